"""Reads and writes uncompressed PCM WAV (RIFF/WAVE) containers."""

import logging
import struct

from .exceptions import FormatError
from .models import DecodedAudio, FormatParameters

logger = logging.getLogger(__name__)

WAVE_FORMAT_PCM = 0x0001
WAVE_FORMAT_EXTENSIBLE = 0xFFFE

_RIFF_HEADER = struct.Struct("<4sI4s")
_CHUNK_HEADER = struct.Struct("<4sI")
_FMT_BODY = struct.Struct("<HHIIHH")
_CANONICAL_HEADER_SIZE = 44


def duration_ms(byte_length: int, params: FormatParameters) -> float:
    """Duration of `byte_length` bytes of samples, derived from the format alone."""
    if params.byte_rate <= 0:
        raise FormatError(f"Cannot compute duration for format {params}")
    return byte_length * 1000 / params.byte_rate


def _parse_fmt(body: bytes) -> FormatParameters:
    if len(body) < _FMT_BODY.size:
        raise FormatError(f"'fmt ' chunk too short ({len(body)} bytes)")
    format_tag, channels, sample_rate, _byte_rate, _block_align, bits = _FMT_BODY.unpack_from(body)
    if format_tag == WAVE_FORMAT_EXTENSIBLE:
        # cbSize(2) validBits(2) channelMask(4) then the sub-format GUID, whose first two bytes are the real tag
        if len(body) < 26:
            raise FormatError("WAVE_FORMAT_EXTENSIBLE 'fmt ' chunk is truncated")
        format_tag = struct.unpack_from("<H", body, 24)[0]
    if format_tag != WAVE_FORMAT_PCM:
        raise FormatError(f"Unsupported WAV encoding (format tag {format_tag:#06x}); only linear PCM is handled")
    if channels == 0 or sample_rate == 0 or bits == 0 or bits % 8:
        raise FormatError(
            f"Invalid PCM parameters: rate={sample_rate}, channels={channels}, bits={bits}"
        )
    return FormatParameters(sample_rate=sample_rate, channels=channels, bits_per_sample=bits)


def decode(data: bytes) -> DecodedAudio:
    """
    Parses a RIFF/WAVE container.

    Chunks are walked in order from the end of the RIFF header; unknown chunks
    (LIST, fact, JUNK...) are skipped, honoring the pad byte after odd-sized
    chunks. The duration is computed from the sample byte count.

    Args:
        data: Complete file contents.

    Returns:
        A DecodedAudio with the format, the raw sample bytes and the duration.

    Raises:
        FormatError: If the magic markers, the 'fmt ' chunk or the 'data'
                     chunk are missing, or the encoding is not linear PCM.
    """
    if len(data) < _RIFF_HEADER.size:
        raise FormatError(f"Not a valid WAV file: only {len(data)} bytes")
    riff, _riff_size, wave = _RIFF_HEADER.unpack_from(data)
    if riff != b"RIFF" or wave != b"WAVE":
        raise FormatError("Not a valid WAV file: missing RIFF/WAVE markers")

    params = None
    offset = _RIFF_HEADER.size
    while offset + _CHUNK_HEADER.size <= len(data):
        chunk_id, chunk_size = _CHUNK_HEADER.unpack_from(data, offset)
        body_start = offset + _CHUNK_HEADER.size

        if chunk_id == b"fmt ":
            params = _parse_fmt(data[body_start:body_start + chunk_size])
        elif chunk_id == b"data":
            if params is None:
                raise FormatError("'data' chunk found before 'fmt ' chunk")
            available = len(data) - body_start
            if chunk_size > available:
                # streaming writers leave a placeholder size; trust the bytes we actually have
                logger.debug(f"'data' chunk declares {chunk_size} bytes but {available} are present")
                chunk_size = available
            samples = data[body_start:body_start + chunk_size]
            remainder = len(samples) % params.block_align
            if remainder:
                logger.warning(f"Dropping {remainder} trailing byte(s) that do not form a whole sample frame")
                samples = samples[:len(samples) - remainder]
            return DecodedAudio(params=params, samples=samples, duration_ms=duration_ms(len(samples), params))

        offset = body_start + chunk_size + (chunk_size & 1)

    if params is None:
        raise FormatError("Not a valid WAV file: no 'fmt ' chunk")
    raise FormatError("Not a valid WAV file: no 'data' chunk")


def encode(samples: bytes, params: FormatParameters) -> bytes:
    """
    Serializes raw PCM samples as a canonical 44-byte-header WAV container.

    Args:
        samples: Interleaved little-endian PCM sample bytes.
        params: Format of the samples.

    Returns:
        The container bytes, with RIFF and data sizes matching `samples`.
    """
    data_size = len(samples)
    pad = b"\x00" if data_size & 1 else b""
    riff_size = _CANONICAL_HEADER_SIZE - 8 + data_size + len(pad)
    header = b"".join((
        _RIFF_HEADER.pack(b"RIFF", riff_size, b"WAVE"),
        _CHUNK_HEADER.pack(b"fmt ", _FMT_BODY.size),
        _FMT_BODY.pack(
            WAVE_FORMAT_PCM,
            params.channels,
            params.sample_rate,
            params.byte_rate,
            params.block_align,
            params.bits_per_sample,
        ),
        _CHUNK_HEADER.pack(b"data", data_size),
    ))
    return header + samples + pad
