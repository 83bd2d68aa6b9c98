import struct

import pytest

from speechsync import wav_codec
from speechsync.exceptions import FormatError
from speechsync.models import FormatParameters
from speechsync.utils import format_time_srt

from conftest import PCM_16K_MONO, silence


def test_encode_then_decode_returns_params_samples_and_duration():
    params = FormatParameters(sample_rate=24000, channels=2, bits_per_sample=16)
    samples = bytes(range(256)) * 375 # 96000 bytes = 1s at 24kHz stereo 16-bit
    decoded = wav_codec.decode(wav_codec.encode(samples, params))
    assert decoded.params == params
    assert decoded.samples == samples
    assert decoded.duration_ms == pytest.approx(1000.0)


def test_encoded_header_sizes_match_sample_length():
    samples = silence(500)
    data = wav_codec.encode(samples, PCM_16K_MONO)
    assert data[:4] == b"RIFF" and data[8:12] == b"WAVE"
    assert struct.unpack_from("<I", data, 4)[0] == len(data) - 8
    assert data[36:40] == b"data"
    assert struct.unpack_from("<I", data, 40)[0] == len(samples)
    assert len(data) == 44 + len(samples)


def test_odd_length_data_chunk_is_padded():
    params = FormatParameters(sample_rate=8000, channels=1, bits_per_sample=8)
    data = wav_codec.encode(b"\x80" * 7, params)
    assert len(data) == 44 + 8
    assert wav_codec.decode(data).samples == b"\x80" * 7


def _chunk(chunk_id, body):
    pad = b"\x00" if len(body) % 2 else b""
    return chunk_id + struct.pack("<I", len(body)) + body + pad


def _fmt_body(params, tag=1):
    return struct.pack(
        "<HHIIHH", tag, params.channels, params.sample_rate,
        params.byte_rate, params.block_align, params.bits_per_sample,
    )


def _riff(*chunks):
    body = b"WAVE" + b"".join(chunks)
    return b"RIFF" + struct.pack("<I", len(body)) + body


def test_decode_skips_extra_and_padded_chunks():
    samples = silence(100)
    data = _riff(
        _chunk(b"JUNK", b"abc"), # odd size, followed by a pad byte
        _chunk(b"fmt ", _fmt_body(PCM_16K_MONO)),
        _chunk(b"LIST", b"INFOsome metadata"),
        _chunk(b"data", samples),
    )
    decoded = wav_codec.decode(data)
    assert decoded.samples == samples
    assert decoded.duration_ms == pytest.approx(100.0)


def test_decode_accepts_extensible_pcm():
    body = _fmt_body(PCM_16K_MONO, tag=0xFFFE) + struct.pack("<HHI", 22, 16, 4) + struct.pack("<H", 1) + b"\x00" * 14
    data = _riff(_chunk(b"fmt ", body), _chunk(b"data", silence(10)))
    assert wav_codec.decode(data).params == PCM_16K_MONO


def test_decode_clamps_placeholder_data_size():
    samples = silence(50)
    data = bytearray(wav_codec.encode(samples, PCM_16K_MONO))
    struct.pack_into("<I", data, 40, 0xFFFFFFFF)
    assert wav_codec.decode(bytes(data)).samples == samples


@pytest.mark.parametrize("data, message", [
    (b"", "only 0 bytes"),
    (b"RIFX\x00\x00\x00\x00WAVE", "RIFF/WAVE"),
    (b"RIFF\x00\x00\x00\x00AVI ", "RIFF/WAVE"),
])
def test_decode_rejects_bad_magic(data, message):
    with pytest.raises(FormatError, match=message):
        wav_codec.decode(data)


def test_decode_requires_fmt_and_data_chunks():
    with pytest.raises(FormatError, match="no 'fmt '"):
        wav_codec.decode(_riff(_chunk(b"LIST", b"info")))
    with pytest.raises(FormatError, match="no 'data'"):
        wav_codec.decode(_riff(_chunk(b"fmt ", _fmt_body(PCM_16K_MONO))))
    with pytest.raises(FormatError, match="before 'fmt '"):
        wav_codec.decode(_riff(_chunk(b"data", silence(10)), _chunk(b"fmt ", _fmt_body(PCM_16K_MONO))))


def test_decode_rejects_compressed_audio():
    data = _riff(_chunk(b"fmt ", _fmt_body(PCM_16K_MONO, tag=0x0055)), _chunk(b"data", b"\x00" * 10))
    with pytest.raises(FormatError, match="only linear PCM"):
        wav_codec.decode(data)


def test_duration_formula():
    params = FormatParameters(sample_rate=48000, channels=2, bits_per_sample=24)
    assert wav_codec.duration_ms(288000, params) == pytest.approx(1000.0)


def test_duration_of_whole_milliseconds_is_exact():
    samples = b"\x00" * 32032 # 1001ms at 16kHz mono 16-bit
    decoded = wav_codec.decode(wav_codec.encode(samples, PCM_16K_MONO))
    assert decoded.duration_ms == 1001.0
    assert format_time_srt(decoded.duration_ms) == "00:00:01,001"
