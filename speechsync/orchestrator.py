"""Synthesizes all sentences of a batch concurrently and merges the audio."""

import asyncio
import logging
import os
import time
from typing import List, Optional, Sequence

from . import wav_codec
from .exceptions import FileSystemError, FormatError, SynthesisError
from .models import (
    AudioFragment,
    CombinedAudio,
    FailureKind,
    FragmentFailure,
    FragmentOutcome,
    FragmentSuccess,
    SpeechCredentials,
    SynthesisBatch,
)
from .synthesizer import FragmentSynthesizer
from .utils import ensure_dir_exists, remove_files

logger = logging.getLogger(__name__)


def staging_path_for(staging_dir: str, batch_timestamp: int, index: int) -> str:
    """Distinct per-sentence staging file; no two fragments of any batch share one."""
    return os.path.join(staging_dir, f"temp_sentence_{batch_timestamp}_{index}.wav")


def _failure_message(failure: FragmentFailure) -> str:
    if failure.kind is FailureKind.CANCELED:
        return f"Synthesis canceled: {failure.reason}"
    return failure.reason


class SynthesisOrchestrator:
    """
    Fans out one synthesis call per sentence and joins the results.

    All fragments of a batch are in flight at the same time. The batch either
    succeeds as a whole or fails with the error of the lowest-index failed
    sentence; staging files are removed on every path.
    """

    def __init__(
        self,
        synthesizer: FragmentSynthesizer,
        staging_dir: str,
        fail_on_zero_duration: bool = False
    ):
        """
        Initializes the SynthesisOrchestrator.

        Args:
            synthesizer: Backend adapter used for every fragment.
            staging_dir: Directory for the ephemeral per-sentence containers.
            fail_on_zero_duration: Treat a fragment with no audio as a fatal
                                   FormatError instead of a warning.
        """
        self.synthesizer = synthesizer
        self.staging_dir = staging_dir
        self.fail_on_zero_duration = fail_on_zero_duration

    async def _run_one(
        self,
        index: int,
        sentence: str,
        voice: str,
        credentials: SpeechCredentials,
        staging_path: str
    ) -> FragmentOutcome:
        try:
            return await self.synthesizer.synthesize(index, sentence, voice, credentials, staging_path)
        except Exception as e:
            logger.error(f"Synthesizer raised for sentence {index}: {e}", exc_info=True)
            return FragmentFailure(index, sentence, staging_path, FailureKind.FAILED, str(e) or type(e).__name__)

    def _load_fragment(self, outcome: FragmentSuccess) -> AudioFragment:
        try:
            with open(outcome.staging_path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise FileSystemError(f"Could not read synthesized audio for sentence {outcome.index}: {e}") from e
        try:
            decoded = wav_codec.decode(data)
        except FormatError as e:
            raise FormatError(f"Sentence {outcome.index}: {e}") from e

        if decoded.duration_ms == 0:
            message = f"Sentence {outcome.index} produced no audio samples"
            if self.fail_on_zero_duration:
                raise FormatError(message)
            logger.warning(f"{message}; its subtitle will have zero length")
        if outcome.reported_duration_ms == 0:
            logger.warning(f"Backend reported no duration for sentence {outcome.index}; using the container length")
        else:
            logger.debug(
                f"Sentence {outcome.index}: reported {outcome.reported_duration_ms:.0f}ms, "
                f"decoded {decoded.duration_ms:.0f}ms"
            )

        return AudioFragment(
            index=outcome.index,
            sentence=outcome.sentence,
            params=decoded.params,
            samples=decoded.samples,
            duration_ms=decoded.duration_ms,
            reported_duration_ms=outcome.reported_duration_ms,
        )

    def _merge(self, fragments: List[AudioFragment]) -> CombinedAudio:
        params = fragments[0].params
        for fragment in fragments[1:]:
            if fragment.params != params:
                raise FormatError(
                    f"Sentence {fragment.index} audio format {fragment.params} differs from "
                    f"sentence {fragments[0].index} format {params}; cannot merge"
                )
        samples = b"".join(f.samples for f in fragments)
        return CombinedAudio(params=params, samples=samples, container=wav_codec.encode(samples, params))

    async def synthesize_all(
        self,
        sentences: Sequence[str],
        voice: str,
        credentials: SpeechCredentials,
        batch_timestamp: Optional[int] = None
    ) -> SynthesisBatch:
        """
        Synthesizes every sentence concurrently and merges the audio in sentence order.

        Args:
            sentences: Sentences in input order.
            voice: Voice identifier passed to every fragment.
            credentials: Speech credentials for this batch.
            batch_timestamp: Epoch milliseconds used to name staging files.

        Returns:
            A SynthesisBatch with fragments in index order and the combined audio.

        Raises:
            SynthesisError: For the lowest-index failed fragment.
            FormatError: If a fragment cannot be decoded or formats differ.
            FileSystemError: If the staging directory is unusable.
        """
        if not sentences:
            raise ValueError("synthesize_all needs at least one sentence")
        ensure_dir_exists(self.staging_dir)
        batch_timestamp = batch_timestamp if batch_timestamp is not None else int(time.time() * 1000)
        staging_paths = [
            staging_path_for(self.staging_dir, batch_timestamp, i) for i in range(1, len(sentences) + 1)
        ]

        try:
            logger.info(f"Synthesizing {len(sentences)} sentence(s) in parallel...")
            for i, sentence in enumerate(sentences, start=1):
                logger.debug(f"Queuing sentence {i}/{len(sentences)}: '{sentence[:50]}'")
            started = time.monotonic()
            outcomes = await asyncio.gather(*(
                self._run_one(i, sentence, voice, credentials, path)
                for i, (sentence, path) in enumerate(zip(sentences, staging_paths), start=1)
            ))
            logger.info(f"All sentences synthesized in {(time.monotonic() - started) * 1000:.0f}ms")

            ordered = sorted(outcomes, key=lambda o: o.index)
            failures = [o for o in ordered if isinstance(o, FragmentFailure)]
            if failures:
                first = failures[0]
                logger.error(f"{len(failures)} of {len(ordered)} fragment(s) failed; discarding the batch")
                raise SynthesisError(_failure_message(first), index=first.index, kind=first.kind.value)

            fragments = [self._load_fragment(o) for o in ordered]
            combined = self._merge(fragments)
            total = sum(f.duration_ms for f in fragments)
            logger.info(f"Merged {len(fragments)} fragment(s): {total:.0f}ms, {len(combined.samples)} sample bytes")
            return SynthesisBatch(fragments=fragments, combined=combined, total_duration_ms=total)
        finally:
            remove_files(*staging_paths)
