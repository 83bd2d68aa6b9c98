"""Handles per-sentence speech synthesis using Azure Speech Services."""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Optional

import azure.cognitiveservices.speech as speechsdk

from .models import (
    FailureKind,
    FragmentFailure,
    FragmentOutcome,
    FragmentSuccess,
    SpeechCredentials,
)

logger = logging.getLogger(__name__)

TICKS_PER_MS = 10_000 # the SDK reports offsets in 100ns ticks
DEFAULT_OUTPUT_FORMAT = "Riff16Khz16BitMonoPcm"


class FragmentSynthesizer(ABC):
    """Abstract base class for speech synthesis back ends."""

    @abstractmethod
    async def synthesize(
        self,
        index: int,
        sentence: str,
        voice: str,
        credentials: SpeechCredentials,
        staging_path: str
    ) -> FragmentOutcome:
        """
        Synthesizes one sentence into a WAV container at `staging_path`.

        Args:
            index: 1-based sentence index, echoed in the outcome.
            sentence: Text to speak.
            voice: Backend voice identifier (e.g. "en-US-JennyNeural").
            credentials: Credentials for this call only.
            staging_path: Private file the container is written to. The caller
                          removes it.

        Returns:
            FragmentSuccess, or FragmentFailure with kind CANCELED (the backend
            refused and gave a reason) or FAILED (transport or unexpected error).
            Remote problems are reported through the outcome, never raised.
        """
        pass


class _FurthestOffset:
    """Largest audio end offset seen in word-boundary events, in ms."""

    def __init__(self):
        self._lock = threading.Lock()
        self.value = 0.0

    def observe(self, end_ms: float) -> None:
        with self._lock:
            if end_ms > self.value:
                self.value = end_ms


def _to_ms(value: Any) -> float:
    """Converts an SDK duration (timedelta or integer ticks) to milliseconds."""
    if value is None:
        return 0.0
    if hasattr(value, "total_seconds"):
        return value.total_seconds() * 1000
    return value / TICKS_PER_MS


class AzureSpeechSynthesizer(FragmentSynthesizer):
    """Implements fragment synthesis with the Azure Cognitive Services Speech SDK."""

    def __init__(self, output_format: str = DEFAULT_OUTPUT_FORMAT, speech_sdk: Optional[Any] = None):
        """
        Initializes the AzureSpeechSynthesizer.

        Args:
            output_format: Name of a SpeechSynthesisOutputFormat member. Must be
                           a RIFF PCM format so fragments can be merged.
            speech_sdk: SDK module to use; defaults to azure.cognitiveservices.speech.

        Raises:
            ValueError: If the output format is unknown or not RIFF PCM.
        """
        self.sdk = speech_sdk or speechsdk
        if not output_format.startswith("Riff") or "Pcm" not in output_format:
            raise ValueError(f"Output format must be an uncompressed RIFF PCM format, got '{output_format}'")
        try:
            self.output_format = self.sdk.SpeechSynthesisOutputFormat[output_format]
        except KeyError as e:
            raise ValueError(f"Unknown Azure output format: {output_format}") from e
        logger.info(f"Initializing AzureSpeechSynthesizer with output format '{output_format}'")

    def _create_synthesizer(self, voice: str, credentials: SpeechCredentials, staging_path: str):
        speech_config = self.sdk.SpeechConfig(subscription=credentials.key, region=credentials.region)
        speech_config.speech_synthesis_voice_name = voice
        speech_config.set_speech_synthesis_output_format(self.output_format)
        audio_config = self.sdk.audio.AudioOutputConfig(filename=staging_path)
        return self.sdk.SpeechSynthesizer(speech_config=speech_config, audio_config=audio_config)

    def _outcome_from_result(
        self,
        result: Any,
        index: int,
        sentence: str,
        staging_path: str,
        furthest: _FurthestOffset
    ) -> FragmentOutcome:
        reason = result.reason
        if reason == self.sdk.ResultReason.SynthesizingAudioCompleted:
            duration = furthest.value
            if duration == 0:
                duration = _to_ms(getattr(result, "audio_duration", None))
            return FragmentSuccess(index, sentence, staging_path, reported_duration_ms=duration)
        if reason == self.sdk.ResultReason.Canceled:
            details = result.cancellation_details
            detail_text = getattr(details, "error_details", None) or str(getattr(details, "reason", "unknown"))
            return FragmentFailure(index, sentence, staging_path, FailureKind.CANCELED, detail_text)
        return FragmentFailure(index, sentence, staging_path, FailureKind.FAILED, f"Unexpected result: {reason}")

    async def synthesize(
        self,
        index: int,
        sentence: str,
        voice: str,
        credentials: SpeechCredentials,
        staging_path: str
    ) -> FragmentOutcome:
        loop = asyncio.get_running_loop()
        done: asyncio.Future = loop.create_future()
        furthest = _FurthestOffset()

        def resolve(outcome: FragmentOutcome) -> None:
            if not done.done():
                done.set_result(outcome)

        # SDK callbacks run on SDK threads; hop back onto the event loop to resolve.
        def on_word_boundary(evt) -> None:
            furthest.observe(_to_ms(evt.audio_offset) + _to_ms(evt.duration))

        def on_finished(evt) -> None:
            try:
                outcome = self._outcome_from_result(evt.result, index, sentence, staging_path, furthest)
            except Exception as e:
                outcome = FragmentFailure(index, sentence, staging_path, FailureKind.FAILED, str(e))
            try:
                loop.call_soon_threadsafe(resolve, outcome)
            except RuntimeError:
                # event arrived after the loop was closed; the fragment was already resolved
                logger.debug(f"Ignoring late synthesis event for sentence {index}")

        synthesizer = None
        try:
            synthesizer = self._create_synthesizer(voice, credentials, staging_path)
            synthesizer.synthesis_word_boundary.connect(on_word_boundary)
            synthesizer.synthesis_completed.connect(on_finished)
            synthesizer.synthesis_canceled.connect(on_finished)
            logger.debug(f"Starting synthesis of sentence {index}: '{sentence[:50]}'")
            result_future = synthesizer.speak_text_async(sentence)
            outcome = await done
            # get() releases the per-call SDK handle and returns once the staging file is closed
            await loop.run_in_executor(None, result_future.get)
        except Exception as e:
            logger.error(f"Synthesis of sentence {index} failed before completion: {e}", exc_info=True)
            outcome = FragmentFailure(index, sentence, staging_path, FailureKind.FAILED, str(e) or type(e).__name__)
        finally:
            if synthesizer is not None:
                for signal in (
                    synthesizer.synthesis_word_boundary,
                    synthesizer.synthesis_completed,
                    synthesizer.synthesis_canceled,
                ):
                    signal.disconnect_all()
                del synthesizer # releases the SDK's handle on the staging file

        if isinstance(outcome, FragmentSuccess):
            logger.debug(f"Sentence {index} synthesized, reported duration {outcome.reported_duration_ms:.0f}ms")
        else:
            logger.warning(f"Sentence {index} synthesis {outcome.kind.value}: {outcome.reason}")
        return outcome
