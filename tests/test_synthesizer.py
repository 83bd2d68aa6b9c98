"""Tests for the Azure adapter against a scripted stand-in for the Speech SDK."""
import asyncio
import datetime
import enum
import threading
from types import SimpleNamespace

import pytest

from speechsync.models import FailureKind, FragmentFailure, FragmentSuccess, SpeechCredentials
from speechsync.synthesizer import AzureSpeechSynthesizer

from conftest import make_wav


class ResultReason(enum.Enum):
    SynthesizingAudioCompleted = 1
    Canceled = 2
    SynthesizingAudioStarted = 3


class OutputFormat(enum.Enum):
    Riff16Khz16BitMonoPcm = 1
    Audio24Khz48KBitRateMonoMp3 = 2


class Signal:
    def __init__(self):
        self.callbacks = []

    def connect(self, callback):
        self.callbacks.append(callback)

    def disconnect_all(self):
        self.callbacks = []

    def fire(self, evt):
        for callback in list(self.callbacks):
            callback(evt)


class ScriptedFuture:
    def __init__(self, thread, sdk):
        self.thread = thread
        self.sdk = sdk

    def get(self):
        self.thread.join()
        self.sdk.gets.append(self.thread)


class ScriptedSDK:
    """Mimics the parts of azure.cognitiveservices.speech the adapter touches."""

    ResultReason = ResultReason
    SpeechSynthesisOutputFormat = OutputFormat

    def __init__(self, script):
        self.script = script
        self.configs = []
        self.gets = []
        sdk = self

        class SpeechConfig:
            def __init__(self, subscription, region):
                self.subscription = subscription
                self.region = region
                self.speech_synthesis_voice_name = None
                self.output_format = None
                sdk.configs.append(self)

            def set_speech_synthesis_output_format(self, fmt):
                self.output_format = fmt

        class SpeechSynthesizer:
            def __init__(self, speech_config, audio_config):
                self.audio_config = audio_config
                self.synthesis_word_boundary = Signal()
                self.synthesis_completed = Signal()
                self.synthesis_canceled = Signal()

            def speak_text_async(self, text):
                thread = threading.Thread(target=sdk.script, args=(self, text))
                thread.start()
                return ScriptedFuture(thread, sdk)

        self.SpeechConfig = SpeechConfig
        self.SpeechSynthesizer = SpeechSynthesizer
        self.audio = SimpleNamespace(AudioOutputConfig=lambda filename: SimpleNamespace(filename=filename))


CREDS = SpeechCredentials(key="k", region="westeurope")


def synthesize(sdk, tmp_path, sentence="Hello world."):
    adapter = AzureSpeechSynthesizer(speech_sdk=sdk)
    path = str(tmp_path / "frag.wav")
    return asyncio.run(adapter.synthesize(1, sentence, "en-US-JennyNeural", CREDS, path)), path


def test_success_uses_furthest_word_boundary(tmp_path):
    def script(synth, text):
        for offset_ticks, duration in ((0, 300), (4_000_000, 500), (2_000_000, 100)):
            synth.synthesis_word_boundary.fire(SimpleNamespace(
                audio_offset=offset_ticks, duration=datetime.timedelta(milliseconds=duration)))
        with open(synth.audio_config.filename, "wb") as f:
            f.write(make_wav(1000))
        result = SimpleNamespace(reason=ResultReason.SynthesizingAudioCompleted,
                                 audio_duration=datetime.timedelta(milliseconds=1000))
        synth.synthesis_completed.fire(SimpleNamespace(result=result))
        synth.synthesis_completed.fire(SimpleNamespace(result=result)) # resolved once only

    sdk = ScriptedSDK(script)
    outcome, path = synthesize(sdk, tmp_path)

    assert isinstance(outcome, FragmentSuccess)
    assert outcome.reported_duration_ms == pytest.approx(900)
    assert outcome.staging_path == path
    assert sdk.configs[0].subscription == "k"
    assert sdk.configs[0].speech_synthesis_voice_name == "en-US-JennyNeural"
    assert sdk.configs[0].output_format is OutputFormat.Riff16Khz16BitMonoPcm


def test_success_falls_back_to_audio_duration(tmp_path):
    def script(synth, text):
        result = SimpleNamespace(reason=ResultReason.SynthesizingAudioCompleted,
                                 audio_duration=datetime.timedelta(milliseconds=1234))
        synth.synthesis_completed.fire(SimpleNamespace(result=result))

    outcome, _ = synthesize(ScriptedSDK(script), tmp_path)
    assert outcome.reported_duration_ms == pytest.approx(1234)


def test_cancellation_carries_backend_reason(tmp_path):
    def script(synth, text):
        details = SimpleNamespace(reason="Error", error_details="401 Unauthorized")
        result = SimpleNamespace(reason=ResultReason.Canceled, cancellation_details=details)
        synth.synthesis_canceled.fire(SimpleNamespace(result=result))

    outcome, _ = synthesize(ScriptedSDK(script), tmp_path)
    assert isinstance(outcome, FragmentFailure)
    assert outcome.kind is FailureKind.CANCELED
    assert outcome.reason == "401 Unauthorized"


def test_unexpected_reason_is_a_failure(tmp_path):
    def script(synth, text):
        result = SimpleNamespace(reason=ResultReason.SynthesizingAudioStarted)
        synth.synthesis_completed.fire(SimpleNamespace(result=result))

    outcome, _ = synthesize(ScriptedSDK(script), tmp_path)
    assert outcome.kind is FailureKind.FAILED
    assert "Unexpected result" in outcome.reason


def test_exception_when_starting_is_a_failure(tmp_path):
    sdk = ScriptedSDK(lambda synth, text: None)

    def broken(*args, **kwargs):
        raise RuntimeError("no network")

    sdk.SpeechSynthesizer = broken
    outcome, _ = synthesize(sdk, tmp_path)
    assert outcome.kind is FailureKind.FAILED
    assert outcome.reason == "no network"


def test_compressed_output_format_is_refused():
    with pytest.raises(ValueError, match="RIFF PCM"):
        AzureSpeechSynthesizer(output_format="Audio24Khz48KBitRateMonoMp3", speech_sdk=ScriptedSDK(None))


def test_unknown_output_format_is_refused():
    with pytest.raises(ValueError, match="Unknown"):
        AzureSpeechSynthesizer(output_format="Riff99Khz16BitMonoPcm", speech_sdk=ScriptedSDK(None))


def test_result_future_is_resolved_once_per_fragment(tmp_path):
    def script(synth, text):
        result = SimpleNamespace(reason=ResultReason.SynthesizingAudioCompleted,
                                 audio_duration=datetime.timedelta(milliseconds=500))
        synth.synthesis_completed.fire(SimpleNamespace(result=result))

    sdk = ScriptedSDK(script)
    adapter = AzureSpeechSynthesizer(speech_sdk=sdk)

    async def run_all():
        return await asyncio.gather(*(
            adapter.synthesize(i, f"Sentence {i}.", "en-US-JennyNeural", CREDS, str(tmp_path / f"{i}.wav"))
            for i in (1, 2, 3)
        ))

    outcomes = asyncio.run(run_all())
    assert all(isinstance(o, FragmentSuccess) for o in outcomes)
    assert len(sdk.gets) == 3


def test_canceled_fragment_still_resolves_result_future(tmp_path):
    def script(synth, text):
        details = SimpleNamespace(reason="Error", error_details="quota exceeded")
        result = SimpleNamespace(reason=ResultReason.Canceled, cancellation_details=details)
        synth.synthesis_canceled.fire(SimpleNamespace(result=result))

    sdk = ScriptedSDK(script)
    outcome, _ = synthesize(sdk, tmp_path)
    assert outcome.kind is FailureKind.CANCELED
    assert len(sdk.gets) == 1
