"""Shared fixtures and fakes for SpeechSync tests."""
import asyncio
import random

import pytest

from speechsync import wav_codec
from speechsync.models import (
    FormatParameters,
    FragmentFailure,
    FragmentSuccess,
    SpeechCredentials,
)
from speechsync.synthesizer import FragmentSynthesizer
from speechsync.translator import Translator
from speechsync.exceptions import TranslationError

PCM_16K_MONO = FormatParameters(sample_rate=16000, channels=1, bits_per_sample=16)


def silence(duration_ms, params=PCM_16K_MONO):
    """Zeroed sample bytes lasting exactly `duration_ms` (whole frames)."""
    frames = int(params.sample_rate * duration_ms / 1000)
    return b"\x00" * (frames * params.block_align)


def make_wav(duration_ms, params=PCM_16K_MONO):
    return wav_codec.encode(silence(duration_ms, params), params)


class FakeSynthesizer(FragmentSynthesizer):
    """Writes silent WAV files with scripted durations; completion order is shuffled."""

    def __init__(self, durations, failures=None, params=None, raise_for=None):
        self.durations = list(durations)
        self.failures = failures or {} # index -> FragmentFailure kind/reason tuple
        self.params = params or {} # index -> FormatParameters
        self.raise_for = raise_for or set()
        self.calls = []
        self.staged = []

    async def synthesize(self, index, sentence, voice, credentials, staging_path):
        self.calls.append((index, sentence, voice, credentials))
        await asyncio.sleep(random.uniform(0, 0.01))
        if index in self.raise_for:
            raise RuntimeError(f"boom {index}")
        params = self.params.get(index, PCM_16K_MONO)
        duration = self.durations[index - 1]
        with open(staging_path, "wb") as f:
            f.write(make_wav(duration, params))
        self.staged.append(staging_path)
        if index in self.failures:
            kind, reason = self.failures[index]
            return FragmentFailure(index, sentence, staging_path, kind, reason)
        return FragmentSuccess(index, sentence, staging_path, reported_duration_ms=duration)


class FakeTranslator(Translator):
    def __init__(self, fail_on=None):
        self.fail_on = fail_on or {}
        self.calls = []

    async def translate(self, text):
        self.calls.append(text)
        await asyncio.sleep(random.uniform(0, 0.01))
        if text in self.fail_on:
            raise TranslationError(self.fail_on[text], status=500)
        return f"ZH({text})"


@pytest.fixture
def credentials():
    return SpeechCredentials(key="test-key", region="westeurope")

