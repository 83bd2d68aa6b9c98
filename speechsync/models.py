"""Data models for SpeechSync."""

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Union

@dataclass(frozen=True)
class FormatParameters:
    """PCM layout shared by every fragment of one batch."""
    sample_rate: int
    channels: int
    bits_per_sample: int

    @property
    def block_align(self) -> int:
        return self.channels * (self.bits_per_sample // 8)

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.block_align

@dataclass(frozen=True)
class DecodedAudio:
    """Result of parsing one WAV container."""
    params: FormatParameters
    samples: bytes
    duration_ms: float

@dataclass
class AudioFragment:
    """Synthesized audio for a single sentence, in index order once merged."""
    index: int # 1-based
    sentence: str
    params: FormatParameters
    samples: bytes
    duration_ms: float
    reported_duration_ms: float = 0.0 # duration signalled by the backend, 0 if none

@dataclass
class CombinedAudio:
    """Concatenated samples of a whole batch, already serialized as WAV."""
    params: FormatParameters
    samples: bytes
    container: bytes

@dataclass
class SynthesisBatch:
    """Successful output of the parallel synthesis step."""
    fragments: List[AudioFragment]
    combined: CombinedAudio
    total_duration_ms: float

    @property
    def sentences(self) -> List[str]:
        return [f.sentence for f in self.fragments]

    @property
    def durations(self) -> List[float]:
        return [f.duration_ms for f in self.fragments]

@dataclass(frozen=True)
class SentenceTiming:
    """Holds the [start, end) interval of one sentence in the combined audio."""
    sentence: str
    start_ms: float
    end_ms: float
    index: int

class FailureKind(enum.Enum):
    CANCELED = "canceled" # backend canceled the request and supplied a reason
    FAILED = "failed" # transport error or unexpected result

@dataclass(frozen=True)
class FragmentSuccess:
    index: int
    sentence: str
    staging_path: str
    reported_duration_ms: float = 0.0

@dataclass(frozen=True)
class FragmentFailure:
    index: int
    sentence: str
    staging_path: str
    kind: FailureKind
    reason: str

FragmentOutcome = Union[FragmentSuccess, FragmentFailure]

@dataclass(frozen=True)
class SpeechCredentials:
    key: str
    region: str

@dataclass(frozen=True)
class TranslationCredentials:
    endpoint: str
    api_key: str
    deployment: str
    api_version: str = "2024-02-15-preview"

@dataclass
class GenerationResult:
    """Everything produced by one successful generation run."""
    audio_path: str
    srt_path: str
    audio_size: int
    srt_size: int
    duration_ms: float
    timings: List[SentenceTiming] = field(default_factory=list)
    translated_srt_path: Optional[str] = None
    bilingual_srt_path: Optional[str] = None
    translations: Optional[List[str]] = None

    @property
    def sentence_count(self) -> int:
        return len(self.timings)
