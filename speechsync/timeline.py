"""Builds the sentence-level timeline of the combined audio."""

import logging
from typing import List, Sequence

from .exceptions import ContractViolation
from .models import SentenceTiming

logger = logging.getLogger(__name__)

def build_timeline(sentences: Sequence[str], durations: Sequence[float]) -> List[SentenceTiming]:
    """
    Accumulates per-sentence durations into back-to-back intervals.

    Args:
        sentences: Sentence texts in index order.
        durations: Duration in milliseconds of each sentence's audio, same order.

    Returns:
        One SentenceTiming per sentence, 1-based index, the first starting at 0.

    Raises:
        ContractViolation: If the two sequences differ in length or a duration is negative.
    """
    if len(sentences) != len(durations):
        raise ContractViolation(
            f"Timeline needs one duration per sentence, got {len(sentences)} sentences and {len(durations)} durations"
        )

    timings: List[SentenceTiming] = []
    offset = 0.0
    for i, (sentence, duration) in enumerate(zip(sentences, durations), start=1):
        if duration < 0:
            raise ContractViolation(f"Negative duration {duration} for sentence {i}")
        end = offset + duration
        timings.append(SentenceTiming(sentence=sentence, start_ms=offset, end_ms=end, index=i))
        offset = end

    logger.debug(f"Built timeline of {len(timings)} entries, total {offset:.0f}ms")
    return timings

def validate_timeline(timings: Sequence[SentenceTiming]) -> None:
    """Raises ContractViolation unless the timings are 1-based, contiguous and non-overlapping."""
    expected_start = 0.0
    for position, timing in enumerate(timings, start=1):
        if timing.index != position:
            raise ContractViolation(f"Timing at position {position} carries index {timing.index}")
        if timing.start_ms != expected_start:
            raise ContractViolation(
                f"Timing {position} starts at {timing.start_ms}ms, expected {expected_start}ms"
            )
        if timing.end_ms < timing.start_ms:
            raise ContractViolation(f"Timing {position} ends before it starts")
        expected_start = timing.end_ms
