"""Splits input text into sentences."""

import logging
import re
from typing import List

logger = logging.getLogger(__name__)

DEFAULT_TERMINATORS = ".!?"

class SentenceSplitter:
    """
    Breaks text into ordered, trimmed sentences.

    A boundary is a run of terminator characters followed by whitespace or the
    end of the text. The terminators stay attached to the sentence they close,
    so "Wait... what?!" gives ["Wait...", "what?!"] and "3.14" is not split.
    """

    def __init__(self, terminators: str = DEFAULT_TERMINATORS):
        if not terminators:
            raise ValueError("At least one sentence terminator is required.")
        self.terminators = terminators
        self._boundary = re.compile(f"(?<=[{re.escape(terminators)}])\\s+")

    def split(self, text: str) -> List[str]:
        """
        Splits text into sentences.

        Args:
            text: Raw input text.

        Returns:
            Non-empty sentences in input order. Empty when the text is blank;
            callers must treat that as an input error.
        """
        if not text or not text.strip():
            return []
        sentences = [s.strip() for s in self._boundary.split(text.strip())]
        sentences = [s for s in sentences if s]
        logger.debug(f"Split text ({len(text)} chars) into {len(sentences)} sentence(s)")
        return sentences

def split_sentences(text: str, terminators: str = DEFAULT_TERMINATORS) -> List[str]:
    return SentenceSplitter(terminators).split(text)
