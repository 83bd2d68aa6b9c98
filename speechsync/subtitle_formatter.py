"""Renders sentence timelines into subtitle text (SRT)."""

import enum
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .models import SentenceTiming
from .exceptions import FileSystemError
from .utils import format_time_srt

logger = logging.getLogger(__name__)

class SubtitleVariant(enum.Enum):
    """Which text line(s) a subtitle record carries."""
    SOURCE = "source"
    TRANSLATED = "translated"
    BILINGUAL = "bilingual"

class SubtitleFormatter(ABC):
    """Abstract base class for subtitle formatters."""

    extension = ""

    @abstractmethod
    def render(
        self,
        timings: Sequence[SentenceTiming],
        translations: Optional[Sequence[str]] = None,
        variant: SubtitleVariant = SubtitleVariant.SOURCE
    ) -> str:
        """
        Renders the timeline as subtitle text.

        Args:
            timings: Sentence timings in index order.
            translations: Translated sentences, aligned with `timings` by position.
                          Missing positions render as an empty line.
            variant: Which text line(s) each record carries.

        Returns:
            The subtitle document as a string.
        """
        pass

    def write(self, content: str, output_path: str) -> int:
        """
        Writes rendered subtitles to disk.

        Returns:
            Number of bytes written.

        Raises:
            FileSystemError: If the file cannot be written.
        """
        try:
            encoded = content.encode("utf-8")
            with open(output_path, "wb") as f:
                f.write(encoded)
            logger.info(f"Wrote subtitles to {output_path} ({len(encoded)} bytes)")
            return len(encoded)
        except OSError as e:
            logger.error(f"Failed to write subtitle file {output_path}: {e}", exc_info=True)
            raise FileSystemError(f"Could not write subtitle file {output_path}: {e}") from e


class SRTFormatter(SubtitleFormatter):
    """Formats subtitles into the SRT (SubRip Text) format."""

    extension = "srt"

    def _text_lines(
        self,
        timing: SentenceTiming,
        translation: str,
        variant: SubtitleVariant
    ) -> List[str]:
        if variant is SubtitleVariant.SOURCE:
            return [timing.sentence]
        if variant is SubtitleVariant.TRANSLATED:
            return [translation]
        return [timing.sentence, translation]

    def render(
        self,
        timings: Sequence[SentenceTiming],
        translations: Optional[Sequence[str]] = None,
        variant: SubtitleVariant = SubtitleVariant.SOURCE
    ) -> str:
        if not timings:
            return ""
        translations = translations or []
        if variant is not SubtitleVariant.SOURCE and len(translations) != len(timings):
            logger.warning(
                f"Got {len(translations)} translations for {len(timings)} subtitles; "
                f"missing entries will be left blank"
            )

        lines: List[str] = []
        for position, timing in enumerate(timings):
            translation = translations[position] if position < len(translations) else ""
            lines.append(f"{timing.index}")
            lines.append(f"{format_time_srt(timing.start_ms)} --> {format_time_srt(timing.end_ms)}")
            lines.extend(self._text_lines(timing, translation or "", variant))
            lines.append("")
        return "\n".join(lines)


_SRT = SRTFormatter()

def render_source_srt(timings: Sequence[SentenceTiming]) -> str:
    return _SRT.render(timings)

def render_translated_srt(timings: Sequence[SentenceTiming], translations: Sequence[str]) -> str:
    return _SRT.render(timings, translations, SubtitleVariant.TRANSLATED)

def render_bilingual_srt(timings: Sequence[SentenceTiming], translations: Sequence[str]) -> str:
    return _SRT.render(timings, translations, SubtitleVariant.BILINGUAL)
