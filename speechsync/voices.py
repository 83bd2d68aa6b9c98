"""Catalog of commonly used Azure neural voices."""

from dataclasses import dataclass
from typing import List, Optional

DEFAULT_VOICE = "fr-FR-EloiseNeural"

@dataclass(frozen=True)
class Voice:
    name: str
    language: str
    gender: str

VOICES: List[Voice] = [
    Voice("fr-FR-VivienneMultilingualNeural", "French (France)", "Female"),
    Voice("fr-FR-EloiseNeural", "French (France)", "Female"),
    Voice("fr-FR-HenriNeural", "French (France)", "Male"),
    Voice("fr-FR-DeniseNeural", "French (France)", "Female"),
    Voice("fr-CA-SylvieNeural", "French (Canada)", "Female"),
    Voice("en-US-JennyNeural", "English (US)", "Female"),
    Voice("en-US-GuyNeural", "English (US)", "Male"),
    Voice("en-US-AriaNeural", "English (US)", "Female"),
    Voice("en-GB-SoniaNeural", "English (UK)", "Female"),
    Voice("en-GB-RyanNeural", "English (UK)", "Male"),
    Voice("de-DE-KatjaNeural", "German", "Female"),
    Voice("de-DE-ConradNeural", "German", "Male"),
    Voice("es-ES-ElviraNeural", "Spanish (Spain)", "Female"),
    Voice("es-MX-DaliaNeural", "Spanish (Mexico)", "Female"),
    Voice("it-IT-ElsaNeural", "Italian", "Female"),
    Voice("ja-JP-NanamiNeural", "Japanese", "Female"),
    Voice("ko-KR-SunHiNeural", "Korean", "Female"),
    Voice("zh-CN-XiaoxiaoNeural", "Chinese (Mandarin)", "Female"),
    Voice("zh-CN-YunxiNeural", "Chinese (Mandarin)", "Male"),
    Voice("pt-BR-FranciscaNeural", "Portuguese (Brazil)", "Female"),
]

def list_voices(language_filter: Optional[str] = None) -> List[Voice]:
    """Returns the catalog, optionally keeping voices whose language or name contains the filter."""
    if not language_filter:
        return list(VOICES)
    needle = language_filter.lower()
    return [v for v in VOICES if needle in v.language.lower() or needle in v.name.lower()]
