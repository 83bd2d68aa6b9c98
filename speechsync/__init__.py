"""SpeechSync: text to speech audio with sentence-synchronized subtitles."""

__version__ = "0.1.0"
