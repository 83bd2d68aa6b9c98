"""Custom Exceptions for the SpeechSync application."""

from typing import Optional


class SpeechSyncError(Exception):
    """Base class for user-facing exceptions in this package."""
    pass

class InputError(SpeechSyncError):
    """Exception raised for empty or otherwise unusable input text."""
    pass

class ConfigurationError(SpeechSyncError):
    """Exception raised for errors in configuration loading or missing credentials."""
    pass

class FormatError(SpeechSyncError):
    """Exception raised for malformed audio containers or mismatched formats in a batch."""
    pass

class SynthesisError(SpeechSyncError):
    """Exception raised when remote speech synthesis fails or is canceled."""

    def __init__(self, message: str, index: Optional[int] = None, kind: Optional[str] = None):
        super().__init__(message)
        self.index = index # 1-based sentence index of the failing fragment
        self.kind = kind

class TranslationError(SpeechSyncError):
    """Exception raised for errors during translation."""

    def __init__(self, message: str, status: Optional[int] = None, index: Optional[int] = None):
        super().__init__(message)
        self.status = status # HTTP status when the service answered, else None
        self.index = index

class FileSystemError(SpeechSyncError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass

class ContractViolation(RuntimeError):
    """Internal invariant broken (length or ordering mismatch). Not a user error."""
    pass
