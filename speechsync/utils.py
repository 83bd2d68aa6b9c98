"""Utility functions for SpeechSync."""

import math
import os
import logging
import re
from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9]")

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def remove_files(*file_paths: str) -> None:
    """Removes the given files if they exist, logging (not raising) on failure."""
    for file_path in file_paths:
        if file_path and os.path.exists(file_path):
            try:
                os.remove(file_path)
                logger.debug(f"Removed file: {file_path}")
            except OSError as e:
                logger.warning(f"Could not remove file {file_path}: {e}")

def format_time_srt(milliseconds: float) -> str:
    """
    Formats a millisecond offset into SRT time format HH:MM:SS,mmm.

    Fractional milliseconds are truncated, hours are not capped at 99.

    Args:
        milliseconds: Time offset in milliseconds.

    Returns:
        Formatted time string.
    """
    if milliseconds < 0:
        milliseconds = 0.0 # Ensure non-negative time
    total_ms = int(math.floor(milliseconds))
    hrs = total_ms // 3600000
    total_ms %= 3600000
    mins = total_ms // 60000
    total_ms %= 60000
    secs = total_ms // 1000
    total_ms %= 1000
    return f"{hrs:02d}:{mins:02d}:{secs:02d},{total_ms:03d}"

def sanitize_voice_name(voice: str) -> str:
    """Replaces every non-alphanumeric character so the voice can go into a filename."""
    return _UNSAFE_NAME_CHARS.sub("_", voice)

def build_base_name(timestamp_ms: int, voice: str) -> str:
    """Common base name shared by the audio file and its subtitle tracks."""
    return f"speech_{timestamp_ms}_{sanitize_voice_name(voice)}"
