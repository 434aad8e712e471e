"""
Turn a markdown report into prose suitable for text-to-speech.
"""

import re

from app.vet_service.utils.logger import get_logger

logger = get_logger(__name__)

SPEECH_MAX_CHARS = 1000

# Characters the TTS model would otherwise read aloud
_MARKUP_CHARS = re.compile(r"[#*`]")


def strip_markup(text: str) -> str:
    """Remove ``#``, ``*`` and backtick characters."""
    if not text:
        return ""
    return _MARKUP_CHARS.sub("", text)


def truncate_text(text: str, max_chars: int = SPEECH_MAX_CHARS) -> str:
    """
    Cap text at ``max_chars``, cutting at the last space when possible.

    Returns the text unchanged if already within the limit.
    """
    if len(text) <= max_chars:
        return text

    truncated = text[:max_chars]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        truncated = truncated[:last_space]

    return truncated.rstrip()


def prepare_speech_text(markdown: str, max_chars: int = SPEECH_MAX_CHARS) -> str:
    """
    Sanitize a markdown report for the speech model.

    Strips markup characters, collapses blank-line runs and caps the length.
    """
    cleaned = strip_markup(markdown)
    cleaned = re.sub(r"\n\s*\n\s*\n+", "\n\n", cleaned).strip()
    speech_text = truncate_text(cleaned, max_chars=max_chars)

    logger.debug(f"Prepared speech text: {len(markdown)} → {len(speech_text)} chars")

    return speech_text
