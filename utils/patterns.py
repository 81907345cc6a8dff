"""
Shared regex patterns for Telegram callback query handlers.
"""
import re
from typing import List, Optional

from core.distortions import DISTORTION_SLUGS
from utils.formatters import HISTORY_LABELS
from utils.keyboards import (
    ARCHIVE_THOUGHT,
    DELETE_THOUGHT,
    DISTORTION_TOGGLE,
    DISTORTIONS_DONE,
    HISTORY_LABEL,
    RESTORE_THOUGHT,
    SETTINGS_DONE,
    VIEW_THOUGHT,
)

# Identifier suffixes are uuid4 strings
IDENTIFIER = r"[0-9a-fA-F-]{1,36}"


def generate_options_pattern(options: List[str]) -> str:
    """
    Generate a regex pattern matching exactly one of the options.

    Args:
        options: List of option strings

    Returns:
        Regex pattern string
    """
    return "^(" + "|".join(re.escape(option) for option in options) + ")$"


def generate_prefixed_pattern(prefix: str, value: str = IDENTIFIER) -> str:
    """Pattern for "<prefix><value>" callback data, capturing the value."""
    return f"^{re.escape(prefix)}({value})$"


def extract_callback_value(data: str, prefix: str) -> Optional[str]:
    """The part of callback data after prefix, or None if it doesn't start with it."""
    if not data or not data.startswith(prefix):
        return None
    value = data[len(prefix):]
    return value or None


DISTORTION_TOGGLE_PATTERN = generate_prefixed_pattern(
    DISTORTION_TOGGLE, "|".join(re.escape(slug) for slug in DISTORTION_SLUGS)
)
DISTORTIONS_DONE_PATTERN = generate_options_pattern([DISTORTIONS_DONE])

VIEW_THOUGHT_PATTERN = generate_prefixed_pattern(VIEW_THOUGHT)
ARCHIVE_THOUGHT_PATTERN = generate_prefixed_pattern(ARCHIVE_THOUGHT)
RESTORE_THOUGHT_PATTERN = generate_prefixed_pattern(RESTORE_THOUGHT)
DELETE_THOUGHT_PATTERN = generate_prefixed_pattern(DELETE_THOUGHT)

HISTORY_LABEL_PATTERN = generate_prefixed_pattern(
    HISTORY_LABEL, "|".join(re.escape(label) for label in HISTORY_LABELS)
)
SETTINGS_DONE_PATTERN = generate_options_pattern([SETTINGS_DONE])
