"""
Input and record validation utilities.
"""
import re
from datetime import date, datetime
from typing import Any, Tuple


def is_valid_saved_thought(thought: Any) -> bool:
    """
    Structural check on a loaded thought.

    A thought is displayable when it has a non-empty uuid and both timestamps
    are real datetimes.
    """
    if thought is None:
        return False
    uuid = getattr(thought, "uuid", None)
    if not isinstance(uuid, str) or not uuid.strip():
        return False
    return (
        isinstance(getattr(thought, "created_at", None), datetime)
        and isinstance(getattr(thought, "updated_at", None), datetime)
    )


def is_valid_thought_group(group: Any) -> bool:
    """A group is valid when its date is a date and it holds at least one thought, all valid."""
    if group is None:
        return False
    group_date = getattr(group, "date", None)
    # datetime is a date subclass; a group is keyed by a plain day
    if not isinstance(group_date, date) or isinstance(group_date, datetime):
        return False
    thoughts = getattr(group, "thoughts", None)
    if not thoughts:
        return False
    return all(is_valid_saved_thought(t) for t in thoughts)


def validate_text_length(
    text: str,
    field_name: str = "Text",
    min_length: int = 1,
    max_length: int = 500
) -> Tuple[bool, str]:
    """
    Validate text field length.

    Args:
        text: Text to validate
        field_name: Name of field for error messages
        min_length: Minimum allowed length
        max_length: Maximum allowed length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not text:
        if min_length > 0:
            return False, f"{field_name} is required"
        return True, ""

    text = text.strip()

    if len(text) < min_length:
        return False, f"{field_name} is too short (min {min_length} characters)"

    if len(text) > max_length:
        return False, f"{field_name} is too long (max {max_length} characters)"

    return True, ""


def sanitize_text(text: str) -> str:
    """
    Sanitize user input text.

    Strips surrounding whitespace and null bytes and collapses runs of
    spaces/tabs. Line breaks are kept; journal entries are often multi-line.
    """
    if not text:
        return ""

    text = text.strip().replace("\x00", "")
    text = re.sub(r"[ \t]+", " ", text)
    return text
