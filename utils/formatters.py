"""
Shared formatting utilities for dates, times, and messages.
"""
from datetime import datetime, date
from html import escape
from typing import Optional, List

from core.distortions import emoji_for_slug, label_for_slug
from core.thoughts import SavedThought, Thought, ThoughtGroup

HISTORY_LABEL_ALTERNATIVE = "alternative-thought"
HISTORY_LABEL_AUTOMATIC = "automatic-thought"
HISTORY_LABELS = (HISTORY_LABEL_ALTERNATIVE, HISTORY_LABEL_AUTOMATIC)

# Maximum number of distortion emoji shown under a thought
MAX_DISTORTION_EMOJI = 8
PREVIEW_LENGTH = 150


def readable_datetime(dt: datetime, include_year: bool = False) -> str:
    """
    Format datetime for display to user.

    Args:
        dt: Datetime object to format
        include_year: Whether to include year in output

    Returns:
        Formatted string like "14 Dec, 09:30" or "14 Dec 2024, 09:30"
    """
    if dt is None:
        return "-"

    if include_year:
        return dt.strftime("%d %b %Y, %H:%M")
    return dt.strftime("%d %b, %H:%M")


def readable_date(d: date, include_year: bool = False) -> str:
    """
    Format date for display to user.

    Returns:
        Formatted string like "14 Dec" or "14 Dec 2024"
    """
    if d is None:
        return "-"

    if include_year:
        return d.strftime("%d %b %Y")
    return d.strftime("%d %b")


def group_label(group_date: date, today: Optional[date] = None) -> str:
    """Heading for a day group: "Today" for the current day, the date otherwise."""
    if today is None:
        today = date.today()
    if group_date == today:
        return "Today"
    return readable_date(group_date, include_year=group_date.year != today.year)


def truncate(text: str, length: int = PREVIEW_LENGTH) -> str:
    text = text or ""
    return text[:length] + "..." if len(text) > length else text


def thought_headline(thought: Thought, history_label: str = HISTORY_LABEL_ALTERNATIVE) -> str:
    """The text a list shows for a thought, per the user's history label setting."""
    if history_label == HISTORY_LABEL_AUTOMATIC:
        text = thought.automatic_thought
    else:
        text = thought.alternative_thought or thought.automatic_thought
    return truncate(text.strip()) if text and text.strip() else "(empty)"


def distortion_emoji_line(thought: Thought, limit: int = MAX_DISTORTION_EMOJI) -> str:
    """Emoji for the selected distortions, at most ``limit`` of them."""
    emoji = [emoji_for_slug(d.slug) for d in thought.selected_distortions]
    return " ".join([e for e in emoji if e][:limit]).strip()


def distortion_names(thought: Thought) -> List[str]:
    return [d.label or label_for_slug(d.slug) for d in thought.selected_distortions]


def format_thought_detail(thought: Thought) -> str:
    """Full HTML rendering of one thought record."""
    lines = [f"<b>Automatic thought:</b> {escape(thought.automatic_thought or '-')}"]
    if thought.challenge:
        lines.append(f"<b>Challenge:</b> {escape(thought.challenge)}")
    lines.append(f"<b>Alternative thought:</b> {escape(thought.alternative_thought or '-')}")
    names = distortion_names(thought)
    if names:
        lines.append(f"<b>Distortions:</b> {escape(', '.join(names))}")
    return "\n".join(lines)


def format_group_heading(group: ThoughtGroup, today: Optional[date] = None) -> str:
    return f"<b>{escape(group_label(group.date, today))}</b>"


def format_thought_item(
    index: int,
    thought: SavedThought,
    history_label: str = HISTORY_LABEL_ALTERNATIVE,
    prefix: str = "",
) -> str:
    """One list line: number, optional prefix, headline, then distortion emoji."""
    headline = escape(thought_headline(thought, history_label))
    line = f"{index}. {prefix + ' ' if prefix else ''}{headline}"
    emoji = distortion_emoji_line(thought)
    if emoji:
        line += f"\n    {emoji}"
    return line
