"""
Shared inline keyboard generators for the Telegram front-end.

Callback payloads carry only the thought's identifier suffix (a uuid), never
the full storage key: Telegram caps callback data at 64 bytes.
"""
from typing import List, Tuple

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from core.distortions import emoji_for_slug, label_for_slug
from core.thoughts import CognitiveDistortion, SavedThought
from utils.formatters import HISTORY_LABEL_ALTERNATIVE, HISTORY_LABEL_AUTOMATIC

# Callback data prefixes
DISTORTION_TOGGLE = "dist:"
DISTORTIONS_DONE = "dist_done"
VIEW_THOUGHT = "view:"
ARCHIVE_THOUGHT = "arch:"
RESTORE_THOUGHT = "rest:"
DELETE_THOUGHT = "del:"
HISTORY_LABEL = "label:"
SETTINGS_DONE = "settings_done"


def generate_options_keyboard(
    options: List[Tuple[str, str]],
    columns: int = 3
) -> List[List[InlineKeyboardButton]]:
    """
    Generate a keyboard from a list of options.

    Args:
        options: List of (label, callback_data) tuples
        columns: Number of buttons per row

    Returns:
        Keyboard layout for InlineKeyboardMarkup
    """
    keyboard = []
    row = []

    for label, callback_data in options:
        row.append(InlineKeyboardButton(label, callback_data=callback_data))

        if len(row) == columns:
            keyboard.append(row)
            row = []

    if row:
        keyboard.append(row)

    return keyboard


def generate_distortion_keyboard(
    distortions: List[CognitiveDistortion],
    columns: int = 2
) -> List[List[InlineKeyboardButton]]:
    """
    Toggle keyboard for picking distortions; selected ones carry a check mark.

    Args:
        distortions: The thought's distortion list (selected flags shown)
        columns: Number of buttons per row

    Returns:
        Keyboard layout, with a "Done" row at the bottom
    """
    options = []
    for distortion in distortions:
        mark = "✅ " if distortion.selected else ""
        emoji = emoji_for_slug(distortion.slug) or ""
        label = distortion.label or label_for_slug(distortion.slug)
        options.append((f"{mark}{emoji} {label}".strip(), f"{DISTORTION_TOGGLE}{distortion.slug}"))

    keyboard = generate_options_keyboard(options, columns=columns)
    keyboard.append([InlineKeyboardButton("Done", callback_data=DISTORTIONS_DONE)])
    return keyboard


def generate_thought_actions_keyboard(
    thoughts: List[Tuple[int, SavedThought, str]],
    archived: bool = False
) -> List[List[InlineKeyboardButton]]:
    """
    One row of action buttons per listed thought.

    Args:
        thoughts: (display number, thought, identifier suffix) triples
        archived: Archive view (restore / delete forever) instead of the journal view

    Returns:
        Keyboard layout for InlineKeyboardMarkup
    """
    keyboard = []
    for index, _, suffix in thoughts:
        if archived:
            keyboard.append([
                InlineKeyboardButton(f"↩️ Restore {index}", callback_data=f"{RESTORE_THOUGHT}{suffix}"),
                InlineKeyboardButton(f"❌ Delete {index}", callback_data=f"{DELETE_THOUGHT}{suffix}"),
            ])
        else:
            keyboard.append([
                InlineKeyboardButton(f"👁 View {index}", callback_data=f"{VIEW_THOUGHT}{suffix}"),
                InlineKeyboardButton(f"🗑 Archive {index}", callback_data=f"{ARCHIVE_THOUGHT}{suffix}"),
            ])
    return keyboard


def generate_history_label_keyboard(current: str) -> List[List[InlineKeyboardButton]]:
    """Settings keyboard for which text list views show."""
    options = [
        ("Alternative thought", HISTORY_LABEL_ALTERNATIVE),
        ("Automatic thought", HISTORY_LABEL_AUTOMATIC),
    ]
    keyboard = [
        [InlineKeyboardButton(
            f"{'✅ ' if value == current else ''}{label}",
            callback_data=f"{HISTORY_LABEL}{value}",
        )]
        for label, value in options
    ]
    keyboard.append([InlineKeyboardButton("Done", callback_data=SETTINGS_DONE)])
    return keyboard


def make_markup(keyboard: List[List[InlineKeyboardButton]]) -> InlineKeyboardMarkup:
    """
    Convenience function to wrap keyboard in InlineKeyboardMarkup.

    Args:
        keyboard: Keyboard layout from any generate_* function

    Returns:
        InlineKeyboardMarkup ready to use in reply_text
    """
    return InlineKeyboardMarkup(inline_keyboard=keyboard)
