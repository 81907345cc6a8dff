"""
Helper functions for conversation handlers.

Requires python-telegram-bot v21+
"""
from typing import List

from telegram.ext import ContextTypes

from core.distortions import new_distortion_list
from core.thoughts import CognitiveDistortion, Thought
from utils.logger import get_logger

logger = get_logger(__name__)

# chat_data keys for a thought being written
AUTOMATIC_THOUGHT = 'automatic_thought'
CHALLENGE = 'challenge'
ALTERNATIVE_THOUGHT = 'alternative_thought'
DISTORTIONS = 'distortions'


def clear_chat_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Clear chat_data from context."""
    context.chat_data.clear()
    logger.debug("chat_data cleared")


def get_chat_data(context: ContextTypes.DEFAULT_TYPE, key: str, default=None):
    """Safely get a value from chat_data."""
    return context.chat_data.get(key, default)


def set_chat_data(context: ContextTypes.DEFAULT_TYPE, key: str, value) -> None:
    """Set a value in chat_data."""
    context.chat_data[key] = value


def get_draft_distortions(context: ContextTypes.DEFAULT_TYPE) -> List[CognitiveDistortion]:
    """Distortion list for the thought being written (creates it if needed)."""
    if DISTORTIONS not in context.chat_data:
        context.chat_data[DISTORTIONS] = new_distortion_list()
    return context.chat_data[DISTORTIONS]


def build_draft_thought(context: ContextTypes.DEFAULT_TYPE) -> Thought:
    """Assemble the Thought collected so far in chat_data."""
    return Thought(
        automatic_thought=get_chat_data(context, AUTOMATIC_THOUGHT, ""),
        challenge=get_chat_data(context, CHALLENGE, ""),
        alternative_thought=get_chat_data(context, ALTERNATIVE_THOUGHT, ""),
        cognitive_distortions=list(get_draft_distortions(context)),
    )
