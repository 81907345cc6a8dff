"""
Journal settings.

Currently one setting: whether the journal list shows each thought's
alternative thought (default) or the original automatic thought.

Requires python-telegram-bot v21+
"""
from telegram import Update
from telegram.ext import (
    CallbackQueryHandler,
    CommandHandler,
    ConversationHandler,
    MessageHandler,
    filters,
    ContextTypes,
)

from core.decorators import callback_query_handler, with_thought_store
from modules.helpers import clear_chat_data
from utils.formatters import HISTORY_LABEL_AUTOMATIC
from utils.keyboards import HISTORY_LABEL, generate_history_label_keyboard, make_markup
from utils.logger import get_logger
from utils.patterns import HISTORY_LABEL_PATTERN, SETTINGS_DONE_PATTERN, extract_callback_value

logger = get_logger(__name__)

# Conversation states
SELECT_SETTING = 0

# Timeout
TIMEOUT_SECONDS = 300


def format_settings_message(history_label: str) -> str:
    """Format current settings for display."""
    shown = "automatic thought" if history_label == HISTORY_LABEL_AUTOMATIC else "alternative thought"
    return (
        "<b>Journal Settings</b>\n\n"
        f"<b>Journal list shows:</b> the {shown}\n\n"
        "Select an option to change it:"
    )


@with_thought_store
async def start_settings(update: Update, context: ContextTypes.DEFAULT_TYPE, store) -> int:
    """Entry point for /settings command."""
    chat_id = update.effective_chat.id
    logger.info(f"[User:{chat_id}] Opening settings")

    current = await store.get_history_label()
    await update.message.reply_text(
        format_settings_message(current),
        parse_mode="HTML",
        reply_markup=make_markup(generate_history_label_keyboard(current))
    )
    return SELECT_SETTING


@callback_query_handler
@with_thought_store
async def handle_history_label(
    update: Update, context: ContextTypes.DEFAULT_TYPE, query_data: str, store
) -> int:
    label = extract_callback_value(query_data, HISTORY_LABEL)
    if not await store.set_history_label(label):
        await update.callback_query.edit_message_text(
            "Sorry, that setting couldn't be saved. Please try /settings again."
        )
        return ConversationHandler.END

    await update.callback_query.edit_message_text(
        format_settings_message(label),
        parse_mode="HTML",
        reply_markup=make_markup(generate_history_label_keyboard(label))
    )
    return SELECT_SETTING


@callback_query_handler
async def handle_settings_done(update: Update, context: ContextTypes.DEFAULT_TYPE, query_data: str) -> int:
    await update.callback_query.edit_message_text("Settings saved!")
    clear_chat_data(context)
    return ConversationHandler.END


async def cancel_settings(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Cancel settings."""
    chat_id = update.effective_chat.id
    logger.info(f"[User:{chat_id}] Cancelled settings")
    clear_chat_data(context)
    await update.effective_message.reply_text("Settings closed.")
    return ConversationHandler.END


async def timeout_settings(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle settings timeout."""
    logger.info("Settings timed out")
    clear_chat_data(context)
    if update and update.effective_message:
        await update.effective_message.reply_text(
            "Settings timed out. Use /settings to try again."
        )
    return ConversationHandler.END


# Build conversation handler
settings_handler = ConversationHandler(
    entry_points=[CommandHandler('settings', start_settings)],
    states={
        SELECT_SETTING: [
            CallbackQueryHandler(handle_history_label, pattern=HISTORY_LABEL_PATTERN),
            CallbackQueryHandler(handle_settings_done, pattern=SETTINGS_DONE_PATTERN),
        ],
        ConversationHandler.TIMEOUT: [
            MessageHandler(filters.ALL, timeout_settings),
            CallbackQueryHandler(timeout_settings),
        ],
    },
    fallbacks=[
        CommandHandler('cancel', cancel_settings),
    ],
    conversation_timeout=TIMEOUT_SECONDS,
)
