"""
Thought record conversation handler.

Walks the user through one CBT thought record: the automatic thought, a
challenge to it, an alternative thought, and the distortions involved.

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

from core.decorators import (
    callback_query_handler,
    handle_conversation_error,
    with_thought_store,
)
from core.distortions import toggle_distortion
from core.thoughts import SavedThought
from modules.helpers import (
    ALTERNATIVE_THOUGHT,
    AUTOMATIC_THOUGHT,
    CHALLENGE,
    build_draft_thought,
    clear_chat_data,
    get_draft_distortions,
    set_chat_data,
)
from utils.formatters import format_thought_detail
from utils.keyboards import DISTORTION_TOGGLE, generate_distortion_keyboard, make_markup
from utils.logger import get_logger, log_user_action
from utils.patterns import (
    DISTORTION_TOGGLE_PATTERN,
    DISTORTIONS_DONE_PATTERN,
    extract_callback_value,
)
from utils.validators import sanitize_text, validate_text_length

logger = get_logger(__name__)

# Conversation states
AUTOMATIC, CHALLENGING, ALTERNATIVE, DISTORTIONS = range(4)

# Configuration
TIMEOUT_SECONDS = 600  # 10 minutes per thought record
MAX_LENGTH = 2000


async def _read_text(update: Update, field_name: str):
    """Sanitized message text, or None after telling the user what's wrong."""
    text = sanitize_text(update.message.text)
    is_valid, error = validate_text_length(text, field_name=field_name, max_length=MAX_LENGTH)
    if not is_valid:
        await update.message.reply_text(f"{error}. Please try again.")
        return None
    return text


async def thought(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Entry point for /thought."""
    clear_chat_data(context)
    await update.message.reply_text(
        "Let's write a thought record.\n\n"
        "<b>What's the automatic thought?</b>\n"
        "Write down the thought exactly as it came to you.\n\n"
        "Use /cancel to stop.",
        parse_mode="HTML"
    )
    return AUTOMATIC


async def handle_automatic(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    text = await _read_text(update, "Automatic thought")
    if text is None:
        return AUTOMATIC

    set_chat_data(context, AUTOMATIC_THOUGHT, text)
    await update.message.reply_text(
        "<b>Challenge it.</b>\n"
        "What evidence is there against this thought? Is there another way to see it?\n\n"
        "Use /skip to skip this step.",
        parse_mode="HTML"
    )
    return CHALLENGING


async def handle_challenge(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    text = await _read_text(update, "Challenge")
    if text is None:
        return CHALLENGING

    set_chat_data(context, CHALLENGE, text)
    return await _ask_alternative(update)


async def skip_challenge(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    set_chat_data(context, CHALLENGE, "")
    return await _ask_alternative(update)


async def _ask_alternative(update: Update) -> int:
    await update.message.reply_text(
        "<b>What's a more balanced, alternative thought?</b>",
        parse_mode="HTML"
    )
    return ALTERNATIVE


async def handle_alternative(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    text = await _read_text(update, "Alternative thought")
    if text is None:
        return ALTERNATIVE

    set_chat_data(context, ALTERNATIVE_THOUGHT, text)
    distortions = get_draft_distortions(context)
    await update.message.reply_text(
        "Which cognitive distortions were in the automatic thought?\n"
        "Tap to select, then press Done.",
        reply_markup=make_markup(generate_distortion_keyboard(distortions))
    )
    return DISTORTIONS


@callback_query_handler
async def handle_distortion_toggle(
    update: Update, context: ContextTypes.DEFAULT_TYPE, query_data: str
) -> int:
    slug = extract_callback_value(query_data, DISTORTION_TOGGLE)
    distortions = get_draft_distortions(context)
    if slug and toggle_distortion(distortions, slug):
        await update.callback_query.edit_message_reply_markup(
            reply_markup=make_markup(generate_distortion_keyboard(distortions))
        )
    return DISTORTIONS


@callback_query_handler
@handle_conversation_error(error_message="Error saving thought. Please try /thought again.")
@with_thought_store
async def handle_distortions_done(
    update: Update, context: ContextTypes.DEFAULT_TYPE, query_data: str, store
) -> int:
    """Save the record."""
    draft = build_draft_thought(context)
    saved = await store.save(draft)

    if isinstance(saved, SavedThought) and saved.uuid:
        log_user_action(logger, update.effective_chat.id, "thought_saved", saved.uuid)
        await update.callback_query.edit_message_text(
            f"Thought saved!\n\n{format_thought_detail(saved)}\n\n"
            "Use /mythoughts to view your journal.",
            parse_mode="HTML"
        )
    else:
        logger.warning(f"Thought for chat {update.effective_chat.id} was not saved")
        await update.callback_query.edit_message_text(
            "Sorry, that thought couldn't be saved. Please try /thought again."
        )

    clear_chat_data(context)
    return ConversationHandler.END


async def cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Cancel the thought record."""
    logger.info("Thought record cancelled")
    clear_chat_data(context)
    await update.effective_message.reply_text("Thought record cancelled.")
    return ConversationHandler.END


async def timeout(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle conversation timeout."""
    logger.info("Thought record timed out")
    clear_chat_data(context)
    await update.effective_message.reply_text(
        "Thought record timed out. Please use /thought to start again."
    )
    return ConversationHandler.END


text_input = filters.TEXT & ~filters.COMMAND

# Build the conversation handler
thoughts_handler = ConversationHandler(
    entry_points=[CommandHandler('thought', thought)],
    states={
        AUTOMATIC: [MessageHandler(text_input, handle_automatic)],
        CHALLENGING: [
            CommandHandler('skip', skip_challenge),
            MessageHandler(text_input, handle_challenge),
        ],
        ALTERNATIVE: [MessageHandler(text_input, handle_alternative)],
        DISTORTIONS: [
            CallbackQueryHandler(handle_distortion_toggle, pattern=DISTORTION_TOGGLE_PATTERN),
            CallbackQueryHandler(handle_distortions_done, pattern=DISTORTIONS_DONE_PATTERN),
        ],
        ConversationHandler.TIMEOUT: [MessageHandler(filters.ALL, timeout)]
    },
    fallbacks=[CommandHandler('cancel', cancel)],
    conversation_timeout=TIMEOUT_SECONDS
)
