"""
Decorators for common handler patterns.
Reduces boilerplate in conversation handlers.

Requires python-telegram-bot v21+
"""
from functools import wraps
from typing import Callable

from telegram import Update
from telegram.ext import ContextTypes, ConversationHandler

from utils.logger import get_logger

logger = get_logger(__name__)

STORE_KEY = "thought_store"


def get_chat_store(context: ContextTypes.DEFAULT_TYPE, chat_id: int):
    """
    The chat's ThoughtStore, created on first use.

    The store is kept in application-level bot_data, keyed by chat, so it
    survives chat_data being cleared at the end of a conversation.
    """
    from core.store import ThoughtStore

    stores = context.bot_data.setdefault(STORE_KEY, {})
    store = stores.get(chat_id)
    if store is None:
        store = ThoughtStore.for_chat(chat_id)
        stores[chat_id] = store
    return store


def with_thought_store(func: Callable) -> Callable:
    """
    Decorator that provides the chat's thought store to the handler.

    The store is passed as a keyword argument 'store'.

    Usage:
        @with_thought_store
        async def my_handler(update, context, store):
            collections = await store.load_all()
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        kwargs['store'] = get_chat_store(context, update.effective_chat.id)
        return await func(update, context, *args, **kwargs)

    return wrapper


def log_action(action_name: str) -> Callable:
    """
    Decorator that logs when a handler is called.

    Usage:
        @log_action("thought_archive")
        async def archive_handler(update, context):
            pass
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
            chat_id = update.effective_chat.id if update.effective_chat else "unknown"
            logger.info(f"[{action_name}] Called by chat_id: {chat_id}")

            try:
                result = await func(update, context, *args, **kwargs)
                logger.debug(f"[{action_name}] Completed successfully")
                return result
            except Exception as e:
                logger.error(f"[{action_name}] Error: {e}", exc_info=True)
                raise

        return wrapper
    return decorator


def handle_conversation_error(
    error_message: str = "Something went wrong. Please try again.",
    return_state: int = ConversationHandler.END
) -> Callable:
    """
    Decorator that catches exceptions in conversation handlers.

    Usage:
        @handle_conversation_error()
        async def my_handler(update, context):
            # If exception occurs, user sees error_message
            pass
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
            try:
                return await func(update, context, *args, **kwargs)
            except Exception as e:
                logger.error(f"Conversation error in {func.__name__}: {e}", exc_info=True)

                # Clear any partial data
                context.chat_data.clear()

                await update.effective_message.reply_text(error_message)
                return return_state

        return wrapper
    return decorator


def callback_query_handler(func: Callable) -> Callable:
    """
    Decorator that handles common callback query boilerplate.

    Automatically answers the callback query and extracts data.

    Usage:
        @callback_query_handler
        async def handle_selection(update, context, query_data):
            # query_data contains the callback_data
            pass
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        query = update.callback_query
        await query.answer()

        kwargs['query_data'] = (query.data or "").strip()
        return await func(update, context, *args, **kwargs)

    return wrapper
