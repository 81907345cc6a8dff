"""
Thought Journal - CBT thought record Telegram bot

Main entry point for the bot application.
Supports both polling (development) and webhook (production) modes.

Requires python-telegram-bot v21+
"""
from telegram import BotCommand, Update
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
)

from config import BotConfig, journal_config
from dbhelper import init_database
from bot_commands import get_commands_list, get_help_text
from core.decorators import with_thought_store
from utils.logger import get_logger

# Import conversation handlers
from modules.thought import thoughts_handler
from modules.journal import journal_handlers
from modules.settings import settings_handler

# Import scheduler
from core.scheduler import schedule_expiry_sweep

# Initialize logger
logger = get_logger(__name__)

# Bot configuration
bot_config = BotConfig()


@with_thought_store
async def start(update: Update, context: ContextTypes.DEFAULT_TYPE, store) -> None:
    """Handle /start command - Welcome message."""
    user_name = update.effective_user.first_name or "there"

    if await store.is_existing_user():
        await update.message.reply_text(
            f"Welcome back, {user_name}! Use /thought to write a thought record "
            f"or /mythoughts to see your journal."
        )
        return

    welcome_text = (
        f"Hey {user_name}! Welcome to Thought Journal.\n\n"
        f"A thought record helps you catch an automatic thought, challenge it, "
        f"and replace it with a more balanced one.\n\n"
        f"<b>Quick Start:</b>\n"
        f"1. /thought - Write your first thought record\n"
        f"2. /mythoughts - Review your journal, grouped by day\n"
        f"3. /archive - Restore or delete archived thoughts\n\n"
        f"Use /help to see all commands."
    )

    await update.message.reply_text(welcome_text, parse_mode="HTML")
    await store.mark_existing_user()
    logger.info(f"Start command from new user: {update.effective_user.id}")


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command - Show available commands."""
    await update.message.reply_text(
        get_help_text(journal_config.retention_days), parse_mode="HTML"
    )


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Global error handler for the bot."""
    user_id = "Unknown"
    chat_id = "Unknown"

    if isinstance(update, Update):
        if update.effective_user:
            user_id = update.effective_user.id
        if update.effective_chat:
            chat_id = update.effective_chat.id

    logger.error(
        f"[User:{user_id}] [Chat:{chat_id}] Error: {type(context.error).__name__}: {context.error}",
        exc_info=context.error
    )

    if isinstance(update, Update):
        if update.message:
            logger.debug(f"Error triggered by message: {update.message.text}")
        elif update.callback_query:
            logger.debug(f"Error triggered by callback: {update.callback_query.data}")

        if update.effective_message:
            try:
                await update.effective_message.reply_text(
                    "An error occurred. Please try again or use /cancel to start fresh."
                )
            except Exception as e:
                logger.warning(f"Could not notify chat {chat_id} about error: {e}")


async def setup_commands(application: Application) -> None:
    """Set up bot commands for the Telegram menu."""
    commands = [
        BotCommand(cmd, desc)
        for cmd, desc in get_commands_list()
    ]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands set up successfully")


def register_handlers(application: Application) -> None:
    """Register all handlers with the application."""
    # Conversation handlers (must be added before command handlers)
    application.add_handler(thoughts_handler)
    application.add_handler(settings_handler)

    # Basic command handlers
    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))

    # Journal views and their buttons
    for handler in journal_handlers:
        application.add_handler(handler)

    # Error handler
    application.add_error_handler(error_handler)

    logger.info("All handlers registered successfully")


async def post_init(application: Application) -> None:
    """Post-initialization hook - runs after application is initialized."""
    await setup_commands(application)

    logger.info("Initializing expiry sweep...")
    schedule_expiry_sweep(application.job_queue)


def main() -> None:
    """Main entry point."""
    if not bot_config.token:
        logger.error("BOT_TOKEN not found in environment variables!")
        raise ValueError("BOT_TOKEN environment variable is required")

    logger.info("Initializing Thought Journal...")

    logger.info("Initializing database...")
    init_database()

    application = (
        Application.builder()
        .token(bot_config.token)
        .post_init(post_init)
        .build()
    )

    register_handlers(application)

    if bot_config.mode == "webhook":
        logger.info(f"Starting bot in webhook mode on port {bot_config.port}...")
        application.run_webhook(
            listen="0.0.0.0",
            port=bot_config.port,
            url_path=bot_config.token,
            webhook_url=f"{bot_config.webhook_url}/{bot_config.token}",
        )
    else:
        logger.info("Starting bot in polling mode...")
        application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
