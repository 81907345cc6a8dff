"""
Journal views: the day-grouped list of thoughts and the archive.

Archiving is a soft delete. Archived thoughts can be restored or deleted for
good until they expire after the retention window.

Requires python-telegram-bot v21+
"""
from datetime import date
from typing import List, Optional

from telegram import Update
from telegram.ext import CallbackQueryHandler, CommandHandler, ContextTypes

from core.decorators import callback_query_handler, log_action, with_thought_store
from core.grouping import local_date
from core.thoughts import ThoughtGroup
from utils.formatters import (
    format_group_heading,
    format_thought_detail,
    format_thought_item,
    readable_datetime,
)
from utils.keyboards import (
    ARCHIVE_THOUGHT,
    DELETE_THOUGHT,
    RESTORE_THOUGHT,
    VIEW_THOUGHT,
    generate_thought_actions_keyboard,
    make_markup,
)
from utils.logger import get_logger, log_user_action
from utils.patterns import (
    ARCHIVE_THOUGHT_PATTERN,
    DELETE_THOUGHT_PATTERN,
    RESTORE_THOUGHT_PATTERN,
    VIEW_THOUGHT_PATTERN,
    extract_callback_value,
)

logger = get_logger(__name__)

# Most recent days shown per view
MAX_GROUPS = 7


def _today(store) -> date:
    return local_date(store.manager.clock(), store.tz)


async def _send_groups(
    update: Update,
    store,
    groups: List[ThoughtGroup],
    archived: bool,
) -> None:
    """One message per day group, each with its action buttons."""
    history_label = await store.get_history_label()
    today = _today(store)
    prefix = "(archived)" if archived else ""

    for group in groups[:MAX_GROUPS]:
        items = [
            (index, t, store.namespace.suffix_of(t.uuid))
            for index, t in enumerate(group.thoughts, 1)
        ]
        lines = [format_group_heading(group, today)]
        lines.extend(
            format_thought_item(index, t, history_label, prefix=prefix)
            for index, t, _ in items
        )
        await update.effective_message.reply_text(
            "\n".join(lines),
            parse_mode="HTML",
            reply_markup=make_markup(generate_thought_actions_keyboard(items, archived=archived)),
        )

    if len(groups) > MAX_GROUPS:
        await update.effective_message.reply_text(
            f"Showing the {MAX_GROUPS} most recent days of {len(groups)}."
        )


@log_action("my_thoughts")
@with_thought_store
async def my_thoughts(update: Update, context: ContextTypes.DEFAULT_TYPE, store) -> None:
    """Show the journal, grouped by day."""
    collections = await store.load_all()

    if not collections.active:
        await update.effective_message.reply_text(
            "No thoughts yet! Use /thought to write your first thought record."
        )
    else:
        await _send_groups(update, store, collections.active, archived=False)

    if collections.archived:
        count = sum(len(g.thoughts) for g in collections.archived)
        await update.effective_message.reply_text(
            f"{count} thought(s) in the archive. Use /archive to see them."
        )


@log_action("my_archive")
@with_thought_store
async def my_archive(update: Update, context: ContextTypes.DEFAULT_TYPE, store) -> None:
    """Show archived thoughts with restore / delete buttons."""
    collections = await store.load_all()

    if not collections.archived:
        await update.effective_message.reply_text("The archive is empty.")
        return

    days = store.manager.retention.total_seconds() / 86400
    await update.effective_message.reply_text(
        f"Archived thoughts are deleted for good {days:g} days after they were archived."
    )
    await _send_groups(update, store, collections.archived, archived=True)


def _suffix(query_data: str, prefix: str) -> Optional[str]:
    suffix = extract_callback_value(query_data, prefix)
    if suffix is None:
        logger.warning(f"Malformed callback data: {query_data!r}")
    return suffix


@callback_query_handler
@with_thought_store
async def handle_view(update: Update, context: ContextTypes.DEFAULT_TYPE, query_data: str, store) -> None:
    suffix = _suffix(query_data, VIEW_THOUGHT)
    if suffix is None:
        return

    saved = await store.get(store.active_key(suffix))
    if saved is None:
        await update.effective_message.reply_text("That thought is no longer in your journal.")
        return

    created = saved.created_at.astimezone(store.tz) if saved.created_at else None
    await update.effective_message.reply_text(
        f"<b>{readable_datetime(created, include_year=True)}</b>\n\n{format_thought_detail(saved)}",
        parse_mode="HTML"
    )


@callback_query_handler
@with_thought_store
async def handle_archive(update: Update, context: ContextTypes.DEFAULT_TYPE, query_data: str, store) -> None:
    suffix = _suffix(query_data, ARCHIVE_THOUGHT)
    if suffix is None:
        return

    await store.archive(store.active_key(suffix))
    log_user_action(logger, update.effective_chat.id, "thought_archived", suffix)
    await update.effective_message.reply_text(
        "Moved to the archive. Use /archive to restore it."
    )


@callback_query_handler
@with_thought_store
async def handle_restore(update: Update, context: ContextTypes.DEFAULT_TYPE, query_data: str, store) -> None:
    suffix = _suffix(query_data, RESTORE_THOUGHT)
    if suffix is None:
        return

    await store.restore(store.archived_key(suffix))
    log_user_action(logger, update.effective_chat.id, "thought_restored", suffix)
    await update.effective_message.reply_text("Restored. Use /mythoughts to see it.")


@callback_query_handler
@with_thought_store
async def handle_permanent_delete(
    update: Update, context: ContextTypes.DEFAULT_TYPE, query_data: str, store
) -> None:
    suffix = _suffix(query_data, DELETE_THOUGHT)
    if suffix is None:
        return

    await store.permanent_delete(store.archived_key(suffix))
    log_user_action(logger, update.effective_chat.id, "thought_deleted", suffix)
    await update.effective_message.reply_text("Deleted for good.")


journal_handlers = [
    CommandHandler("mythoughts", my_thoughts),
    CommandHandler("archive", my_archive),
    CallbackQueryHandler(handle_view, pattern=VIEW_THOUGHT_PATTERN),
    CallbackQueryHandler(handle_archive, pattern=ARCHIVE_THOUGHT_PATTERN),
    CallbackQueryHandler(handle_restore, pattern=RESTORE_THOUGHT_PATTERN),
    CallbackQueryHandler(handle_permanent_delete, pattern=DELETE_THOUGHT_PATTERN),
]
