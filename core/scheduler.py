"""
Scheduler for the periodic expiry sweep.
Uses python-telegram-bot's JobQueue which wraps APScheduler.

Every load already sweeps expired archived thoughts, so this job only matters
for chats that haven't opened their journal in a while.

Requires python-telegram-bot v21+ (with the job-queue extra)
"""
from datetime import timedelta
from typing import Optional

from telegram.ext import ContextTypes

from config import journal_config
from core.database import SqlKeyValueStore
from core.keys import KeyNamespace
from core.storage import StorageAdapter
from core.store import ThoughtStore
from utils.logger import get_logger

logger = get_logger(__name__)

SWEEP_JOB_NAME = "thought_expiry_sweep"


async def sweep_all_journals(backend=None) -> int:
    """
    Run the expiry sweep for every chat that has thoughts stored.

    Returns:
        Number of journals swept
    """
    backend = backend or SqlKeyValueStore()
    keys = await StorageAdapter(backend).list_all_keys()
    owners = KeyNamespace.owners_in(keys)

    for owner in owners:
        store = ThoughtStore.for_chat(owner, backend=backend)
        live = await store.sweep_expired()
        logger.debug(f"Swept journal {owner}: {live} live thought(s)")

    logger.info(f"Expiry sweep finished for {len(owners)} journal(s)")
    return len(owners)


async def run_expiry_sweep(context: ContextTypes.DEFAULT_TYPE) -> None:
    """JobQueue callback."""
    try:
        await sweep_all_journals()
    except Exception as e:
        # The next run, or any load, retries
        logger.error(f"Error during expiry sweep: {e}", exc_info=True)


def remove_job_by_name(job_queue, job_name: str) -> bool:
    """Remove a job by its name."""
    jobs = job_queue.get_jobs_by_name(job_name)
    for job in jobs:
        job.schedule_removal()
    return len(jobs) > 0


def schedule_expiry_sweep(job_queue, interval: Optional[timedelta] = None) -> None:
    """(Re)schedule the repeating sweep. Safe to call more than once."""
    if job_queue is None:
        logger.warning("No job queue available; expiry sweep runs only on load")
        return

    interval = interval or journal_config.sweep_interval
    remove_job_by_name(job_queue, SWEEP_JOB_NAME)
    job_queue.run_repeating(
        callback=run_expiry_sweep,
        interval=interval,
        first=timedelta(seconds=30),
        name=SWEEP_JOB_NAME,
    )
    logger.info(f"Scheduled expiry sweep every {interval}")
