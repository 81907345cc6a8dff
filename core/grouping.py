"""
Day grouping for display.

Thoughts are bucketed by the local calendar day of ``created_at``. Newest day
first; inside a day, oldest thought first. Invalid records and groups are
dropped rather than shown empty.
"""
from collections import OrderedDict
from datetime import date, datetime, tzinfo
from typing import Iterable, List, Optional

from core.thoughts import SavedThought, ThoughtGroup
from utils.logger import get_logger
from utils.validators import is_valid_saved_thought, is_valid_thought_group

logger = get_logger(__name__)


def local_date(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """
    Calendar day of ``moment`` in ``tz`` (host local time when tz is None).

    pytz zones are applied with ``astimezone`` as well, which picks the right
    offset for the instant.
    """
    return moment.astimezone(tz).date()


def group_thoughts_by_day(
    thoughts: Iterable[SavedThought], tz: Optional[tzinfo] = None
) -> List[ThoughtGroup]:
    """
    Group thoughts into ThoughtGroup entries.

    Args:
        thoughts: Saved thoughts in any order
        tz: Timezone that defines "day"

    Returns:
        Valid groups, newest day first, thoughts within a day in creation order
    """
    buckets = OrderedDict()
    skipped = 0
    for thought in thoughts:
        if not is_valid_saved_thought(thought):
            skipped += 1
            continue
        buckets.setdefault(local_date(thought.created_at, tz), []).append(thought)

    if skipped:
        logger.warning(f"Dropped {skipped} invalid thought(s) while grouping")

    groups = []
    for day in sorted(buckets, reverse=True):
        # sorted() is stable, so same-instant thoughts keep their load order
        ordered = sorted(buckets[day], key=lambda t: t.created_at)
        groups.append(ThoughtGroup(date=day, thoughts=ordered))

    return [group for group in groups if is_valid_thought_group(group)]
