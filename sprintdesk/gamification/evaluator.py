"""Badge Evaluator: derive newly satisfied badges from a record's stats"""

from typing import Callable, Optional
from datetime import datetime, timezone
import logging

from sprintdesk.gamification.badges import all_badges
from sprintdesk.models.achievement import AchievementRecord, AchievementStats, Badge, CriterionKind

logger = logging.getLogger(__name__)


# Stat each criterion kind is compared against. COMEBACK_AFTER_INACTIVE is
# absent: it depends on the idle gap at completion time, not a stored counter.
_STAT_READERS: dict[CriterionKind, Callable[[AchievementStats], int]] = {
    CriterionKind.TASKS_COMPLETED: lambda s: s.tasks_completed,
    CriterionKind.SPRINTS_JOINED: lambda s: len(s.sprints_joined),
    CriterionKind.BACKLOGS_CREATED: lambda s: s.backlogs_created,
    CriterionKind.SPRINT_ALL_TASKS_COMPLETED: lambda s: s.sprint_finisher_count,
    CriterionKind.TASK_WITHIN_24H: lambda s: s.speed_demon_count,
    CriterionKind.CONSECUTIVE_SPRINTS_WITH_COMPLETIONS: lambda s: len(s.sprints_with_completions),
    CriterionKind.TOP_PERFORMER_IN_SPRINT: lambda s: s.top_performer_count,
    CriterionKind.DAILY_STREAK: lambda s: s.current_streak,
}


def criterion_progress(badge: Badge, stats: AchievementStats) -> Optional[int]:
    """Current value of the stat behind a badge, None for transition-based badges"""
    reader = _STAT_READERS.get(badge.criterion.kind)
    if reader is None:
        return None
    return reader(stats)


def is_satisfied(badge: Badge, stats: AchievementStats) -> bool:
    current = criterion_progress(badge, stats)
    return current is not None and current >= badge.criterion.threshold


def evaluate(record: AchievementRecord, now: Optional[datetime] = None) -> list[str]:
    """
    Award every catalog badge whose criterion the stats now meet

    Mutates record.badges; the caller persists the record.

    Returns:
        Newly awarded badge ids in catalog order
    """
    if now is None:
        now = datetime.now(timezone.utc)

    newly_awarded = []
    for badge in all_badges():
        if record.has_badge(badge.id):
            continue
        if is_satisfied(badge, record.stats) and record.award(badge.id, now):
            newly_awarded.append(badge.id)

    if newly_awarded:
        logger.info(f"User {record.user_id} unlocked badges: {', '.join(newly_awarded)}")

    return newly_awarded
