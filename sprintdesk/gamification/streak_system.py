"""
Daily Streak Tracking

Streaks count consecutive days with at least one completed task:
- Same day as the previous completion: streak unchanged
- Exactly one day later: streak continues
- Two or more days later: streak restarts at 1
- Seven or more idle days: the completion counts as a comeback

Days are whole 24 hour periods since the previous completion, not calendar dates.
"""

from typing import Any, Dict, Optional
from datetime import datetime, timedelta, timezone
import logging

from sprintdesk.models.achievement import AchievementStats

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)
SPEED_WINDOW = timedelta(hours=24)
COMEBACK_IDLE_DAYS = 7


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed, floored; clock skew counts as the same day"""
    elapsed = as_utc(later) - as_utc(earlier)
    return max(elapsed // ONE_DAY, 0)


def is_speed_completion(started_at: Optional[datetime], completed_at: datetime) -> bool:
    """True if the task was finished within 24 hours of being started"""
    if started_at is None:
        return False
    return as_utc(completed_at) - as_utc(started_at) <= SPEED_WINDOW


def update_streak(stats: AchievementStats, now: datetime) -> Dict[str, Any]:
    """
    Apply a task completion at `now` to the streak counters in place

    Also stamps last_task_completed_at and last_active_at.

    Returns:
        {
            'current_streak': int,
            'longest_streak': int,
            'old_streak': int,
            'days_since_last': int | None,  # None on first completion
            'comeback': bool  # idle for COMEBACK_IDLE_DAYS or more
        }
    """
    previous = stats.last_task_completed_at
    old_streak = stats.current_streak
    days_since_last = None
    comeback = False

    if previous is None:
        stats.current_streak = 1
    else:
        days_since_last = days_between(previous, now)
        comeback = days_since_last >= COMEBACK_IDLE_DAYS

        if days_since_last == 0:
            pass
        elif days_since_last == 1:
            stats.current_streak += 1
        else:
            stats.current_streak = 1
            logger.debug(f"Streak reset after {days_since_last} days (was {old_streak})")

    if stats.current_streak > stats.longest_streak:
        stats.longest_streak = stats.current_streak

    stats.last_task_completed_at = now
    stats.last_active_at = now

    return {
        "current_streak": stats.current_streak,
        "longest_streak": stats.longest_streak,
        "old_streak": old_streak,
        "days_since_last": days_since_last,
        "comeback": comeback,
    }
