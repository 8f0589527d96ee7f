"""
Achievement System

Reacts to tracker events and keeps each user's achievement record current:
- Task completions (counters, speed, daily streak, comeback, sprint coverage)
- Backlog item creation
- Sprint membership
- Sprint-level evaluations (finisher, top performer)

Every event is one read-modify-write of the user's record, retried when
another writer saved the record first. Badges are awarded by the evaluator
after the event's stat changes are applied and never revoked.

get_user_achievements creates an empty record for a known first-time user;
unknown ids get an unsaved zero record. The other query helpers never write.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
from datetime import datetime, timezone
import logging

import psycopg

from sprintdesk.config import ACHIEVEMENT_MAX_RETRIES, LEADERBOARD_LIMIT
from sprintdesk.db import queries
from sprintdesk.exceptions import AchievementError, SprintDeskError, wrap_external_exception
from sprintdesk.gamification import badges as catalog
from sprintdesk.gamification.evaluator import criterion_progress, evaluate
from sprintdesk.gamification.streak_system import is_speed_completion, update_streak
from sprintdesk.models.achievement import AchievementRecord
from sprintdesk.resilience.retry import retry_with_backoff

logger = logging.getLogger(__name__)

# Mutation applied to a freshly loaded record. Returns None when the event
# changed nothing, otherwise the badge ids the rule itself awarded.
RecordMutation = Callable[[AchievementRecord], Optional[List[str]]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def _apply_event(
    user_id: str,
    event: str,
    mutate: RecordMutation,
    now: datetime
) -> List[str]:
    """Run one event against the user's record and persist the result"""

    async def _attempt() -> List[str]:
        record = await queries.get_or_create_record(user_id)
        rule_awards = mutate(record)
        changed = rule_awards is not None

        newly_awarded = list(rule_awards or [])
        newly_awarded.extend(evaluate(record, now))

        if changed or newly_awarded:
            await queries.save_record(record)

        return newly_awarded

    _attempt.__name__ = f"achievement_{event}"
    try:
        awarded = await retry_with_backoff(_attempt, max_retries=ACHIEVEMENT_MAX_RETRIES)
    except SprintDeskError:
        raise
    except psycopg.Error as e:
        raise wrap_external_exception(e, operation=f"achievement_{event}", user_id=user_id) from e
    except Exception as e:
        raise AchievementError(
            message=f"Failed to process {event} for user {user_id}: {e}",
            event=event,
            user_id=user_id,
            cause=e
        ) from e

    logger.info(f"[ACHIEVEMENTS] {event} processed for user {user_id}: {len(awarded)} new badge(s)")
    return awarded


# ============================================
# Event Handlers
# ============================================

async def on_task_completed(
    user_id: str,
    sprint_id: Optional[str] = None,
    started_at: Optional[datetime] = None,
    now: Optional[datetime] = None
) -> List[str]:
    """
    Record a task completion

    Args:
        user_id: Assignee who completed the task
        sprint_id: Sprint the task belongs to, if any
        started_at: When work on the task began, if known
        now: Completion time (defaults to current UTC time)

    Returns:
        Badge ids newly awarded, the comeback badge first when earned
    """
    if now is None:
        now = _utcnow()

    def _mutate(record: AchievementRecord) -> List[str]:
        stats = record.stats
        awarded = []

        stats.tasks_completed += 1

        if is_speed_completion(started_at, now):
            stats.speed_demon_count += 1

        streak = update_streak(stats, now)
        if streak["comeback"] and record.award(catalog.COMEBACK.id, now):
            awarded.append(catalog.COMEBACK.id)
            logger.info(f"User {user_id} came back after {streak['days_since_last']} idle days")

        if sprint_id and sprint_id not in stats.sprints_with_completions:
            stats.sprints_with_completions.append(sprint_id)

        return awarded

    return await _apply_event(user_id, "task_completed", _mutate, now)


async def on_backlog_created(user_id: str, now: Optional[datetime] = None) -> List[str]:
    """Record creation of a backlog item by user_id"""
    if now is None:
        now = _utcnow()

    def _mutate(record: AchievementRecord) -> List[str]:
        record.stats.backlogs_created += 1
        record.stats.last_active_at = now
        return []

    return await _apply_event(user_id, "backlog_created", _mutate, now)


async def on_sprint_joined(
    user_id: str,
    sprint_id: str,
    now: Optional[datetime] = None
) -> List[str]:
    """
    Record sprint membership

    Joining the same sprint again changes nothing, but badges are still
    evaluated so a previously missed unlock can catch up.
    """
    if now is None:
        now = _utcnow()

    def _mutate(record: AchievementRecord) -> Optional[List[str]]:
        if sprint_id in record.stats.sprints_joined:
            return None
        record.stats.sprints_joined.append(sprint_id)
        record.stats.last_active_at = now
        return []

    return await _apply_event(user_id, "sprint_joined", _mutate, now)


async def check_sprint_finisher(
    user_id: str,
    sprint_id: str,
    now: Optional[datetime] = None
) -> List[str]:
    """
    Credit user_id if every task assigned to them in the sprint is completed

    A user with no assigned tasks in the sprint is never a finisher.
    """
    assignments = await queries.get_sprint_assignments(sprint_id, user_id)

    if not assignments:
        logger.debug(f"No tasks for user {user_id} in sprint {sprint_id}, skipping finisher check")
        return []

    if not all(task.is_completed for task in assignments):
        return []

    if now is None:
        now = _utcnow()

    def _mutate(record: AchievementRecord) -> List[str]:
        record.stats.sprint_finisher_count += 1
        return []

    return await _apply_event(user_id, "sprint_finished", _mutate, now)


def pick_top_performer(assignee_ids: List[str]) -> Optional[Tuple[str, int]]:
    """
    Assignee with the most completions

    assignee_ids holds one entry per completed task, in completion order.
    On a tie the assignee seen first in that order is chosen.

    Returns:
        (assignee_id, completed_count) or None if there were no completions
    """
    # Insertion order keeps first-seen order for the tie-break
    counts: Dict[str, int] = {}
    for assignee_id in assignee_ids:
        counts[assignee_id] = counts.get(assignee_id, 0) + 1

    top_id = None
    top_count = 0
    for assignee_id, count in counts.items():
        if count > top_count:
            top_count = count
            top_id = assignee_id

    if top_id is None:
        return None
    return top_id, top_count


async def check_top_performer(
    sprint_id: str,
    now: Optional[datetime] = None
) -> Tuple[Optional[str], List[str]]:
    """
    Credit the sprint's top performer

    Meant to run once, when the sprint is completed.

    Returns:
        (top performer user id or None, badge ids newly awarded to them)
    """
    tasks = await queries.get_completed_sprint_tasks(sprint_id)
    top = pick_top_performer([task.assignee_id for task in tasks if task.assignee_id])

    if top is None:
        logger.debug(f"No completed tasks in sprint {sprint_id}, no top performer")
        return None, []

    top_user_id, completed = top
    logger.info(f"Top performer for sprint {sprint_id}: {top_user_id} ({completed} tasks)")

    if now is None:
        now = _utcnow()

    def _mutate(record: AchievementRecord) -> List[str]:
        record.stats.top_performer_count += 1
        return []

    awarded = await _apply_event(top_user_id, "top_performer", _mutate, now)
    return top_user_id, awarded


async def refresh_identity(user_id: str) -> bool:
    """
    Re-sync the leaderboard name/department/position snapshot from the user

    The snapshot is otherwise only taken when the record is created.

    Returns:
        True if the record was updated
    """
    user = await queries.get_user(user_id)
    if user is None:
        logger.warning(f"Cannot refresh achievement identity, user {user_id} not found")
        return False

    return await queries.update_record_identity(
        user_id, user.name, user.department, user.position
    )


# ============================================
# Query Services
# ============================================

def _badge_progress(badge, record: AchievementRecord) -> Dict[str, int]:
    required = badge.criterion.threshold
    current = criterion_progress(badge, record.stats)
    if current is None:
        current = required if record.has_badge(badge.id) else 0

    return {
        "current": current,
        "required": required,
        "percentage": min(100, int(current / required * 100)) if required > 0 else 0,
    }


async def get_user_achievements(user_id: str) -> Dict[str, Any]:
    """
    Get user's stats with every badge marked earned or locked

    A first-time user gets an empty record created, so every badge shows locked.
    An id the user table does not know gets the same zero view without a write.

    Returns:
        {
            'user_id': str,
            'stats': dict,
            'earned_badges': [badge + earned_at, in earn order],
            'all_badges': [badge + earned, earned_at, progress, in catalog order],
            'earned_count': int,
            'total_badges': int
        }
    """
    record = await queries.get_record(user_id)
    if record is None:
        if await queries.get_user(user_id) is None:
            # Unknown to the tracker: zero-state view only, nothing persisted
            logger.debug(f"Achievements requested for unknown user {user_id}")
            record = AchievementRecord(user_id=user_id)
        else:
            record = await queries.get_or_create_record(user_id)

    earned_badges = []
    for earned in record.badges:
        badge = catalog.get_badge(earned.badge_id)
        if badge is None:
            logger.warning(f"User {user_id} holds unknown badge {earned.badge_id}")
            continue
        earned_badges.append({**badge.model_dump(mode="json"), "earned_at": earned.earned_at})

    all_badges = []
    for badge in catalog.all_badges():
        all_badges.append({
            **badge.model_dump(mode="json"),
            "earned": record.has_badge(badge.id),
            "earned_at": record.earned_at(badge.id),
            "progress": _badge_progress(badge, record),
        })

    return {
        "user_id": user_id,
        "stats": record.stats.model_dump(),
        "earned_badges": earned_badges,
        "all_badges": all_badges,
        "earned_count": len(earned_badges),
        "total_badges": len(catalog.BADGES),
    }


def _leaderboard_sort_key(record: AchievementRecord) -> Tuple[int, int, str]:
    return (-len(record.badges), -record.stats.tasks_completed, record.user_id)


async def get_leaderboard(
    department: Optional[str] = None,
    limit: int = LEADERBOARD_LIMIT
) -> List[Dict[str, Any]]:
    """
    Ranked leaderboard by badge count, then tasks completed

    Args:
        department: Restrict to records whose snapshot department matches
        limit: Number of rows (default 20)

    Returns:
        Rows with 1-based sequential rank; ties still get distinct ranks
    """
    records = await queries.list_leaderboard_records(department, limit)
    records = sorted(records, key=_leaderboard_sort_key)[:limit]

    leaderboard = []
    for index, record in enumerate(records):
        badge_details = []
        for earned in record.badges:
            badge = catalog.get_badge(earned.badge_id)
            if badge:
                badge_details.append({
                    "icon": badge.icon,
                    "name": badge.name,
                    "description": badge.description,
                })

        leaderboard.append({
            "rank": index + 1,
            "visible_name": record.visible_name,
            "visible_department": record.visible_department,
            "visible_position": record.visible_position,
            "visible_id": record.user_id,
            "badge_count": len(record.badges),
            "badges": badge_details,
            "tasks_completed": record.stats.tasks_completed,
            "current_streak": record.stats.current_streak,
        })

    return leaderboard


def get_badge_catalog() -> List[Dict[str, Any]]:
    """Every badge definition, in catalog order"""
    return [badge.model_dump(mode="json") for badge in catalog.all_badges()]
