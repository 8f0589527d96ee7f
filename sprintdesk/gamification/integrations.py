"""
Achievement Integration Hooks

Call these from the tracker's mutation paths after the triggering change has
been saved (task status change, backlog creation, sprint membership, sprint
completion). They never raise: achievement bookkeeping must not fail the
operation that triggered it, so errors are logged and an empty result is
returned.

Usage:
    from sprintdesk.gamification.integrations import handle_task_status_change

    # After saving the backlog item
    await handle_task_status_change(
        user_id=item.assignee_id,
        previous_status=old_status,
        new_status=item.task_status,
        sprint_id=item.sprint_id,
        started_at=item.started_at,
    )
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, TypedDict

from sprintdesk.gamification.achievement_system import (
    on_task_completed,
    on_backlog_created,
    on_sprint_joined,
    check_sprint_finisher,
    check_top_performer,
)
from sprintdesk.models.backlog import TaskStatus

logger = logging.getLogger(__name__)


class SprintCompletionResult(TypedDict):
    """Result of sprint completion processing"""
    finishers: dict[str, List[str]]
    top_performer: Optional[str]
    top_performer_badges: List[str]


async def handle_task_status_change(
    user_id: Optional[str],
    previous_status: Optional[str],
    new_status: Optional[str],
    sprint_id: Optional[str] = None,
    started_at: Optional[datetime] = None
) -> List[str]:
    """
    Count a completion when a task moves into 'completed'

    Saving an already completed task again is not a new completion.

    Returns:
        Badge ids newly awarded to the assignee (empty on any failure)
    """
    if not user_id:
        return []

    if new_status != TaskStatus.COMPLETED.value or previous_status == TaskStatus.COMPLETED.value:
        return []

    try:
        return await on_task_completed(user_id, sprint_id=sprint_id, started_at=started_at)
    except Exception as e:
        logger.error(
            f"[ACHIEVEMENTS] Failed to process task completion for user {user_id}: {e}",
            exc_info=True
        )
        return []


async def handle_backlog_created(user_id: Optional[str]) -> List[str]:
    """Count a new backlog item for its creator"""
    if not user_id:
        return []

    try:
        return await on_backlog_created(user_id)
    except Exception as e:
        logger.error(
            f"[ACHIEVEMENTS] Failed to process backlog creation for user {user_id}: {e}",
            exc_info=True
        )
        return []


async def handle_sprint_joined(user_id: Optional[str], sprint_id: Optional[str]) -> List[str]:
    """Record sprint membership for a user added to a sprint"""
    if not user_id or not sprint_id:
        return []

    try:
        return await on_sprint_joined(user_id, sprint_id)
    except Exception as e:
        logger.error(
            f"[ACHIEVEMENTS] Failed to process sprint join for user {user_id}, sprint {sprint_id}: {e}",
            exc_info=True
        )
        return []


async def handle_sprint_completed(
    sprint_id: str,
    assignee_ids: Iterable[str]
) -> SprintCompletionResult:
    """
    Run the sprint-level checks once a sprint is marked completed

    Each assignee is checked for sprint finisher independently, so one
    failure does not skip the others. The top performer is credited once.
    """
    result: SprintCompletionResult = {
        "finishers": {},
        "top_performer": None,
        "top_performer_badges": [],
    }

    # Preserve order, drop duplicates and blanks
    unique_assignees = list(dict.fromkeys(a for a in assignee_ids if a))

    for user_id in unique_assignees:
        try:
            awarded = await check_sprint_finisher(user_id, sprint_id)
            result["finishers"][user_id] = awarded
        except Exception as e:
            logger.error(
                f"[ACHIEVEMENTS] Sprint finisher check failed for user {user_id}, sprint {sprint_id}: {e}",
                exc_info=True
            )

    try:
        top_user_id, awarded = await check_top_performer(sprint_id)
        result["top_performer"] = top_user_id
        result["top_performer_badges"] = awarded
    except Exception as e:
        logger.error(
            f"[ACHIEVEMENTS] Top performer check failed for sprint {sprint_id}: {e}",
            exc_info=True
        )

    logger.info(
        f"[ACHIEVEMENTS] Sprint {sprint_id} completed: {len(result['finishers'])} assignee(s) checked, "
        f"top performer {result['top_performer']}"
    )
    return result
