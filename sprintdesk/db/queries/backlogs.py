"""Backlog reads used by sprint-level achievement checks"""
import logging
from sprintdesk.db.connection import db
from sprintdesk.models.backlog import SprintTask

logger = logging.getLogger(__name__)

_TASK_COLUMNS = "id, sprint_id, assignee_id, task_status, started_at, completed_at"


def _row_to_task(row: dict) -> SprintTask:
    return SprintTask(
        id=str(row["id"]),
        sprint_id=str(row["sprint_id"]) if row.get("sprint_id") is not None else None,
        assignee_id=str(row["assignee_id"]) if row.get("assignee_id") is not None else None,
        task_status=row.get("task_status") or "pending",
        started_at=row.get("started_at"),
        completed_at=row.get("completed_at"),
    )


async def get_sprint_assignments(sprint_id: str, user_id: str) -> list[SprintTask]:
    """All backlog items in a sprint assigned to a user, any status"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {_TASK_COLUMNS}
                FROM backlogs
                WHERE sprint_id = %s AND assignee_id = %s
                ORDER BY id
                """,
                (sprint_id, user_id)
            )
            rows = await cur.fetchall()
            return [_row_to_task(row) for row in rows]


async def get_completed_sprint_tasks(sprint_id: str) -> list[SprintTask]:
    """
    Completed, assigned backlog items in a sprint

    Ordered by completion time so callers can tell who finished first.
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {_TASK_COLUMNS}
                FROM backlogs
                WHERE sprint_id = %s
                  AND task_status = 'completed'
                  AND assignee_id IS NOT NULL
                ORDER BY completed_at NULLS LAST, id
                """,
                (sprint_id,)
            )
            rows = await cur.fetchall()
            return [_row_to_task(row) for row in rows]
