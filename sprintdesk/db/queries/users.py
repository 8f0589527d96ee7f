"""User lookups (read-only; users are managed by the tracker core)"""
import logging
from typing import Optional
from sprintdesk.db.connection import db
from sprintdesk.models.user import UserIdentity

logger = logging.getLogger(__name__)


async def get_user(user_id: str) -> Optional[UserIdentity]:
    """Get identity fields and role for a user, None if unknown"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT id, name, department, position, role
                FROM users
                WHERE id = %s
                """,
                (user_id,)
            )
            row = await cur.fetchone()

    if not row:
        logger.debug(f"User {user_id} not found")
        return None

    return UserIdentity(
        id=str(row["id"]),
        name=row.get("name") or "",
        department=row.get("department") or "",
        position=row.get("position") or "",
        role=row.get("role") or "member",
    )
