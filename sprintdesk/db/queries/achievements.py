"""Achievement record database queries"""
import logging
from typing import Optional
from psycopg.types.json import Jsonb
from sprintdesk.db.connection import db
from sprintdesk.db.queries.users import get_user
from sprintdesk.exceptions import ConcurrentUpdateError
from sprintdesk.models.achievement import AchievementRecord, AchievementStats

logger = logging.getLogger(__name__)

_RECORD_COLUMNS = """
    user_id, visible_name, visible_department, visible_position,
    badges, stats, version, created_at, updated_at
"""


def _row_to_record(row: dict) -> AchievementRecord:
    return AchievementRecord(
        user_id=str(row["user_id"]),
        visible_name=row.get("visible_name") or "",
        visible_department=row.get("visible_department") or "",
        visible_position=row.get("visible_position") or "",
        badges=row.get("badges") or [],
        stats=AchievementStats.model_validate(row.get("stats") or {}),
        version=row.get("version", 0),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


async def get_record(user_id: str) -> Optional[AchievementRecord]:
    """
    Get achievement record without creating one

    Returns:
        AchievementRecord or None if the user has no record yet
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM user_achievements
                WHERE user_id = %s
                """,
                (user_id,)
            )
            row = await cur.fetchone()
            return _row_to_record(row) if row else None


async def get_or_create_record(user_id: str) -> AchievementRecord:
    """
    Get achievement record (creates if doesn't exist)

    The identity snapshot is read from the users table once, at creation.
    A concurrent creator loses on the unique user_id constraint and re-reads
    the winning row instead of inserting a duplicate.
    """
    existing = await get_record(user_id)
    if existing:
        return existing

    user = await get_user(user_id)
    empty_stats = AchievementStats()

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                INSERT INTO user_achievements
                    (user_id, visible_name, visible_department, visible_position, badges, stats)
                VALUES (%s, %s, %s, %s, %s, %s)
                ON CONFLICT (user_id) DO NOTHING
                RETURNING {_RECORD_COLUMNS}
                """,
                (
                    user_id,
                    user.name if user else "",
                    user.department if user else "",
                    user.position if user else "",
                    Jsonb([]),
                    Jsonb(empty_stats.model_dump(mode="json")),
                )
            )
            row = await cur.fetchone()
            await conn.commit()

    if row:
        logger.info(f"Created achievement record for user {user_id}")
        return _row_to_record(row)

    logger.debug(f"Achievement record for user {user_id} created concurrently, re-reading")
    record = await get_record(user_id)
    if record is None:
        raise ConcurrentUpdateError(
            message=f"Achievement record for {user_id} vanished after insert conflict",
            user_id=user_id,
            operation="get_or_create_record"
        )
    return record


async def save_record(record: AchievementRecord) -> AchievementRecord:
    """
    Persist full record using optimistic concurrency

    The update only applies if the stored version still equals
    record.version; the version is then incremented on both sides.

    Raises:
        ConcurrentUpdateError: if another writer saved first
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                UPDATE user_achievements
                SET badges = %s,
                    stats = %s,
                    version = version + 1,
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = %s AND version = %s
                RETURNING version, updated_at
                """,
                (
                    Jsonb([b.model_dump(mode="json") for b in record.badges]),
                    Jsonb(record.stats.model_dump(mode="json")),
                    record.user_id,
                    record.version,
                )
            )
            row = await cur.fetchone()
            await conn.commit()

    if not row:
        raise ConcurrentUpdateError(
            message=f"Achievement record for {record.user_id} changed since version {record.version}",
            expected_version=record.version,
            user_id=record.user_id,
            operation="save_record"
        )

    record.version = row["version"]
    record.updated_at = row["updated_at"]
    return record


async def update_record_identity(
    user_id: str,
    name: str,
    department: str,
    position: str
) -> bool:
    """
    Overwrite the identity snapshot on an existing record

    Returns:
        True if a record was updated, False if the user has none
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                UPDATE user_achievements
                SET visible_name = %s,
                    visible_department = %s,
                    visible_position = %s,
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = %s
                RETURNING user_id
                """,
                (name, department, position, user_id)
            )
            row = await cur.fetchone()
            await conn.commit()
            return row is not None


async def list_leaderboard_records(
    department: Optional[str] = None,
    limit: int = 20
) -> list[AchievementRecord]:
    """
    Get top records by badge count, then tasks completed

    Args:
        department: Only include records whose snapshot department matches
        limit: Maximum number of records

    Returns:
        Records in leaderboard order
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            if department:
                await cur.execute(
                    f"""
                    SELECT {_RECORD_COLUMNS}
                    FROM user_achievements
                    WHERE visible_department = %s
                    ORDER BY badge_count DESC, tasks_completed DESC, user_id
                    LIMIT %s
                    """,
                    (department, limit)
                )
            else:
                await cur.execute(
                    f"""
                    SELECT {_RECORD_COLUMNS}
                    FROM user_achievements
                    ORDER BY badge_count DESC, tasks_completed DESC, user_id
                    LIMIT %s
                    """,
                    (limit,)
                )
            rows = await cur.fetchall()
            return [_row_to_record(row) for row in rows]
