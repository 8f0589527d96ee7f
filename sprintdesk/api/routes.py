"""API routes for achievements"""
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status

from sprintdesk.api.auth import get_acting_user, verify_api_key
from sprintdesk.api.middleware import limiter
from sprintdesk.api.models import (
    AchievementsResponse,
    LeaderboardResponse,
    BadgeCatalogResponse,
    HealthCheckResponse,
    ErrorResponse,
)
from sprintdesk.db.connection import db
from sprintdesk.gamification import (
    get_user_achievements,
    get_leaderboard,
    get_badge_catalog,
)
from sprintdesk.models.user import UserIdentity

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/api/v1/achievements",
    response_model=AchievementsResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}
)
@limiter.limit("30/minute")
async def get_achievements_endpoint(
    request: Request,
    user_id: Optional[str] = None,
    api_key: str = Depends(verify_api_key),
    acting_user: UserIdentity = Depends(get_acting_user)
):
    """
    Get achievements for the acting user, or for user_id (Rate limit: 30/minute)

    Viewing another user's achievements requires super-admin, admin or manager.
    Known users without a record get one created with zero stats, so every badge is locked.
    Ids unknown to the tracker get the same zero view without a record being stored.
    """
    target_user_id = user_id or acting_user.id

    if target_user_id != acting_user.id and not acting_user.can_view_others:
        logger.warning(f"User {acting_user.id} ({acting_user.role.value}) denied achievements of {target_user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view other user achievements"
        )

    try:
        achievements = await get_user_achievements(target_user_id)
        return {"success": True, "achievements": achievements}

    except Exception as e:
        logger.error(f"Error getting achievements for {target_user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )


@router.get(
    "/api/v1/achievements/leaderboard",
    response_model=LeaderboardResponse,
    responses={401: {"model": ErrorResponse}}
)
@limiter.limit("30/minute")
async def get_leaderboard_endpoint(
    request: Request,
    department: Optional[str] = None,
    api_key: str = Depends(verify_api_key),
    acting_user: UserIdentity = Depends(get_acting_user)
):
    """
    Get the achievements leaderboard (Rate limit: 30/minute)

    Super-admins see every department, or the one named by `department`.
    Everyone else only sees their own department.
    """
    if acting_user.is_super_admin:
        scope = department or None
    else:
        scope = acting_user.department or None

    try:
        leaderboard = await get_leaderboard(scope)
        return {"success": True, "department": scope, "leaderboard": leaderboard}

    except Exception as e:
        logger.error(f"Error getting leaderboard for department {scope}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )


@router.get("/api/v1/achievements/badges", response_model=BadgeCatalogResponse)
@limiter.limit("60/minute")
async def get_badges_endpoint(
    request: Request,
    api_key: str = Depends(verify_api_key),
    acting_user: UserIdentity = Depends(get_acting_user)
):
    """Get every badge definition (Rate limit: 60/minute)"""
    return {"success": True, "badges": get_badge_catalog()}


@router.get("/api/health", response_model=HealthCheckResponse)
@limiter.limit("60/minute")
async def health_check(request: Request):
    """Health check endpoint (Rate limit: 60/minute for monitoring systems)"""
    try:
        async with db.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()

        db_status = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "disconnected"

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "degraded",
        database=db_status,
        timestamp=datetime.now(timezone.utc)
    )
