"""Pydantic models for API responses"""
from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime

from sprintdesk.models.achievement import AchievementStats, BadgeCategory, BadgeCriterion


class BadgeResponse(BaseModel):
    """Badge definition"""
    id: str
    name: str
    icon: str
    description: str
    category: BadgeCategory
    criterion: BadgeCriterion


class EarnedBadgeResponse(BadgeResponse):
    """Badge the user holds"""
    earned_at: datetime


class BadgeProgress(BaseModel):
    """Progress toward a badge threshold"""
    current: int
    required: int
    percentage: int


class BadgeStatusResponse(BadgeResponse):
    """Badge with the user's unlock state"""
    earned: bool
    earned_at: Optional[datetime] = None
    progress: BadgeProgress


class UserAchievements(BaseModel):
    """Achievement summary for one user"""
    user_id: str
    stats: AchievementStats
    earned_badges: List[EarnedBadgeResponse]
    all_badges: List[BadgeStatusResponse]
    earned_count: int
    total_badges: int


class AchievementsResponse(BaseModel):
    """Response for the user achievements endpoint"""
    success: bool = True
    achievements: UserAchievements


class LeaderboardBadge(BaseModel):
    """Badge summary shown on the leaderboard"""
    icon: str
    name: str
    description: str


class LeaderboardEntry(BaseModel):
    """One leaderboard row"""
    rank: int = Field(..., ge=1)
    visible_name: str
    visible_department: str
    visible_position: str
    visible_id: str
    badge_count: int
    badges: List[LeaderboardBadge]
    tasks_completed: int
    current_streak: int


class LeaderboardResponse(BaseModel):
    """Response for the leaderboard endpoint"""
    success: bool = True
    department: Optional[str] = None
    leaderboard: List[LeaderboardEntry]


class BadgeCatalogResponse(BaseModel):
    """Response for the badge catalog endpoint"""
    success: bool = True
    badges: List[BadgeResponse]


class ErrorResponse(BaseModel):
    """Error response"""
    success: bool = False
    message: str


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str
    timestamp: datetime
    database: str
