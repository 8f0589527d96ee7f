"""Achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class BadgeCategory(str, Enum):
    """Badge categories"""
    BEGINNER = "beginner"
    PROGRESS = "progress"
    ELITE = "elite"
    STREAK = "streak"


class CriterionKind(str, Enum):
    """Stat a badge criterion is measured against"""
    TASKS_COMPLETED = "tasks_completed"
    SPRINTS_JOINED = "sprints_joined"
    BACKLOGS_CREATED = "backlogs_created"
    SPRINT_ALL_TASKS_COMPLETED = "sprint_all_tasks_completed"
    TASK_WITHIN_24H = "task_completed_within_24h"
    CONSECUTIVE_SPRINTS_WITH_COMPLETIONS = "consecutive_sprints_with_completions"
    TOP_PERFORMER_IN_SPRINT = "top_performer_in_sprint"
    DAILY_STREAK = "daily_streak"
    COMEBACK_AFTER_INACTIVE = "comeback_after_inactive"


class BadgeCriterion(BaseModel):
    """Unlock rule: the stat behind `kind` must reach `threshold`"""
    kind: CriterionKind
    threshold: int


class Badge(BaseModel):
    """Badge definition"""
    model_config = {"frozen": True}

    id: str
    name: str
    icon: str
    description: str
    category: BadgeCategory
    criterion: BadgeCriterion


class EarnedBadge(BaseModel):
    """A badge on a user's record"""
    badge_id: str
    earned_at: datetime


class AchievementStats(BaseModel):
    """Cumulative counters behind badge unlocks"""
    tasks_completed: int = 0
    backlogs_created: int = 0
    # Sprint ids, kept unique
    sprints_joined: list[str] = Field(default_factory=list)
    sprints_with_completions: list[str] = Field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0
    last_task_completed_at: Optional[datetime] = None
    last_active_at: Optional[datetime] = None
    speed_demon_count: int = 0
    sprint_finisher_count: int = 0
    top_performer_count: int = 0


class AchievementRecord(BaseModel):
    """Per-user achievement record"""
    user_id: str
    visible_name: str = ""
    visible_department: str = ""
    visible_position: str = ""
    badges: list[EarnedBadge] = Field(default_factory=list)
    stats: AchievementStats = Field(default_factory=AchievementStats)
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def has_badge(self, badge_id: str) -> bool:
        return any(b.badge_id == badge_id for b in self.badges)

    def award(self, badge_id: str, earned_at: datetime) -> bool:
        """Append badge unless already earned. Returns True if newly awarded."""
        if self.has_badge(badge_id):
            return False
        self.badges.append(EarnedBadge(badge_id=badge_id, earned_at=earned_at))
        return True

    def earned_at(self, badge_id: str) -> Optional[datetime]:
        for badge in self.badges:
            if badge.badge_id == badge_id:
                return badge.earned_at
        return None
