"""
Gamification system for sprintdesk

Achievement engine for the sprint tracker:
- Badge catalog (beginner, progress, elite, streak)
- Daily streak tracking
- Event handlers for task, backlog and sprint activity
- Achievement summaries and department leaderboards
"""

from sprintdesk.gamification.achievement_system import (
    on_task_completed,
    on_backlog_created,
    on_sprint_joined,
    check_sprint_finisher,
    check_top_performer,
    refresh_identity,
    get_user_achievements,
    get_leaderboard,
    get_badge_catalog,
)
from sprintdesk.gamification.integrations import (
    handle_task_status_change,
    handle_backlog_created,
    handle_sprint_joined,
    handle_sprint_completed,
)

__all__ = [
    "on_task_completed",
    "on_backlog_created",
    "on_sprint_joined",
    "check_sprint_finisher",
    "check_top_performer",
    "refresh_identity",
    "get_user_achievements",
    "get_leaderboard",
    "get_badge_catalog",
    "handle_task_status_change",
    "handle_backlog_created",
    "handle_sprint_joined",
    "handle_sprint_completed",
]
