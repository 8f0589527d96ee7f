"""
Badge Catalog

Static table of every badge a user can earn, grouped by category:
- Beginner (first task, first sprint, first backlog item)
- Progress (task volume, sprint finisher, speed, consistency)
- Elite (top performer, 50 and 100 tasks)
- Streak (daily streaks, comeback after inactivity)

Declaration order is the display and evaluation order.
"""

from typing import Optional

from sprintdesk.exceptions import ConfigurationError
from sprintdesk.models.achievement import Badge, BadgeCategory, BadgeCriterion, CriterionKind


def _badge(
    badge_id: str,
    name: str,
    icon: str,
    description: str,
    category: BadgeCategory,
    kind: CriterionKind,
    threshold: int
) -> Badge:
    return Badge(
        id=badge_id,
        name=name,
        icon=icon,
        description=description,
        category=category,
        criterion=BadgeCriterion(kind=kind, threshold=threshold),
    )


FIRST_STEP = _badge(
    "first_step", "First Step", "⭐", "Complete your first task",
    BadgeCategory.BEGINNER, CriterionKind.TASKS_COMPLETED, 1,
)
GETTING_STARTED = _badge(
    "getting_started", "Getting Started", "🚀", "Join your first sprint",
    BadgeCategory.BEGINNER, CriterionKind.SPRINTS_JOINED, 1,
)
CONTRIBUTOR = _badge(
    "contributor", "Contributor", "📝", "Create your first backlog item",
    BadgeCategory.BEGINNER, CriterionKind.BACKLOGS_CREATED, 1,
)
ON_FIRE = _badge(
    "on_fire", "On Fire", "🔥", "Complete 10 tasks",
    BadgeCategory.PROGRESS, CriterionKind.TASKS_COMPLETED, 10,
)
SPRINT_FINISHER = _badge(
    "sprint_finisher", "Sprint Finisher", "🏃", "Complete all your tasks in a sprint",
    BadgeCategory.PROGRESS, CriterionKind.SPRINT_ALL_TASKS_COMPLETED, 1,
)
SPEED_DEMON = _badge(
    "speed_demon", "Speed Demon", "⚡", "Complete a task within 24 hours",
    BadgeCategory.PROGRESS, CriterionKind.TASK_WITHIN_24H, 1,
)
# Counts distinct sprints with a completion; adjacency is not checked
CONSISTENT = _badge(
    "consistent", "Consistent", "💪", "Complete tasks in 3 consecutive sprints",
    BadgeCategory.PROGRESS, CriterionKind.CONSECUTIVE_SPRINTS_WITH_COMPLETIONS, 3,
)
SPRINT_CHAMPION = _badge(
    "sprint_champion", "Sprint Champion", "🏆", "Be the top performer in a sprint",
    BadgeCategory.ELITE, CriterionKind.TOP_PERFORMER_IN_SPRINT, 1,
)
TASK_MASTER = _badge(
    "task_master", "Task Master", "💎", "Complete 50 tasks total",
    BadgeCategory.ELITE, CriterionKind.TASKS_COMPLETED, 50,
)
LEGEND = _badge(
    "legend", "Legend", "👑", "Complete 100 tasks total",
    BadgeCategory.ELITE, CriterionKind.TASKS_COMPLETED, 100,
)
STREAK_3_DAY = _badge(
    "streak_3_day", "3-Day Streak", "🔥", "Complete tasks 3 days in a row",
    BadgeCategory.STREAK, CriterionKind.DAILY_STREAK, 3,
)
STREAK_7_DAY = _badge(
    "streak_7_day", "7-Day Streak", "🔥🔥", "Complete tasks 7 days in a row",
    BadgeCategory.STREAK, CriterionKind.DAILY_STREAK, 7,
)
STREAK_30_DAY = _badge(
    "streak_30_day", "30-Day Streak", "🔥🔥🔥", "Complete tasks 30 days in a row",
    BadgeCategory.STREAK, CriterionKind.DAILY_STREAK, 30,
)
COMEBACK = _badge(
    "comeback", "Comeback", "❄️", "Return after 7+ days inactive and complete a task",
    BadgeCategory.STREAK, CriterionKind.COMEBACK_AFTER_INACTIVE, 7,
)

BADGES: tuple[Badge, ...] = (
    FIRST_STEP,
    GETTING_STARTED,
    CONTRIBUTOR,
    ON_FIRE,
    SPRINT_FINISHER,
    SPEED_DEMON,
    CONSISTENT,
    SPRINT_CHAMPION,
    TASK_MASTER,
    LEGEND,
    STREAK_3_DAY,
    STREAK_7_DAY,
    STREAK_30_DAY,
    COMEBACK,
)

EXPECTED_BADGE_COUNT = 14


def validate_catalog(badges: tuple[Badge, ...]) -> dict[str, Badge]:
    """
    Check catalog shape and build the id index

    Raises:
        ConfigurationError: duplicate ids, wrong size or non-positive threshold
    """
    if len(badges) != EXPECTED_BADGE_COUNT:
        raise ConfigurationError(
            message=f"Badge catalog has {len(badges)} entries, expected {EXPECTED_BADGE_COUNT}",
            config_key="BADGES"
        )

    index: dict[str, Badge] = {}
    for badge in badges:
        if badge.id in index:
            raise ConfigurationError(
                message=f"Duplicate badge id in catalog: {badge.id}",
                config_key="BADGES"
            )
        if badge.criterion.threshold <= 0:
            raise ConfigurationError(
                message=f"Badge {badge.id} has non-positive threshold",
                config_key="BADGES"
            )
        index[badge.id] = badge
    return index


_BADGES_BY_ID = validate_catalog(BADGES)


def get_badge(badge_id: str) -> Optional[Badge]:
    """Look up a badge definition by id"""
    return _BADGES_BY_ID.get(badge_id)


def all_badges() -> list[Badge]:
    """All badge definitions in declaration order"""
    return list(BADGES)
