"""
Database queries - re-exported so callers can use `from sprintdesk.db import queries`.

Module organization:
- achievements.py: Achievement records, leaderboard
- users.py: User identity and role lookups
- backlogs.py: Sprint task assignments and completions
"""

from sprintdesk.db.queries.users import get_user

from sprintdesk.db.queries.backlogs import (
    get_sprint_assignments,
    get_completed_sprint_tasks,
)

from sprintdesk.db.queries.achievements import (
    get_record,
    get_or_create_record,
    save_record,
    update_record_identity,
    list_leaderboard_records,
)

__all__ = [
    "get_user",
    "get_sprint_assignments",
    "get_completed_sprint_tasks",
    "get_record",
    "get_or_create_record",
    "save_record",
    "update_record_identity",
    "list_leaderboard_records",
]
