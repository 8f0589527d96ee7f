"""Backlog item models"""
from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class TaskStatus(str, Enum):
    """Work status of a backlog item assigned in a sprint"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class SprintTask(BaseModel):
    """Backlog item as seen from a sprint"""
    id: str
    sprint_id: Optional[str] = None
    assignee_id: Optional[str] = None
    task_status: TaskStatus = TaskStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.task_status == TaskStatus.COMPLETED
