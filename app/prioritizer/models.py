"""Goal / Project / Task entities and API payloads — Pydantic v2 models."""

from __future__ import annotations

import uuid
from abc import abstractmethod
from datetime import date, datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

TaskStatus = Literal["active", "completed"]


def _new_id() -> str:
    return str(uuid.uuid4())


class Timeframe(BaseModel):
    start: date
    end: date


class Task(BaseModel):
    task_id: str = Field(default_factory=_new_id)
    description: str
    status: TaskStatus = "active"
    project_id: str | None = None


class RatedEntity(BaseModel):
    """Fields shared by everything the scorer rates."""

    description: str
    motivation: str = ""
    status: str = "active"
    complexity: str | None = None  # "low" | "medium" | "high", anything else counts as medium
    excitement: str | None = None
    score: int = 0
    user_id: str | None = None

    @property
    @abstractmethod
    def entity_id(self) -> str: ...


class Goal(RatedEntity):
    goal_id: str = Field(default_factory=_new_id)
    color: str = "#075985"

    @property
    def entity_id(self) -> str:
        return self.goal_id


class Project(RatedEntity):
    project_id: str = Field(default_factory=_new_id)
    project_goal: str | None = None  # goal_id, never an embedded goal
    timeframe: Timeframe | None = None
    tasks: list[Task] = Field(default_factory=list)
    priority_score: int = 0

    @property
    def entity_id(self) -> str:
        return self.project_id


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class GoalIn(BaseModel):
    goal_id: str | None = None
    description: str = Field(min_length=10, max_length=120)
    motivation: str = ""
    status: str = "active"
    complexity: str | None = None
    excitement: str | None = None
    color: str | None = None


class ProjectIn(BaseModel):
    project_id: str | None = None
    description: str = Field(min_length=10, max_length=120)
    motivation: str = ""
    status: str = "active"
    complexity: str | None = "medium"
    excitement: str | None = "medium"
    project_goal: str | None = None
    timeframe: Timeframe | None = None
    tasks: list[Task] | None = None  # None on edit keeps the stored tasks


class TaskIn(BaseModel):
    task_id: str | None = None
    description: str = Field(min_length=1, max_length=120)
    status: TaskStatus = "active"


class TaskStatusIn(BaseModel):
    status: TaskStatus


class MoveIn(BaseModel):
    direction: Literal[-1, 1]


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class RankedProject(Project):
    goal_color: str | None = None
    active_tasks: int = 0
    completed_tasks: int = 0
    unlinked: bool = False


class RankingResponse(BaseModel):
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    projects: list[RankedProject] = Field(default_factory=list)
    unlinked: list[str] = Field(default_factory=list)
