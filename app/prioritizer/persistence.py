"""Persistence boundary — create/update goals and projects in the backing store.

Tables mirror the entity models: goals(goal_id, user_id, description, ...),
projects(project_id, user_id, ..., project_goal, tasks JSONB, priority_score).
Calls are keyed by entity id. The state layer schedules them and never waits
on the outcome.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Protocol

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.prioritizer.models import Goal, Project, RatedEntity

GOAL = "goal"
PROJECT = "project"


class Persister(Protocol):
    async def create(self, kind: str, entity: RatedEntity) -> None: ...

    async def update(self, kind: str, entity: RatedEntity) -> None: ...


class NullPersister:
    """Offline mode: every write is accepted and dropped."""

    async def create(self, kind: str, entity: RatedEntity) -> None:
        return None

    async def update(self, kind: str, entity: RatedEntity) -> None:
        return None


def goal_row(goal: Goal) -> dict[str, Any]:
    return {
        "goal_id": goal.goal_id,
        "user_id": goal.user_id,
        "description": goal.description,
        "motivation": goal.motivation,
        "status": goal.status,
        "complexity": goal.complexity,
        "excitement": goal.excitement,
        "color": goal.color,
        "score": goal.score,
    }


def project_row(project: Project) -> dict[str, Any]:
    return {
        "project_id": project.project_id,
        "user_id": project.user_id,
        "description": project.description,
        "motivation": project.motivation,
        "status": project.status,
        "complexity": project.complexity,
        "excitement": project.excitement,
        "project_goal": project.project_goal,
        "timeframe_start": project.timeframe.start if project.timeframe else None,
        "timeframe_end": project.timeframe.end if project.timeframe else None,
        "tasks": json.dumps([t.model_dump(mode="json") for t in project.tasks]),
        "score": project.score,
        "priority_score": project.priority_score,
    }


def _table_for(kind: str, entity: RatedEntity) -> tuple[str, str, dict[str, Any]]:
    if kind == GOAL and isinstance(entity, Goal):
        return "goals", "goal_id", goal_row(entity)
    if kind == PROJECT and isinstance(entity, Project):
        return "projects", "project_id", project_row(entity)
    raise ValueError(f"Cannot persist {type(entity).__name__} as '{kind}'")


def build_insert(kind: str, entity: RatedEntity) -> tuple[str, dict[str, Any]]:
    table, _, row = _table_for(kind, entity)
    columns = ", ".join(row)
    values = ", ".join(f":{c}" for c in row)
    return f"INSERT INTO {table} ({columns}) VALUES ({values})", row


def build_update(kind: str, entity: RatedEntity) -> tuple[str, dict[str, Any]]:
    table, key, row = _table_for(kind, entity)
    assignments = ", ".join(f"{c} = :{c}" for c in row if c != key)
    return f"UPDATE {table} SET {assignments} WHERE {key} = :{key}", row


class SqlPersister:
    """Writes through a SQLAlchemy async session factory."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def _execute(self, sql: str, params: dict[str, Any]) -> None:
        async with self._session_factory() as session:
            await session.execute(text(sql), params)
            await session.commit()

    async def create(self, kind: str, entity: RatedEntity) -> None:
        await self._execute(*build_insert(kind, entity))

    async def update(self, kind: str, entity: RatedEntity) -> None:
        await self._execute(*build_update(kind, entity))
