"""Shared fixtures for the test suite."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.prioritizer.models import Goal, Project, Task
from app.prioritizer.state import PrioritizerState, get_state


# ---------------------------------------------------------------------------
# Fake persistence (no real Postgres needed)
# ---------------------------------------------------------------------------

class RecordingPersister:
    """Persister that remembers every call; optionally fails them all."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[str, str, str]] = []

    async def create(self, kind, entity):
        self.calls.append(("create", kind, entity.entity_id))
        if self.fail:
            raise ConnectionError("store unreachable")

    async def update(self, kind, entity):
        self.calls.append(("update", kind, entity.entity_id))
        if self.fail:
            raise ConnectionError("store unreachable")


class FakeSession:
    """Minimal stand-in for AsyncSession used in SqlPersister tests."""

    def __init__(self):
        self.executed: list[tuple[str, dict[str, Any]]] = []
        self.commits = 0

    async def execute(self, stmt, params=None):
        self.executed.append((str(stmt), params or {}))

    async def commit(self):
        self.commits += 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def persister():
    return RecordingPersister()


@pytest.fixture()
def state(persister):
    return PrioritizerState(persister=persister)


@pytest.fixture()
def override_state(state):
    """Override the FastAPI dependency so each test gets a fresh state."""
    app.dependency_overrides[get_state] = lambda: state
    yield state
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_state):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def make_goal(goal_id: str, complexity: str = "medium", excitement: str = "medium", **kw) -> Goal:
    """Helper to build a goal with a readable description."""
    return Goal(
        goal_id=goal_id,
        description=kw.pop("description", f"Goal {goal_id} description"),
        complexity=complexity,
        excitement=excitement,
        **kw,
    )


def make_project(
    project_id: str,
    goal_id: str | None = None,
    complexity: str = "medium",
    excitement: str = "medium",
    status: str = "active",
    **kw,
) -> Project:
    """Helper to build a project linked to `goal_id`."""
    return Project(
        project_id=project_id,
        description=kw.pop("description", f"Project {project_id} description"),
        project_goal=goal_id,
        complexity=complexity,
        excitement=excitement,
        status=status,
        **kw,
    )


def make_task(task_id: str, status: str = "active") -> Task:
    return Task(task_id=task_id, description=f"Task {task_id}", status=status)
