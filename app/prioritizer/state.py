"""Application state — the authoritative goal and project lists.

Every write updates local state first, then schedules a persister call.
The persister outcome never feeds back into local state: failures are
logged and recorded on `sync_failures`, nothing is reverted.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable

from app.config import settings
from app.db import get_session_factory
from app.prioritizer.models import Goal, Project, RatedEntity, Task, TaskStatus
from app.prioritizer.persistence import GOAL, PROJECT, NullPersister, Persister, SqlPersister
from app.prioritizer.ranking import Ranking, compute_ranking
from app.prioritizer.reorder import reorder
from app.prioritizer.scoring import score_entity

logger = logging.getLogger(__name__)


class PrioritizerError(Exception):
    pass


class EntityNotFoundError(PrioritizerError):
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"Unknown {kind}: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class DuplicateEntityError(PrioritizerError):
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"Duplicate {kind}: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


@dataclass(frozen=True, slots=True)
class SyncFailure:
    operation: str  # "create" | "update"
    kind: str  # "goal" | "project"
    entity_id: str
    error: str


class PrioritizerState:
    def __init__(
        self,
        persister: Persister | None = None,
        goals: Iterable[Goal] = (),
        projects: Iterable[Project] = (),
    ):
        self._persister: Persister = persister or NullPersister()
        self._goals: list[Goal] = list(goals)
        self._projects: list[Project] = list(projects)
        self._pending: set[asyncio.Task] = set()
        self.sync_failures: list[SyncFailure] = []

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def goals(self) -> list[Goal]:
        return list(self._goals)

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    def _goal_index(self, goal_id: str) -> int:
        for i, goal in enumerate(self._goals):
            if goal.goal_id == goal_id:
                return i
        raise EntityNotFoundError(GOAL, goal_id)

    def _project_index(self, project_id: str) -> int:
        for i, project in enumerate(self._projects):
            if project.project_id == project_id:
                return i
        raise EntityNotFoundError(PROJECT, project_id)

    def get_goal(self, goal_id: str) -> Goal:
        return self._goals[self._goal_index(goal_id)]

    def get_project(self, project_id: str) -> Project:
        return self._projects[self._project_index(project_id)]

    def ranking(self) -> Ranking:
        """Run the ranking pipeline and store the fresh scores on our entities."""
        result = compute_ranking(self._projects, self._goals)

        goal_scores = {g.goal_id: g.score for g in result.goals}
        for goal in self._goals:
            goal.score = goal_scores.get(goal.goal_id, goal.score)

        scored = {p.project_id: p for p in result.scored_projects}
        for project in self._projects:
            fresh = scored.get(project.project_id)
            if fresh is not None:
                project.score = fresh.score
                project.priority_score = fresh.priority_score

        return result

    # ------------------------------------------------------------------
    # Goal writes
    # ------------------------------------------------------------------

    def add_goal(self, goal: Goal) -> Goal:
        if any(g.goal_id == goal.goal_id for g in self._goals):
            raise DuplicateEntityError(GOAL, goal.goal_id)
        self._goals.append(goal)
        score_entity(goal, self._goals)
        logger.debug("Added goal %s (score %d)", goal.goal_id, goal.score)
        self._sync("create", GOAL, goal)
        return goal

    def update_goal(self, goal: Goal) -> Goal:
        index = self._goal_index(goal.goal_id)
        self._goals[index] = goal
        score_entity(goal, self._goals)
        logger.debug("Updated goal %s (score %d)", goal.goal_id, goal.score)
        self._sync("update", GOAL, goal)
        return goal

    def move_goal(self, goal_id: str, direction: int) -> bool:
        return reorder(self._goals, self._goal_index(goal_id), direction)

    # ------------------------------------------------------------------
    # Project writes
    # ------------------------------------------------------------------

    def add_project(self, project: Project) -> Project:
        if any(p.project_id == project.project_id for p in self._projects):
            raise DuplicateEntityError(PROJECT, project.project_id)
        project.tasks = [t.model_copy(update={"project_id": project.project_id}) for t in project.tasks]
        self._projects.append(project)
        score_entity(project, self._projects)
        logger.debug("Added project %s (score %d)", project.project_id, project.score)
        self._sync("create", PROJECT, project)
        return project

    def update_project(self, project: Project, keep_tasks: bool = False) -> Project:
        index = self._project_index(project.project_id)
        if keep_tasks:
            project.tasks = list(self._projects[index].tasks)
        else:
            project.tasks = [t.model_copy(update={"project_id": project.project_id}) for t in project.tasks]
        self._projects[index] = project
        score_entity(project, self._projects)
        logger.debug("Updated project %s (score %d)", project.project_id, project.score)
        self._sync("update", PROJECT, project)
        return project

    def move_project(self, project_id: str, direction: int) -> bool:
        return reorder(self._projects, self._project_index(project_id), direction)

    # ------------------------------------------------------------------
    # Task writes (tasks live inside their project)
    # ------------------------------------------------------------------

    def _task_index(self, project: Project, task_id: str) -> int:
        for i, task in enumerate(project.tasks):
            if task.task_id == task_id:
                return i
        raise EntityNotFoundError("task", task_id)

    def add_task(self, project_id: str, task: Task) -> Task:
        project = self.get_project(project_id)
        if any(t.task_id == task.task_id for t in project.tasks):
            raise DuplicateEntityError("task", task.task_id)
        task.project_id = project_id
        project.tasks = [*project.tasks, task]
        self._sync("update", PROJECT, project)
        return task

    def set_task_status(self, project_id: str, task_id: str, status: TaskStatus) -> Task:
        project = self.get_project(project_id)
        task = project.tasks[self._task_index(project, task_id)]
        task.status = status
        self._sync("update", PROJECT, project)
        return task

    def move_task(self, project_id: str, task_id: str, direction: int) -> bool:
        project = self.get_project(project_id)
        tasks = list(project.tasks)
        moved = reorder(tasks, self._task_index(project, task_id), direction)
        project.tasks = tasks
        return moved

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _sync(self, operation: str, kind: str, entity: RatedEntity) -> None:
        snapshot = entity.model_copy(deep=True)
        coro = self._write(operation, kind, snapshot)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (plain sync caller): write inline.
            asyncio.run(coro)
            return
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write(self, operation: str, kind: str, entity: RatedEntity) -> None:
        try:
            if operation == "create":
                await self._persister.create(kind, entity)
            else:
                await self._persister.update(kind, entity)
        except Exception as exc:
            logger.error("Failed to %s %s %s", operation, kind, entity.entity_id, exc_info=True)
            self.sync_failures.append(
                SyncFailure(operation=operation, kind=kind, entity_id=entity.entity_id, error=str(exc))
            )

    async def drain(self) -> None:
        """Wait for every scheduled persister call to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))


def build_persister() -> Persister:
    if settings.persistence_enabled:
        return SqlPersister(get_session_factory())
    return NullPersister()


_state: PrioritizerState | None = None


def get_state() -> PrioritizerState:
    """FastAPI dependency — one state per process."""
    global _state
    if _state is None:
        _state = PrioritizerState(persister=build_persister())
    return _state
