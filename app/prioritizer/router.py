"""Prioritizer HTTP router — goals, projects, tasks & ranking."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.auth import resolve_owner, verify_api_key
from app.config import settings
from app.prioritizer.models import (
    Goal,
    GoalIn,
    MoveIn,
    Project,
    ProjectIn,
    RankedProject,
    RankingResponse,
    Task,
    TaskIn,
    TaskStatusIn,
)
from app.prioritizer.state import (
    DuplicateEntityError,
    EntityNotFoundError,
    PrioritizerState,
    get_state,
)

router = APIRouter(prefix="/prioritizer", tags=["prioritizer"], dependencies=[Depends(verify_api_key)])


def _not_found(exc: EntityNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc))


def _conflict(exc: DuplicateEntityError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(exc))


def _goal_from(body: GoalIn, goal_id: str | None, owner: str | None, color: str | None = None) -> Goal:
    data = body.model_dump(exclude={"goal_id", "color"})
    data["color"] = body.color or color or settings.default_goal_color
    data["user_id"] = owner
    if goal_id or body.goal_id:
        data["goal_id"] = goal_id or body.goal_id
    return Goal(**data)


def _project_from(body: ProjectIn, project_id: str | None, owner: str | None) -> Project:
    data = body.model_dump(exclude={"project_id", "tasks"})
    data["tasks"] = body.tasks or []
    data["user_id"] = owner
    if project_id or body.project_id:
        data["project_id"] = project_id or body.project_id
    return Project(**data)


# ---------------------------------------------------------------------------
# /prioritizer/goals
# ---------------------------------------------------------------------------


@router.get("/goals", response_model=list[Goal])
async def list_goals(state: PrioritizerState = Depends(get_state)) -> list[Goal]:
    return state.goals


@router.post("/goals", response_model=Goal, status_code=201)
async def add_goal(
    body: GoalIn,
    state: PrioritizerState = Depends(get_state),
    owner: str | None = Depends(resolve_owner),
) -> Goal:
    try:
        return state.add_goal(_goal_from(body, None, owner))
    except DuplicateEntityError as exc:
        raise _conflict(exc)


@router.put("/goals/{goal_id}", response_model=Goal)
async def update_goal(
    goal_id: str,
    body: GoalIn,
    state: PrioritizerState = Depends(get_state),
    owner: str | None = Depends(resolve_owner),
) -> Goal:
    try:
        # an omitted color keeps the stored one
        stored = state.get_goal(goal_id)
        return state.update_goal(_goal_from(body, goal_id, owner, stored.color))
    except EntityNotFoundError as exc:
        raise _not_found(exc)


@router.post("/goals/{goal_id}/move", response_model=list[Goal])
async def move_goal(
    goal_id: str,
    body: MoveIn,
    state: PrioritizerState = Depends(get_state),
) -> list[Goal]:
    try:
        state.move_goal(goal_id, body.direction)
    except EntityNotFoundError as exc:
        raise _not_found(exc)
    return state.goals


# ---------------------------------------------------------------------------
# /prioritizer/projects
# ---------------------------------------------------------------------------


@router.get("/projects", response_model=list[Project])
async def list_projects(state: PrioritizerState = Depends(get_state)) -> list[Project]:
    return state.projects


@router.post("/projects", response_model=Project, status_code=201)
async def add_project(
    body: ProjectIn,
    state: PrioritizerState = Depends(get_state),
    owner: str | None = Depends(resolve_owner),
) -> Project:
    try:
        return state.add_project(_project_from(body, None, owner))
    except DuplicateEntityError as exc:
        raise _conflict(exc)


@router.put("/projects/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    body: ProjectIn,
    state: PrioritizerState = Depends(get_state),
    owner: str | None = Depends(resolve_owner),
) -> Project:
    try:
        return state.update_project(_project_from(body, project_id, owner), keep_tasks=body.tasks is None)
    except EntityNotFoundError as exc:
        raise _not_found(exc)


@router.post("/projects/{project_id}/move", response_model=list[Project])
async def move_project(
    project_id: str,
    body: MoveIn,
    state: PrioritizerState = Depends(get_state),
) -> list[Project]:
    try:
        state.move_project(project_id, body.direction)
    except EntityNotFoundError as exc:
        raise _not_found(exc)
    return state.projects


# ---------------------------------------------------------------------------
# /prioritizer/projects/{project_id}/tasks
# ---------------------------------------------------------------------------


@router.post("/projects/{project_id}/tasks", response_model=Task, status_code=201)
async def add_task(
    project_id: str,
    body: TaskIn,
    state: PrioritizerState = Depends(get_state),
) -> Task:
    task = Task(**body.model_dump(exclude={"task_id"}))
    if body.task_id:
        task.task_id = body.task_id
    try:
        return state.add_task(project_id, task)
    except EntityNotFoundError as exc:
        raise _not_found(exc)
    except DuplicateEntityError as exc:
        raise _conflict(exc)


@router.patch("/projects/{project_id}/tasks/{task_id}", response_model=Task)
async def set_task_status(
    project_id: str,
    task_id: str,
    body: TaskStatusIn,
    state: PrioritizerState = Depends(get_state),
) -> Task:
    try:
        return state.set_task_status(project_id, task_id, body.status)
    except EntityNotFoundError as exc:
        raise _not_found(exc)


@router.post("/projects/{project_id}/tasks/{task_id}/move", response_model=list[Task])
async def move_task(
    project_id: str,
    task_id: str,
    body: MoveIn,
    state: PrioritizerState = Depends(get_state),
) -> list[Task]:
    try:
        state.move_task(project_id, task_id, body.direction)
        return state.get_project(project_id).tasks
    except EntityNotFoundError as exc:
        raise _not_found(exc)


# ---------------------------------------------------------------------------
# /prioritizer/ranking
# ---------------------------------------------------------------------------


@router.get("/ranking", response_model=RankingResponse)
async def get_ranking(state: PrioritizerState = Depends(get_state)) -> RankingResponse:
    result = state.ranking()
    colors = {g.goal_id: g.color for g in result.goals}
    unlinked = set(result.unlinked)

    ranked = [
        RankedProject(
            **project.model_dump(),
            goal_color=colors.get(project.project_goal or ""),
            active_tasks=sum(1 for t in project.tasks if t.status == "active"),
            completed_tasks=sum(1 for t in project.tasks if t.status == "completed"),
            unlinked=project.project_id in unlinked,
        )
        for project in result.projects
    ]
    return RankingResponse(projects=ranked, unlinked=result.unlinked)
