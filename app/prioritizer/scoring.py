"""Pure scoring functions — math only, never raises.

score = weight(complexity) + weight(excitement) + positional importance
priority = project score + goal score
"""

from __future__ import annotations

from typing import Any, Sequence

from app.prioritizer.models import Goal, Project, RatedEntity

WEIGHTS: dict[str, int] = {"low": 1, "medium": 2, "high": 3}
DEFAULT_WEIGHT = 2


def map_weight(value: Any) -> int:
    """Map a qualitative rating to 1/2/3. Unknown or missing ratings count as medium."""
    if not isinstance(value, str):
        return DEFAULT_WEIGHT
    return WEIGHTS.get(value, DEFAULT_WEIGHT)


def index_of(entity: RatedEntity, sequence: Sequence[RatedEntity]) -> int | None:
    """Position of `entity` in `sequence` by id, first match. None when absent."""
    key = entity.entity_id
    for i, item in enumerate(sequence):
        if item.entity_id == key:
            return i
    return None


def positional_importance(index: int | None, length: int) -> int:
    """length - index, so earlier entries weigh more. Absent entries get 0."""
    if index is None or index < 0 or index >= length:
        return 0
    return length - index


def base_score(complexity: Any, excitement: Any, index: int | None, length: int) -> int:
    return map_weight(complexity) + map_weight(excitement) + positional_importance(index, length)


def score_entity(entity: RatedEntity, sequence: Sequence[RatedEntity]) -> int:
    """Score a goal or project against the list that contains it.

    Writes the result into `entity.score` and returns it.
    """
    score = base_score(
        entity.complexity,
        entity.excitement,
        index_of(entity, sequence),
        len(sequence),
    )
    entity.score = score
    return score


def find_goal(goal_id: str | None, goals: Sequence[Goal]) -> Goal | None:
    if goal_id is None:
        return None
    for goal in goals:
        if goal.goal_id == goal_id:
            return goal
    return None


def compose_priority(project: Project, goals: Sequence[Goal]) -> bool:
    """Set priority_score = project.score + owning goal's score.

    Returns False (and leaves the project untouched) when the goal is missing.
    """
    goal = find_goal(project.project_goal, goals)
    if goal is None:
        return False
    project.priority_score = project.score + goal.score
    return True
