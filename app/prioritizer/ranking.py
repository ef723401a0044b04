"""Ranking pipeline — score goals, score projects, compose, filter, sort."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from app.prioritizer.models import Goal, Project
from app.prioritizer.scoring import compose_priority, score_entity

logger = logging.getLogger(__name__)

ACTIVE = "active"


@dataclass(frozen=True, slots=True)
class Ranking:
    projects: list[Project]  # active only, highest priority first
    goals: list[Goal] = field(default_factory=list)
    scored_projects: list[Project] = field(default_factory=list)  # every project, input order
    unlinked: list[str] = field(default_factory=list)


def compute_ranking(projects: Sequence[Project], goals: Sequence[Goal]) -> Ranking:
    """Rank active projects by priority score.

    Operates on deep copies; the caller's entities are never mutated.
    Repeated calls with the same inputs return the same ranking.
    """
    goal_copies = [g.model_copy(deep=True) for g in goals]
    project_copies = [p.model_copy(deep=True) for p in projects]

    for goal in goal_copies:
        score_entity(goal, goal_copies)

    for project in project_copies:
        score_entity(project, project_copies)

    unlinked: list[str] = []
    for project in project_copies:
        if not compose_priority(project, goal_copies):
            unlinked.append(project.project_id)

    if unlinked:
        logger.warning("Projects reference unknown goals: %s", ", ".join(unlinked))

    active = [p for p in project_copies if p.status == ACTIVE]
    # sorted() is stable: equal priorities keep their list order
    ranked = sorted(active, key=lambda p: p.priority_score, reverse=True)

    return Ranking(
        projects=ranked,
        goals=goal_copies,
        scored_projects=project_copies,
        unlinked=unlinked,
    )
