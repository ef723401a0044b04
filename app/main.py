import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings
from app.prioritizer.router import router as prioritizer_router
from app.prioritizer.state import get_state

logging.basicConfig(level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Let scheduled persister writes finish before the loop goes away.
    await get_state().drain()


app = FastAPI(title="TaskPrioritizer", version="0.1.0", lifespan=lifespan)
app.include_router(prioritizer_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "prioritizer": {
            "goals": "/prioritizer/goals",
            "goals_move": "/prioritizer/goals/{goal_id}/move",
            "projects": "/prioritizer/projects",
            "projects_move": "/prioritizer/projects/{project_id}/move",
            "tasks": "/prioritizer/projects/{project_id}/tasks",
            "tasks_move": "/prioritizer/projects/{project_id}/tasks/{task_id}/move",
            "ranking": "/prioritizer/ranking",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
