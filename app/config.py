from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/prioritizer"
    api_key: str | None = None
    log_level: str = "INFO"

    # Remote sync of goals/projects. Off = work offline, local state only.
    persistence_enabled: bool = False

    # Owner id stamped on stored rows when the request carries no X-User-Id.
    default_user_id: str | None = None

    default_goal_color: str = "#075985"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
