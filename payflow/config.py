"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: str = "INFO"
    poll_interval_seconds: float = 2.0
    poll_max_wait_seconds: float = 60.0
    api_base_url: str = "http://localhost:8000"
    api_timeout_seconds: float = 10.0
    mock_latency_ms: int = 0  # Simulated sandbox latency
    mock_not_visible_polls: int = 1  # Fetches that 404 right after creation

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
