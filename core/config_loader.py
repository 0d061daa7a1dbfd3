import yaml
import os
import logging
from typing import Optional
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    url: str
    echo: bool = False
    statement_timeout_ms: Optional[int] = None  # applied per connection on PostgreSQL


class MatchingConfig(BaseModel):
    """
    Configuration for learner search.

    worker_pool_size bounds the threads evaluating candidates; 1 evaluates
    them sequentially on the calling thread.
    """
    worker_pool_size: int = Field(default=4, ge=1)
    search_timeout_seconds: Optional[float] = None


class ApplicationsConfig(BaseModel):
    # Off: providers may move an application to any reviewable status.
    enforce_transitions: bool = False


class NotificationConfig(BaseModel):
    """
    Configuration for notification fan-out.

    Fan-out always runs after the triggering transaction commits. With
    use_async_queue it is handed to an RQ worker, otherwise it runs inline.
    """
    enabled: bool = True

    # Redis queue settings
    use_async_queue: bool = False
    redis_url: Optional[str] = None
    queue_name: str = "notifications"
    job_timeout: str = "5m"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class AppConfig(BaseModel):
    database: DatabaseConfig
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    applications: ApplicationsConfig = Field(default_factory=ApplicationsConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try the repo root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        if not data.get('database'):
            data['database'] = {}
        data['database']['url'] = env_db_url

    # Allow env var override for Redis URL
    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        if not data.get('notifications'):
            data['notifications'] = {}
        data['notifications']['redis_url'] = env_redis_url

    return AppConfig(**data)


def configure_logging(config: LoggingConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.level.upper(), logging.INFO),
        format=config.format
    )
