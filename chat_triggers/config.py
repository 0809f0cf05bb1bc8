# chat_triggers/config.py
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    PROJECT_NAME: str = "Chat Triggers"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Notification fan-out and cleanup triggers for the chat document store"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    DATABASE_URL: str = "sqlite+aiosqlite:///./chat_triggers.db"

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379

    PUSH_BACKEND: Literal["redis", "http"] = "redis"
    PUSH_QUEUE_KEY: str = "push:outbox"
    PUSH_ENDPOINT: str = "http://localhost:8080/v1/messages:send"
    PUSH_API_KEY: str | None = None
    PUSH_TIMEOUT_SECONDS: float = 10.0
    PUSH_CLICK_ACTION: str = "FLUTTER_NOTIFICATION_CLICK"

    PURGE_PAGE_SIZE: int = 400
    STORY_SWEEP_PAGE_SIZE: int = 400
    STORY_SWEEP_INTERVAL_MINUTES: int = 60
    SCHEDULER_TIMEZONE: str = "UTC"
    SCHEDULER_ENABLED: bool = True

    DEFAULT_SENDER_NAME: str = "Unknown User"
    DEFAULT_GROUP_TITLE: str = "New Group Message"
    TEST_NOTIFICATION_TITLE: str = "Test Notification"
    DEFAULT_TEST_MESSAGE: str = "Test message"

    model_config = SettingsConfigDict(env_file=".env", extra="allow")
