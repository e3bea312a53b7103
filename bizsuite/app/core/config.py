from __future__ import annotations

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process settings, read from `BIZSUITE_*` environment variables.

    Client-side values (BASE_URL, TIMEOUT_S, ...) act as overrides for the JSON client
    config file; the MOCK_* / CORS values only matter to the mock API.
    """

    APP_NAME: str = "BizSuite Mock API"
    APP_VERSION: str = "0.1.0"

    HOME_DIR: str = ""
    CONFIG_PATH: str = "config.json"
    CREDENTIALS_PATH: str = "credentials.json"
    BASE_URL: str = ""
    TIMEOUT_S: float = 0.0

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""
    LOG_SECRETS: bool = False

    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:5174"]
    MOCK_HOST: str = "127.0.0.1"
    MOCK_PORT: int = 5000
    MOCK_REQUIRE_AUTH: bool = True
    MOCK_DATA_DIR: str = "mock_data"
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    model_config = SettingsConfigDict(
        env_prefix="BIZSUITE_",
        case_sensitive=False,
    )


settings = Settings()
