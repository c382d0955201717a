from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Plugin CMS"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./cms.db"
    auto_create_tables: bool = True

    # Plugin settings
    plugin_state_backend: Literal["database", "file"] = "database"
    plugin_state_file: Path = Path("data/plugins_state.json")
    # Additional plugin modules, e.g. {"events": "mysite.events"}
    extra_plugin_modules: dict[str, str] = {}

    # Shared secret for the admin surfaces; unset leaves them open
    admin_api_key: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    default_locale: str = "en"

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
