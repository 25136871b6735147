from pathlib import Path
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parent.parent
ROOT_ENV = BASE_DIR.parent / ".env"


class AppSettings(BaseSettings):
    mongodb_url: str = "mongodb://localhost:27017/users_api"
    # Falls back to the database named in mongodb_url
    mongodb_database: str | None = None
    mongodb_server_selection_timeout_ms: int = 5000
    users_collection: str = "users"
    log_level: str = "INFO"

    model_config: ConfigDict = ConfigDict(
        env_file=ROOT_ENV,
        extra="ignore"
    )


app_settings: AppSettings = AppSettings()
