import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    DIRECTORY_API_URL: str = ""
    DIRECTORY_HTTP_TIMEOUT: float = 30.0

    SESSION_CACHE_KEY: str = "user"
    MAX_WINDOW_DAYS: int = 365

    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
