import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Database settings
    database_file: str = os.getenv("BOOKSTORE_DB_FILE", "books.db")
    database_timeout: float = float(os.getenv("BOOKSTORE_DB_TIMEOUT", "5"))

    # Content provider
    content_authority: str = os.getenv("BOOKSTORE_AUTHORITY", "com.example.android.books")

    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Bookstore Inventory")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    debug: bool = _env_flag("DEBUG")


settings = Settings()
