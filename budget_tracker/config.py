from typing import List, Optional
import os

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env before reading the environment
load_dotenv()


DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    environment: str = "development"
    database_url: Optional[str] = None
    sql_echo: bool = False
    cors_origins: List[str] = DEFAULT_CORS_ORIGINS
    log_level: str = "INFO"

    def require_database_url(self) -> str:
        if not self.database_url:
            raise RuntimeError("Please define the DATABASE_URL environment variable")
        return self.database_url


def load_settings() -> Settings:
    origins = os.getenv("CORS_ORIGINS")
    return Settings(
        environment=os.getenv("ENVIRONMENT", "development"),
        database_url=os.getenv("DATABASE_URL") or None,
        sql_echo=os.getenv("SQL_ECHO", "").strip().lower() in _TRUTHY,
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()] if origins else DEFAULT_CORS_ORIGINS,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


# Global settings instance
settings = load_settings()
