"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Relational store (any SQLAlchemy async URL) ────────────────────────
    db_host: str = "db"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "social_graph"
    db_pool_size: int = 20
    db_max_overflow: int = 10
    # Full URL override, e.g. postgresql+asyncpg://… or sqlite+aiosqlite://
    database_url_override: Optional[str] = None

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"mysql+aiomysql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # ── External authentication service ────────────────────────────────────
    auth_service_url: str = "http://auth:3000"
    auth_session_path: str = "/api/auth/get-session"
    auth_timeout_seconds: float = 2.0

    # ── HTTP ───────────────────────────────────────────────────────────────
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:19006",
    ]
    app_version: str = "1.0.0"

    # ── Observability ──────────────────────────────────────────────────────
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    tracing_enabled: bool = True
    service_name: str = "social-graph-api"
    environment: str = "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
