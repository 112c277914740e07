from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

from psycopg.conninfo import make_conninfo


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Runtime configuration values exposed to FastAPI components."""

    app_name: str = os.getenv("APP_NAME", "account-service")
    version: str = "0.1.0"
    database_url: str = os.getenv("DATABASE_URL", "")
    db_host: str = os.getenv("DB_HOST", "localhost")
    db_port: int = int(os.getenv("DB_PORT", "5432"))
    db_user: str = os.getenv("DB_USER", "postgres")
    db_password: str = os.getenv("DB_PASS", "postgres")
    db_name: str = os.getenv("DB_NAME", "accounts")
    db_encrypt: bool = _env_flag("DB_ENCRYPT", "true")
    db_connect_timeout_seconds: int = int(os.getenv("DB_CONNECT_TIMEOUT_SECONDS", "15"))
    db_statement_timeout_ms: int = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "60000"))
    db_bootstrap_schema: bool = _env_flag("DB_BOOTSTRAP_SCHEMA", "false")
    http_host: str = os.getenv("HTTP_HOST", "0.0.0.0")
    http_port: int = int(os.getenv("HTTP_PORT", "8000"))
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_issuer: str = os.getenv("JWT_ISSUER", "account-service")
    jwt_ttl_seconds: int = int(os.getenv("JWT_TTL_SECONDS", "86400"))
    smtp_host: str = os.getenv("SMTP_HOST", "")
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
    smtp_user: str = os.getenv("SMTP_USER", "")
    smtp_password: str = os.getenv("SMTP_PASSWORD", "")
    smtp_starttls: bool = _env_flag("SMTP_STARTTLS", "true")
    mail_from: str = os.getenv("MAIL_FROM", "no-reply@localhost")
    reset_url_base: str = os.getenv("RESET_URL_BASE", "http://localhost:8080/reset-password")
    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:8080")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def conninfo(self) -> str:
        """Return the libpq connection string for the accounts database.

        ``DATABASE_URL`` wins when set; otherwise the individual ``DB_*``
        values are assembled, with ``DB_ENCRYPT`` selecting the TLS mode.
        """
        if self.database_url:
            return self.database_url
        return make_conninfo(
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_password,
            dbname=self.db_name,
            sslmode="require" if self.db_encrypt else "prefer",
            connect_timeout=self.db_connect_timeout_seconds,
            options=f"-c statement_timeout={self.db_statement_timeout_ms}",
        )

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()
