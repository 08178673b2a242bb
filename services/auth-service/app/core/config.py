"""
Auth Service — Configuration
All settings are read from environment variables (or .env file).
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    SERVICE_NAME: str = "auth-service"
    SERVICE_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # ── JWT ──────────────────────────────────────────────────
    JWT_SECRET_KEY: str = "CHANGE_ME_IN_PRODUCTION"
    JWT_REFRESH_SECRET_KEY: str = "CHANGE_ME_TOO_IN_PRODUCTION"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # ── Password hashing ─────────────────────────────────────
    BCRYPT_ROUNDS: int = 10

    # ── PostgreSQL ────────────────────────────────────────────
    # A full connection string (e.g. from Neon) wins over the POSTGRES_* parts.
    DATABASE_URL: str | None = None
    POSTGRES_HOST: str = "auth-db"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "auth_db"
    POSTGRES_USER: str = "auth_user"
    POSTGRES_PASSWORD: str = "auth_pass"
    DB_ECHO: bool = False

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # ── Best-effort writes ────────────────────────────────────
    # Upper bound on how long failed-login / refresh-token writes may hold up a response.
    SIDE_WRITE_TIMEOUT_SECONDS: float = 2.0

    # ── Observability ─────────────────────────────────────────
    METRICS_ENABLED: bool = True
    HEALTH_CHECK_TIMEOUT: float = 5.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()
