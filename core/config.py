from dataclasses import dataclass
from datetime import timedelta

from pydantic_settings import BaseSettings
from pydantic import ConfigDict

from core.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", extra="ignore")

    ENV: str = "development"

    DATABASE_URL: str = "sqlite+aiosqlite:///./app.db"
    JWT_SECRET: str | None = None
    REFRESH_TOKEN_SECRET: str | None = None
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 10
    RATE_LIMIT_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]


settings = Settings()


@dataclass(frozen=True)
class AuthConfig:
    """
    Token and password policy, built once at startup and handed to the services.

    The refresh secret falls back to the access secret when no distinct one
    is configured.
    """
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)
    bcrypt_rounds: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthConfig":
        if not settings.JWT_SECRET:
            raise ConfigurationError("JWT_SECRET is not defined")

        return cls(
            access_secret=settings.JWT_SECRET,
            refresh_secret=settings.REFRESH_TOKEN_SECRET or settings.JWT_SECRET,
            algorithm=settings.ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            bcrypt_rounds=settings.BCRYPT_ROUNDS,
        )
