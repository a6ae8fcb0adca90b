"""
Centralized configuration management using pydantic-settings.

Settings are built once by `get_settings()` and handed explicitly to the
application factory, which passes the individual values into the database,
token and password components.
"""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tasklist.utils.logger import setup_logger

load_dotenv()

logger = setup_logger("core_config")

MIN_BCRYPT_ROUNDS = 10
MAX_BCRYPT_ROUNDS = 31
SYMMETRIC_JWT_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    """
    Application settings managed by pydantic-settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # ===== Token Configuration =====
    secret_key: SecretStr | None = Field(
        default=None,
        alias="SECRET_KEY",
        description="Server-held HMAC secret used to sign session tokens",
    )

    jwt_algorithm: str = Field(
        default="HS256",
        alias="JWT_ALGORITHM",
        description="Symmetric JWT signing algorithm (HS256, HS384 or HS512)",
    )

    access_token_expire_minutes: int = Field(
        default=1440,
        gt=0,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
        description="Session token lifetime in minutes (24 hours default)",
    )

    # ===== Password Hashing =====
    bcrypt_rounds: int = Field(
        default=12,
        ge=MIN_BCRYPT_ROUNDS,
        le=MAX_BCRYPT_ROUNDS,
        alias="BCRYPT_ROUNDS",
        description="bcrypt work factor (log2 of iterations)",
    )

    # ===== Database Configuration =====
    database_url: str = Field(
        default="sqlite+aiosqlite:///./todo_applications.db",
        alias="TASKLIST_DATABASE_URL",
        description="Application database URL (sqlite or postgresql)",
    )

    database_echo: bool = Field(
        default=False,
        alias="DATABASE_ECHO",
        description="Log every SQL statement emitted by the engine",
    )

    # ===== Server Configuration =====
    server_host: str = Field(
        default="0.0.0.0", alias="SERVER_HOST", description="Server host address"
    )

    server_port: int = Field(
        default=3000, alias="SERVER_PORT", description="Server port number"
    )

    server_workers: int = Field(
        default=1, alias="SERVER_WORKERS", description="Number of uvicorn workers"
    )

    # ===== CORS Configuration =====
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://localhost:3000",
            "http://127.0.0.1:5173",
        ],
        alias="CORS_ALLOW_ORIGINS",
        description="CORS allowed origins",
    )

    cors_allow_credentials: bool = Field(
        default=True,
        alias="CORS_ALLOW_CREDENTIALS",
        description="Whether to allow credentials in CORS requests",
    )

    cors_allow_methods: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ALLOW_METHODS",
        description="CORS allowed methods",
    )

    cors_allow_headers: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ALLOW_HEADERS",
        description="CORS allowed headers",
    )

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, value: str) -> str:
        algorithm = value.upper()
        if algorithm not in SYMMETRIC_JWT_ALGORITHMS:
            raise ValueError(
                f"JWT_ALGORITHM must be one of {SYMMETRIC_JWT_ALGORITHMS}, got {value!r}"
            )
        return algorithm

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, value: str) -> str:
        """Point plain driver URLs at their asyncio drivers."""
        if value.startswith("postgresql://"):
            return value.replace("postgresql://", "postgresql+asyncpg://", 1)
        if value.startswith("sqlite://"):
            return value.replace("sqlite://", "sqlite+aiosqlite://", 1)
        if value.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
            return value
        raise ValueError(f"Unsupported database URL prefix: {value}")

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Log warnings for missing or weak critical configuration."""
        if self.secret_key is None:
            logger.warning("SECRET_KEY environment variable not set.")
        elif len(self.secret_key.get_secret_value()) < 32:
            logger.warning("SECRET_KEY is shorter than 32 characters.")

        logger.debug(f"Database backend: {self.database_url.split(':', 1)[0]}")
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
