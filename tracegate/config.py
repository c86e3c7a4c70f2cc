"""Application configuration."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="TRACEGATE_"
    )

    database_url: str = "sqlite+aiosqlite:///./tracegate.db"

    @field_validator("database_url", mode="after")
    @classmethod
    def normalize_db_url(cls, v: str) -> str:
        """Ensure postgresql+asyncpg scheme (hosted Postgres gives postgresql://)."""
        if v.startswith("postgresql://") and "+asyncpg" not in v:
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    auto_create_schema: bool = True
    log_level: str = "INFO"

    audit_default_limit: int = 50
    audit_max_limit: int = 500

    rrt_issuer: str = "rosie-sor-demo"
    rrt_validity_hours: int = 12

    default_approver: str = "qa@example.com"
    ci_user_id: str = "ci-agent@rosie.local"


settings = Settings()
