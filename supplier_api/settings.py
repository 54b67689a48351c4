from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Defaults are local and deterministic (SQLite file, built-in policies, demo auth).
    - Every field can be overridden with an ``APP_`` environment variable.
    """

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    db_url: str | None = None
    log_level: str = "INFO"

    # ABAC
    abac_policy_path: str | None = None
    abac_fail_closed_on_lookup_error: bool = False
    expose_denial_reasons: bool = False

    # Bearer tokens. Without a secret the token is taken as the principal id (demo mode).
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    jwt_audience: str | None = None
    jwt_issuer: str | None = None
    clock_skew_seconds: int = 60

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = Path(__file__).resolve().parents[1]
        db_path = repo_root / "supplier_api.db"
        return f"sqlite:///{db_path}"

    def resolved_policy_path(self) -> Path | None:
        if self.abac_policy_path:
            return Path(self.abac_policy_path)
        return None


@lru_cache
def get_settings() -> Settings:
    return Settings()
