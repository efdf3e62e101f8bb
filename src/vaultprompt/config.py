"""Application settings read from the environment and ``.env``."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import RefinementConfig

load_dotenv()


class Settings(BaseSettings):
    """Runtime settings for Vault Prompt."""

    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    refine_model: str = Field(default="gemini-2.0-flash", alias="VAULT_REFINE_MODEL")
    temperature: float = Field(default=0.7, alias="VAULT_TEMPERATURE")

    starting_credits: int = Field(default=5, ge=0, alias="VAULT_STARTING_CREDITS")
    balance_cache_ttl: float = Field(
        default=30.0,
        ge=0,
        alias="VAULT_BALANCE_CACHE_TTL",
    )
    usage_history_limit: int = Field(
        default=1000,
        gt=0,
        alias="VAULT_USAGE_HISTORY_LIMIT",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        level = (v or "").upper()
        if level in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            return level
        return "INFO"

    def refinement_config(self) -> RefinementConfig:
        """Refinement options derived from these settings."""
        return RefinementConfig(model=self.refine_model, temperature=self.temperature)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
