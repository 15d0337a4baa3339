"""Service settings loaded from the environment."""

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from .enhancer import EnhancerConfig
from .history import HistoryStore, InMemoryHistoryStore, JsonFileHistoryStore

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:8000",
)


class ConfigError(ValueError):
    pass


class Settings(BaseModel):
    """Settings for the HTTP service and sandbox entrypoint."""

    llm_provider: Literal["openrouter", "gemini", "mock"] = "openrouter"
    model: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    gemini_api_key: Optional[str] = None
    llm_timeout: float = Field(default=60.0, gt=0)
    referer: Optional[str] = None
    history_path: Optional[str] = None
    cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ.

        Raises:
            ConfigError: If a variable has an invalid value.
        """
        env = os.environ if environ is None else environ
        raw: dict = {
            "llm_provider": env.get("CODESAFE_LLM_PROVIDER", "openrouter").strip().lower(),
            "model": env.get("CODESAFE_MODEL") or None,
            "openrouter_api_key": env.get("OPENROUTER_API_KEY") or None,
            "gemini_api_key": env.get("GEMINI_API_KEY") or None,
            "referer": env.get("CODESAFE_REFERER") or None,
            "history_path": env.get("CODESAFE_HISTORY_PATH") or None,
        }
        if env.get("OPENROUTER_BASE_URL"):
            raw["openrouter_base_url"] = env["OPENROUTER_BASE_URL"]
        if env.get("CODESAFE_LLM_TIMEOUT"):
            raw["llm_timeout"] = env["CODESAFE_LLM_TIMEOUT"]
        if env.get("CODESAFE_CORS_ORIGINS"):
            raw["cors_origins"] = [
                origin.strip()
                for origin in env["CODESAFE_CORS_ORIGINS"].split(",")
                if origin.strip()
            ]

        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @property
    def api_key(self) -> Optional[str]:
        """API key for the selected provider."""
        if self.llm_provider == "gemini":
            return self.gemini_api_key
        if self.llm_provider == "openrouter":
            return self.openrouter_api_key
        return None

    def enhancer_config(self) -> EnhancerConfig:
        """Build the enhancement boundary configuration.

        Raises:
            ConfigError: If the selected provider has no API key.
        """
        if self.llm_provider != "mock" and not self.api_key:
            key_var = "GEMINI_API_KEY" if self.llm_provider == "gemini" else "OPENROUTER_API_KEY"
            raise ConfigError(f"{key_var} is not configured on the server")

        return EnhancerConfig(
            provider=self.llm_provider,
            api_key=self.api_key,
            model=self.model,
            base_url=self.openrouter_base_url,
            timeout=self.llm_timeout,
            referer=self.referer,
        )

    def history_store(self) -> HistoryStore:
        """Create the history store; JSON file when a path is set."""
        if self.history_path:
            return JsonFileHistoryStore(self.history_path)
        return InMemoryHistoryStore()
