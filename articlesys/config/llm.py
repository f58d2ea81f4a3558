"""LLM configuration models."""

from __future__ import annotations

from pydantic import Field

from articlesys.config.base import BaseConfig
from articlesys.config.utils import resolve_env_reference


class LLMConfig(BaseConfig):
    """Configuration for the summarisation model endpoint."""

    alias: str = Field("gemini", description="Model alias used in logs")
    name: str = Field("gemini/gemini-pro", description="Model identifier passed to LiteLLM")
    base_url: str = Field("", description="Optional API base URL; 'stub://' selects the offline stub client")
    api_key: str = Field("env:GEMINI_API_KEY", description="API key, can use 'env:VAR_NAME' format")
    temperature: float = Field(0.3, ge=0.0, le=2.0, description="Sampling temperature")
    top_p: float = Field(0.95, ge=0.0, le=1.0, description="Nucleus sampling parameter")
    max_attempts: int = Field(3, ge=1, description="Maximum completion attempts before giving up")
    degrade_on_failure: bool = Field(
        True,
        description="Return a placeholder summary instead of failing when every attempt fails",
    )

    @property
    def api_key_secret(self) -> str | None:
        """Return the resolved API key, or ``None`` when the variable is unset."""

        resolved = resolve_env_reference(self.api_key, required=False)
        return resolved or None

    @property
    def is_stub(self) -> bool:
        return self.base_url.strip().lower().startswith("stub://")


__all__ = ["LLMConfig"]
