"""Configuration namespace for articlesys."""

from __future__ import annotations

from .app import AppConfig, apply_env_overrides
from .base import BaseConfig, load_config
from .llm import LLMConfig
from .summary import DefaultsConfig, ExtractorConfig, FetcherConfig, SummaryLength
from .utils import is_env_reference, resolve_env_reference

__all__ = [
    "AppConfig",
    "BaseConfig",
    "DefaultsConfig",
    "ExtractorConfig",
    "FetcherConfig",
    "LLMConfig",
    "SummaryLength",
    "apply_env_overrides",
    "is_env_reference",
    "load_config",
    "resolve_env_reference",
]
