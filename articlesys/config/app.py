"""Application-level configuration models."""

from __future__ import annotations

import os
from collections.abc import Mapping

from loguru import logger
from pydantic import Field

from articlesys.config.base import BaseConfig
from articlesys.config.llm import LLMConfig
from articlesys.config.summary import DefaultsConfig, ExtractorConfig, FetcherConfig, SummaryLength


class AppConfig(BaseConfig):
    """Top-level runtime configuration for the summariser."""

    logging_level: str = Field("WARNING", description="Log level: DEBUG, INFO, WARNING, ERROR")
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig, description="Call-time defaults")
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig, description="Article fetch settings")
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig, description="Content extraction settings")
    llm: LLMConfig = Field(default_factory=LLMConfig, description="Summarisation model settings")


def apply_env_overrides(config: AppConfig, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Return a copy of ``config`` with supported environment variables applied.

    Invalid values are ignored with a warning so that a stray variable never
    prevents the tool from starting.
    """

    env = os.environ if environ is None else environ
    defaults = config.defaults.model_copy()
    fetcher = config.fetcher.model_copy()

    length = env.get("DEFAULT_SUMMARY_LENGTH")
    if length:
        try:
            defaults.summary_length = SummaryLength(length.strip().lower())
        except ValueError:
            logger.warning("Ignoring DEFAULT_SUMMARY_LENGTH={!r}: expected short, medium or long", length)

    output_path = env.get("DEFAULT_OUTPUT_PATH")
    if output_path:
        defaults.output_dir = output_path

    timeout = env.get("SCRAPER_TIMEOUT")
    if timeout:
        try:
            fetcher.timeout = float(timeout)
        except ValueError:
            logger.warning("Ignoring SCRAPER_TIMEOUT={!r}: not a number", timeout)

    retries = env.get("SCRAPER_RETRIES")
    if retries:
        try:
            fetcher.retries = int(retries)
        except ValueError:
            logger.warning("Ignoring SCRAPER_RETRIES={!r}: not an integer", retries)

    return config.model_copy(update={"defaults": defaults, "fetcher": fetcher})


__all__ = ["AppConfig", "apply_env_overrides"]
