"""Pipeline stage configuration models."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from articlesys.config.base import BaseConfig


class SummaryLength(str, Enum):
    """Supported summary lengths."""

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; ArticleSummarizer/1.0)"


class DefaultsConfig(BaseConfig):
    """Defaults applied when the caller does not override them."""

    summary_length: SummaryLength = Field(SummaryLength.MEDIUM, description="Default summary length")
    output_dir: str = Field("./summaries", description="Directory for rendered summaries")
    include_key_points: bool = Field(True, description="Ask the model for a key points section")


class FetcherConfig(BaseConfig):
    """HTTP settings for article retrieval."""

    timeout: float = Field(10.0, gt=0, description="Request timeout in seconds")
    retries: int = Field(3, ge=0, description="Retries after the first failed attempt")
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header sent with requests")


class ExtractorConfig(BaseConfig):
    """Content extraction behaviour."""

    remove_selectors: list[str] = Field(
        default_factory=lambda: ["nav", "header", "footer", ".ads", ".comments", ".sidebar"],
        description="Extra CSS selectors removed before content detection",
    )
    include_images: bool = Field(False, description="Keep <img> elements in the extracted markup")
    preserve_links: bool = Field(True, description="Keep <a> elements instead of flattening them to text")


__all__ = [
    "DEFAULT_USER_AGENT",
    "DefaultsConfig",
    "ExtractorConfig",
    "FetcherConfig",
    "SummaryLength",
]
