"""Data models passed between the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from articlesys.config.summary import DEFAULT_USER_AGENT, SummaryLength


@dataclass(frozen=True, slots=True)
class FetchOptions:
    timeout: float = 10.0
    retries: int = 3
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True, slots=True)
class ExtractOptions:
    remove_selectors: tuple[str, ...] = ()
    include_images: bool = False
    preserve_links: bool = True


@dataclass(frozen=True, slots=True)
class SummarizeOptions:
    length: SummaryLength = SummaryLength.MEDIUM
    include_key_points: bool = True


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Raw HTML retrieved for a URL."""

    html: str
    source_url: str
    title: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ExtractedContent:
    """Readable article content derived from a :class:`FetchResult`."""

    title: str
    content_html: str
    text_content: str
    excerpt: str | None = None
    author: str | None = None
    publish_date: datetime | None = None


@dataclass(frozen=True, slots=True)
class SummaryResult:
    """Model output split into body and optional key points."""

    summary: str
    key_points: list[str] | None
    original_word_count: int
    summary_word_count: int


@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    title: str
    url: str
    date: str  # ISO 8601


@dataclass(slots=True)
class ArticleSummary:
    """Everything produced for one URL; ``output_path`` is set once saved."""

    fetch: FetchResult
    content: ExtractedContent
    summary: SummaryResult
    metadata: DocumentMetadata
    markdown: str
    output_path: Path | None = None


__all__ = [
    "ArticleSummary",
    "DocumentMetadata",
    "ExtractOptions",
    "ExtractedContent",
    "FetchOptions",
    "FetchResult",
    "SummarizeOptions",
    "SummaryResult",
]
