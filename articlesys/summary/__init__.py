"""Article summarization pipeline stages."""

from .extractor import ContentExtractor
from .fetcher import ArticleFetcher, normalize_url
from .generator import LLMClientProvider, SummaryGenerator, extract_key_points
from .models import (
    ArticleSummary,
    DocumentMetadata,
    ExtractedContent,
    ExtractOptions,
    FetchOptions,
    FetchResult,
    SummarizeOptions,
    SummaryResult,
)
from .pipeline import ArticlePipeline
from .renderer import SummaryRenderer, save_document

__all__ = [
    "ArticleFetcher",
    "ArticlePipeline",
    "ArticleSummary",
    "ContentExtractor",
    "DocumentMetadata",
    "ExtractOptions",
    "ExtractedContent",
    "FetchOptions",
    "FetchResult",
    "LLMClientProvider",
    "SummarizeOptions",
    "SummaryGenerator",
    "SummaryRenderer",
    "SummaryResult",
    "extract_key_points",
    "normalize_url",
    "save_document",
]
