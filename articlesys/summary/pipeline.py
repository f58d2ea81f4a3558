"""High-level orchestration: fetch, extract, summarize, render, save."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from articlesys.config import AppConfig, SummaryLength

from .extractor import ContentExtractor
from .fetcher import ArticleFetcher
from .generator import LLMClientProvider, SummaryGenerator
from .models import ArticleSummary, DocumentMetadata, ExtractOptions, FetchOptions, SummarizeOptions
from .renderer import SummaryRenderer, default_output_path, save_document


class ArticlePipeline:
    """Wire the four stages together for a single URL at a time."""

    def __init__(
        self,
        config: AppConfig,
        *,
        fetcher: ArticleFetcher | None = None,
        extractor: ContentExtractor | None = None,
        generator: SummaryGenerator | None = None,
        renderer: SummaryRenderer | None = None,
        api_key: str | None = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher or ArticleFetcher(
            FetchOptions(
                timeout=config.fetcher.timeout,
                retries=config.fetcher.retries,
                user_agent=config.fetcher.user_agent,
            )
        )
        self.extractor = extractor or ContentExtractor(
            ExtractOptions(
                remove_selectors=tuple(config.extractor.remove_selectors),
                include_images=config.extractor.include_images,
                preserve_links=config.extractor.preserve_links,
            )
        )
        if generator is None:
            self.client_provider = LLMClientProvider(config.llm, api_key=api_key)
            generator = SummaryGenerator(
                self.client_provider,
                max_attempts=config.llm.max_attempts,
                degrade_on_failure=config.llm.degrade_on_failure,
            )
        else:
            self.client_provider = generator.provider
        self.generator = generator
        self.renderer = renderer or SummaryRenderer()

    def summarize_article(
        self,
        url: str,
        *,
        length: SummaryLength | str | None = None,
        include_key_points: bool | None = None,
        summarized_at: datetime | None = None,
    ) -> ArticleSummary:
        """Run every stage for ``url`` and return the rendered document without saving it."""

        defaults = self.config.defaults
        options = SummarizeOptions(
            length=SummaryLength(length) if length is not None else defaults.summary_length,
            include_key_points=defaults.include_key_points if include_key_points is None else include_key_points,
        )

        fetched = self.fetcher.fetch(url)
        content = self.extractor.extract(fetched.html, fetched.source_url)
        summary = self.generator.summarize(content.text_content, options)

        moment = summarized_at or datetime.now(timezone.utc)
        metadata = DocumentMetadata(title=content.title, url=fetched.source_url, date=moment.isoformat())
        markdown = self.renderer.render(summary.summary, metadata, summary.key_points)
        return ArticleSummary(
            fetch=fetched,
            content=content,
            summary=summary,
            metadata=metadata,
            markdown=markdown,
        )

    def run(
        self,
        url: str,
        *,
        output: Path | None = None,
        length: SummaryLength | str | None = None,
        include_key_points: bool | None = None,
    ) -> ArticleSummary:
        article = self.summarize_article(url, length=length, include_key_points=include_key_points)
        target = Path(output) if output is not None else default_output_path(
            self.config.defaults.output_dir, article.content.title
        )
        article.output_path = save_document(article.markdown, target)
        _log_stats(article)
        return article


def _log_stats(article: ArticleSummary) -> None:
    summary = article.summary
    if summary.original_word_count:
        ratio = summary.summary_word_count / summary.original_word_count * 100
        logger.info(
            "Summary: {} words ({:.1f}% of original {} words)",
            summary.summary_word_count,
            ratio,
            summary.original_word_count,
        )
    else:
        logger.info("Summary: {} words (original had no words)", summary.summary_word_count)
    if summary.key_points:
        logger.info("Key points extracted: {}", len(summary.key_points))


__all__ = ["ArticlePipeline"]
