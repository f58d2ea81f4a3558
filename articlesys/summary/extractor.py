"""Locate and clean the main article body inside arbitrary HTML.

Every lookup is driven by an ordered selector tuple evaluated first-match-wins,
so precedence can be read (and tested) straight from the constants below.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, NavigableString, Tag
from dateutil import parser as date_parser
from loguru import logger
from soupsieve import SelectorSyntaxError

from articlesys.errors import ErrorKind, make_error

from .models import ExtractedContent, ExtractOptions

TITLE_SELECTORS: tuple[str, ...] = (
    "h1.article-title",
    "h1.entry-title",
    "h1.post-title",
    "h1.title",
    "article h1",
    "main h1",
    ".article h1",
    ".post h1",
    "h1",
)

BOILERPLATE_SELECTORS: tuple[str, ...] = (
    "script",
    "style",
    "iframe",
    "nav",
    "header",
    "footer",
    ".ads",
    ".advertisement",
    ".banner",
    ".sidebar",
    ".comments",
    ".related",
    ".recommended",
    ".social",
    ".share",
    ".newsletter",
    ".popup",
    '[role="banner"]',
    '[role="navigation"]',
    '[role="complementary"]',
)

CONTENT_SELECTORS: tuple[str, ...] = (
    "article",
    ".article",
    ".post",
    ".entry-content",
    ".article-content",
    ".post-content",
    ".content",
    "main",
    "#main",
    "#content",
)

AUTHOR_SELECTORS: tuple[str, ...] = (
    'meta[name="author"]',
    'meta[property="article:author"]',
    ".author",
    ".byline",
    ".article-author",
    '[rel="author"]',
)

DATE_SELECTORS: tuple[str, ...] = (
    'meta[name="date"]',
    'meta[property="article:published_time"]',
    "time",
    ".date",
    ".published",
    ".article-date",
    ".post-date",
)

EXCERPT_SELECTORS: tuple[str, ...] = (
    'meta[name="description"]',
    'meta[property="og:description"]',
    ".excerpt",
    ".summary",
    ".article-summary",
    ".post-excerpt",
)

DENSITY_CONTAINERS: tuple[str, ...] = ("div", "section", "main")

MIN_CONTENT_CHARS = 200
MIN_PARAGRAPHS = 2
MIN_EXCERPT_CHARS = 50

_WHITESPACE = re.compile(r"\s+")


class ContentExtractor:
    """Turn fetched HTML into :class:`ExtractedContent`."""

    def __init__(self, options: ExtractOptions | None = None) -> None:
        self.options = options or ExtractOptions()

    def extract(self, html: str, url: str) -> ExtractedContent:
        logger.info("Extracting main content")
        try:
            soup = BeautifulSoup(html or "", "html.parser")
        except Exception as exc:  # noqa: BLE001 - parser errors vary by input
            raise make_error(ErrorKind.EXTRACTION, "PARSING_FAILED", exc, url=url) from exc

        title = resolve_title(soup) or _hostname(url)

        remove_boilerplate(soup, self.options.remove_selectors)
        container = find_main_content(soup)
        clean_container(
            container,
            include_images=self.options.include_images,
            preserve_links=self.options.preserve_links,
        )

        text_content = container.get_text(" ", strip=True)
        if not text_content:
            logger.warning("No readable content found for {}", url)

        return ExtractedContent(
            title=title,
            content_html=container.decode_contents().strip(),
            text_content=text_content,
            excerpt=extract_excerpt(soup),
            author=extract_author(soup),
            publish_date=extract_publish_date(soup),
        )


def resolve_title(soup: BeautifulSoup) -> str | None:
    for selector in TITLE_SELECTORS:
        element = soup.select_one(selector)
        if element is not None:
            text = element.get_text(" ", strip=True)
            if text:
                return text
    if soup.title is not None:
        text = soup.title.get_text(strip=True)
        if text:
            return text
    return None


def remove_boilerplate(soup: BeautifulSoup, extra_selectors: Iterable[str] = ()) -> None:
    for selector in (*BOILERPLATE_SELECTORS, *extra_selectors):
        try:
            matches = soup.select(selector)
        except SelectorSyntaxError as exc:
            raise make_error(ErrorKind.VALIDATION, "INVALID_OPTION", exc, selector=selector) from exc
        for element in matches:
            if not element.decomposed:
                element.decompose()


def find_main_content(soup: BeautifulSoup) -> Tag:
    """Pick the article container.

    Semantic selectors first (text longer than ``MIN_CONTENT_CHARS``), then the
    container with strictly the most ``<p>`` descendants (more than
    ``MIN_PARAGRAPHS``), then the body.
    """

    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is not None and len(element.get_text().strip()) > MIN_CONTENT_CHARS:
            logger.debug("Main content matched selector {}", selector)
            return element

    root = soup.body or soup
    best: Tag | None = None
    best_count = MIN_PARAGRAPHS
    for element in root.find_all(list(DENSITY_CONTAINERS)):
        count = len(element.find_all("p"))
        if count > best_count:
            best, best_count = element, count
    if best is not None:
        logger.debug("Main content chosen by paragraph density ({} paragraphs)", best_count)
        return best

    logger.debug("Falling back to document body for main content")
    return root


def clean_container(container: Tag, *, include_images: bool, preserve_links: bool) -> None:
    for paragraph in container.find_all("p"):
        if not paragraph.decomposed and not paragraph.get_text(strip=True):
            paragraph.decompose()

    if not include_images:
        for image in container.find_all("img"):
            if not image.decomposed:
                image.decompose()

    if not preserve_links:
        for link in container.find_all("a"):
            link.replace_with(link.get_text())

    for node in list(container.find_all(string=True)):
        if type(node) is not NavigableString:
            continue
        normalized = _WHITESPACE.sub(" ", str(node)).strip()
        if normalized:
            node.replace_with(normalized)
        else:
            node.extract()


def extract_author(soup: BeautifulSoup) -> str | None:
    for selector in AUTHOR_SELECTORS:
        value = _selector_text(soup, selector)
        if value:
            return value
    return None


def extract_publish_date(soup: BeautifulSoup) -> datetime | None:
    for selector in DATE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        if element.name == "meta":
            raw = element.get("content")
        elif element.name == "time":
            raw = element.get("datetime")
        else:
            raw = element.get_text(" ", strip=True)
        parsed = _parse_date(raw)
        if parsed is not None:
            return parsed
    return None


def extract_excerpt(soup: BeautifulSoup) -> str | None:
    for selector in EXCERPT_SELECTORS:
        value = _selector_text(soup, selector)
        if value:
            return value

    first_paragraph = soup.find("p")
    if first_paragraph is not None:
        text = first_paragraph.get_text(" ", strip=True)
        if len(text) > MIN_EXCERPT_CHARS:
            return text
    return None


def _selector_text(soup: BeautifulSoup, selector: str) -> str | None:
    element = soup.select_one(selector)
    if element is None:
        return None
    if element.name == "meta":
        value = (element.get("content") or "").strip()
    else:
        value = element.get_text(" ", strip=True)
    return value or None


def _parse_date(raw: str | None) -> datetime | None:
    if not raw or not raw.strip():
        return None
    try:
        return date_parser.parse(raw.strip())
    except (ValueError, OverflowError):
        logger.debug("Skipping unparseable date {!r}", raw)
        return None


def _hostname(url: str) -> str:
    try:
        return urlsplit(url).hostname or url
    except ValueError:
        return url


__all__ = [
    "AUTHOR_SELECTORS",
    "BOILERPLATE_SELECTORS",
    "CONTENT_SELECTORS",
    "ContentExtractor",
    "DATE_SELECTORS",
    "EXCERPT_SELECTORS",
    "TITLE_SELECTORS",
    "clean_container",
    "find_main_content",
    "remove_boilerplate",
]
