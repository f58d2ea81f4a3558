"""Retrieve article HTML over HTTP."""

from __future__ import annotations

import time
from collections.abc import Callable
from urllib.parse import urlsplit, urlunsplit

import requests
from bs4 import BeautifulSoup
from loguru import logger

from articlesys.errors import AppError, ErrorKind, make_error
from articlesys.retry import RetryError, retry_with_backoff

from .models import FetchOptions, FetchResult

MAX_REDIRECTS = 5
HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


def normalize_url(url: str) -> str:
    """Return ``url`` as an absolute http(s) URL, prepending ``https://`` if needed."""

    candidate = (url or "").strip()
    if not candidate.lower().startswith(("http://", "https://")):
        if "://" in candidate:
            raise make_error(ErrorKind.VALIDATION, "INVALID_URL", url=url)
        candidate = "https://" + candidate

    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
        parts.port  # noqa: B018 - raises ValueError for malformed ports
    except ValueError as exc:
        raise make_error(ErrorKind.VALIDATION, "INVALID_URL", exc, url=url) from exc

    if parts.scheme not in {"http", "https"} or not parts.netloc or not hostname:
        raise make_error(ErrorKind.VALIDATION, "INVALID_URL", url=url)
    if any(ch.isspace() for ch in parts.netloc):
        raise make_error(ErrorKind.VALIDATION, "INVALID_URL", url=url)

    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", parts.query, parts.fragment))


class ArticleFetcher:
    """Fetch HTML with a timeout, bounded retries and content-type validation."""

    def __init__(
        self,
        options: FetchOptions | None = None,
        *,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.options = options or FetchOptions()
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": self.options.user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml",
                "Accept-Language": "en-US,en;q=0.9",
            }
        )
        self.session.max_redirects = MAX_REDIRECTS
        self._sleep = sleep

    def fetch(self, url: str) -> FetchResult:
        normalized = normalize_url(url)
        logger.info("Fetching content from {}", normalized)

        attempts = self.options.retries + 1
        try:
            response = retry_with_backoff(
                lambda: self._get(normalized),
                attempts=attempts,
                retry_on=(requests.RequestException, AppError),
                sleep=self._sleep,
                label=f"GET {normalized}",
            )
        except RetryError as exc:
            raise self._classify(exc.last_error, normalized, attempts) from exc.last_error

        html = _decode(response)
        soup = BeautifulSoup(html, "html.parser")
        result = FetchResult(
            html=html,
            source_url=normalized,
            title=_page_title(soup),
            metadata=_meta_tags(soup),
        )
        logger.debug("Fetched {} characters from {} ({} meta tags)", len(html), normalized, len(result.metadata))
        return result

    # ------------------------------------------------------------------
    def _get(self, url: str) -> requests.Response:
        response = self.session.get(url, timeout=self.options.timeout, allow_redirects=True)
        response.raise_for_status()
        content_type = response.headers.get("Content-Type", "") or ""
        if not any(kind in content_type.lower() for kind in HTML_CONTENT_TYPES):
            raise make_error(
                ErrorKind.NETWORK,
                "INVALID_RESPONSE",
                ValueError("Response is not HTML content"),
                url=url,
                content_type=content_type,
            )
        return response

    def _classify(self, error: BaseException, url: str, attempts: int) -> AppError:
        context = {"url": url, "timeout": self.options.timeout, "attempts": attempts}

        if isinstance(error, AppError):
            error.context.update(context)
            return error
        if isinstance(error, requests.Timeout):
            return make_error(ErrorKind.NETWORK, "TIMEOUT", error, **context)
        if isinstance(error, requests.HTTPError) and error.response is not None:
            status = error.response.status_code
            context["status"] = status
            context["reason"] = error.response.reason
            context["detail"] = _status_detail(status)
        return make_error(ErrorKind.NETWORK, "CONNECTION_FAILED", error, **context)


def _status_detail(status: int) -> str:
    if status == 404:
        return "Page not found"
    if status == 403:
        return "Access forbidden"
    if status >= 500:
        return "Server error"
    return f"HTTP {status}"


def _decode(response: requests.Response) -> str:
    encoding = response.encoding
    if not encoding or encoding.lower() in {"iso-8859-1", "latin-1", "ascii"}:
        encoding = response.apparent_encoding or encoding or "utf-8"
    response.encoding = encoding
    return response.text


def _page_title(soup: BeautifulSoup) -> str | None:
    if soup.title is None:
        return None
    title = soup.title.get_text().strip()
    return title or None


def _meta_tags(soup: BeautifulSoup) -> dict[str, str]:
    metadata: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        name = (tag.get("name") or tag.get("property") or "").strip().lower()
        content = (tag.get("content") or "").strip()
        if name and content:
            metadata[name] = content
    return metadata


__all__ = ["ArticleFetcher", "normalize_url"]
