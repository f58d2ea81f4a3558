"""Summary generation through a LiteLLM-backed completion client."""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import litellm
from loguru import logger

from articlesys.config.llm import LLMConfig
from articlesys.config.summary import SummaryLength
from articlesys.errors import AppError, ErrorKind, make_error
from articlesys.retry import RetryError, retry_with_backoff

from .models import SummarizeOptions, SummaryResult

FAILED_SUMMARY = "Failed to generate summary. Please try again later."

LENGTH_INSTRUCTIONS: dict[SummaryLength, str] = {
    SummaryLength.SHORT: "in a very concise way (about 1-2 paragraphs)",
    SummaryLength.MEDIUM: "with moderate detail (about 3-4 paragraphs)",
    SummaryLength.LONG: "comprehensively, covering all important aspects (about 5-7 paragraphs)",
}

KEY_POINTS_INSTRUCTION = "Include a section with 3-5 key points from the article."

_KEY_POINTS_HEADING = re.compile(r"key points:|main points:|key takeaways:|main takeaways:", re.IGNORECASE)
_HEADING_PREFIX = re.compile(r"(?:^|\n)[ \t]*(?:#+[ \t]*|\*\*|__)?[ \t]*$")
_BULLET = re.compile(r"^(?:[-*•]|\d+[.)])\s*")


class CompletionClient(Protocol):
    def complete(self, prompt: str) -> str:
        """Return the raw completion text for ``prompt``."""
        ...


def build_prompt(text: str, options: SummarizeOptions) -> str:
    lines = [f"Summarize the following article {LENGTH_INSTRUCTIONS[SummaryLength(options.length)]}."]
    if options.include_key_points:
        lines.append(KEY_POINTS_INSTRUCTION)
    lines.extend(
        [
            "Focus on the main ideas and important details.",
            "Use clear and concise language.",
            "",
            "ARTICLE:",
            text.strip(),
        ]
    )
    return "\n".join(lines)


def count_words(text: str) -> int:
    return len(text.split())


def extract_key_points(text: str) -> tuple[str, list[str] | None]:
    """Split a model response into the summary body and its key points.

    The body is everything before the first key-points heading; bullet or
    numbered lines after the heading line become the key points. Without a
    heading the whole text is the summary.
    """

    match = _KEY_POINTS_HEADING.search(text)
    if match is None:
        return text, None

    before = text[: match.start()]
    prefix = _HEADING_PREFIX.search(before)
    if prefix is not None:
        before = before[: prefix.start()]
    summary = before.strip()

    points: list[str] = []
    for line in text[match.start() :].splitlines()[1:]:
        stripped = line.strip()
        if not _BULLET.match(stripped):
            continue
        point = _BULLET.sub("", stripped).strip()
        if point:
            points.append(point)
    return summary, points or None


@dataclass(slots=True)
class _LiteLLMClient:
    """Client that delegates completions to LiteLLM."""

    config: LLMConfig
    api_key: str

    def complete(self, prompt: str) -> str:
        call_kwargs: dict[str, Any] = {
            "model": self.config.name,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.config.temperature,
            "top_p": self.config.top_p,
            "api_key": self.api_key,
        }
        base_url = self.config.base_url.strip()
        if base_url:
            call_kwargs["api_base"] = base_url

        response = litellm.completion(**call_kwargs)
        return _extract_content(response)


@dataclass(slots=True)
class _StubLLMClient:
    """Deterministic offline client selected by a ``stub://`` base URL."""

    config: LLMConfig

    def complete(self, prompt: str) -> str:
        _, _, article = prompt.partition("ARTICLE:")
        sentences = _first_sentences(article, limit=3) or ["No content provided."]
        body = f"This summary was generated by {self.config.alias}. " + " ".join(sentences)
        if KEY_POINTS_INSTRUCTION not in prompt:
            return body
        bullets = "\n".join(f"- {sentence}" for sentence in sentences)
        return f"{body}\n\nKey Points:\n{bullets}"


class LLMClientProvider:
    """Owns the completion client and builds it on first use."""

    def __init__(self, config: LLMConfig, api_key: str | None = None) -> None:
        self.config = config
        self._api_key = api_key
        self._client: CompletionClient | None = None

    def get(self) -> CompletionClient:
        if self._client is None:
            self._client = self._build()
        return self._client

    def _build(self) -> CompletionClient:
        if self.config.is_stub:
            logger.debug("Using stub LLM client for alias {}", self.config.alias)
            return _StubLLMClient(self.config)

        api_key = (self._api_key or "").strip() or self.config.api_key_secret
        if not api_key:
            raise make_error(
                ErrorKind.CONFIGURATION,
                "MISSING_API_KEY",
                alias=self.config.alias,
                api_key=self.config.api_key,
            )
        logger.debug("Using LiteLLM client for alias {} (model {})", self.config.alias, self.config.name)
        return _LiteLLMClient(self.config, api_key)


class SummaryGenerator:
    """Generate summaries with retries and an explicit degrade policy."""

    def __init__(
        self,
        provider: LLMClientProvider,
        *,
        max_attempts: int = 3,
        degrade_on_failure: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.provider = provider
        self.max_attempts = max_attempts
        self.degrade_on_failure = degrade_on_failure
        self._sleep = sleep

    def summarize(self, text: str, options: SummarizeOptions | None = None) -> SummaryResult:
        options = options or SummarizeOptions()
        original_word_count = count_words(text)
        length = SummaryLength(options.length)
        logger.info("Generating {} summary with {}", length.value, self.provider.config.alias)

        try:
            raw = self._generate(build_prompt(text, options))
        except AppError as error:
            if not self.degrade_on_failure:
                raise
            logger.error("Failed to generate summary: {}", error.user_message())
            logger.debug("Summarization failure details: {}", error.debug_info())
            return SummaryResult(
                summary=FAILED_SUMMARY,
                key_points=None,
                original_word_count=original_word_count,
                summary_word_count=0,
            )

        summary, key_points = extract_key_points(raw)
        if not options.include_key_points:
            key_points = None
        return SummaryResult(
            summary=summary,
            key_points=key_points,
            original_word_count=original_word_count,
            summary_word_count=count_words(summary),
        )

    def _generate(self, prompt: str) -> str:
        """Build the client and run the completion; every failure surfaces as :class:`AppError`."""

        client = self.provider.get()
        try:
            return retry_with_backoff(
                lambda: self._complete(client, prompt),
                attempts=self.max_attempts,
                retry_on=(Exception,),
                sleep=self._sleep,
                label="LLM completion",
            )
        except RetryError as exc:
            raise _classify(
                exc.last_error, model=self.provider.config.name, attempts=exc.attempts
            ) from exc.last_error

    @staticmethod
    def _complete(client: CompletionClient, prompt: str) -> str:
        output = client.complete(prompt)
        if not output or not output.strip():
            raise make_error(ErrorKind.API, "INVALID_RESPONSE", ValueError("LLM returned empty response"))
        return output.strip()


def _classify(error: BaseException, **context: Any) -> AppError:
    if isinstance(error, AppError):
        error.context.update(context)
        return error
    exceptions = litellm.exceptions
    if isinstance(error, exceptions.AuthenticationError):
        code = "AUTHENTICATION_FAILED"
    elif isinstance(error, exceptions.RateLimitError):
        code = "RATE_LIMIT_EXCEEDED"
    elif isinstance(error, (exceptions.ServiceUnavailableError, exceptions.APIConnectionError, exceptions.Timeout)):
        code = "SERVICE_UNAVAILABLE"
    else:
        code = "INVALID_RESPONSE"
    return make_error(ErrorKind.API, code, error, **context)


def _extract_content(response: Any) -> str:
    choices = getattr(response, "choices", None)
    if choices is None and isinstance(response, dict):
        choices = response.get("choices")
    if not choices:
        return ""

    choice = choices[0]
    message = getattr(choice, "message", None)
    if message is None and isinstance(choice, dict):
        message = choice.get("message")
    if message is None:
        return ""

    content = getattr(message, "content", None)
    if content is None and isinstance(message, dict):
        content = message.get("content")

    if isinstance(content, list):
        return "\n".join(str(part).strip() for part in content if str(part).strip())
    return str(content or "").strip()


def _first_sentences(text: str, *, limit: int) -> list[str]:
    sentences: list[str] = []
    for chunk in text.replace("\n", " ").split("."):
        cleaned = chunk.strip()
        if cleaned:
            sentences.append(cleaned + ".")
        if len(sentences) >= limit:
            break
    return sentences


__all__ = [
    "CompletionClient",
    "FAILED_SUMMARY",
    "LENGTH_INSTRUCTIONS",
    "LLMClientProvider",
    "SummaryGenerator",
    "build_prompt",
    "count_words",
    "extract_key_points",
]
