"""Tests for prompt construction, key-point parsing and the summary generator."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import litellm
import pytest

from articlesys.config import LLMConfig, SummaryLength
from articlesys.errors import AppError, ErrorKind
from articlesys.summary import generator as generator_module
from articlesys.summary.generator import (
    FAILED_SUMMARY,
    LLMClientProvider,
    SummaryGenerator,
    build_prompt,
    count_words,
    extract_key_points,
)
from articlesys.summary.models import SummarizeOptions


class _ScriptedClient:
    def __init__(self, outcomes: list[Any]) -> None:
        self.outcomes = list(outcomes)
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class _FixedProvider(LLMClientProvider):
    def __init__(self, client: _ScriptedClient) -> None:
        super().__init__(LLMConfig(api_key="test-key"))
        self._client = client


def _generator(outcomes: list[Any], *, degrade: bool = True) -> tuple[SummaryGenerator, _ScriptedClient, list[float]]:
    client = _ScriptedClient(outcomes)
    waits: list[float] = []
    generator = SummaryGenerator(
        _FixedProvider(client),
        max_attempts=3,
        degrade_on_failure=degrade,
        sleep=waits.append,
    )
    return generator, client, waits


def test_extract_key_points_splits_summary_and_bullets() -> None:
    summary, points = extract_key_points("Paragraph one.\n\nKey Points:\n- Point A\n- Point B")

    assert summary == "Paragraph one."
    assert points == ["Point A", "Point B"]


def test_extract_key_points_without_heading() -> None:
    text = "Just a summary without any list."

    assert extract_key_points(text) == (text, None)


def test_extract_key_points_handles_markdown_heading_and_numbering() -> None:
    text = "Body text.\n\n## Main Takeaways:\n1. First\n2) Second\n* Third\n• Fourth\nNot a bullet"

    summary, points = extract_key_points(text)

    assert summary == "Body text."
    assert points == ["First", "Second", "Third", "Fourth"]


def test_extract_key_points_bold_heading() -> None:
    summary, points = extract_key_points("Body.\n**Key Points:**\n- One")

    assert summary == "Body."
    assert points == ["One"]


def test_extract_key_points_heading_without_bullets_is_absent() -> None:
    summary, points = extract_key_points("Intro.\nKey takeaways:\nnothing listed here")

    assert summary == "Intro."
    assert points is None


def test_count_words_uses_whitespace_tokens() -> None:
    assert count_words("one two  three") == 3
    assert count_words("") == 0
    assert count_words("  \n\t ") == 0


@pytest.mark.parametrize(
    ("length", "fragment"),
    [
        (SummaryLength.SHORT, "about 1-2 paragraphs"),
        (SummaryLength.MEDIUM, "about 3-4 paragraphs"),
        (SummaryLength.LONG, "about 5-7 paragraphs"),
    ],
)
def test_build_prompt_length_directive(length: SummaryLength, fragment: str) -> None:
    prompt = build_prompt("Article body.", SummarizeOptions(length=length, include_key_points=False))

    assert fragment in prompt
    assert "key points" not in prompt
    assert prompt.endswith("ARTICLE:\nArticle body.")


def test_build_prompt_requests_key_points() -> None:
    prompt = build_prompt("Body.", SummarizeOptions(include_key_points=True))

    assert "Include a section with 3-5 key points from the article." in prompt


def test_summarize_success_counts_words() -> None:
    generator, client, waits = _generator(["Short summary here.\n\nKey Points:\n- Alpha\n- Beta"])

    result = generator.summarize("one two three four five six", SummarizeOptions())

    assert result.summary == "Short summary here."
    assert result.key_points == ["Alpha", "Beta"]
    assert result.original_word_count == 6
    assert result.summary_word_count == 3
    assert len(client.prompts) == 1
    assert waits == []


def test_summarize_drops_key_points_when_not_requested() -> None:
    generator, _, _ = _generator(["Summary.\nKey points:\n- Extra"])

    result = generator.summarize("text", SummarizeOptions(include_key_points=False))

    assert result.key_points is None


def test_summarize_retries_transient_failures() -> None:
    generator, client, waits = _generator([RuntimeError("flaky"), "Recovered summary."])

    result = generator.summarize("some words", SummarizeOptions())

    assert result.summary == "Recovered summary."
    assert len(client.prompts) == 2
    assert waits == [2.0]


def test_summarize_degrades_after_exhausting_attempts() -> None:
    generator, client, waits = _generator([RuntimeError("down")])

    result = generator.summarize("four words right here", SummarizeOptions())

    assert result.summary == FAILED_SUMMARY
    assert result.key_points is None
    assert result.original_word_count == 4
    assert result.summary_word_count == 0
    assert len(client.prompts) == 3
    assert waits == [2.0, 4.0]


def test_summarize_raises_when_degrade_disabled() -> None:
    generator, _, _ = _generator(["   "], degrade=False)

    with pytest.raises(AppError) as excinfo:
        generator.summarize("text", SummarizeOptions())

    assert excinfo.value.kind is ErrorKind.API
    assert excinfo.value.code == "INVALID_RESPONSE"


def test_litellm_errors_are_classified() -> None:
    rate_limited = litellm.exceptions.RateLimitError(message="slow down", llm_provider="gemini", model="gemini-pro")
    generator, _, _ = _generator([rate_limited], degrade=False)

    with pytest.raises(AppError) as excinfo:
        generator.summarize("text", SummarizeOptions())

    assert excinfo.value.code == "RATE_LIMIT_EXCEEDED"
    assert excinfo.value.context["attempts"] == 3


def test_provider_requires_api_key() -> None:
    provider = LLMClientProvider(LLMConfig())

    with pytest.raises(AppError) as excinfo:
        provider.get()

    assert excinfo.value.kind is ErrorKind.CONFIGURATION
    assert excinfo.value.code == "MISSING_API_KEY"


def test_missing_key_degrades_to_placeholder() -> None:
    waits: list[float] = []
    generator = SummaryGenerator(LLMClientProvider(LLMConfig()), degrade_on_failure=True, sleep=waits.append)

    result = generator.summarize("some text here", SummarizeOptions())

    assert result.summary == FAILED_SUMMARY
    assert result.key_points is None
    assert result.original_word_count == 3
    assert result.summary_word_count == 0
    assert waits == []


def test_missing_key_raises_when_degrade_disabled() -> None:
    generator = SummaryGenerator(LLMClientProvider(LLMConfig()), degrade_on_failure=False, sleep=lambda _: None)

    with pytest.raises(AppError) as excinfo:
        generator.summarize("text", SummarizeOptions())

    assert excinfo.value.kind is ErrorKind.CONFIGURATION
    assert excinfo.value.code == "MISSING_API_KEY"


def test_provider_builds_client_once(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    provider = LLMClientProvider(LLMConfig())

    first = provider.get()
    second = provider.get()

    assert first is second
    assert first.api_key == "from-env"


def test_explicit_api_key_wins_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")

    client = LLMClientProvider(LLMConfig(), api_key="from-flag").get()

    assert client.api_key == "from-flag"


def test_litellm_client_passes_model_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def _fake_completion(**kwargs: Any) -> Any:
        captured.update(kwargs)
        message = SimpleNamespace(content="  Generated text.  ")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    monkeypatch.setattr(generator_module.litellm, "completion", _fake_completion)
    config = LLMConfig(api_key="k", base_url="https://llm.example.com", temperature=0.1, top_p=0.5)

    output = LLMClientProvider(config).get().complete("prompt text")

    assert output == "Generated text."
    assert captured["model"] == "gemini/gemini-pro"
    assert captured["messages"] == [{"role": "user", "content": "prompt text"}]
    assert captured["temperature"] == 0.1
    assert captured["top_p"] == 0.5
    assert captured["api_key"] == "k"
    assert captured["api_base"] == "https://llm.example.com"


def test_stub_client_needs_no_key_and_lists_key_points() -> None:
    provider = LLMClientProvider(LLMConfig(base_url="stub://"))
    generator = SummaryGenerator(provider, sleep=lambda _: None)

    result = generator.summarize("First sentence. Second sentence. Third one.", SummarizeOptions())

    assert result.summary.startswith("This summary was generated by gemini.")
    assert result.key_points == ["First sentence.", "Second sentence.", "Third one."]
