"""Pytest helpers for path configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

_ENV_VARS = (
    "GEMINI_API_KEY",
    "DEFAULT_SUMMARY_LENGTH",
    "DEFAULT_OUTPUT_PATH",
    "SCRAPER_TIMEOUT",
    "SCRAPER_RETRIES",
)

ARTICLE_HTML = """
<html>
  <head>
    <title>Site | Fallback</title>
    <meta name="description" content="A short description of the test article for readers.">
    <meta name="author" content="Ada Lovelace">
    <meta property="article:published_time" content="2024-03-05T10:00:00Z">
  </head>
  <body>
    <nav><a href="/">Home</a> <a href="/about">About</a></nav>
    <header>Site header</header>
    <article>
      <h1 class="entry-title">Analytical Engines Today</h1>
      <p>The analytical engine was a proposed mechanical general-purpose computer. It was designed by Charles Babbage.</p>
      <p>It incorporated an arithmetic logic unit, control flow in the form of conditional branching and loops, and integrated memory.</p>
      <p>   </p>
      <p>Read the <a href="https://example.com/engine">full history</a> of the engine for more details on its design.</p>
      <img src="engine.png" alt="Engine">
    </article>
    <aside class="sidebar">Popular posts</aside>
    <footer>Copyright</footer>
    <script>var tracking = true;</script>
  </body>
</html>
"""


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def article_html() -> str:
    return ARTICLE_HTML


@pytest.fixture()
def stub_config_file(tmp_path: Path) -> Path:
    """Config pointing at the offline stub model and a temporary output dir."""

    config_file = tmp_path / "config.toml"
    config_file.write_text(
        f"""
[defaults]
output_dir = "{(tmp_path / 'out').as_posix()}"

[fetcher]
retries = 0

[llm]
base_url = "stub://local"
""",
        encoding="utf-8",
    )
    return config_file
