"""Render summaries into Markdown documents and write them to disk."""

from __future__ import annotations

import os
import re
from datetime import datetime
from pathlib import Path

import html2text
from jinja2 import BaseLoader, Environment
from loguru import logger

from articlesys.errors import ErrorKind, make_error

from .models import DocumentMetadata

_DEFAULT_TEMPLATE = """{% if title %}
# {{ title }}

{% endif %}
## Article Information

{% if url %}
**Source:** [{{ url }}]({{ url }})

{% endif %}
**Date Summarized:** {{ date }}

---

## Summary

{{ body }}
{% if key_points %}

## Key Points

{% for point in key_points %}
- {{ point }}
{% endfor %}
{% endif %}
"""

_HTML_TAG = re.compile(r"<\s*/?\s*[a-zA-Z][a-zA-Z0-9]*(?:\s[^<>]*)?/?\s*>")
_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def convert_to_markdown(text: str) -> str:
    """Convert embedded HTML to Markdown; plain text passes through stripped."""

    if not _HTML_TAG.search(text):
        return text.strip()

    converter = html2text.HTML2Text()
    converter.body_width = 0
    converter.ul_item_mark = "-"
    converter.backquote_code_style = True
    converter.ignore_images = False
    return converter.handle(text).strip()


def format_summary_date(value: str) -> str:
    """Render an ISO 8601 timestamp as ``Month D, YYYY``."""

    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        logger.debug("Keeping unparseable summary date {!r}", value)
        return value
    return f"{moment.strftime('%B')} {moment.day}, {moment.year}"


class SummaryRenderer:
    """Render summaries into Markdown strings."""

    def __init__(self, template: str | None = None) -> None:
        env = Environment(loader=BaseLoader(), autoescape=False, trim_blocks=True, lstrip_blocks=True)
        self._template = env.from_string(template or _DEFAULT_TEMPLATE)

    def render(
        self,
        summary_text: str,
        metadata: DocumentMetadata,
        key_points: list[str] | None = None,
    ) -> str:
        logger.info("Converting content to Markdown")
        return (
            self._template.render(
                title=(metadata.title or "").strip(),
                url=(metadata.url or "").strip(),
                date=format_summary_date(metadata.date),
                body=convert_to_markdown(summary_text),
                key_points=key_points or [],
            ).strip()
            + "\n"
        )


def save_document(document: str, path: Path) -> Path:
    """Write ``document`` next to ``path`` and rename it into place."""

    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(document, encoding="utf-8")
        os.replace(tmp, path)
    except PermissionError as exc:
        _discard(tmp)
        raise make_error(ErrorKind.FILE_SYSTEM, "PERMISSION_DENIED", exc, path=str(path)) from exc
    except OSError as exc:
        _discard(tmp)
        raise make_error(ErrorKind.FILE_SYSTEM, "WRITE_FAILED", exc, path=str(path)) from exc
    logger.info("Summary saved to {}", path)
    return path


def _discard(tmp: Path) -> None:
    if not tmp.exists():
        return
    try:
        tmp.unlink()
    except OSError as exc:
        logger.warning("Could not remove temporary file {}: {}", tmp, exc)


def slugify_title(title: str) -> str:
    slug = _SLUG_INVALID.sub("-", (title or "").lower()).strip("-")
    return slug or "summary"


def default_output_path(output_dir: str | Path, title: str) -> Path:
    return Path(output_dir) / f"{slugify_title(title)}.md"


__all__ = [
    "SummaryRenderer",
    "convert_to_markdown",
    "default_output_path",
    "format_summary_date",
    "save_document",
    "slugify_title",
]
