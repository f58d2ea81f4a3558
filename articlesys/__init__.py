"""Fetch a web article, summarise it with an LLM and write a Markdown document."""

__version__ = "0.1.0"

__all__: list[str] = ["__version__"]
