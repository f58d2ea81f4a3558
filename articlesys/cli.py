"""Command line interface for the article summarizer."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from .config import AppConfig, SummaryLength, apply_env_overrides, load_config
from .config.inspector import check_config, explain_config
from .errors import AppError, ErrorKind, make_error, wrap_error
from .log import configure_logging
from .summary import ArticlePipeline

DEFAULT_CONFIG_PATH = Path("config") / "default.toml"


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    log_level: str | None = None
    log_file: Path | None = None
    _config: AppConfig | None = None

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            self._config = apply_env_overrides(self._load())
            if self.log_level is None:
                configure_logging(self._config.logging_level, self.log_file)
        return self._config

    def _load(self) -> AppConfig:
        if not self.config_path.exists():
            logger.warning("Configuration file {} not found; using defaults", self.config_path)
            return AppConfig()
        logger.info("Loading configuration from {}", self.config_path)
        try:
            return load_config(AppConfig, self.config_path)
        except ValidationError as exc:
            raise make_error(ErrorKind.CONFIGURATION, "INVALID_CONFIG", exc, path=str(self.config_path)) from exc
        except (OSError, ValueError) as exc:
            raise make_error(
                ErrorKind.CONFIGURATION, "CONFIG_FILE_ERROR", exc, path=str(self.config_path)
            ) from exc


app = typer.Typer(help="Summarize web articles into Markdown documents")
config_app = typer.Typer(help="Validate and document configuration files")
app.add_typer(config_app, name="config")


def _normalize_format(value: str) -> str:
    return value.lower()


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.find_root().obj
    if not isinstance(state, CLIState):  # pragma: no cover - defensive guard
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> None:
    raise typer.Exit(code)


def _report_error(exc: BaseException) -> None:
    error = wrap_error(exc)
    logger.error("{}", error.user_message())
    logger.debug("Error details: {}", error.debug_info())


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        help="Path to the TOML configuration file",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress messages"),
    debug: bool = typer.Option(False, "--debug", help="Log diagnostic details"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write DEBUG logs to this file"),
) -> None:
    """Load .env files and configure logging before any command runs."""

    load_dotenv()
    level = "DEBUG" if debug else "INFO" if verbose else None
    configure_logging(level or "WARNING", log_file)
    ctx.obj = CLIState(config_path=config.resolve(), log_level=level, log_file=log_file)


@app.command(help="Fetch an article, summarize it and save the Markdown document")
def summarize(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Article URL; https:// is assumed when no scheme is given"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file path"),
    length: SummaryLength | None = typer.Option(
        None,
        "--length",
        "-l",
        case_sensitive=False,
        help="Summary length (defaults to the configured value)",
    ),
    api_key: str | None = typer.Option(None, "--api-key", "-k", help="API key for the summarization model"),
    key_points: bool | None = typer.Option(
        None,
        "--key-points/--no-key-points",
        help="Ask for a key points section (defaults to the configured value)",
    ),
) -> None:
    state = _get_state(ctx)
    try:
        config = state.ensure_config()
        pipeline = ArticlePipeline(config, api_key=api_key)
        logger.info("Processing article from {}", url)
        article = pipeline.run(url, output=output, length=length, include_key_points=key_points)
    except Exception as exc:  # noqa: BLE001 - unclassified errors are wrapped as UNKNOWN
        _report_error(exc)
        _exit(1)

    summary = article.summary
    typer.echo(f"Summary saved to {article.output_path}")
    typer.echo(f"Summary generated: {summary.summary_word_count} words")


@app.command(help="Show the resolved configuration")
def status(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    try:
        config = state.ensure_config()
    except AppError as exc:
        _report_error(exc)
        _exit(1)

    llm = config.llm
    lines = [
        f"Config file: {state.config_path} (exists={state.config_path.exists()})",
        f"Logging level: {config.logging_level}",
        f"Summary length: {config.defaults.summary_length.value}",
        f"Output dir: {config.defaults.output_dir}",
        f"Key points: {config.defaults.include_key_points}",
        f"Fetch timeout: {config.fetcher.timeout}s, retries: {config.fetcher.retries}",
        f"Extra remove selectors: {', '.join(config.extractor.remove_selectors) or 'none'}",
        f"LLM: {llm.alias} ({llm.name}), stub={llm.is_stub}, api key set={llm.api_key_secret is not None}",
        f"LLM attempts: {llm.max_attempts}, degrade on failure: {llm.degrade_on_failure}",
    ]
    for line in lines:
        typer.echo(line)


@config_app.command(help="Validate the configuration file")
def check(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for validation results",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    result, exit_code, _ = check_config(state.config_path)

    if format == "json":
        typer.echo(json.dumps(result, indent=2, ensure_ascii=False, default=str))
        _exit(exit_code)

    if result["status"] == "ok":
        typer.echo(f"Configuration OK: {result['config_path']}")
        for warning in result["warnings"]:
            logger.warning(warning)
    else:
        error: dict[str, Any] = result["error"]
        logger.error(
            "Configuration error ({}) for {}: {}",
            error["type"],
            result["config_path"],
            error["message"],
        )
        for detail in error.get("details", []):
            logger.error("  - {}: {} ({})", detail["loc"] or "<root>", detail["message"], detail["type"])

    _exit(exit_code)


@config_app.command(help="Describe available configuration fields")
def explain(
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for configuration schema",
        callback=_normalize_format,
    ),
) -> None:
    fields = explain_config()

    if format == "json":
        typer.echo(json.dumps({"fields": fields}, indent=2, ensure_ascii=False, default=str))
        return

    typer.echo(f"Configuration schema ({len(fields)} fields):")
    for field in fields:
        default_value = field["default"]
        if isinstance(default_value, (dict, list)):
            default_repr = json.dumps(default_value, ensure_ascii=False, default=str)
        else:
            default_repr = str(default_value)
        typer.echo(
            f"  - {field['name']}: type={field['type']}, "
            f"required={'yes' if field['required'] else 'no'}, default={default_repr}, "
            f"description={field['description'] or '(no description)'}"
        )


def main(argv: list[str] | None = None) -> int:
    """Entry point compatible with setuptools console scripts."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
