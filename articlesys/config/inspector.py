"""Validate configuration files and describe the available fields."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from types import UnionType
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from .app import AppConfig
from .base import load_config
from .utils import is_env_reference

# exit codes used by ``articlesys config check``
EXIT_OK = 0
EXIT_INVALID_FORMAT = 1
EXIT_UNREADABLE = 2
EXIT_VALIDATION = 3


def check_config(path: Path) -> tuple[dict[str, Any], int, AppConfig | None]:
    """Validate ``path`` and collect non-fatal warnings.

    Returns ``(result, exit_code, config_or_None)``.
    """

    def _failure(error_type: str, message: str, code: int, **extra: Any) -> tuple[dict[str, Any], int, None]:
        error: dict[str, Any] = {"type": error_type, "message": message}
        error.update(extra)
        return {"status": "error", "config_path": str(path), "error": error}, code, None

    try:
        config = load_config(AppConfig, path)
    except FileNotFoundError as exc:
        return _failure("missing_file", str(exc), EXIT_UNREADABLE)
    except PermissionError as exc:
        return _failure("permission_error", str(exc), EXIT_UNREADABLE)
    except ValidationError as exc:
        details = [
            {
                "loc": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        return _failure("validation_error", "Configuration validation failed", EXIT_VALIDATION, details=details)
    except ValueError as exc:
        return _failure("invalid_format", str(exc), EXIT_INVALID_FORMAT)

    result = {"status": "ok", "config_path": str(path), "warnings": _collect_warnings(config)}
    return result, EXIT_OK, config


def explain_config() -> list[dict[str, Any]]:
    """Flatten the :class:`AppConfig` schema into documented field entries."""

    entries: list[dict[str, Any]] = []

    def _walk(model_cls: type[BaseModel], prefix: str) -> None:
        for name, field in model_cls.model_fields.items():
            dotted = f"{prefix}{name}"
            entries.append(
                {
                    "name": dotted,
                    "type": _format_annotation(field.annotation),
                    "required": field.is_required(),
                    "default": _format_default(field),
                    "description": field.description or "",
                }
            )
            nested = _nested_model(field.annotation)
            if nested is not None:
                _walk(nested, f"{dotted}.")

    _walk(AppConfig, "")
    return entries


def _collect_warnings(config: AppConfig) -> list[str]:
    warnings: list[str] = []
    llm = config.llm
    if not llm.is_stub and llm.api_key_secret is None:
        if is_env_reference(llm.api_key):
            warnings.append(f"LLM api_key '{llm.api_key}' does not resolve; pass --api-key or set the variable")
        else:
            warnings.append("LLM api_key is empty; pass --api-key or configure one")
    if config.fetcher.retries == 0:
        warnings.append("fetcher.retries is 0; failed requests will not be retried")
    if not llm.degrade_on_failure:
        warnings.append("llm.degrade_on_failure is false; summarisation failures will abort the run")
    return warnings


def _nested_model(annotation: Any) -> type[BaseModel] | None:
    origin = get_origin(annotation)
    if origin in {Union, UnionType}:
        candidates: tuple[Any, ...] = get_args(annotation)
    elif origin is None:
        candidates = (annotation,)
    else:
        return None
    for candidate in candidates:
        if get_origin(candidate) is None and isinstance(candidate, type) and issubclass(candidate, BaseModel):
            return candidate
    return None


def _format_annotation(annotation: Any) -> str:
    origin = get_origin(annotation)
    if origin is None:
        return annotation.__name__ if isinstance(annotation, type) else repr(annotation).replace("typing.", "")
    args = get_args(annotation)
    if origin in {Union, UnionType}:
        non_none = [arg for arg in args if arg is not type(None)]  # noqa: E721
        if len(non_none) == 1:
            return f"Optional[{_format_annotation(non_none[0])}]"
        return "Union[" + ", ".join(_format_annotation(arg) for arg in args) + "]"
    origin_name = getattr(origin, "__name__", repr(origin))
    if not args:
        return origin_name
    return f"{origin_name}[" + ", ".join(_format_annotation(arg) for arg in args) + "]"


def _format_default(field: FieldInfo) -> Any:
    if field.is_required():
        return None
    value = field.default_factory() if field.default_factory is not None else field.default  # type: ignore[call-arg]
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


__all__ = ["check_config", "explain_config"]
