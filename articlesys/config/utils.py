"""Secret lookup for configuration values of the form ``env:NAME``."""

from __future__ import annotations

import os

ENV_PREFIX = "env:"


def is_env_reference(value: str | None) -> bool:
    return value is not None and value.startswith(ENV_PREFIX)


def resolve_env_reference(value: str | None, *, required: bool = True) -> str | None:
    """Return the secret behind ``value``.

    Literal strings come back untouched. For an ``env:NAME`` reference the
    variable is read and trimmed; a whitespace-only value counts as unset and
    either raises :class:`EnvironmentError` (``required``) or yields ``None``.
    """

    if not is_env_reference(value):
        return value

    name = value[len(ENV_PREFIX) :].strip()
    secret = (os.environ.get(name) or "").strip() if name else ""
    if secret:
        return secret
    if required:
        raise EnvironmentError(f"{value!r} refers to an unset environment variable")
    return None


__all__ = ["ENV_PREFIX", "is_env_reference", "resolve_env_reference"]
