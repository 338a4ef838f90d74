"""Variable substitution for configuration and script content.

Two kinds of placeholders are supported:

* ``${env://NAME}`` and ``${env://NAME:-default}`` are replaced by
  environment variables.
* ``${NAME}`` and ``${NAME:-default}`` are replaced by script arguments.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping

_ENV_VAR_PATTERN = re.compile(r"\$\{env://([A-Za-z_][A-Za-z0-9_]*)(:-([^}]*))?\}")
_SCRIPT_ARGS_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(:-([^}]*))?\}")

_ENV_PREFIX = "${env://"
_ARGS_PREFIX = "${"


class SubstitutionError(ValueError):
    """Raised when a required variable has no value and no default."""


def _parse_variable_with_default(var_part: str) -> tuple[str, str | None]:
    """Split ``NAME:-default`` into its name and default (``None`` if absent)."""
    name, sep, default = var_part.partition(":-")
    return name, (default if sep else None)


def _strip_placeholder(match: str, prefix: str) -> str:
    inner = match[:-1] if match.endswith("}") else match
    return inner[len(prefix):] if inner.startswith(prefix) else inner


class EnvSubstituter:
    """Replaces ``${env://VAR}`` placeholders with environment variables."""

    def substitute_env_vars(self, content: str) -> str:
        """Return ``content`` with every environment placeholder resolved.

        An empty environment variable counts as unset. Raises
        :class:`SubstitutionError` listing every placeholder that could not
        be resolved.
        """
        errors: list[str] = []

        def replace(match: re.Match[str]) -> str:
            text = match.group(0)
            name, default = _parse_variable_with_default(
                _strip_placeholder(text, _ENV_PREFIX)
            )
            value = os.environ.get(name, "")
            if value:
                return value
            if default is not None:
                return default
            errors.append(f"required environment variable {name} not set in {text}")
            return text

        result = _ENV_VAR_PATTERN.sub(replace, content)
        if errors:
            raise SubstitutionError(
                "environment variable substitution failed: " + ", ".join(errors)
            )
        return result


class ArgsSubstituter:
    """Replaces ``${VAR}`` placeholders with script arguments."""

    def __init__(self, args: Mapping[str, str] | None = None) -> None:
        self.args: dict[str, str] = dict(args or {})

    def substitute_args(self, content: str) -> str:
        """Return ``content`` with every argument placeholder resolved.

        An argument that is present, even if empty, is always used. Raises
        :class:`SubstitutionError` listing every placeholder that could not
        be resolved.
        """
        errors: list[str] = []

        def replace(match: re.Match[str]) -> str:
            text = match.group(0)
            name, default = _parse_variable_with_default(
                _strip_placeholder(text, _ARGS_PREFIX)
            )
            if name in self.args:
                return self.args[name]
            if default is not None:
                return default
            errors.append(f"required script argument '{name}' not set in {text}")
            return text

        result = _SCRIPT_ARGS_PATTERN.sub(replace, content)
        if errors:
            raise SubstitutionError(
                "script argument substitution failed: " + ", ".join(errors)
            )
        return result


def has_env_vars(content: str) -> bool:
    """Tell whether ``content`` holds an environment variable placeholder."""
    return _ENV_VAR_PATTERN.search(content) is not None


def has_script_args(content: str) -> bool:
    """Tell whether ``content`` holds a script argument placeholder."""
    return _SCRIPT_ARGS_PATTERN.search(content) is not None