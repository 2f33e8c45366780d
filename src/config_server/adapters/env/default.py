"""Environment variable adapter for server settings.

Purpose
-------
Translate ``CONFIG_SERVER_*`` process environment variables into a nested
settings mapping that is layered over the settings file.

Key behaviours
--------------
* Only variables starting with :data:`ENV_PREFIX` are captured.
* ``__`` nests (``CONFIG_SERVER_ADDITIONS__EUREKA__ENABLED`` →
  ``{"additions": {"eureka": {"enabled": ...}}}``).
* Light coercion of booleans, integers, floats and ``null``/``none``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from ...domain.errors import ValidationError
from ...observability import log_debug

ENV_PREFIX: Final[str] = "CONFIG_SERVER_"


class EnvSettingsLoader:
    """Collect settings overrides from the process environment."""

    def __init__(self, *, environ: Mapping[str, str] | None = None, prefix: str = ENV_PREFIX) -> None:
        self._environ = os.environ if environ is None else environ
        self._prefix = prefix if prefix.endswith("_") else f"{prefix}_"

    def load(self) -> dict[str, object]:
        """Return a nested mapping built from variables carrying the prefix.

        Examples
        --------
        >>> env = {
        ...     'CONFIG_SERVER_LOG_PROPERTIES': 'true',
        ...     'CONFIG_SERVER_ADDITIONS__EUREKA__PORT': '8761',
        ...     'HOME': '/root',
        ... }
        >>> EnvSettingsLoader(environ=env).load()
        {'additions': {'eureka': {'port': 8761}}, 'log_properties': True}
        """

        collected: dict[str, object] = {}
        for key in sorted(self._environ):
            if not key.startswith(self._prefix):
                continue
            stripped = key[len(self._prefix) :]
            if stripped:
                assign_nested(collected, stripped, _coerce(self._environ[key]))
        log_debug("env_settings_loaded", keys=sorted(collected.keys()))
        return collected


def assign_nested(target: dict[str, object], key: str, value: object) -> None:
    """Assign ``value`` inside ``target`` using ``__`` as a nesting delimiter.

    Examples
    --------
    >>> data: dict[str, object] = {}
    >>> assign_nested(data, 'ADDITIONS__SERVER__PORT', 5)
    >>> data
    {'additions': {'server': {'port': 5}}}
    """

    parts = [part.lower() for part in key.split("__")]
    cursor = target
    for part in parts[:-1]:
        child = cursor.setdefault(part, {})
        if not isinstance(child, dict):
            raise ValidationError(f"Cannot nest {key} below scalar setting {part}")
        cursor = child
    cursor[parts[-1]] = value


def _coerce(value: str) -> object:
    """Coerce textual environment values to Python primitives where possible.

    Examples
    --------
    >>> _coerce('true'), _coerce('10'), _coerce('3.5'), _coerce('api-gateway')
    (True, 10, 3.5, 'api-gateway')
    """

    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    try:
        if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
            return int(value)
        return float(value)
    except ValueError:
        return value
