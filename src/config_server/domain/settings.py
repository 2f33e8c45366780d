"""Immutable process-wide settings injected into the save and poll paths.

Purpose
-------
Carry the static configuration the synthesis engine depends on (which services
are gateway-class, whether pulled properties are logged verbatim, and the
static additions appended to every poll) as an explicit value rather than
ambient module state.

Contents
--------
* :class:`ServerSettings` – frozen settings value object.
* :data:`DEFAULT_GATEWAY_NAMES` / :data:`DEFAULT_ADDITIONS` – defaults used
  when neither the settings file nor the environment overrides them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

DEFAULT_GATEWAY_NAMES: Final[frozenset[str]] = frozenset({"api-gateway", "gateway-helper"})

DEFAULT_ADDITIONS: Final[Mapping[str, Any]] = MappingProxyType(
    {
        "spring.cloud.config.allowOverride": True,
        "spring.cloud.config.overrideNone": True,
    }
)


@dataclass(frozen=True, slots=True)
class ServerSettings:
    """Static settings shared by every request.

    Examples
    --------
    >>> settings = ServerSettings(gateway_names=["edge"])
    >>> settings.is_gateway("edge"), settings.is_gateway("billing")
    (True, False)
    """

    gateway_names: frozenset[str] = DEFAULT_GATEWAY_NAMES
    log_properties: bool = False
    additions: Mapping[str, Any] = field(default_factory=lambda: dict(DEFAULT_ADDITIONS))

    def __post_init__(self) -> None:
        object.__setattr__(self, "gateway_names", frozenset(_as_names(self.gateway_names)))
        object.__setattr__(self, "additions", MappingProxyType(dict(self.additions)))

    def is_gateway(self, service: str) -> bool:
        """Return ``True`` when *service* receives the shared route table."""

        return service in self.gateway_names


def _as_names(values: Iterable[str] | str) -> Iterable[str]:
    """Accept either an iterable of names or a comma separated string."""

    if isinstance(values, str):
        return [part.strip() for part in values.split(",") if part.strip()]
    return [str(value).strip() for value in values if str(value).strip()]
