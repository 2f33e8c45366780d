"""Domain value objects for submitted documents, stored records and poll results.

Purpose
-------
Describe the shapes flowing through the save and poll paths without any I/O.
Documents are immutable once built; derived variants (route-free remainder,
merged text) are produced with :func:`dataclasses.replace`.

Contents
--------
* :class:`UpdatePolicy` – ``not`` / ``add`` / ``cover`` wire values.
* :class:`ConfigDocument` – a document submitted for saving.
* :class:`StoredRecord` – a read-only snapshot of a record held by the store.
* :class:`PropertySource` / :class:`Environment` – the poll response.
* :func:`profile_key` – maps a profile name to the key under which its YAML
  blob is stored.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Final

DEFAULT_PROFILE: Final[str] = "default"
"""Profile sentinel mapped to the bare ``application.yml`` key."""

ROUTE_SERVICE_NAME: Final[str] = "zuul-route"
"""Reserved service name holding the route table shared by gateway services."""

VERSION_ANNOTATION: Final[str] = "config-server.io/version"
"""Annotation key carrying the version tag of a stored record."""


class UpdatePolicy(str, Enum):
    """What to do when a save targets a record that already exists."""

    NOT = "not"
    ADD = "add"
    COVER = "cover"


def profile_key(profile: str) -> str:
    """Return the data key holding the YAML blob for *profile*.

    Examples
    --------
    >>> profile_key("default")
    'application.yml'
    >>> profile_key("dev")
    'application-dev.yml'
    """

    if profile == DEFAULT_PROFILE:
        return "application.yml"
    return f"application-{profile}.yml"


@dataclass(frozen=True, slots=True)
class ConfigDocument:
    """A configuration document submitted for saving.

    ``body`` is the decoded mapping and ``text`` the YAML that will be written
    to the store. They start out equivalent; route separation and merging
    replace ``text`` with the serialised result of their transform.
    """

    service: str
    version: str
    namespace: str
    update_policy: UpdatePolicy
    body: dict[str, Any]
    text: str
    profile: str = DEFAULT_PROFILE

    @property
    def profile_key(self) -> str:
        return profile_key(self.profile)


@dataclass(frozen=True, slots=True)
class StoredRecord:
    """Snapshot of a record owned by the store collaborator.

    ``data`` maps profile keys to raw YAML text; ``annotations`` carries the
    version tag under :data:`VERSION_ANNOTATION`.
    """

    name: str
    namespace: str
    data: Mapping[str, str] = field(default_factory=dict)
    annotations: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))
        object.__setattr__(self, "annotations", MappingProxyType(dict(self.annotations)))

    @property
    def version(self) -> str:
        """Return the version tag or an empty string when the record carries none."""

        return self.annotations.get(VERSION_ANNOTATION, "")

    def blob(self, profile: str) -> str:
        """Return the raw YAML stored for *profile* (empty when absent)."""

        return self.data.get(profile_key(profile), "")


@dataclass(frozen=True, slots=True)
class PropertySource:
    """Named flattened property set."""

    name: str
    source: dict[str, Any]


@dataclass(frozen=True, slots=True)
class Environment:
    """Resolved configuration returned to a polling consumer."""

    name: str
    version: str
    profiles: list[str]
    property_sources: list[PropertySource]
    label: str | None = None
    state: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return the JSON shape expected by Spring Cloud Config clients.

        Examples
        --------
        >>> env = Environment("svc", "1.0", ["default"], [PropertySource("svc-default-1.0", {"a": 1})])
        >>> env.as_dict()["propertySources"]
        [{'name': 'svc-default-1.0', 'source': {'a': 1}}]
        """

        return {
            "name": self.name,
            "profiles": list(self.profiles),
            "label": self.label,
            "version": self.version,
            "state": self.state,
            "propertySources": [{"name": item.name, "source": dict(item.source)} for item in self.property_sources],
        }
