"""Composition root for ``config_server``.

Purpose
-------
Wire settings, the record store and the application services together. The
HTTP transport and the CLI both go through this module, so it is the
canonical place to change how settings are layered or which store backs the
service.

Contents
--------
* :func:`load_settings` – defaults ← settings file ← ``CONFIG_SERVER_*`` env.
* :func:`settings_from_mapping` – turn a raw settings mapping into
  :class:`ServerSettings`.
* :func:`create_store` – pick the in-memory or directory store.
* :class:`ConfigServer` – the save service and poll assembler sharing one
  store and one settings value.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .adapters.env.default import EnvSettingsLoader
from .adapters.file_loaders.structured import SettingsFileLoader
from .adapters.store.filesystem import FileConfigMapStore
from .adapters.store.memory import InMemoryConfigMapStore
from .application.flatten import flatten
from .application.merge import merge_overlay
from .application.poll import PollAssembler
from .application.ports import ConfigMapStore
from .application.save import SaveService
from .domain.errors import ValidationError
from .domain.settings import DEFAULT_ADDITIONS, DEFAULT_GATEWAY_NAMES, ServerSettings
from .observability import log_info

_KNOWN_KEYS = {"gateway_names", "log_properties", "additions"}


def load_settings(
    path: str | os.PathLike[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ServerSettings:
    """Return settings layered from defaults, the optional file and the environment.

    Examples
    --------
    >>> settings = load_settings(environ={"CONFIG_SERVER_GATEWAY_NAMES": "edge,edge-helper"})
    >>> sorted(settings.gateway_names)
    ['edge', 'edge-helper']
    """

    layers: dict[str, Any] = {
        "gateway_names": sorted(DEFAULT_GATEWAY_NAMES),
        "additions": dict(DEFAULT_ADDITIONS),
    }
    if path is not None:
        layers = merge_overlay(layers, SettingsFileLoader().load(Path(path)))
    layers = merge_overlay(layers, EnvSettingsLoader(environ=environ).load())
    settings = settings_from_mapping(layers)
    log_info(
        "settings_loaded",
        path=str(path) if path is not None else None,
        gateways=sorted(settings.gateway_names),
        additions=len(settings.additions),
    )
    return settings


def settings_from_mapping(raw: Mapping[str, Any]) -> ServerSettings:
    """Validate *raw* and build :class:`ServerSettings`; nested additions are flattened.

    Examples
    --------
    >>> settings_from_mapping({"additions": {"eureka": {"enabled": False}}}).additions["eureka.enabled"]
    False
    """

    unknown = set(raw) - _KNOWN_KEYS
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

    gateway_names = raw.get("gateway_names", DEFAULT_GATEWAY_NAMES)
    if gateway_names is None:
        gateway_names = ()
    if not isinstance(gateway_names, (str, list, tuple, set, frozenset)):
        raise ValidationError("gateway_names must be a list or a comma separated string")

    log_properties = raw.get("log_properties", False)
    if not isinstance(log_properties, bool):
        raise ValidationError("log_properties must be a boolean")

    additions = raw.get("additions", DEFAULT_ADDITIONS)
    if additions is None:
        additions = {}
    if not isinstance(additions, Mapping):
        raise ValidationError("additions must be a mapping")

    return ServerSettings(gateway_names=gateway_names, log_properties=log_properties, additions=flatten(additions))


def create_store(data_dir: str | os.PathLike[str] | None = None) -> ConfigMapStore:
    """Return a directory store rooted at *data_dir*, or an in-memory store when ``None``."""

    if data_dir is None:
        return InMemoryConfigMapStore()
    return FileConfigMapStore(data_dir)


@dataclass(frozen=True, slots=True)
class ConfigServer:
    """Save and poll services bound to one store and one settings value."""

    store: ConfigMapStore
    settings: ServerSettings
    saver: SaveService
    assembler: PollAssembler

    @classmethod
    def build(cls, store: ConfigMapStore | None = None, settings: ServerSettings | None = None) -> ConfigServer:
        """Assemble services, defaulting to an in-memory store and default settings.

        Examples
        --------
        >>> server = ConfigServer.build()
        >>> server.settings.is_gateway("api-gateway")
        True
        """

        store = store if store is not None else InMemoryConfigMapStore()
        settings = settings if settings is not None else ServerSettings()
        return cls(store, settings, SaveService(store, settings), PollAssembler(store, settings))


__all__ = [
    "ConfigServer",
    "create_store",
    "load_settings",
    "settings_from_mapping",
]
