"""Shared fixtures: an in-memory store, deterministic settings and a document builder."""

from __future__ import annotations

from typing import Callable

import pytest

from config_server.adapters.store.memory import InMemoryConfigMapStore
from config_server.application.save import build_document
from config_server.core import ConfigServer
from config_server.domain.documents import ConfigDocument
from config_server.domain.settings import ServerSettings

STATIC_ADDITIONS = {"spring.cloud.config.allowOverride": True, "server.static": "on"}


@pytest.fixture()
def store() -> InMemoryConfigMapStore:
    return InMemoryConfigMapStore()


@pytest.fixture()
def settings() -> ServerSettings:
    return ServerSettings(gateway_names=["api-gateway", "gateway-helper"], additions=STATIC_ADDITIONS)


@pytest.fixture()
def server(store: InMemoryConfigMapStore, settings: ServerSettings) -> ConfigServer:
    return ConfigServer.build(store, settings)


@pytest.fixture()
def make_document() -> Callable[..., ConfigDocument]:
    """Build documents with sensible defaults so tests only spell out what matters."""

    def _make(
        yaml_text: str,
        *,
        service: str = "billing",
        version: str = "1.0.0",
        namespace: str = "dev",
        policy: str = "add",
        profile: str | None = None,
    ) -> ConfigDocument:
        return build_document(
            service=service,
            version=version,
            namespace=namespace,
            update_policy=policy,
            yaml_text=yaml_text,
            profile=profile,
        )

    return _make
