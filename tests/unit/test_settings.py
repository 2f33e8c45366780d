"""Settings layering: defaults, settings file, then ``CONFIG_SERVER_*`` variables."""

from __future__ import annotations

from pathlib import Path

import pytest

from config_server.core import ConfigServer, create_store, load_settings, settings_from_mapping
from config_server.adapters.store.filesystem import FileConfigMapStore
from config_server.adapters.store.memory import InMemoryConfigMapStore
from config_server.domain.errors import ValidationError
from config_server.domain.settings import DEFAULT_ADDITIONS, DEFAULT_GATEWAY_NAMES, ServerSettings


def test_defaults_without_file_or_environment() -> None:
    """Without file or environment the defaults apply."""

    settings = load_settings(environ={})
    assert settings.gateway_names == DEFAULT_GATEWAY_NAMES
    assert settings.log_properties is False
    assert dict(settings.additions) == dict(DEFAULT_ADDITIONS)


def test_environment_overrides_file(tmp_path: Path) -> None:
    """Environment values win over the settings file."""

    path = tmp_path / "settings.yaml"
    path.write_text(
        "gateway_names: [edge]\nlog_properties: false\nadditions:\n  eureka:\n    enabled: true\n",
        encoding="utf-8",
    )
    settings = load_settings(
        path,
        environ={"CONFIG_SERVER_LOG_PROPERTIES": "true", "CONFIG_SERVER_ADDITIONS__EUREKA__ENABLED": "false"},
    )
    assert settings.gateway_names == frozenset({"edge"})
    assert settings.log_properties is True
    assert dict(settings.additions) == {**DEFAULT_ADDITIONS, "eureka.enabled": False}


def test_single_addition_keeps_default_additions() -> None:
    """Adding one property through the environment layers on top of the defaults."""

    settings = load_settings(environ={"CONFIG_SERVER_ADDITIONS__FOO": "1"})
    assert dict(settings.additions) == {**DEFAULT_ADDITIONS, "foo": 1}


def test_null_additions_in_file_clear_defaults(tmp_path: Path) -> None:
    """An explicit ``additions: null`` removes the built-in additions."""

    path = tmp_path / "settings.yaml"
    path.write_text("additions: null\n", encoding="utf-8")
    assert dict(load_settings(path, environ={}).additions) == {}


def test_empty_gateway_list_disables_route_overlay() -> None:
    """An empty gateway list means no service is a gateway."""

    settings = settings_from_mapping({"gateway_names": []})
    assert not settings.is_gateway("api-gateway")


@pytest.mark.parametrize(
    "raw",
    [
        {"unknown": 1},
        {"log_properties": "yes"},
        {"additions": ["a"]},
        {"gateway_names": 5},
    ],
)
def test_invalid_settings_are_rejected(raw) -> None:
    """Unknown keys and wrong types are validation errors."""

    with pytest.raises(ValidationError):
        settings_from_mapping(raw)


def test_settings_are_immutable() -> None:
    """Settings additions cannot be mutated."""

    settings = ServerSettings(additions={"a": 1})
    with pytest.raises(TypeError):
        settings.additions["b"] = 2  # type: ignore[index]


def test_create_store_selects_backend(tmp_path: Path) -> None:
    """A data directory selects the file store, otherwise memory."""

    assert isinstance(create_store(), InMemoryConfigMapStore)
    assert isinstance(create_store(tmp_path), FileConfigMapStore)


def test_server_build_defaults() -> None:
    """Building without arguments uses memory and default settings."""

    server = ConfigServer.build()
    assert isinstance(server.store, InMemoryConfigMapStore)
    assert server.settings.is_gateway("gateway-helper")
