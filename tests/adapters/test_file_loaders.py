from __future__ import annotations

from pathlib import Path

import pytest

from config_server.adapters.file_loaders.structured import SettingsFileLoader
from config_server.domain.errors import InvalidFormat, NotFound


def test_yaml_settings(tmp_path: Path) -> None:
    """YAML settings files load into plain mappings."""

    path = tmp_path / "settings.yml"
    path.write_text("gateway_names:\n  - edge\nlog_properties: true\n", encoding="utf-8")
    assert SettingsFileLoader().load(path) == {"gateway_names": ["edge"], "log_properties": True}


def test_json_settings(tmp_path: Path) -> None:
    """JSON settings files load into plain mappings."""

    path = tmp_path / "settings.json"
    path.write_text('{"additions": {"a.b": 1}}', encoding="utf-8")
    assert SettingsFileLoader().load(path)["additions"] == {"a.b": 1}


def test_toml_settings(tmp_path: Path) -> None:
    """TOML settings files load into plain mappings."""

    path = tmp_path / "settings.toml"
    path.write_text('gateway_names = ["edge"]\n[additions]\nflag = true\n', encoding="utf-8")
    data = SettingsFileLoader().load(path)
    assert data["gateway_names"] == ["edge"]
    assert data["additions"] == {"flag": True}


def test_empty_yaml_is_empty_mapping(tmp_path: Path) -> None:
    """An empty YAML settings file contributes nothing."""

    path = tmp_path / "settings.yaml"
    path.write_text("# nothing\n", encoding="utf-8")
    assert SettingsFileLoader().load(path) == {}


def test_missing_file(tmp_path: Path) -> None:
    """A missing settings file is reported as not found."""

    with pytest.raises(NotFound):
        SettingsFileLoader().load(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    ("name", "content"),
    [
        ("settings.json", "{invalid}"),
        ("settings.toml", "= broken"),
        ("settings.yaml", "- a\n- b\n"),
        ("settings.json", "[1, 2]"),
        ("settings.ini", "[section]"),
    ],
)
def test_invalid_settings(tmp_path: Path, name: str, content: str) -> None:
    """Malformed or unsupported settings files are invalid format."""

    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    with pytest.raises(InvalidFormat):
        SettingsFileLoader().load(path)
