"""Structured settings file loader.

Purpose
-------
Read the optional settings file handed to ``config-server serve --settings``
and return its content as a mapping. YAML is the primary format (it matches
the documents the server stores); JSON and TOML are accepted for parity with
deployment tooling that already produces them.

Contents
--------
* :class:`SettingsFileLoader` – dispatches on the file suffix.
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from pathlib import Path

from ...codec import decode_yaml
from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error

_YAML_SUFFIXES = {".yaml", ".yml"}


class SettingsFileLoader:
    """Load a settings file into a mapping."""

    def load(self, path: str | Path) -> Mapping[str, object]:
        """Return the mapping stored in *path*.

        Raises
        ------
        NotFound
            When *path* does not exist.
        InvalidFormat
            When the content cannot be parsed, is not a mapping, or the suffix
            is not supported.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> target = Path(tmp.name) / "settings.yaml"
        >>> _ = target.write_text("log_properties: true\\n", encoding="utf-8")
        >>> SettingsFileLoader().load(target)["log_properties"]
        True
        >>> tmp.cleanup()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Settings file not found: {file_path}")
        text = file_path.read_text(encoding="utf-8")
        suffix = file_path.suffix.lower()
        if suffix in _YAML_SUFFIXES:
            data: object = decode_yaml(text, source=str(file_path))
        elif suffix == ".json":
            data = self._parse(json.loads, json.JSONDecodeError, text, file_path, "json")
        elif suffix == ".toml":
            data = self._parse(tomllib.loads, tomllib.TOMLDecodeError, text, file_path, "toml")
        else:
            raise InvalidFormat(f"Unsupported settings format: {file_path.suffix or '<none>'}")
        if not isinstance(data, Mapping):
            raise InvalidFormat(f"Settings file {file_path} did not produce a mapping")
        log_debug("settings_file_loaded", path=str(file_path), format=suffix.lstrip("."))
        return data

    @staticmethod
    def _parse(parser, error_cls: type[Exception], text: str, path: Path, fmt: str) -> object:
        try:
            return parser(text)
        except error_cls as exc:
            log_error("settings_file_invalid", path=str(path), format=fmt, error=str(exc))
            raise InvalidFormat(f"Invalid {fmt.upper()} in {path}: {exc}") from exc
