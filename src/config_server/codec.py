"""YAML codec used for submitted documents, stored blobs and settings files.

Purpose
-------
Wrap ``yaml.safe_load`` / ``yaml.safe_dump`` so decoding and encoding failures
surface as domain errors and every caller sees the same empty-document rules.

Anchors and aliases are expanded into independent copies on decode. Callers
mutate decoded trees (additive merge, route separation), so no two paths may
share a node, and a self-referencing alias is rejected as invalid.

Contents
--------
* :func:`decode_yaml` – YAML text → mapping (empty text → ``{}``).
* :func:`encode_yaml` – mapping → YAML text.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import yaml

from .domain.errors import InvalidFormat, TransformFailure
from .domain.values import ValueKind, kind_of
from .observability import log_debug, log_error


def decode_yaml(text: str | bytes, *, source: str = "document") -> dict[str, Any]:
    """Return the mapping encoded in *text*.

    Raises
    ------
    InvalidFormat
        When *text* is not valid YAML, its top level is not a mapping, or an
        alias refers to one of its own ancestors.

    Examples
    --------
    >>> decode_yaml("server:\\n  port: 8080\\n")
    {'server': {'port': 8080}}
    >>> decode_yaml("")
    {}
    >>> doc = decode_yaml("a: &x {k: 1}\\nb: *x\\n")
    >>> doc["a"] is doc["b"]
    False
    """

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        log_error("yaml_invalid", source=source, error=str(exc))
        raise InvalidFormat(f"Invalid YAML in {source}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        log_error("yaml_invalid", source=source, error="top level is not a mapping")
        raise InvalidFormat(f"YAML in {source} did not produce a mapping")
    detached = _detach(data, (), source)
    log_debug("yaml_decoded", source=source, keys=len(detached))
    return detached


def _detach(value: Any, ancestors: tuple[int, ...], source: str) -> Any:
    """Copy every container below *value* so aliased nodes stop sharing identity."""

    kind = kind_of(value)
    if kind is ValueKind.SCALAR:
        return value
    if id(value) in ancestors:
        log_error("yaml_invalid", source=source, error="recursive alias")
        raise InvalidFormat(f"YAML in {source} contains a recursive alias")
    inner = ancestors + (id(value),)
    if kind is ValueKind.MAPPING:
        return {key: _detach(child, inner, source) for key, child in value.items()}
    return [_detach(item, inner, source) for item in value]


def encode_yaml(data: Mapping[str, Any], *, source: str = "document") -> str:
    """Serialise *data* as block-style YAML with sorted keys.

    Raises
    ------
    TransformFailure
        When *data* holds values PyYAML cannot represent.

    Examples
    --------
    >>> print(encode_yaml({"zuul": {"routes": {"r1": "/foo"}}}), end="")
    zuul:
      routes:
        r1: /foo
    """

    try:
        return yaml.safe_dump(dict(data), default_flow_style=False, allow_unicode=True, sort_keys=True)
    except yaml.YAMLError as exc:
        log_error("yaml_encode_failed", source=source, error=str(exc))
        raise TransformFailure(f"Cannot serialise {source} as YAML: {exc}") from exc
