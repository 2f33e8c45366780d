"""Flatten nested configuration into dotted property keys.

Purpose
-------
Consumers receive a single-level property map (``server.port = 8080``) rather
than the nested document that was saved. This module performs that transform
and nothing else; it is total over decoded YAML and never raises, even on
recursive structures.

Contents
--------
* :func:`flatten` – public entry point.
* :func:`_flatten_into` – recursive walker keyed on :class:`ValueKind`.
* :func:`_as_property` – normalises leaf scalars into JSON-friendly values.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from ..domain.values import ValueKind, kind_of

_PLAIN_SCALARS = (str, bool, int)


def flatten(nested: Mapping[Any, Any]) -> dict[str, Any]:
    """Return a single-level mapping whose keys are dotted paths into *nested*.

    Sequence elements use their zero-based index as a path segment; empty
    mappings and empty sequences contribute no entry.

    Examples
    --------
    >>> flatten({"server": {"port": 8080}, "hosts": ["a", "b"], "empty": {}})
    {'server.port': 8080, 'hosts.0': 'a', 'hosts.1': 'b'}
    >>> flatten({"plain": 1})
    {'plain': 1}
    """

    flat: dict[str, Any] = {}
    for key, value in nested.items():
        _flatten_into(flat, str(key), value, (id(nested),))
    return flat


def _flatten_into(flat: dict[str, Any], path: str, value: Any, ancestors: tuple[int, ...]) -> None:
    """Write every leaf below *value* into *flat* using *path* as prefix.

    A container that is one of its own ancestors contributes nothing.
    """

    kind = kind_of(value)
    if kind is ValueKind.SCALAR:
        flat[path] = _as_property(value)
        return
    if id(value) in ancestors:
        return
    inner = ancestors + (id(value),)
    if kind is ValueKind.MAPPING:
        for key, child in value.items():
            _flatten_into(flat, f"{path}.{key}", child, inner)
    else:
        for index, item in enumerate(value):
            _flatten_into(flat, f"{path}.{index}", item, inner)


def _as_property(value: Any) -> Any:
    """Keep JSON-native scalars, stringify everything else (dates, NaN, objects)."""

    if value is None or isinstance(value, _PLAIN_SCALARS):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    return str(value)
