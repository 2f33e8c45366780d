"""Application-layer merge policies.

Purpose
-------
Reconcile a newly submitted document with the one already stored. The save
path uses the additive policy: new keys are introduced and shared sub-trees
are merged deeper, but a value that already exists is never replaced. The
settings loader uses the overlay policy, where later layers win.

Contents
    - ``merge_add``: additive merge used by the ``add`` update policy.
    - ``merge_overlay``: last-layer-wins merge used for settings layering.

System Role
-----------
Free of I/O; operates on decoded mappings, never on YAML text.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from copy import deepcopy
from typing import Any

from ..domain.values import is_mapping


def merge_add(existing: MutableMapping[str, Any], incoming: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Merge *incoming* into *existing* without overwriting anything already present.

    For every key of *incoming*:

    * absent from *existing* – inserted as-is (nested structure included);
    * a mapping on both sides – merged recursively;
    * anything else (scalars, sequences, ``None``, mismatched kinds) – the
      existing value wins and the incoming one is dropped.

    *existing* is mutated and returned.

    Examples
    --------
    >>> merge_add({"a": {"x": 1}}, {"a": {"y": 2}})
    {'a': {'x': 1, 'y': 2}}
    >>> merge_add({"port": 80}, {"port": 8080, "host": "h"})
    {'port': 80, 'host': 'h'}
    """

    for key, value in incoming.items():
        if key not in existing:
            existing[key] = deepcopy(value)
            continue
        current = existing[key]
        if is_mapping(current) and is_mapping(value):
            merge_add(current, value)
    return existing


def merge_overlay(base: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new mapping where *incoming* wins over *base* and mappings merge deeply.

    Examples
    --------
    >>> merge_overlay({"log": {"level": "info", "json": True}}, {"log": {"level": "debug"}})
    {'log': {'level': 'debug', 'json': True}}
    """

    merged: dict[str, Any] = deepcopy(dict(base))
    for key, value in incoming.items():
        current = merged.get(key)
        if is_mapping(current) and is_mapping(value):
            merged[key] = merge_overlay(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged
