"""Closed classification of decoded YAML values.

Decoded YAML only ever produces three shapes: scalars, sequences and mappings.
The merge engine, the route separator and the flattener branch on that shape
through :func:`kind_of` instead of scattering ``isinstance`` checks.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum


class ValueKind(Enum):
    """Shape of a decoded YAML value."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def kind_of(value: object) -> ValueKind:
    """Classify *value*; anything that is not a mapping or a list is a scalar.

    Examples
    --------
    >>> kind_of({"a": 1}), kind_of([1]), kind_of(None)
    (<ValueKind.MAPPING: 'mapping'>, <ValueKind.SEQUENCE: 'sequence'>, <ValueKind.SCALAR: 'scalar'>)
    """

    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    return ValueKind.SCALAR


def is_mapping(value: object) -> bool:
    """Return ``True`` when *value* is a nested mapping."""

    return kind_of(value) is ValueKind.MAPPING
