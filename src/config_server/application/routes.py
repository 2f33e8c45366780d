"""Split the shared route table out of a gateway document.

Gateway-class services do not own their routes: at save time the
``zuul.routes`` sub-tree is lifted into a separate document persisted under
:data:`~config_server.domain.documents.ROUTE_SERVICE_NAME`, and at poll time it
is overlaid back on top of the gateway's own properties.
"""

from __future__ import annotations

from typing import Any, Final

from ..codec import encode_yaml
from ..domain.values import is_mapping

ROUTE_ROOT_KEY: Final[str] = "zuul"
ROUTE_TABLE_KEY: Final[str] = "routes"
ROUTE_TABLE_PROPERTY: Final[str] = f"{ROUTE_ROOT_KEY}.{ROUTE_TABLE_KEY}"
ROUTE_PROPERTY_PREFIX: Final[str] = f"{ROUTE_TABLE_PROPERTY}."


def separate_route(gateway: dict[str, Any]) -> tuple[str, str, dict[str, Any]]:
    """Remove ``zuul.routes`` from *gateway* in place and return both halves serialised.

    Returns ``(remainder_yaml, routes_yaml, routes_mapping)``. When the gateway
    carries no routes the remainder is the unchanged document and the route
    mapping is ``{"zuul": {}}``. A ``zuul`` block left empty after extraction
    is dropped from the remainder.

    Raises
    ------
    TransformFailure
        When either half cannot be serialised; nothing has been written yet.

    Examples
    --------
    >>> doc = {"zuul": {"routes": {"r1": "/foo"}, "other": "keep"}}
    >>> remainder, routes, mapping = separate_route(doc)
    >>> doc, mapping
    ({'zuul': {'other': 'keep'}}, {'zuul': {'routes': {'r1': '/foo'}}})
    """

    extracted: dict[str, Any] = {}
    root = gateway.get(ROUTE_ROOT_KEY)
    if is_mapping(root) and ROUTE_TABLE_KEY in root:
        extracted[ROUTE_TABLE_KEY] = root.pop(ROUTE_TABLE_KEY)
        if not root:
            del gateway[ROUTE_ROOT_KEY]

    routes = {ROUTE_ROOT_KEY: extracted}
    remainder_text = encode_yaml(gateway, source="gateway remainder")
    routes_text = encode_yaml(routes, source="route table")
    return remainder_text, routes_text, routes


def overlay_routes(properties: dict[str, Any], route_properties: dict[str, Any]) -> dict[str, Any]:
    """Drop locally stored route keys from *properties* and lay the shared table on top.

    Examples
    --------
    >>> overlay_routes({"zuul.routes.a": 1, "port": 80}, {"zuul.routes.b": 2})
    {'port': 80, 'zuul.routes.b': 2}
    """

    merged = {key: value for key, value in properties.items() if not _is_route_key(key)}
    merged.update(route_properties)
    return merged


def _is_route_key(key: str) -> bool:
    return key == ROUTE_TABLE_PROPERTY or key.startswith(ROUTE_PROPERTY_PREFIX)
