"""Poll path: assemble the flattened property set a consumer receives.

Purpose
-------
Resolve ``(service, version)`` into an :class:`Environment`: decode the stored
blob for the requested profile, flatten it, replace gateway routes with the
shared route table, and append the static additions.
"""

from __future__ import annotations

import json
from typing import Any

from ..codec import decode_yaml
from ..domain.documents import ROUTE_SERVICE_NAME, Environment, PropertySource, profile_key
from ..domain.errors import NotFound
from ..domain.settings import ServerSettings
from ..observability import log_info
from .flatten import flatten
from .ports import ConfigMapStore
from .routes import overlay_routes


class PollAssembler:
    """Build poll responses from the store and the injected settings."""

    def __init__(self, store: ConfigMapStore, settings: ServerSettings) -> None:
        self._store = store
        self._settings = settings

    def resolve(self, service: str, version: str) -> Environment:
        """Return the resolved environment of *service* for profile *version*.

        Raises
        ------
        NotFound
            When the service's record, or the shared route table of a
            gateway-class service, does not exist.
        InvalidFormat
            When a stored blob is not valid YAML.
        """

        properties, resolved_version = self._load_properties(service, version)
        if self._settings.is_gateway(service):
            route_properties, _ = self._load_properties(ROUTE_SERVICE_NAME, version)
            properties = overlay_routes(properties, route_properties)
        properties.update(self._settings.additions)

        environment = Environment(
            name=service,
            version=resolved_version,
            profiles=[version],
            property_sources=[PropertySource(name=f"{service}-{version}-{resolved_version}", source=properties)],
        )
        self._log_pulled(service, version, properties)
        return environment

    def _load_properties(self, service: str, version: str) -> tuple[dict[str, Any], str]:
        """Return the flattened properties and version tag stored for *service*."""

        record = self._store.query_record_by_name(service)
        if record is None:
            raise NotFound(f"no configuration record for {service}")
        body = decode_yaml(record.blob(version), source=f"{service} {profile_key(version)}")
        return flatten(body), record.version

    def _log_pulled(self, service: str, version: str, properties: dict[str, Any]) -> None:
        if self._settings.log_properties:
            rendered = json.dumps(properties, indent=2, sort_keys=True, default=str)
            log_info("config_pulled", service=service, profile=version, properties=rendered)
        else:
            log_info("config_pulled", service=service, profile=version, keys=len(properties))
