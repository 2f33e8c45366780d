"""Save path: route separation, policy resolution, merge and persist.

Purpose
-------
Turn a submitted YAML document into store writes. Gateway-class documents are
split first so their routes land in the shared route table; each resulting
document then goes through :func:`resolve_actions` and the store.

Contents
--------
* :class:`SaveOutcome` – what happened to the service's own document.
* :func:`build_document` – validate request fields and decode the YAML body.
* :class:`SaveService` – orchestrates a save against a :class:`ConfigMapStore`.

System Role
-----------
The full target text is computed before any write, so a transform failure
leaves the stored record untouched. The query → decide → write sequence is
not atomic against the store; concurrent saves to the same record race and
the last write wins.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum

from ..codec import decode_yaml, encode_yaml
from ..domain.documents import DEFAULT_PROFILE, ROUTE_SERVICE_NAME, ConfigDocument, StoredRecord, UpdatePolicy
from ..domain.errors import InvalidFormat, PolicyConflict, TransformFailure, ValidationError
from ..domain.settings import ServerSettings
from ..observability import log_debug, log_info, log_warning, make_event
from .merge import merge_add
from .policy import SaveAction, resolve_actions
from .ports import ConfigMapStore
from .routes import separate_route


class SaveOutcome(str, Enum):
    """Result of saving a document that was not rejected."""

    CREATED = "created"
    UPDATED = "updated"


def build_document(
    *,
    service: str,
    version: str,
    namespace: str,
    update_policy: UpdatePolicy | str,
    yaml_text: str,
    profile: str | None = None,
) -> ConfigDocument:
    """Validate request fields and decode *yaml_text* into a :class:`ConfigDocument`.

    Raises
    ------
    ValidationError
        When a required field is blank or the policy is unknown.
    InvalidFormat
        When *yaml_text* is not a YAML mapping.

    Examples
    --------
    >>> doc = build_document(service="svc", version="1.0", namespace="dev", update_policy="add", yaml_text="a: 1")
    >>> doc.body, doc.profile_key
    ({'a': 1}, 'application.yml')
    """

    for name, value in (("service", service), ("version", version), ("namespace", namespace)):
        if not value or not value.strip():
            raise ValidationError(f"{name} is required")
    try:
        policy = UpdatePolicy(update_policy)
    except ValueError as exc:
        raise ValidationError(f"unknown update policy {update_policy!r}") from exc
    body = decode_yaml(yaml_text, source=f"{service} submission")
    return ConfigDocument(
        service=service,
        version=version,
        namespace=namespace,
        update_policy=policy,
        body=body,
        text=yaml_text,
        profile=profile or DEFAULT_PROFILE,
    )


class SaveService:
    """Persist submitted documents according to their update policy."""

    def __init__(self, store: ConfigMapStore, settings: ServerSettings) -> None:
        self._store = store
        self._settings = settings

    def save(self, document: ConfigDocument) -> SaveOutcome:
        """Save *document*, splitting routes out first for gateway-class services.

        Raises
        ------
        PolicyConflict
            When the service's record exists and the policy is ``not``.
        TransformFailure / StoreFailure
            When separation, merging or a store write fails.
        """

        if self._settings.is_gateway(document.service):
            document = self._save_route_table(document)
        outcome = self._store_document(document)
        log_info("config_saved", **make_event(document.service, document.namespace, {"outcome": outcome.value}))
        return outcome

    def _save_route_table(self, gateway: ConfigDocument) -> ConfigDocument:
        """Persist the gateway's routes under the shared name and return the route-free remainder."""

        remainder_text, routes_text, routes = separate_route(gateway.body)
        route_document = ConfigDocument(
            service=ROUTE_SERVICE_NAME,
            version=gateway.version,
            namespace=gateway.namespace,
            update_policy=gateway.update_policy,
            body=routes,
            text=routes_text,
            profile=DEFAULT_PROFILE,
        )
        try:
            self._store_document(route_document)
        except PolicyConflict:
            log_warning("route_table_kept", **make_event(ROUTE_SERVICE_NAME, gateway.namespace, {"gateway": gateway.service}))
        return replace(gateway, text=remainder_text)

    def _store_document(self, document: ConfigDocument) -> SaveOutcome:
        existing = self._store.query_record(document.service, document.namespace)
        outcome = SaveOutcome.UPDATED
        for action in resolve_actions(existing is not None, document.update_policy):
            if action is SaveAction.REJECT:
                log_info("config_save_rejected", **make_event(document.service, document.namespace))
                raise PolicyConflict(f"record {document.service} already exists in {document.namespace}")
            if action is SaveAction.CREATE:
                self._store.create_record(document)
                outcome = SaveOutcome.CREATED
            elif action is SaveAction.MERGE:
                self._store.update_record(self._merged(document, existing))
            else:
                self._store.update_record(document)
        return outcome

    def _merged(self, document: ConfigDocument, existing: StoredRecord | None) -> ConfigDocument:
        """Return *document* with its text replaced by the additive merge over the stored blob."""

        previous = existing.blob(document.profile) if existing is not None else ""
        if not previous:
            return document
        try:
            stored = decode_yaml(previous, source=f"{document.service} stored {document.profile_key}")
        except InvalidFormat as exc:
            raise TransformFailure(f"cannot merge into malformed {document.profile_key} of {document.service}") from exc
        merged = merge_add(stored, document.body)
        log_debug("config_merged", **make_event(document.service, document.namespace, {"keys": len(merged)}))
        return replace(document, text=encode_yaml(merged, source=f"{document.service} merge result"))
