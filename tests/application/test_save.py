"""Save service behaviour against the in-memory store.

Covers the update-policy table end to end, the additive merge over stored
blobs, and the gateway route split into the shared route table.
"""

from __future__ import annotations

import pytest
import yaml

from config_server.adapters.store.memory import InMemoryConfigMapStore
from config_server.application.save import SaveOutcome, SaveService, build_document
from config_server.domain.documents import ROUTE_SERVICE_NAME, VERSION_ANNOTATION, ConfigDocument, StoredRecord
from config_server.domain.errors import InvalidFormat, PolicyConflict, StoreFailure, TransformFailure, ValidationError


def _stored(store: InMemoryConfigMapStore, service: str = "billing", namespace: str = "dev", key: str = "application.yml"):
    record = store.query_record(service, namespace)
    assert record is not None
    return yaml.safe_load(record.data[key])


def test_first_save_under_add_creates_then_writes_verbatim(server, store, make_document) -> None:
    """A first ``add`` save creates the record with the submitted text."""

    outcome = server.saver.save(make_document("server:\n  port: 8080\n", policy="add"))

    assert outcome is SaveOutcome.CREATED
    assert _stored(store) == {"server": {"port": 8080}}
    assert store.query_record("billing", "dev").annotations[VERSION_ANNOTATION] == "1.0.0"


def test_add_merges_into_existing_blob(server, store, make_document) -> None:
    """``add`` inserts new keys and keeps every existing value."""

    server.saver.save(make_document("server:\n  port: 8080\nfeature: [a]\n", policy="not"))
    outcome = server.saver.save(
        make_document("server:\n  port: 9090\n  host: h\nfeature: [b]\nnew: 1\n", policy="add", version="1.1.0")
    )

    assert outcome is SaveOutcome.UPDATED
    assert _stored(store) == {"server": {"port": 8080, "host": "h"}, "feature": ["a"], "new": 1}
    assert store.query_record("billing", "dev").version == "1.1.0"


def test_cover_overwrites_profile_blob(server, store, make_document) -> None:
    """``cover`` replaces the stored profile blob."""

    server.saver.save(make_document("a: 1\nb: 2\n", policy="not"))
    server.saver.save(make_document("a: 3\n", policy="cover"))
    assert _stored(store) == {"a": 3}


def test_not_rejects_existing_record_without_mutation(server, store, make_document) -> None:
    """``not`` on an existing record conflicts and leaves it untouched."""

    server.saver.save(make_document("a: 1\n", policy="not"))
    before = store.query_record("billing", "dev")

    with pytest.raises(PolicyConflict):
        server.saver.save(make_document("a: 2\n", policy="not", version="2.0.0"))

    assert store.query_record("billing", "dev") == before


def test_profiles_are_stored_under_separate_keys(server, store, make_document) -> None:
    """Each profile is stored under its own data key."""

    server.saver.save(make_document("a: 1\n", policy="add"))
    server.saver.save(make_document("a: 2\n", policy="add", profile="prod"))

    assert _stored(store) == {"a": 1}
    assert _stored(store, key="application-prod.yml") == {"a": 2}


def test_merge_into_malformed_blob_is_transform_failure(settings, make_document) -> None:
    """Merging into a malformed stored blob is a transform failure."""

    store = InMemoryConfigMapStore(
        [StoredRecord(name="billing", namespace="dev", data={"application.yml": "a: [unclosed"})]
    )
    with pytest.raises(TransformFailure):
        SaveService(store, settings).save(make_document("b: 1\n", policy="add"))
    assert store.query_record("billing", "dev").data["application.yml"] == "a: [unclosed"


def test_gateway_routes_go_to_shared_table(server, store, make_document) -> None:
    """Gateway routes are written to the shared route record."""

    body = "zuul:\n  routes:\n    r1: /foo\n  other: keep\nserver:\n  port: 8080\n"
    server.saver.save(make_document(body, service="api-gateway", policy="add"))

    assert _stored(store, service="api-gateway") == {"zuul": {"other": "keep"}, "server": {"port": 8080}}
    assert _stored(store, service=ROUTE_SERVICE_NAME) == {"zuul": {"routes": {"r1": "/foo"}}}


def test_gateway_save_survives_route_table_conflict(server, store, make_document) -> None:
    """A conflicting route table is kept and the gateway still saves."""

    server.saver.save(make_document("zuul:\n  routes:\n    r1: /foo\n", service="api-gateway", policy="not"))
    outcome = server.saver.save(
        make_document("zuul:\n  routes:\n    r2: /bar\n", service="gateway-helper", policy="not")
    )

    assert outcome is SaveOutcome.CREATED
    assert _stored(store, service=ROUTE_SERVICE_NAME) == {"zuul": {"routes": {"r1": "/foo"}}}
    assert _stored(store, service="gateway-helper") == {}


def test_non_gateway_keeps_zuul_routes(server, store, make_document) -> None:
    """Services outside the gateway set keep their routes."""

    server.saver.save(make_document("zuul:\n  routes:\n    r1: /foo\n", service="billing"))
    assert _stored(store) == {"zuul": {"routes": {"r1": "/foo"}}}
    assert store.query_record(ROUTE_SERVICE_NAME, "dev") is None


class _FailingStore(InMemoryConfigMapStore):
    def update_record(self, document: ConfigDocument) -> StoredRecord:
        raise StoreFailure("update refused")


def test_store_failure_propagates(settings, make_document) -> None:
    """Store failures reach the caller unchanged."""

    with pytest.raises(StoreFailure):
        SaveService(_FailingStore(), settings).save(make_document("a: 1\n", policy="cover"))


@pytest.mark.parametrize(
    ("fields", "error"),
    [
        ({"service": " "}, ValidationError),
        ({"namespace": ""}, ValidationError),
        ({"update_policy": "replace"}, ValidationError),
        ({"yaml_text": "- a\n- b\n"}, InvalidFormat),
        ({"yaml_text": "a: [unclosed"}, InvalidFormat),
    ],
)
def test_build_document_rejects_bad_input(fields, error) -> None:
    """Blank fields and unknown policies are validation errors."""

    request = {"service": "billing", "version": "1", "namespace": "dev", "update_policy": "add", "yaml_text": "a: 1"}
    request.update(fields)
    with pytest.raises(error):
        build_document(**request)


def test_add_into_aliased_blob_keeps_aliases_independent(server, store, make_document) -> None:
    """Keys merged under an anchored mapping never leak into its aliases."""

    server.saver.save(make_document("a: &x {k: 1}\nb: *x\n", policy="not"))
    server.saver.save(make_document("a: {n: 2}\n", policy="add"))

    assert _stored(store) == {"a": {"k": 1, "n": 2}, "b": {"k": 1}}


def test_recursive_alias_is_rejected_before_any_write(store, make_document) -> None:
    """A self-referencing alias is an invalid submission and nothing is stored."""

    with pytest.raises(InvalidFormat):
        make_document("a: &a [*a]\n", policy="cover")
    assert store.query_record("billing", "dev") is None
