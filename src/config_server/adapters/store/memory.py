"""In-memory record store.

Keeps records in a dictionary keyed by ``(namespace, name)``. Suitable for
tests, demos and single-process deployments where losing configuration on
restart is acceptable. The lock protects the dictionary only; callers still
get no compare-and-swap across query and update.
"""

from __future__ import annotations

import threading

from ...domain.documents import VERSION_ANNOTATION, ConfigDocument, StoredRecord
from ...domain.errors import StoreFailure
from ...observability import log_debug, make_event


class InMemoryConfigMapStore:
    """Dictionary-backed implementation of :class:`ConfigMapStore`.

    Examples
    --------
    >>> from config_server.domain.documents import UpdatePolicy
    >>> store = InMemoryConfigMapStore()
    >>> doc = ConfigDocument("svc", "1.0", "dev", UpdatePolicy.NOT, {"a": 1}, "a: 1\\n")
    >>> store.create_record(doc).data["application.yml"]
    'a: 1\\n'
    >>> store.query_record_by_name("svc").version
    '1.0'
    """

    def __init__(self, records: list[StoredRecord] | None = None) -> None:
        self._lock = threading.Lock()
        self._records: dict[tuple[str, str], StoredRecord] = {}
        for record in records or []:
            self._records[(record.namespace, record.name)] = record

    def query_record(self, service: str, namespace: str) -> StoredRecord | None:
        with self._lock:
            return self._records.get((namespace, service))

    def query_record_by_name(self, service: str) -> StoredRecord | None:
        with self._lock:
            for (_, name), record in sorted(self._records.items()):
                if name == service:
                    return record
        return None

    def create_record(self, document: ConfigDocument) -> StoredRecord:
        key = (document.namespace, document.service)
        with self._lock:
            if key in self._records:
                raise StoreFailure(f"record {document.service} already exists in {document.namespace}")
            record = StoredRecord(
                name=document.service,
                namespace=document.namespace,
                data={document.profile_key: document.text},
                annotations={VERSION_ANNOTATION: document.version},
            )
            self._records[key] = record
        log_debug("record_created", **make_event(document.service, document.namespace, {"profile": document.profile}))
        return record

    def update_record(self, document: ConfigDocument) -> StoredRecord:
        key = (document.namespace, document.service)
        with self._lock:
            current = self._records.get(key)
            if current is None:
                raise StoreFailure(f"record {document.service} does not exist in {document.namespace}")
            record = StoredRecord(
                name=current.name,
                namespace=current.namespace,
                data={**current.data, document.profile_key: document.text},
                annotations={**current.annotations, VERSION_ANNOTATION: document.version},
            )
            self._records[key] = record
        log_debug("record_updated", **make_event(document.service, document.namespace, {"profile": document.profile}))
        return record
