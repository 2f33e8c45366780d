"""Application-layer port describing the record store collaborator.

Purpose
-------
Define the structural contract a store adapter must satisfy so the save and
poll services can run against any backing key-value store (in-memory, a
directory of YAML files, a cluster ConfigMap API) without depending on it.

Contents
--------
* :class:`ConfigMapStore` – records keyed by service name and namespace, each
  holding named YAML blobs plus a version annotation.

System Role
-----------
Adapters raise :class:`~config_server.domain.errors.StoreFailure` for failed
writes and return ``None`` from queries when a record is absent. No adapter
offers compare-and-swap; the read-modify-write in the save service is
therefore not atomic.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..domain.documents import ConfigDocument, StoredRecord


@runtime_checkable
class ConfigMapStore(Protocol):
    """Persist configuration records keyed by ``(service, namespace)``.

    Methods
    -------
    :meth:`query_record`
        Look up the record of *service* inside *namespace*.
    :meth:`query_record_by_name`
        Namespace-agnostic lookup used when polling.
    :meth:`create_record`
        Create a record holding the document's blob under its profile key and
        its version annotation.
    :meth:`update_record`
        Replace the blob stored under the document's profile key and refresh
        the version annotation.
    """

    def query_record(self, service: str, namespace: str) -> StoredRecord | None:
        """Return the record for *service* in *namespace* or ``None``."""

    def query_record_by_name(self, service: str) -> StoredRecord | None:
        """Return the first record named *service* in any namespace or ``None``."""

    def create_record(self, document: ConfigDocument) -> StoredRecord:
        """Create the record described by *document* or raise ``StoreFailure``."""

    def update_record(self, document: ConfigDocument) -> StoredRecord:
        """Write *document* into its existing record or raise ``StoreFailure``."""
