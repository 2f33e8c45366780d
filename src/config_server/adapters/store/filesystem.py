"""Directory-backed record store.

Purpose
-------
Persist records as YAML files so a single-node deployment keeps its
configuration across restarts. Layout::

    <root>/<namespace>/<name>.yaml

Each file holds two top-level keys, ``data`` (profile key → YAML text) and
``annotations``. Files are written to a temporary sibling and moved into place
with :func:`os.replace`, so readers never observe a half-written record.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from ...codec import decode_yaml, encode_yaml
from ...domain.documents import VERSION_ANNOTATION, ConfigDocument, StoredRecord
from ...domain.errors import InvalidFormat, StoreFailure
from ...observability import log_debug, log_error, make_event

_SUFFIX = ".yaml"


class FileConfigMapStore:
    """Implementation of :class:`ConfigMapStore` on top of a directory tree."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def query_record(self, service: str, namespace: str) -> StoredRecord | None:
        return self._read(self._path(service, namespace), service, namespace)

    def query_record_by_name(self, service: str) -> StoredRecord | None:
        if not self._root.is_dir():
            return None
        for namespace_dir in sorted(p for p in self._root.iterdir() if p.is_dir()):
            record = self._read(self._path(service, namespace_dir.name), service, namespace_dir.name)
            if record is not None:
                return record
        return None

    def create_record(self, document: ConfigDocument) -> StoredRecord:
        path = self._path(document.service, document.namespace)
        if path.exists():
            raise StoreFailure(f"record {document.service} already exists in {document.namespace}")
        record = StoredRecord(
            name=document.service,
            namespace=document.namespace,
            data={document.profile_key: document.text},
            annotations={VERSION_ANNOTATION: document.version},
        )
        self._write(path, record)
        log_debug("record_created", **make_event(document.service, document.namespace, {"path": str(path)}))
        return record

    def update_record(self, document: ConfigDocument) -> StoredRecord:
        path = self._path(document.service, document.namespace)
        current = self._read(path, document.service, document.namespace)
        if current is None:
            raise StoreFailure(f"record {document.service} does not exist in {document.namespace}")
        record = StoredRecord(
            name=current.name,
            namespace=current.namespace,
            data={**current.data, document.profile_key: document.text},
            annotations={**current.annotations, VERSION_ANNOTATION: document.version},
        )
        self._write(path, record)
        log_debug("record_updated", **make_event(document.service, document.namespace, {"path": str(path)}))
        return record

    def _path(self, service: str, namespace: str) -> Path:
        for part in (service, namespace):
            if not part or "/" in part or "\\" in part or part in {".", ".."}:
                raise StoreFailure(f"invalid record coordinate {part!r}")
        return self._root / namespace / f"{service}{_SUFFIX}"

    def _read(self, path: Path, service: str, namespace: str) -> StoredRecord | None:
        if not path.is_file():
            return None
        try:
            payload = decode_yaml(path.read_text(encoding="utf-8"), source=str(path))
        except (OSError, InvalidFormat) as exc:
            log_error("record_unreadable", **make_event(service, namespace, {"path": str(path), "error": str(exc)}))
            raise StoreFailure(f"cannot read record {service} in {namespace}: {exc}") from exc
        return StoredRecord(
            name=service,
            namespace=namespace,
            data={str(k): str(v) for k, v in (payload.get("data") or {}).items()},
            annotations={str(k): str(v) for k, v in (payload.get("annotations") or {}).items()},
        )

    def _write(self, path: Path, record: StoredRecord) -> None:
        text = encode_yaml({"data": dict(record.data), "annotations": dict(record.annotations)}, source=str(path))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handle, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                stream.write(text)
            os.replace(temp_name, path)
        except OSError as exc:
            log_error("record_write_failed", **make_event(record.name, record.namespace, {"path": str(path), "error": str(exc)}))
            raise StoreFailure(f"cannot write record {record.name} in {record.namespace}: {exc}") from exc
