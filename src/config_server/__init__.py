"""Public package surface of ``config_server``.

Exposes the synthesis transforms, the save and poll services, the settings
loader and the error taxonomy so embedding applications can run the engine
without the HTTP transport.
"""

from __future__ import annotations

from .application.flatten import flatten
from .application.merge import merge_add
from .application.poll import PollAssembler
from .application.routes import separate_route
from .application.save import SaveOutcome, SaveService, build_document
from .core import ConfigServer, create_store, load_settings
from .domain.documents import ConfigDocument, Environment, StoredRecord, UpdatePolicy
from .domain.errors import (
    ConfigServerError,
    InvalidFormat,
    NotFound,
    PolicyConflict,
    StoreFailure,
    TransformFailure,
    ValidationError,
)
from .domain.settings import ServerSettings
from .observability import bind_trace_id, get_logger

__all__ = [
    "ConfigDocument",
    "ConfigServer",
    "ConfigServerError",
    "Environment",
    "InvalidFormat",
    "NotFound",
    "PolicyConflict",
    "PollAssembler",
    "SaveOutcome",
    "SaveService",
    "ServerSettings",
    "StoreFailure",
    "StoredRecord",
    "TransformFailure",
    "UpdatePolicy",
    "ValidationError",
    "bind_trace_id",
    "build_document",
    "create_store",
    "flatten",
    "get_logger",
    "load_settings",
    "merge_add",
    "separate_route",
]
