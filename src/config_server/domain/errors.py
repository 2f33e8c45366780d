"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by the save path, the poll path, the store
adapters and the transport. The transport maps each family to exactly one
response status, so the hierarchy is the single place where "what went wrong"
is decided.

Contents
--------
* :class:`ConfigServerError` – umbrella base class.
* :class:`ValidationError` / :class:`InvalidFormat` – input validation
  failures (bad fields, malformed YAML).
* :class:`PolicyConflict` – the record exists and the policy forbids updates.
* :class:`StoreFailure` – the store collaborator rejected a create/update.
* :class:`TransformFailure` – merge or route separation could not complete.
* :class:`NotFound` – a poll target or the shared route table is missing.

System Role
-----------
Every failure is terminal for the request that raised it; nothing in the
service retries or compensates.
"""

from __future__ import annotations


class ConfigServerError(Exception):
    """Base type for all exceptions emitted by ``config_server``."""


class ValidationError(ConfigServerError):
    """A request field is missing or violates its constraints."""


class InvalidFormat(ConfigServerError):
    """YAML text could not be decoded into a mapping.

    Raised for submitted documents as well as for stored blobs that fail to
    decode at poll time.
    """


class PolicyConflict(ConfigServerError):
    """The record already exists and the update policy is ``not``.

    Not a failure of the service: the save is simply not attempted and the
    store is left untouched.
    """


class StoreFailure(ConfigServerError):
    """The store collaborator failed to create or update a record."""


class TransformFailure(ConfigServerError):
    """Merging or route separation failed before anything was written."""


class NotFound(ConfigServerError):
    """The requested record (or the shared route table) does not exist."""
