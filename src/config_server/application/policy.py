"""Update-policy resolution for saves.

Maps ``(record exists, requested policy)`` onto the ordered store actions the
save service performs. A first save under ``add`` or ``cover`` creates the
record and then writes it again; with nothing stored before, the merge step
degenerates to writing the incoming document verbatim.
"""

from __future__ import annotations

from enum import Enum

from ..domain.documents import UpdatePolicy


class SaveAction(Enum):
    """Single step applied to the store while saving a document."""

    CREATE = "create"
    REJECT = "reject"
    MERGE = "merge"
    OVERWRITE = "overwrite"


_UPDATE_ACTIONS = {
    UpdatePolicy.NOT: None,
    UpdatePolicy.ADD: SaveAction.MERGE,
    UpdatePolicy.COVER: SaveAction.OVERWRITE,
}


def resolve_actions(record_exists: bool, policy: UpdatePolicy) -> tuple[SaveAction, ...]:
    """Return the ordered actions for a save.

    Examples
    --------
    >>> resolve_actions(False, UpdatePolicy.ADD)
    (<SaveAction.CREATE: 'create'>, <SaveAction.MERGE: 'merge'>)
    >>> resolve_actions(True, UpdatePolicy.NOT)
    (<SaveAction.REJECT: 'reject'>,)
    """

    update = _UPDATE_ACTIONS[UpdatePolicy(policy)]
    if not record_exists:
        return (SaveAction.CREATE,) if update is None else (SaveAction.CREATE, update)
    if update is None:
        return (SaveAction.REJECT,)
    return (update,)
