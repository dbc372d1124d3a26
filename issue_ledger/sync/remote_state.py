"""Mapping of derived status onto the tracker's native open/closed flag."""

from issue_ledger.enums import Status
from issue_ledger.models.domain import RemoteState

_CLOSED_STATUSES = frozenset({Status.CLOSED, Status.DELETED})


def desired_remote_state(status: Status) -> RemoteState:
    """Native state the remote issue should have for a derived status.

    ``closed`` and ``deleted`` close the remote issue; every other status
    keeps it open.
    """
    if status in _CLOSED_STATUSES:
        return RemoteState.CLOSED
    return RemoteState.OPEN


def plan_remote_state(status: Status, current: RemoteState) -> RemoteState | None:
    """Decide whether the remote issue's native state must flip.

    Args:
        status: Derived status of the snapshot
        current: Native state currently on the tracker

    Returns:
        The state to set, or None if the tracker already matches

    Example:
        >>> plan_remote_state(Status.DELETED, RemoteState.OPEN)
        <RemoteState.CLOSED: 'closed'>
        >>> plan_remote_state(Status.BLOCKED, RemoteState.OPEN) is None
        True
    """
    desired = desired_remote_state(status)
    if desired == current:
        return None
    return desired
