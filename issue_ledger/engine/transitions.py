"""
Status transition table.

The table lists which status may move to which other status. It is built
once at import and cannot be modified afterwards.

Allowed edges::

    open        -> in_progress, closed, deleted
    in_progress -> open, closed, deleted
    closed      -> open, deleted
    deleted     -> (none)

``blocked`` and ``in_review`` have no outgoing edges here. They are only
reached through ``status_change`` events whose ``from_status`` matches, and
the applier does not consult this table for those events.
"""

from collections.abc import Mapping
from types import MappingProxyType

from issue_ledger.enums import Status

TRANSITIONS: Mapping[Status, frozenset[Status]] = MappingProxyType(
    {
        Status.OPEN: frozenset({Status.IN_PROGRESS, Status.CLOSED, Status.DELETED}),
        Status.IN_PROGRESS: frozenset({Status.OPEN, Status.CLOSED, Status.DELETED}),
        Status.CLOSED: frozenset({Status.OPEN, Status.DELETED}),
        Status.DELETED: frozenset(),
    }
)

TERMINAL_STATUSES: frozenset[Status] = frozenset({Status.DELETED})


def _coerce(status: Status | str | None) -> Status | None:
    if status is None or isinstance(status, Status):
        return status
    try:
        return Status(status)
    except ValueError:
        return None


def allowed_targets(status: Status | str) -> frozenset[Status]:
    """Return the statuses reachable from ``status`` in one step.

    Unknown statuses, including arbitrary strings, have no edges.
    """
    current = _coerce(status)
    if current is None:
        return frozenset()
    return TRANSITIONS.get(current, frozenset())


def valid_transition(from_status: Status | str, to_status: Status | str) -> bool:
    """Check whether the table has an edge ``from_status -> to_status``.

    Args:
        from_status: Origin status
        to_status: Requested target status

    Returns:
        False if the origin is not a table key or the target is not in its
        edge set, True otherwise.

    Example:
        >>> valid_transition("open", "in_progress")
        True
        >>> valid_transition("deleted", "open")
        False
        >>> valid_transition("bogus", "open")
        False
    """
    target = _coerce(to_status)
    if target is None:
        return False
    return target in allowed_targets(from_status)


def is_terminal(status: Status | str) -> bool:
    """A terminal status blocks every further change to the snapshot."""
    return _coerce(status) in TERMINAL_STATUSES


def from_status_matches(current: Status, from_status: Status | None) -> bool:
    """Check an event's recorded origin status against the current one.

    Events written before origin statuses were recorded carry none; those
    are accepted whatever the current status is.
    """
    return from_status is None or from_status == current
