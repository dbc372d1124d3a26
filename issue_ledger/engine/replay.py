"""
Batch replay of an ordered event log.

``replay_events`` rebuilds every issue from scratch by feeding events, in
the order given, through :func:`~issue_ledger.engine.applier.apply_event`.
The result is identical to applying the same events one at a time; the
only extra check is that an issue cannot be created twice.

Ordering:
    Callers must sort events by sequence key before replaying. The replayer
    never re-sorts, and out-of-order input yields a wrong but valid result.

Example:
    >>> issues = replay_events(events)
    >>> issues[7].status
    <Status.CLOSED: 'closed'>
"""

from collections.abc import Iterable

import structlog

from issue_ledger.engine.applier import apply_event
from issue_ledger.enums import Action
from issue_ledger.exceptions import DuplicateCreateError, EventError, ReplayError
from issue_ledger.models.domain import Event, Issue

log = structlog.get_logger(__name__)


def replay_events(events: Iterable[Event]) -> dict[int, Issue]:
    """Fold an ordered event log into one snapshot per issue.

    Args:
        events: Events sorted ascending by sequence key

    Returns:
        Mapping of issue id to its final snapshot. Deleted issues stay in
        the mapping.

    Raises:
        DuplicateCreateError: If a create event targets an issue that
            already exists
        ReplayError: If applying an event fails. The original
            :class:`~issue_ledger.exceptions.EventError` is the cause.
    """
    issues: dict[int, Issue] = {}
    count = 0

    for event in events:
        existing = issues.get(event.issue_id)
        if event.action == Action.CREATE and existing is not None:
            raise DuplicateCreateError(
                f"Duplicate create for issue {event.issue_id}",
                event_id=event.id,
                action=str(event.action),
                issue_id=event.issue_id,
            )

        try:
            issues[event.issue_id] = apply_event(existing, event)
        except EventError as e:
            log.error(
                "replay_failed",
                event_id=event.id,
                action=str(event.action),
                issue_id=event.issue_id,
                error=e.message,
            )
            raise ReplayError(
                f"Applying event {event.id} failed: {e.message}",
                event_id=event.id,
                action=str(event.action),
                issue_id=event.issue_id,
            ) from e
        count += 1

    log.debug("replay_complete", events=count, issues=len(issues))
    return issues
