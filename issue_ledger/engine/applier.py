"""
Single-event applier.

``apply_event`` folds one event onto an existing snapshot (or onto nothing,
for ``create``). It is the only place issue state changes, and the batch
replayer is a loop around it.

Two outcomes exist besides success:

- fatal structural errors (bad payload, unknown action, event for an issue
  that was never created) raise a subclass of
  :class:`~issue_ledger.exceptions.EventError`;
- policy rejections (terminal issue, stale ``from_status``, reopen of an
  issue that is not closed, ...) are silent no-ops that return the snapshot
  unchanged. Re-delivered or out-of-date events are normal, not failures.

A comment carried in the payload is recorded on the snapshot whatever the
action did, including when the action itself was a no-op.

Snapshots are updated in place and returned.
"""

import structlog
from pydantic import ValidationError

from issue_ledger.engine.transitions import from_status_matches, is_terminal
from issue_ledger.enums import Action, Status
from issue_ledger.exceptions import MissingIssueError, PayloadDecodeError, UnknownActionError
from issue_ledger.models.domain import Comment, Event, Issue
from issue_ledger.models.payload import EventPayload
from issue_ledger.utils.timestamps import format_rfc3339

log = structlog.get_logger(__name__)


def apply_event(issue: Issue | None, event: Event) -> Issue:
    """Apply one event to a snapshot.

    A deleted issue is frozen: every later event, ``assign`` and payload
    comments included, leaves it unchanged.

    Args:
        issue: Current snapshot, or None if the issue has not been created
        event: Event to apply

    Returns:
        The updated snapshot. For every action except ``create`` this is
        the same object that was passed in.

    Raises:
        PayloadDecodeError: If the payload is not valid JSON or has invalid
            field values
        UnknownActionError: If the action is not a known :class:`Action`
        MissingIssueError: If a non-create event targets a missing issue

    Example:
        >>> issue = apply_event(None, create_event)
        >>> issue = apply_event(issue, assign_event)
        >>> issue.owner
        'alice'
    """
    payload = _decode_payload(event)

    try:
        action = Action(event.action)
    except ValueError as e:
        raise UnknownActionError(
            f"Unknown action: {event.action}",
            event_id=event.id,
            action=str(event.action),
            issue_id=event.issue_id,
        ) from e

    if action == Action.CREATE:
        result = _apply_create(event, payload)
        return _record_comment(result, event, payload)

    current = _require(issue, event)
    if is_terminal(current.status):
        # Deleted issues are frozen, comments included
        return _ignored(current, event, "terminal_status")

    if action == Action.STATUS_CHANGE:
        result = _apply_status_change(current, event, payload)
    elif action == Action.ASSIGN:
        result = _apply_assign(current, event, payload)
    elif action == Action.CLOSE:
        result = _apply_close(current, event)
    elif action == Action.UPDATE:
        result = _apply_update(current, event, payload)
    elif action == Action.DELETE:
        result = _apply_delete(current, event)
    elif action == Action.REOPEN:
        result = _apply_reopen(current, event)
    elif action == Action.COMMENT:
        result = _apply_comment(current, event)
    else:
        raise UnknownActionError(
            f"Unhandled action: {action}",
            event_id=event.id,
            action=str(action),
            issue_id=event.issue_id,
        )

    return _record_comment(result, event, payload)


def _record_comment(issue: Issue, event: Event, payload: EventPayload) -> Issue:
    if payload.comment:
        issue.comments.append(
            Comment(
                text=payload.comment,
                author=event.agent,
                timestamp=format_rfc3339(event.timestamp),
            )
        )
    return issue


def _decode_payload(event: Event) -> EventPayload:
    try:
        return EventPayload.decode(event.payload)
    except ValidationError as e:
        raise PayloadDecodeError(
            f"Invalid event payload: {e.error_count()} error(s): {e.errors()[0]['msg']}",
            event_id=event.id,
            action=str(event.action),
            issue_id=event.issue_id,
        ) from e


def _require(issue: Issue | None, event: Event) -> Issue:
    if issue is None:
        raise MissingIssueError(
            f"{event.action} on non-existent issue {event.issue_id}",
            event_id=event.id,
            action=str(event.action),
            issue_id=event.issue_id,
        )
    return issue


def _ignored(issue: Issue, event: Event, reason: str) -> Issue:
    log.debug(
        "event_ignored",
        reason=reason,
        event_id=event.id,
        action=str(event.action),
        issue_id=issue.id,
        status=str(issue.status),
    )
    return issue


def _apply_create(event: Event, payload: EventPayload) -> Issue:
    issue = Issue(
        id=event.issue_id,
        repo_id=event.repo_id,
        created_at=event.timestamp,
        updated_at=event.timestamp,
        title=payload.title or "",
        description=payload.description or "",
        status=Status.OPEN,
        owner=payload.owner or "",
        # Missing labels normalize to an empty list
        labels=list(payload.labels) if payload.labels is not None else [],
    )
    if payload.priority is not None:
        issue.priority = payload.priority
    if payload.issue_type is not None:
        issue.issue_type = payload.issue_type
    return issue


def _apply_status_change(issue: Issue, event: Event, payload: EventPayload) -> Issue:
    if payload.status is None:
        return _ignored(issue, event, "empty_target_status")
    # from_status is the only gate here; the transition table is not consulted
    if not from_status_matches(issue.status, payload.from_status):
        return _ignored(issue, event, "from_status_mismatch")
    issue.status = payload.status
    issue.updated_at = event.timestamp
    return issue


def _apply_assign(issue: Issue, event: Event, payload: EventPayload) -> Issue:
    issue.owner = payload.owner or ""
    issue.updated_at = event.timestamp
    return issue


def _apply_close(issue: Issue, event: Event) -> Issue:
    if issue.status == Status.CLOSED:
        return _ignored(issue, event, "already_closed")
    issue.status = Status.CLOSED
    issue.closed_at = event.timestamp
    issue.updated_at = event.timestamp
    return issue


def _apply_update(issue: Issue, event: Event, payload: EventPayload) -> Issue:
    if payload.title is not None:
        issue.title = payload.title
    if payload.description is not None:
        issue.description = payload.description
    if payload.priority is not None:
        issue.priority = payload.priority
    if payload.issue_type is not None:
        issue.issue_type = payload.issue_type
    if payload.labels is not None:
        issue.labels = list(payload.labels)
    issue.updated_at = event.timestamp
    return issue


def _apply_delete(issue: Issue, event: Event) -> Issue:
    issue.status = Status.DELETED
    issue.updated_at = event.timestamp
    return issue


def _apply_reopen(issue: Issue, event: Event) -> Issue:
    if issue.status != Status.CLOSED:
        return _ignored(issue, event, "not_closed")
    issue.status = Status.OPEN
    issue.closed_at = None
    issue.updated_at = event.timestamp
    return issue


def _apply_comment(issue: Issue, event: Event) -> Issue:
    issue.updated_at = event.timestamp
    return issue
