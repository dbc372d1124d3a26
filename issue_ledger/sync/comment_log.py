"""
Rebuilding issue state from a remote issue's comment thread.

The tracker is the source of truth: each issue's comment thread holds its
event log as tagged comments (see :mod:`issue_ledger.codec.comments`). The
functions here turn an already-fetched thread into events and snapshots.
Fetching and trust filtering happen before these functions are called.

Two paths mirror the engine's two entry points:

- :func:`replay_comments` rebuilds an issue from its whole thread (full
  recovery);
- :func:`apply_comments` applies only comments that arrived since the last
  sync on top of an existing snapshot.

Issues created directly on the tracker have no events at all;
:func:`synthetic_create` builds the create event for them.
"""

import json
from collections.abc import Sequence

import structlog

from issue_ledger.codec.comments import DEFAULT_TAG, parse_event_comment
from issue_ledger.codec.metadata import parse_metadata
from issue_ledger.engine.applier import apply_event
from issue_ledger.engine.replay import replay_events
from issue_ledger.enums import Action
from issue_ledger.exceptions import CodecError, EventError, SyncError
from issue_ledger.models.domain import Event, Issue, RemoteComment, RemoteIssue
from issue_ledger.utils.timestamps import ensure_utc

log = structlog.get_logger(__name__)

DEFAULT_TRACKER_LABEL = "issue-ledger"
"""Remote label that marks an issue as tracked. Never copied into snapshots."""

DEFAULT_SYNC_AGENT = "issue-ledger-sync"
"""Agent recorded on events synthesized during sync."""


def events_from_comments(
    comments: Sequence[RemoteComment],
    repo_id: int,
    issue_id: int,
    issue_number: int | None = None,
    first_event_id: int = 1,
    tag: str = DEFAULT_TAG,
) -> list[Event]:
    """Parse event comments into engine events, in thread order.

    Comments that are not events are skipped silently. Event comments that
    fail to decode are skipped with a warning.

    Args:
        comments: Comment thread in posting order
        repo_id: Repository to assign to the events
        issue_id: Issue to assign to the events
        issue_number: Remote issue number, recorded on each event
        first_event_id: Sequence key of the first event produced
        tag: Comment prefix tag

    Returns:
        Events with consecutive sequence keys starting at ``first_event_id``
    """
    events: list[Event] = []
    for comment in comments:
        try:
            parsed = parse_event_comment(comment.body, tag=tag)
        except CodecError as e:
            log.warning(
                "event_comment_skipped",
                comment_id=comment.id,
                issue_id=issue_id,
                error=e.message,
            )
            continue
        if parsed is None:
            continue

        events.append(
            parsed.to_event(
                event_id=first_event_id + len(events),
                repo_id=repo_id,
                issue_id=issue_id,
                remote_comment_id=comment.id,
                remote_issue_number=issue_number,
            )
        )
    return events


def replay_comments(
    comments: Sequence[RemoteComment],
    repo_id: int,
    issue_id: int,
    issue_number: int | None = None,
    tag: str = DEFAULT_TAG,
) -> tuple[Issue, list[Event]]:
    """Rebuild an issue from its full comment thread.

    Args:
        comments: Entire comment thread in posting order
        repo_id: Repository the issue belongs to
        issue_id: Local issue identifier
        issue_number: Remote issue number
        tag: Comment prefix tag

    Returns:
        Tuple of (snapshot, events parsed from the thread)

    Raises:
        SyncError: If the thread has no events or none of them creates the
            issue
        ReplayError: If replaying the parsed events fails
        DuplicateCreateError: If the thread creates the issue twice
    """
    events = events_from_comments(comments, repo_id, issue_id, issue_number, tag=tag)
    if not events:
        raise SyncError(f"No events found in comments for issue {issue_id}")

    issues = replay_events(events)
    issue = issues.get(issue_id)
    if issue is None:
        raise SyncError(f"Issue {issue_id} not found in replay result")

    log.info("comments_replayed", issue_id=issue_id, events=len(events), status=str(issue.status))
    return issue, events


def apply_comments(
    issue: Issue,
    comments: Sequence[RemoteComment],
    issue_number: int | None = None,
    first_event_id: int = 1,
    tag: str = DEFAULT_TAG,
) -> tuple[Issue, list[Event]]:
    """Apply newly fetched comments to an existing snapshot.

    Args:
        issue: Snapshot as of the previous sync. Updated in place.
        comments: Comments posted since the previous sync, in order
        issue_number: Remote issue number
        first_event_id: Sequence key for the first new event
        tag: Comment prefix tag

    Returns:
        Tuple of (updated snapshot, events applied)

    Raises:
        SyncError: If an event cannot be applied. The engine error is the
            cause.
    """
    events = events_from_comments(
        comments, issue.repo_id, issue.id, issue_number, first_event_id=first_event_id, tag=tag
    )

    current = issue
    for event in events:
        try:
            current = apply_event(current, event)
        except EventError as e:
            raise SyncError(f"Cannot apply event from comment {event.remote_comment_id}: {e}") from e

    log.debug("comments_applied", issue_id=issue.id, events=len(events))
    return current, events


def synthetic_create(
    remote_issue: RemoteIssue,
    repo_id: int,
    issue_id: int,
    event_id: int = 0,
    tracker_label: str = DEFAULT_TRACKER_LABEL,
    agent: str = DEFAULT_SYNC_AGENT,
    tag: str = DEFAULT_TAG,
) -> Event:
    """Build a create event for a remote issue that has no events yet.

    Fields come from the issue's metadata block when it has one. Otherwise
    the whole body becomes the description and the remote labels, minus
    the tracker label, become the issue labels.

    Args:
        remote_issue: Issue as fetched from the tracker
        repo_id: Repository the issue belongs to
        issue_id: Local issue identifier
        event_id: Sequence key for the synthesized event
        tracker_label: Label that marks tracked issues
        agent: Agent recorded on the event
        tag: Metadata tag

    Returns:
        A create event timestamped at the remote issue's creation time
    """
    try:
        meta, description = parse_metadata(remote_issue.body, tag=tag)
    except CodecError as e:
        log.warning("metadata_unreadable", issue_number=remote_issue.number, error=e.message)
        meta, description = None, remote_issue.body

    payload: dict[str, object] = {"title": remote_issue.title}
    if description:
        payload["description"] = description

    if meta is not None:
        payload["priority"] = meta.priority
        if meta.issue_type:
            payload["issue_type"] = meta.issue_type
        if meta.owner:
            payload["owner"] = meta.owner
        if meta.labels:
            payload["labels"] = meta.labels
    else:
        labels = [label for label in remote_issue.labels if label != tracker_label]
        if labels:
            payload["labels"] = labels

    return Event(
        id=event_id,
        repo_id=repo_id,
        issue_id=issue_id,
        timestamp=ensure_utc(remote_issue.created_at),
        action=Action.CREATE,
        payload=json.dumps(payload, separators=(",", ":")),
        agent=agent,
        remote_issue_number=remote_issue.number,
    )
