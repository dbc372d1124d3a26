"""
Domain models for issue-ledger.

Two families of models live here:

- the event-sourced core: :class:`Event` (an immutable fact) and
  :class:`Issue` (the snapshot derived by folding events);
- the remote boundary: :class:`RemoteIssue` and :class:`RemoteComment`,
  the normalized shape of records fetched from a tracker, plus the
  tracker's native :class:`RemoteState`.

Example:
    Building an event by hand::

        event = Event(
            id=1,
            repo_id=1,
            issue_id=7,
            timestamp=datetime(2024, 1, 15, 10, 30, tzinfo=UTC),
            action=Action.CREATE,
            payload='{"title": "Fix login"}',
            agent="alice",
        )
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from issue_ledger.enums import Status
from issue_ledger.models.records import CommentRecord, EventRecord, IssueRecord
from issue_ledger.utils.timestamps import format_timestamp, parse_timestamp


class RemoteState(str, Enum):
    """Native open/closed flag of an issue on the remote tracker.

    Trackers only know these two states; the richer :class:`Status` is
    folded onto them when syncing back.
    """

    OPEN = "open"
    """Issue is active on the tracker."""

    CLOSED = "closed"
    """Issue is closed on the tracker."""


@dataclass(frozen=True)
class Event:
    """A single recorded change to an issue.

    Events are facts: once written they never change. The engine relies on
    the caller to hand them over sorted by ``id``.
    """

    id: int
    """Sequence key. Used only for ordering and for error attribution."""

    repo_id: int
    """Repository the issue belongs to."""

    issue_id: int
    """Issue this event mutates."""

    timestamp: datetime
    """When the change was made. Becomes ``updated_at`` / ``closed_at``."""

    action: str
    """One of the :class:`~issue_ledger.enums.Action` values.

    Kept as a plain string so an unknown action read from a remote record
    reaches the engine intact and is rejected there.
    """

    payload: str = ""
    """Payload JSON text. Empty means all defaults."""

    agent: str = ""
    """Who produced the event. Attribution only."""

    remote_comment_id: int | None = None
    """Comment on the remote tracker this event was read from, if any."""

    remote_issue_number: int | None = None
    """Issue number on the remote tracker, if known."""

    def to_dict(self) -> EventRecord:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "repo_id": self.repo_id,
            "issue_id": self.issue_id,
            "timestamp": format_timestamp(self.timestamp),
            "action": str(self.action),
            "payload": self.payload,
            "agent": self.agent,
            "remote_comment_id": self.remote_comment_id,
            "remote_issue_number": self.remote_issue_number,
        }

    @classmethod
    def from_dict(cls, data: EventRecord) -> "Event":
        """Build an event from a serialized record.

        Raises:
            KeyError: If a required field is missing
            ValueError: If the timestamp cannot be parsed
        """
        return cls(
            id=data["id"],
            repo_id=data["repo_id"],
            issue_id=data["issue_id"],
            timestamp=parse_timestamp(data["timestamp"]),
            action=data["action"],
            payload=data.get("payload", ""),
            agent=data.get("agent", ""),
            remote_comment_id=data.get("remote_comment_id"),
            remote_issue_number=data.get("remote_issue_number"),
        )


@dataclass
class Comment:
    """A free-text comment attached to an issue snapshot.

    Comments can ride along on any event, so the list on a snapshot is an
    append-only log in event order.
    """

    text: str
    author: str
    timestamp: str
    """RFC 3339 UTC string, second precision."""

    def to_dict(self) -> CommentRecord:
        return {"text": self.text, "author": self.author, "timestamp": self.timestamp}


@dataclass
class Issue:
    """Derived state of one issue.

    Snapshots are produced by the engine and mutated in place as later
    events are applied. Use :meth:`copy` before feeding a snapshot you want
    to keep into further ``apply_event`` calls.
    """

    id: int
    """Issue identifier. Fixed at creation."""

    repo_id: int
    """Owning repository. Fixed at creation."""

    created_at: datetime
    """Timestamp of the create event. Never changes."""

    updated_at: datetime
    """Timestamp of the latest event that changed anything."""

    title: str = ""
    description: str = ""

    status: Status = Status.OPEN
    """Current workflow status."""

    priority: int = 0
    issue_type: str | None = None
    """Category of work. Usually an :class:`~issue_ledger.enums.IssueType` value."""

    owner: str = ""

    labels: list[str] = field(default_factory=list)
    """Label names in the order they were set. Never None."""

    closed_at: datetime | None = None
    """Set when the issue is closed, cleared when it is reopened."""

    comments: list[Comment] = field(default_factory=list)

    def copy(self) -> "Issue":
        """Return a deep copy isolated from further in-place updates."""
        return copy.deepcopy(self)

    def to_dict(self) -> IssueRecord:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "repo_id": self.repo_id,
            "title": self.title,
            "description": self.description,
            "status": str(self.status),
            "priority": self.priority,
            "issue_type": str(self.issue_type) if self.issue_type is not None else None,
            "owner": self.owner,
            "labels": list(self.labels),
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
            "closed_at": format_timestamp(self.closed_at) if self.closed_at is not None else None,
            "comments": [c.to_dict() for c in self.comments],
        }

    @classmethod
    def from_dict(cls, data: IssueRecord) -> "Issue":
        """Build a snapshot from a serialized record.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a timestamp or status is invalid
        """
        closed_at = data.get("closed_at")
        issue_type = data.get("issue_type")
        return cls(
            id=data["id"],
            repo_id=data["repo_id"],
            title=data.get("title", ""),
            description=data.get("description", ""),
            status=Status(data["status"]),
            priority=data.get("priority", 0),
            issue_type=issue_type or None,
            owner=data.get("owner", ""),
            labels=list(data.get("labels") or []),
            created_at=parse_timestamp(data["created_at"]),
            updated_at=parse_timestamp(data["updated_at"]),
            closed_at=parse_timestamp(closed_at) if closed_at else None,
            comments=[Comment(**c) for c in data.get("comments", [])],
        )


@dataclass
class RemoteIssue:
    """An issue as fetched from the remote tracker.

    This is the normalized representation handed over by whatever client
    talks to the tracker. issue-ledger never fetches it itself.
    """

    number: int
    """Human-readable issue number on the tracker (e.g., #42)."""

    title: str
    body: str
    """Full body text, possibly containing a metadata block."""

    state: RemoteState
    labels: list[str]
    created_at: datetime


@dataclass
class RemoteComment:
    """A comment as fetched from the remote tracker."""

    id: int
    """Unique identifier for the comment within the tracker."""

    body: str
    author: str
    created_at: datetime
