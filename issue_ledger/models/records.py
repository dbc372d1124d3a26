"""Type definitions for serialized events and snapshots.

These TypedDicts describe the JSON-compatible shape produced by
``Event.to_dict()`` and ``Issue.to_dict()``. Nullable fields are always
present as keys so that ``None`` and an empty value never collapse into
each other on a round trip.

Example:
    A serialized snapshot::

        record: IssueRecord = {
            "id": 7,
            "repo_id": 1,
            "title": "Fix login",
            "description": "",
            "status": "closed",
            "priority": 2,
            "issue_type": "bug",
            "owner": "alice",
            "labels": [],
            "created_at": "2024-01-15T10:30:00Z",
            "updated_at": "2024-01-15T11:00:00Z",
            "closed_at": "2024-01-15T11:00:00Z",
            "comments": [],
        }
"""

from typing import NotRequired, TypedDict


class CommentRecord(TypedDict):
    """A comment recorded on a snapshot."""

    text: str
    author: str
    timestamp: str
    """RFC 3339 UTC, second precision."""


class EventRecord(TypedDict):
    """Serialized event."""

    id: int
    repo_id: int
    issue_id: int
    timestamp: str
    action: str
    payload: str
    """Opaque payload JSON text, exactly as written by the producer."""

    agent: str
    remote_comment_id: NotRequired[int | None]
    remote_issue_number: NotRequired[int | None]


class IssueRecord(TypedDict):
    """Serialized issue snapshot."""

    id: int
    repo_id: int
    title: str
    description: str
    status: str
    priority: int
    issue_type: str | None
    owner: str
    labels: list[str]
    created_at: str
    updated_at: str
    closed_at: str | None
    comments: list[CommentRecord]
