"""Core data models for issue-ledger.

Key Models:
    - Event: Immutable record of one change to an issue
    - EventPayload: Decoded, all-optional payload of an event
    - Issue: Snapshot derived by replaying events
    - Comment: Comment recorded on a snapshot
    - RemoteIssue / RemoteComment: Records fetched from a tracker

Example:
    >>> from issue_ledger.models import Event, Issue
"""

from issue_ledger.models.domain import Comment, Event, Issue, RemoteComment, RemoteIssue, RemoteState
from issue_ledger.models.payload import EventPayload

__all__ = [
    "Comment",
    "Event",
    "EventPayload",
    "Issue",
    "RemoteComment",
    "RemoteIssue",
    "RemoteState",
]
