"""Enumerations for issue-ledger event actions, statuses and issue types."""

from enum import Enum


class Action(str, Enum):
    """Kinds of change an event can carry.

    The set is closed: any other action string reaching the engine is a
    fatal error rather than a silently ignored event.
    """

    CREATE = "create"
    STATUS_CHANGE = "status_change"
    ASSIGN = "assign"
    CLOSE = "close"
    UPDATE = "update"
    DELETE = "delete"
    REOPEN = "reopen"
    COMMENT = "comment"

    def __str__(self) -> str:
        return self.value


class Status(str, Enum):
    """Workflow status of a derived issue snapshot.

    Every snapshot starts at OPEN. DELETED is terminal.
    """

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    IN_REVIEW = "in_review"
    CLOSED = "closed"
    DELETED = "deleted"

    def __str__(self) -> str:
        return self.value


class IssueType(str, Enum):
    """Well-known categories of work.

    Issue types are free-form strings on the wire; these are the values
    issue-ledger itself writes. Other strings are stored as given.
    """

    TASK = "task"
    BUG = "bug"
    FEATURE = "feature"
    EPIC = "epic"

    def __str__(self) -> str:
        return self.value
