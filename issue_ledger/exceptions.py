"""Custom exception hierarchy for issue-ledger.

Errors split into fatal structural problems, which stop a replay and are
raised to the caller, and policy rejections, which are never errors at all
(the engine logs and ignores them). Only the former live here.

Exception Hierarchy:
    IssueLedgerError (base)
    ├── ConfigurationError
    ├── EventError
    │   ├── PayloadDecodeError
    │   ├── UnknownActionError
    │   ├── MissingIssueError
    │   ├── DuplicateCreateError
    │   └── ReplayError
    ├── CodecError
    │   ├── UnsupportedSchemaVersionError
    │   └── MetadataError
    └── SyncError

Example Usage:
    >>> from issue_ledger.exceptions import ReplayError
    >>> try:
    ...     issues = replay_events(events)
    ... except ReplayError as e:
    ...     print(e.event_id, e.action, e.issue_id)
"""


class IssueLedgerError(Exception):
    """Base exception for all issue-ledger errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(IssueLedgerError):
    """Configuration-related errors.

    Examples:
        - Configuration file not found
        - Invalid YAML syntax
        - Unset environment variable referenced from the config
    """

    pass


class EventError(IssueLedgerError):
    """An event could not be applied.

    Carries enough context to trace the failure back to the record the
    event was reconstructed from.

    Attributes:
        message: Human-readable error description
        event_id: Sequence key of the offending event
        action: Action string of the offending event
        issue_id: Issue the event targeted
    """

    def __init__(
        self,
        message: str,
        event_id: int | None = None,
        action: str | None = None,
        issue_id: int | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            event_id: Sequence key of the offending event
            action: Action of the offending event
            issue_id: Issue the event targeted
        """
        self.event_id = event_id
        self.action = action
        self.issue_id = issue_id

        parts = []
        if event_id is not None:
            parts.append(f"event: {event_id}")
        if action:
            parts.append(f"action: {action}")
        if issue_id is not None:
            parts.append(f"issue: {issue_id}")

        full_message = f"{message} ({', '.join(parts)})" if parts else message
        super().__init__(full_message)
        # Preserve original message
        self.message = message


class PayloadDecodeError(EventError):
    """The event payload is not valid JSON or has invalid field values."""

    pass


class UnknownActionError(EventError):
    """The event action is not one of the known actions."""

    pass


class MissingIssueError(EventError):
    """A non-create event arrived for an issue that was never created."""

    pass


class DuplicateCreateError(EventError):
    """A second create event arrived for an issue that already exists."""

    pass


class ReplayError(EventError):
    """Applying an event failed during a batch replay.

    The underlying error is chained as ``__cause__``.
    """

    pass


class CodecError(IssueLedgerError):
    """An event comment or metadata block could not be decoded."""

    pass


class UnsupportedSchemaVersionError(CodecError):
    """An event comment declares a schema version newer than supported.

    Attributes:
        version: Version found in the comment
        supported: Highest version this build understands
    """

    def __init__(self, version: int, supported: int) -> None:
        """Initialize exception.

        Args:
            version: Version found in the comment
            supported: Highest supported version
        """
        self.version = version
        self.supported = supported
        super().__init__(
            f"Unsupported event schema version v{version} (this build supports up to v{supported})"
        )


class MetadataError(CodecError):
    """The metadata block embedded in an issue body is malformed."""

    pass


class SyncError(IssueLedgerError):
    """Remote records could not be reconciled into an issue snapshot."""

    pass
