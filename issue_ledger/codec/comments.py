"""
Event comment codec.

Events live on the remote tracker as specially tagged comments::

    [issue-ledger:v1] {"timestamp":"2024-01-15T10:30:00Z","action":"close","payload":"{}","agent":"alice"}

The prefix carries the schema version. Comments written before versioning
use the bare ``[issue-ledger]`` prefix and are read as version 1. The
payload stays an opaque JSON string inside the JSON envelope, so the
engine sees exactly what the writer produced.

Example:
    >>> body = format_event_comment(event)
    >>> parsed = parse_event_comment(body)
    >>> parsed.action
    'close'
"""

import json
import re
from datetime import datetime
from functools import lru_cache

from pydantic import BaseModel, ValidationError, field_validator

from issue_ledger.exceptions import CodecError, UnsupportedSchemaVersionError
from issue_ledger.models.domain import Event
from issue_ledger.utils.timestamps import format_rfc3339, parse_timestamp

DEFAULT_TAG = "issue-ledger"
"""Tag used in comment prefixes and metadata blocks."""

SCHEMA_VERSION = 1
"""Current event comment wire format version."""


class EventComment(BaseModel):
    """Envelope decoded from an event comment.

    It holds everything the comment itself knows. Identity (sequence key,
    issue, repository) is assigned by whoever collected the comment; see
    :meth:`to_event`.
    """

    timestamp: datetime
    action: str
    payload: str = ""
    agent: str = ""

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_rfc3339(cls, v: object) -> object:
        """Accept only RFC 3339 strings with a timezone designator."""
        if isinstance(v, str):
            return parse_timestamp(v)
        return v

    def to_event(
        self,
        event_id: int,
        repo_id: int,
        issue_id: int,
        remote_comment_id: int | None = None,
        remote_issue_number: int | None = None,
    ) -> Event:
        """Attach identity and build the engine event."""
        return Event(
            id=event_id,
            repo_id=repo_id,
            issue_id=issue_id,
            timestamp=self.timestamp,
            action=self.action,
            payload=self.payload,
            agent=self.agent,
            remote_comment_id=remote_comment_id,
            remote_issue_number=remote_issue_number,
        )


@lru_cache(maxsize=16)
def _prefix_pattern(tag: str) -> re.Pattern[str]:
    # Group 1: version number (absent for the legacy prefix), Group 2: JSON
    return re.compile(rf"^\[{re.escape(tag)}(?::v(\d+))?\]\s*(.+)$", re.DOTALL)


def format_event_comment(event: Event, tag: str = DEFAULT_TAG) -> str:
    """Format an event as a comment body for posting to the tracker.

    Args:
        event: Event to encode
        tag: Prefix tag

    Returns:
        Comment body with a versioned prefix
    """
    envelope = {
        "timestamp": format_rfc3339(event.timestamp),
        "action": str(event.action),
        "payload": event.payload,
        "agent": event.agent,
    }
    return f"[{tag}:v{SCHEMA_VERSION}] {json.dumps(envelope, separators=(',', ':'))}"


def is_event_comment(body: str, tag: str = DEFAULT_TAG) -> bool:
    """Check whether a comment body carries the event prefix."""
    return _prefix_pattern(tag).match(body.strip()) is not None


def parse_event_comment(body: str, tag: str = DEFAULT_TAG) -> EventComment | None:
    """Parse an event from a comment body.

    Args:
        body: Raw comment body
        tag: Prefix tag

    Returns:
        The decoded envelope, or None if the comment is not an event

    Raises:
        UnsupportedSchemaVersionError: If the comment declares a version
            newer than :data:`SCHEMA_VERSION`
        CodecError: If the JSON envelope or its timestamp is invalid
    """
    match = _prefix_pattern(tag).match(body.strip())
    if match is None:
        return None

    version_text, json_text = match.groups()
    if version_text is not None:
        version = int(version_text)
        if version > SCHEMA_VERSION:
            raise UnsupportedSchemaVersionError(version, SCHEMA_VERSION)

    try:
        return EventComment.model_validate_json(json_text)
    except ValidationError as e:
        raise CodecError(f"Invalid event comment: {e.errors()[0]['msg']}") from e
