"""Text codecs for the remote tracker boundary.

Modules:
    comments: Event <-> tagged comment body
    metadata: Metadata block inside an issue body
"""

from issue_ledger.codec.comments import (
    DEFAULT_TAG,
    SCHEMA_VERSION,
    EventComment,
    format_event_comment,
    is_event_comment,
    parse_event_comment,
)
from issue_ledger.codec.metadata import MetadataBlock, parse_metadata, render_body

__all__ = [
    "DEFAULT_TAG",
    "SCHEMA_VERSION",
    "EventComment",
    "MetadataBlock",
    "format_event_comment",
    "is_event_comment",
    "parse_event_comment",
    "parse_metadata",
    "render_body",
]
