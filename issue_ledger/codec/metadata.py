"""
Metadata block embedded in an issue body.

Derived state is mirrored into the remote issue body as a single HTML
comment line so humans see clean text while tools can read the state::

    Users cannot log in with SSO.

    <!-- issue-ledger {"status":"open","priority":1,"issue_type":"bug","owner":"","labels":[]} -->

Only the metadata line is owned by issue-ledger. The human-written text
around it is passed through untouched.
"""

import re
from functools import lru_cache

from pydantic import BaseModel, Field, ValidationError, field_validator

from issue_ledger.codec.comments import DEFAULT_TAG
from issue_ledger.exceptions import MetadataError
from issue_ledger.models.domain import Issue


class MetadataBlock(BaseModel):
    """Structured state stored in an issue body."""

    status: str = ""
    priority: int = 0
    issue_type: str = ""
    owner: str = ""
    labels: list[str] = Field(default_factory=list)

    @field_validator("labels", mode="before")
    @classmethod
    def null_labels_are_empty(cls, v: object) -> object:
        """Older writers emitted ``null`` for an empty label list."""
        return [] if v is None else v

    @classmethod
    def from_issue(cls, issue: Issue) -> "MetadataBlock":
        """Build the block mirrored for a snapshot."""
        return cls(
            status=str(issue.status),
            priority=issue.priority,
            issue_type=str(issue.issue_type) if issue.issue_type is not None else "",
            owner=issue.owner,
            labels=list(issue.labels),
        )


@lru_cache(maxsize=16)
def _metadata_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(rf"^<!-- {re.escape(tag)} (\{{.*\}}) -->$", re.MULTILINE)


def parse_metadata(body: str, tag: str = DEFAULT_TAG) -> tuple[MetadataBlock | None, str]:
    """Extract the metadata block from an issue body.

    Args:
        body: Full issue body
        tag: Metadata tag

    Returns:
        Tuple of (metadata, human text). Without a block, metadata is None
        and the body is returned unchanged. With a block, the metadata line
        is removed and trailing whitespace trimmed from the remaining text.

    Raises:
        MetadataError: If the block is present but its JSON is invalid
    """
    match = _metadata_pattern(tag).search(body)
    if match is None:
        return None, body

    try:
        meta = MetadataBlock.model_validate_json(match.group(1))
    except ValidationError as e:
        raise MetadataError(f"Invalid metadata block: {e.errors()[0]['msg']}") from e

    human_text = body[: match.start()] + body[match.end() :]
    return meta, human_text.rstrip("\n\r ")


def render_body(human_text: str, meta: MetadataBlock, tag: str = DEFAULT_TAG) -> str:
    """Combine human text and a metadata block into a full issue body.

    Example:
        >>> render_body("", MetadataBlock(status="open"))
        '<!-- issue-ledger {"status":"open","priority":0,"issue_type":"","owner":"","labels":[]} -->'
    """
    meta_line = f"<!-- {tag} {meta.model_dump_json()} -->"
    if not human_text:
        return meta_line
    return f"{human_text}\n\n{meta_line}"
