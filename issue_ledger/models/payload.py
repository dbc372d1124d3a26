"""Structured payload carried inside an event.

Events store their payload as opaque JSON text. The engine decodes it into
an :class:`EventPayload` where every field is optional, so that "absent"
and "present but zero/empty" stay distinguishable. That distinction drives
the partial-patch semantics of ``update``: a missing ``priority`` leaves the
snapshot alone while ``"priority": 0`` overwrites it.

String fields follow the tracker's historical wire format, which never
wrote empty strings: an empty string decodes exactly like an absent field.

Example:
    >>> payload = EventPayload.decode('{"title": "Fix login", "priority": 0}')
    >>> payload.title, payload.priority, payload.labels
    ('Fix login', 0, None)
"""

from pydantic import BaseModel, ConfigDict, field_validator

from issue_ledger.enums import Status


class EventPayload(BaseModel):
    """Decoded event payload.

    Unknown keys are ignored so newer writers can add fields without
    breaking older readers.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str | None = None
    description: str | None = None
    status: Status | None = None
    from_status: Status | None = None
    priority: int | None = None
    issue_type: str | None = None
    owner: str | None = None
    labels: list[str] | None = None
    comment: str | None = None

    @field_validator(
        "title",
        "description",
        "status",
        "from_status",
        "issue_type",
        "owner",
        "comment",
        mode="before",
    )
    @classmethod
    def empty_string_is_absent(cls, v: object) -> object:
        """Treat empty strings as if the field were not present."""
        if v == "":
            return None
        return v

    @classmethod
    def decode(cls, raw: str) -> "EventPayload":
        """Decode payload JSON text.

        An empty or whitespace-only string, or a JSON ``null`` document,
        decodes to all defaults.

        Args:
            raw: Payload JSON text

        Returns:
            Decoded payload

        Raises:
            pydantic.ValidationError: If the text is not a JSON object or a
                field has an invalid value
        """
        text = raw.strip()
        if not text or text == "null":
            return cls()
        return cls.model_validate_json(text)

    def encode(self) -> str:
        """Serialize to compact JSON, omitting absent fields."""
        return self.model_dump_json(exclude_none=True)
