"""Pytest configuration and shared fixtures."""

import itertools
import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
import structlog

from issue_ledger.enums import Action
from issue_ledger.models.domain import Event, RemoteComment

T0 = datetime(2024, 1, 15, 10, 0, tzinfo=UTC)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop logging configuration installed by a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def ts() -> Callable[[int], datetime]:
    """Timestamp ``minutes`` after a fixed base time."""

    def _ts(minutes: int) -> datetime:
        return T0 + timedelta(minutes=minutes)

    return _ts


@pytest.fixture
def make_event(ts: Callable[[int], datetime]) -> Callable[..., Event]:
    """Factory for events with increasing sequence keys.

    Keyword arguments other than the named ones become payload fields.
    Pass ``raw_payload`` to set the payload text verbatim.
    """
    counter = itertools.count(1)

    def _make(
        action: Action | str,
        issue_id: int = 1,
        at: int = 0,
        agent: str = "alice",
        repo_id: int = 1,
        raw_payload: str | None = None,
        **fields: Any,
    ) -> Event:
        if raw_payload is not None:
            payload = raw_payload
        else:
            payload = json.dumps(fields) if fields else ""
        return Event(
            id=next(counter),
            repo_id=repo_id,
            issue_id=issue_id,
            timestamp=ts(at),
            action=action,
            payload=payload,
            agent=agent,
        )

    return _make


@pytest.fixture
def make_comment(ts: Callable[[int], datetime]) -> Callable[..., RemoteComment]:
    """Factory for remote comments with increasing ids."""
    counter = itertools.count(100)

    def _make(body: str, at: int = 0, author: str = "alice") -> RemoteComment:
        return RemoteComment(id=next(counter), body=body, author=author, created_at=ts(at))

    return _make


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding JSON test fixtures."""
    return FIXTURES_DIR
