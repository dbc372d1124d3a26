"""Event-replay engine.

This package derives issue snapshots from ordered event logs.

Key Components:
    - transitions: Static status transition table
    - applier: ``apply_event``, folds a single event onto a snapshot
    - replay: ``replay_events``, folds a whole log into snapshots per issue

Example:
    >>> from issue_ledger.engine import apply_event, replay_events
    >>> issues = replay_events(events)
    >>> issue = None
    >>> for event in events:
    ...     issue = apply_event(issue, event)
"""

from issue_ledger.engine.applier import apply_event
from issue_ledger.engine.replay import replay_events
from issue_ledger.engine.transitions import (
    TRANSITIONS,
    allowed_targets,
    from_status_matches,
    is_terminal,
    valid_transition,
)

__all__ = [
    "TRANSITIONS",
    "allowed_targets",
    "apply_event",
    "from_status_matches",
    "is_terminal",
    "replay_events",
    "valid_transition",
]
