"""Pure helpers for reconciling snapshots with a remote tracker.

Nothing in this package performs I/O: callers fetch comments and issues
and push state changes with their own client.
"""

from issue_ledger.sync.comment_log import (
    DEFAULT_SYNC_AGENT,
    DEFAULT_TRACKER_LABEL,
    apply_comments,
    events_from_comments,
    replay_comments,
    synthetic_create,
)
from issue_ledger.sync.remote_state import desired_remote_state, plan_remote_state

__all__ = [
    "DEFAULT_SYNC_AGENT",
    "DEFAULT_TRACKER_LABEL",
    "apply_comments",
    "desired_remote_state",
    "events_from_comments",
    "plan_remote_state",
    "replay_comments",
    "synthetic_create",
]
