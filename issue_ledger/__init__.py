"""issue-ledger: derive issue state from an ordered log of change events.

Example:
    >>> from issue_ledger.engine import replay_events
    >>> issues = replay_events(events)
"""

__version__ = "0.1.0"
