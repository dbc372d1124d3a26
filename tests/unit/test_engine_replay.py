"""Unit tests for engine/replay.py."""

import json

import pytest

from issue_ledger.engine.applier import apply_event
from issue_ledger.engine.replay import replay_events
from issue_ledger.enums import Action, IssueType, Status
from issue_ledger.exceptions import DuplicateCreateError, MissingIssueError, PayloadDecodeError, ReplayError
from issue_ledger.models.domain import Event


def fold(events):
    """Apply events one at a time, the way a live sync does."""
    issues = {}
    for event in events:
        issues[event.issue_id] = apply_event(issues.get(event.issue_id), event)
    return issues


@pytest.fixture
def mixed_log(make_event):
    """Interleaved events for two issues covering every action."""
    return [
        make_event(Action.CREATE, issue_id=1, at=0, title="A", labels=["a"], priority=2),
        make_event(Action.CREATE, issue_id=2, at=1, title="B", issue_type="feature"),
        make_event(Action.ASSIGN, issue_id=1, at=2, owner="bob", comment="taking it"),
        make_event(Action.STATUS_CHANGE, issue_id=2, at=3, status="in_progress", from_status="open"),
        make_event(Action.UPDATE, issue_id=1, at=4, description="more", labels=[]),
        make_event(Action.CLOSE, issue_id=1, at=5),
        make_event(Action.STATUS_CHANGE, issue_id=2, at=6, status="closed", from_status="open"),
        make_event(Action.REOPEN, issue_id=1, at=7),
        make_event(Action.COMMENT, issue_id=2, at=8, comment="ping"),
        make_event(Action.DELETE, issue_id=2, at=9),
        make_event(Action.UPDATE, issue_id=2, at=10, title="ghost"),
        make_event(Action.CLOSE, issue_id=1, at=11, comment="done"),
        make_event(Action.CLOSE, issue_id=1, at=12, comment="really done"),
    ]


class TestEquivalence:
    """Batch replay and per-event application agree."""

    def test_replay_matches_fold(self, mixed_log):
        """Test both paths produce identical snapshots per issue."""
        replayed = replay_events(mixed_log)
        folded = fold(mixed_log)

        assert replayed.keys() == folded.keys()
        for issue_id in replayed:
            assert replayed[issue_id] == folded[issue_id]

    @pytest.mark.parametrize("cut", [1, 3, 6, 10])
    def test_prefix_then_rest(self, mixed_log, cut):
        """Test replaying a prefix and applying the rest matches a full replay."""
        expected = {k: v.copy() for k, v in replay_events(mixed_log).items()}

        issues = replay_events(mixed_log[:cut])
        for event in mixed_log[cut:]:
            issues[event.issue_id] = apply_event(issues.get(event.issue_id), event)

        assert issues == expected

    def test_replay_is_deterministic(self, mixed_log):
        first = replay_events(mixed_log)
        second = replay_events(mixed_log)
        assert first == second

    def test_empty_log(self):
        assert replay_events([]) == {}

    def test_accepts_iterator(self, mixed_log):
        assert set(replay_events(iter(mixed_log))) == {1, 2}

    def test_mixed_log_outcome(self, mixed_log, ts):
        issues = replay_events(mixed_log)

        first = issues[1]
        assert first.status == Status.CLOSED
        assert first.owner == "bob"
        assert first.labels == []
        assert first.closed_at == ts(11)
        assert [c.text for c in first.comments] == ["taking it", "done", "really done"]

        second = issues[2]
        assert second.status == Status.DELETED
        assert second.title == "B"
        assert second.issue_type == IssueType.FEATURE
        assert second.updated_at == ts(9)
        assert [c.text for c in second.comments] == ["ping"]


class TestCreate:
    """Tests for create handling across the log."""

    def test_duplicate_create_fails(self, make_event):
        events = [make_event(Action.CREATE, issue_id=1), make_event(Action.CREATE, issue_id=1, at=1)]

        with pytest.raises(DuplicateCreateError) as exc_info:
            replay_events(events)

        assert exc_info.value.event_id == 2
        assert exc_info.value.issue_id == 1

    def test_duplicate_create_after_delete_fails(self, make_event):
        """Test a deleted issue cannot be recreated."""
        events = [
            make_event(Action.CREATE, issue_id=1),
            make_event(Action.DELETE, issue_id=1, at=1),
            make_event(Action.CREATE, issue_id=1, at=2),
        ]
        with pytest.raises(DuplicateCreateError):
            replay_events(events)

    def test_two_issues_are_independent(self, make_event):
        events = [
            make_event(Action.CREATE, issue_id=1, title="one"),
            make_event(Action.CREATE, issue_id=2, title="two"),
        ]

        issues = replay_events(events)

        assert issues[1].title == "one"
        assert issues[2].title == "two"
        assert issues[1] is not issues[2]
        assert issues[1].labels is not issues[2].labels

    def test_unlisted_issue_type_does_not_stop_replay(self, make_event):
        """Test an issue type outside the known set is stored, not rejected."""
        events = [
            make_event(Action.CREATE, issue_id=1, issue_type="chore"),
            make_event(Action.CREATE, issue_id=2, title="b"),
            make_event(Action.UPDATE, issue_id=2, at=1, issue_type="spike"),
        ]

        issues = replay_events(events)

        assert issues[1].issue_type == "chore"
        assert issues[2].issue_type == "spike"
        assert issues[2].title == "b"

    def test_sub_second_timestamps_kept(self, make_event, ts):
        """Test equivalence holds at full timestamp precision."""
        create = make_event(Action.CREATE)
        close = make_event(Action.CLOSE, at=1)
        at = ts(1).replace(microsecond=250000)
        events = [create, Event(**{**close.__dict__, "timestamp": at})]

        replayed = replay_events(events)

        assert replayed[1] == fold(events)[1]
        assert replayed[1].closed_at == at
        assert replayed[1].to_dict()["closed_at"] == "2024-01-15T10:01:00.250000Z"


class TestErrors:
    """Tests for error attribution."""

    def test_missing_issue_is_wrapped(self, make_event):
        events = [make_event(Action.CREATE, issue_id=1), make_event(Action.CLOSE, issue_id=5, at=1)]

        with pytest.raises(ReplayError) as exc_info:
            replay_events(events)

        err = exc_info.value
        assert err.event_id == 2
        assert err.action == "close"
        assert err.issue_id == 5
        assert isinstance(err.__cause__, MissingIssueError)

    def test_bad_payload_is_wrapped(self, make_event):
        events = [make_event(Action.CREATE, issue_id=1, raw_payload="[1, 2")]

        with pytest.raises(ReplayError, match="Applying event 1 failed") as exc_info:
            replay_events(events)

        assert isinstance(exc_info.value.__cause__, PayloadDecodeError)

    def test_unknown_action_stops_replay(self, make_event):
        events = [make_event(Action.CREATE), make_event("archive", at=1), make_event(Action.CLOSE, at=2)]

        with pytest.raises(ReplayError) as exc_info:
            replay_events(events)

        assert exc_info.value.action == "archive"


class TestScenarios:
    """End-to-end lifecycle scenarios."""

    def test_create_assign_close(self, make_event, ts):
        events = [
            make_event(Action.CREATE, at=0, title="Lifecycle"),
            make_event(Action.ASSIGN, at=1, owner="alice"),
            make_event(Action.CLOSE, at=2),
        ]

        issue = replay_events(events)[1]

        assert issue.title == "Lifecycle"
        assert issue.status == Status.CLOSED
        assert issue.owner == "alice"
        assert issue.closed_at == ts(2)
        assert issue.updated_at == ts(2)

    def test_stale_status_change_is_dropped(self, make_event, ts):
        events = [
            make_event(Action.CREATE, at=0),
            make_event(Action.STATUS_CHANGE, at=1, status="in_progress", from_status="open"),
            make_event(Action.STATUS_CHANGE, at=2, status="closed", from_status="open"),
        ]

        issue = replay_events(events)[1]

        assert issue.status == Status.IN_PROGRESS
        assert issue.updated_at == ts(1)

    def test_log_from_file(self, fixtures_dir):
        """Test a stored event log replays to the expected snapshots."""
        records = json.loads((fixtures_dir / "events.json").read_text())
        issues = replay_events(Event.from_dict(record) for record in records)

        lifecycle = issues[7]
        assert lifecycle.status == Status.CLOSED
        assert lifecycle.owner == "alice"
        assert lifecycle.labels == ["backend"]
        assert lifecycle.closed_at.isoformat() == "2024-01-15T10:04:00+00:00"
        assert [c.text for c in lifecycle.comments] == ["Shipped"]

        flaky = issues[8]
        assert flaky.status == Status.IN_PROGRESS
        assert flaky.labels == ["ci"]
        assert flaky.issue_type == IssueType.BUG
