"""CLI entry point for issue-ledger."""

import json
import sys
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any, TypeVar

import click
import structlog

from issue_ledger.codec.metadata import MetadataBlock, render_body
from issue_ledger.config.settings import LedgerSettings
from issue_ledger.engine.replay import replay_events
from issue_ledger.engine.transitions import TRANSITIONS, valid_transition
from issue_ledger.exceptions import CodecError, ConfigurationError, IssueLedgerError
from issue_ledger.models.domain import Event, Issue, RemoteComment, RemoteIssue, RemoteState
from issue_ledger.sync.comment_log import replay_comments, synthetic_create
from issue_ledger.sync.remote_state import desired_remote_state
from issue_ledger.utils.logging_config import configure_logging
from issue_ledger.utils.timestamps import parse_timestamp

log = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


@click.group()
@click.option("--config", type=click.Path(dir_okay=False), default=None, help="Path to YAML configuration file")
@click.option("--log-level", default=None, help="Logging level (overrides configuration)")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None) -> None:
    """issue-ledger: derive issue state from event logs."""
    try:
        settings = LedgerSettings.from_yaml(config) if config else LedgerSettings()
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    configure_logging(log_level or settings.logging.level, settings.logging.format)
    ctx.obj = {"settings": settings}


def handle_errors(func: F) -> F:
    """Report issue-ledger errors as ``Error: ...`` and exit with status 1."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except IssueLedgerError as e:
            click.echo(f"Error: {e}", err=True)
            log.debug("command_failed", command=func.__name__, exc_info=True)
            sys.exit(1)

    return wrapper  # type: ignore[return-value]


@cli.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--issue", "issue_id", type=int, default=None, help="Only show this issue")
@handle_errors
def replay(events_file: str, issue_id: int | None) -> None:
    """Replay an event log and print the resulting snapshots.

    EVENTS_FILE holds events as a JSON array or as one JSON object per line,
    already sorted by id.
    """
    events = [_event_from_record(record) for record in _load_records(Path(events_file))]
    issues = replay_events(events)

    if issue_id is not None:
        if issue_id not in issues:
            raise IssueLedgerError(f"Issue {issue_id} not found in {events_file}")
        selected = [issues[issue_id]]
    else:
        selected = [issues[key] for key in sorted(issues)]

    click.echo(json.dumps([_snapshot_output(issue) for issue in selected], indent=2))


@cli.command("parse-comments")
@click.argument("comments_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--repo-id", type=int, required=True, help="Repository identifier")
@click.option("--issue-id", type=int, required=True, help="Local issue identifier")
@click.option("--issue-number", type=int, default=None, help="Issue number on the tracker")
@click.pass_context
@handle_errors
def parse_comments(
    ctx: click.Context,
    comments_file: str,
    repo_id: int,
    issue_id: int,
    issue_number: int | None,
) -> None:
    """Rebuild one issue from a saved comment thread.

    COMMENTS_FILE is a JSON array of objects with id, body, author and
    created_at, in posting order.
    """
    settings: LedgerSettings = ctx.obj["settings"]
    comments = [_comment_from_record(record) for record in _load_records(Path(comments_file))]
    issue, events = replay_comments(
        comments, repo_id, issue_id, issue_number=issue_number, tag=settings.codec.tag
    )

    output = _snapshot_output(issue)
    output["events"] = len(events)
    click.echo(json.dumps(output, indent=2))


@cli.command("render-body")
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--issue", "issue_id", type=int, required=True, help="Issue to render")
@click.option("--text", default="", help="Human-written body text")
@click.pass_context
@handle_errors
def render_body_command(ctx: click.Context, events_file: str, issue_id: int, text: str) -> None:
    """Print the remote issue body for a replayed issue."""
    settings: LedgerSettings = ctx.obj["settings"]
    events = [_event_from_record(record) for record in _load_records(Path(events_file))]
    issues = replay_events(events)
    if issue_id not in issues:
        raise IssueLedgerError(f"Issue {issue_id} not found in {events_file}")

    click.echo(render_body(text, MetadataBlock.from_issue(issues[issue_id]), tag=settings.codec.tag))


@cli.command()
@click.argument("issue_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--repo-id", type=int, required=True, help="Repository identifier")
@click.option("--issue-id", type=int, required=True, help="Local issue identifier")
@click.option("--event-id", type=int, default=0, show_default=True, help="Sequence key for the event")
@click.pass_context
@handle_errors
def synthesize(ctx: click.Context, issue_file: str, repo_id: int, issue_id: int, event_id: int) -> None:
    """Print the create event for an issue made directly on the tracker.

    ISSUE_FILE is a JSON object with number, title, body, state, labels and
    created_at.
    """
    settings: LedgerSettings = ctx.obj["settings"]
    remote_issue = _remote_issue_from_record(_load_object(Path(issue_file)))
    event = synthetic_create(
        remote_issue,
        repo_id,
        issue_id,
        event_id=event_id,
        tracker_label=settings.sync.tracker_label,
        agent=settings.sync.agent,
        tag=settings.codec.tag,
    )
    click.echo(json.dumps(event.to_dict(), indent=2))


@cli.command()
def transitions() -> None:
    """Print the status transition table."""
    for status, targets in TRANSITIONS.items():
        rendered = ", ".join(sorted(str(t) for t in targets)) or "(none)"
        click.echo(f"{status} -> {rendered}")


@cli.command("check-transition")
@click.argument("from_status")
@click.argument("to_status")
def check_transition(from_status: str, to_status: str) -> None:
    """Exit 0 if FROM_STATUS may move to TO_STATUS, 1 otherwise."""
    if valid_transition(from_status, to_status):
        click.echo(f"{from_status} -> {to_status}: allowed")
        return
    click.echo(f"{from_status} -> {to_status}: not allowed")
    sys.exit(1)


def _load_records(path: Path) -> list[dict[str, Any]]:
    """Read a JSON array or JSON-lines file of objects."""
    try:
        text = path.read_text()
    except OSError as e:
        raise CodecError(f"Cannot read {path}: {e}") from e

    stripped = text.strip()
    if not stripped:
        return []

    try:
        if stripped.startswith("["):
            records = json.loads(stripped)
        else:
            records = [json.loads(line) for line in stripped.splitlines() if line.strip()]
    except json.JSONDecodeError as e:
        raise CodecError(f"Invalid JSON in {path}: {e}") from e

    if not all(isinstance(record, dict) for record in records):
        raise CodecError(f"Expected JSON objects in {path}")
    return records


def _load_object(path: Path) -> dict[str, Any]:
    """Read a file holding a single JSON object."""
    try:
        record = json.loads(path.read_text())
    except OSError as e:
        raise CodecError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CodecError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(record, dict):
        raise CodecError(f"Expected a JSON object in {path}")
    return record


def _event_from_record(record: dict[str, Any]) -> Event:
    try:
        return Event.from_dict(record)  # type: ignore[arg-type]
    except KeyError as e:
        raise CodecError(f"Event record missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise CodecError(f"Invalid event record: {e}") from e


def _comment_from_record(record: dict[str, Any]) -> RemoteComment:
    try:
        return RemoteComment(
            id=record["id"],
            body=record["body"],
            author=record.get("author", ""),
            created_at=parse_timestamp(record["created_at"]),
        )
    except KeyError as e:
        raise CodecError(f"Comment record missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise CodecError(f"Invalid comment record: {e}") from e


def _remote_issue_from_record(record: dict[str, Any]) -> RemoteIssue:
    try:
        return RemoteIssue(
            number=record["number"],
            title=record["title"],
            body=record.get("body") or "",
            state=RemoteState(record.get("state", "open")),
            labels=list(record.get("labels") or []),
            created_at=parse_timestamp(record["created_at"]),
        )
    except KeyError as e:
        raise CodecError(f"Issue record missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise CodecError(f"Invalid issue record: {e}") from e


def _snapshot_output(issue: Issue) -> dict[str, Any]:
    output: dict[str, Any] = dict(issue.to_dict())
    output["remote_state"] = desired_remote_state(issue.status).value
    return output


def main() -> None:
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
