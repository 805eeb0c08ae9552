"""CLI for the issuecast issue tracker.

Usage:
    issuecast serve                          # Serve UI + WebSocket on port 3000
    issuecast serve --port 8080 --no-git     # Custom port, no git history
    issuecast list                           # List issues in the data dir
    issuecast list --status=Closed           # Filter by status
    issuecast show <id>                      # Show issue with comments
"""

from __future__ import annotations

import json as json_mod
import sys
from pathlib import Path

import click

from issuecast import __version__
from issuecast.config import ENV_DATA_DIR, ENV_HOST, ENV_PORT, resolve_settings
from issuecast.models import coerce_id, find_issue
from issuecast.store import IssueStore, JsonFileBackend

_data_dir_option = click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar=ENV_DATA_DIR,
    help="Directory holding issues.json and its git history (default: cwd)",
)


def _get_store(data_dir: Path | None) -> IssueStore:
    settings = resolve_settings(data_dir=data_dir, git=False)
    if not settings.issues_path.exists():
        click.echo(f"No issues.json found in {settings.data_dir}. Run 'issuecast serve' first.", err=True)
        sys.exit(1)
    return IssueStore(JsonFileBackend(settings.issues_path))


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="issuecast")
def cli() -> None:
    """issuecast: real-time issue tracker."""


@cli.command()
@click.option("--port", type=click.IntRange(1, 65535), default=None, envvar=ENV_PORT, help="Port (default 3000)")
@click.option("--host", default=None, envvar=ENV_HOST, help="Bind address (default 127.0.0.1)")
@_data_dir_option
@click.option("--no-git", is_flag=True, default=False, help="Do not record history in git")
def serve(port: int | None, host: str | None, data_dir: Path | None, no_git: bool) -> None:
    """Serve the tracker UI and live WebSocket."""
    from issuecast.app import main as app_main

    settings = resolve_settings(port=port, host=host, data_dir=data_dir, git=False if no_git else None)
    app_main(settings)


@cli.command("list")
@_data_dir_option
@click.option("--status", default=None, help="Filter by status")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_issues(data_dir: Path | None, status: str | None, as_json: bool) -> None:
    """List issues sorted by id."""
    issues = sorted(_get_store(data_dir).load(), key=lambda i: i.id)
    if status is not None:
        issues = [i for i in issues if i.status == status]

    if as_json:
        click.echo(json_mod.dumps([i.to_dict() for i in issues], indent=2))
        return

    for issue in issues:
        comments = f" ({len(issue.comments)} comments)" if issue.comments else ""
        click.echo(f"#{issue.id:<4} {issue.status:<12} {issue.title}{comments}")

    click.echo(f"\n{len(issues)} issues")


@cli.command()
@click.argument("issue_id")
@_data_dir_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(issue_id: str, data_dir: Path | None, as_json: bool) -> None:
    """Show issue details and comments."""
    issue = find_issue(_get_store(data_dir).load(), coerce_id(issue_id))
    if issue is None:
        click.echo(f"Not found: {issue_id}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json_mod.dumps(issue.to_dict(), indent=2))
        return

    click.echo(f"ID:       {issue.id}")
    click.echo(f"Title:    {issue.title}")
    click.echo(f"Status:   {issue.status}")
    click.echo(f"Created:  {issue.created_at} by {issue.created_by}")
    if issue.description:
        click.echo(f"\n--- Description ---\n{issue.description}")
    if issue.comments:
        click.echo(f"\n--- Comments ({len(issue.comments)}) ---")
        for c in issue.comments:
            click.echo(f"[{c.created_at}] {c.author}: {c.text}")
