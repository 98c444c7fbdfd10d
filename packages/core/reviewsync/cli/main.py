"""Main CLI entry point for reviewsync"""

import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click
import requests
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from reviewsync import __version__
from reviewsync.config import SyncConfig
from reviewsync.dedupe.keys import parse_dedupe_key
from reviewsync.errors import ConfigError, ReviewSyncError
from reviewsync.models.actions import ADOThreadStatus
from reviewsync.models.comments import Platform
from reviewsync.models.findings_input import load_existing_comments, load_findings
from reviewsync.platforms.ado import ADOAdapter, ADOContext
from reviewsync.platforms.base import PlatformAdapter
from reviewsync.platforms.github import GitHubAdapter, GitHubContext
from reviewsync.platforms.recording import RecordedWrite, RecordingAdapter
from reviewsync.sync import SyncResult, sync_review

console = Console()

TOKEN_ENV_VARS = {
    Platform.GITHUB: "GITHUB_TOKEN",
    Platform.ADO: "SYSTEM_ACCESSTOKEN",
}

_WRITE_LABELS = {
    "post": "[green]post[/green]",
    "update": "[yellow]resolve[/yellow]",
    "set_status": "[yellow]close thread[/yellow]",
}


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_config(
    proximity_threshold: Optional[int],
    grouping_distance: Optional[int],
    max_comments: Optional[int],
) -> SyncConfig:
    return SyncConfig.from_env(
        proximity_threshold=proximity_threshold,
        grouping_distance=grouping_distance,
        max_inline_comments=max_comments,
    )


def _require(value, option: str, platform: Platform):
    if value is None or value == "":
        raise ConfigError(option, f"is required for --platform {platform.value}")
    return value


def _build_adapter(
    platform: Platform,
    config: SyncConfig,
    *,
    token: Optional[str],
    pr_number: Optional[int],
    owner: Optional[str],
    repo: Optional[str],
    sha: Optional[str],
    organization: Optional[str],
    project: Optional[str],
    repository: Optional[str],
    api_url: Optional[str],
) -> PlatformAdapter:
    """Build the live adapter for the selected platform from CLI options."""
    token = token or os.getenv(TOKEN_ENV_VARS[platform])
    if not token:
        raise ConfigError(
            "--token", f"no token given and {TOKEN_ENV_VARS[platform]} is not set"
        )

    if platform == Platform.GITHUB:
        context = GitHubContext(
            owner=_require(owner, "--owner", platform),
            repo=_require(repo, "--repo", platform),
            pr_number=_require(pr_number, "--pr", platform),
            head_sha=_require(sha, "--sha", platform),
            token=token,
        )
        if api_url:
            context = replace(context, api_url=api_url.rstrip("/"))
        return GitHubAdapter(context)

    context = ADOContext(
        organization=_require(organization, "--organization", platform),
        project=_require(project, "--project", platform),
        repository_id=_require(repository, "--repository", platform),
        pull_request_id=_require(pr_number, "--pr", platform),
        token=token,
    )
    if api_url:
        context = replace(context, api_url=api_url.rstrip("/"))
    return ADOAdapter(context, thread_status=ADOThreadStatus(config.ado_thread_status_value))


def _display_summary(result: SyncResult, title: str) -> None:
    """Display sync counts in a rich table"""
    console.print()
    console.print(f"[bold]{title}[/bold]")

    stats_table = Table(show_header=False, box=box.SIMPLE)
    stats_table.add_row("🔎 Findings:", f"[cyan]{result.findings_total}[/cyan]")
    stats_table.add_row("📦 Comment groups:", f"[cyan]{result.clusters_total}[/cyan]")
    stats_table.add_row("💬 Comments posted:", f"[bold]{result.posting.posted_comments}[/bold]")
    stats_table.add_row("♻️  Duplicates skipped:", f"{result.posting.skipped_duplicates}")
    if result.posting.capped:
        stats_table.add_row("⏸️  Over comment limit:", f"[yellow]{result.posting.capped}[/yellow]")
    stats_table.add_row("✅ Comments resolved:", f"[bold green]{result.resolution.resolved}[/bold green]")

    if result.posting.failed:
        stats_table.add_row("   ❌ Post failures:", f"[bold red]{result.posting.failed}[/bold red]")
    if result.resolution.failed:
        stats_table.add_row(
            "   ❌ Resolve failures:", f"[bold red]{result.resolution.failed}[/bold red]"
        )

    console.print(stats_table)


def _display_writes(writes: list[RecordedWrite]) -> None:
    """Display recorded platform writes"""
    if not writes:
        console.print("[dim]No platform changes needed[/dim]")
        return

    writes_table = Table(title="📝 Planned Changes", box=box.ROUNDED, show_lines=True)
    writes_table.add_column("#", style="dim", width=3)
    writes_table.add_column("Action", width=14)
    writes_table.add_column("Target", style="cyan")
    writes_table.add_column("Comment")

    for idx, write in enumerate(writes, 1):
        if write.operation == "post":
            target = f"{write.file}:{write.line}"
        else:
            target = f"#{write.target}"
        body_lines = (write.body or "").strip().splitlines()
        first_line = body_lines[0] if body_lines else ""
        if write.status is not None:
            first_line = f"status → {write.status.name.lower()}"
        writes_table.add_row(
            str(idx),
            _WRITE_LABELS.get(write.operation, write.operation),
            target,
            first_line[:60],
        )

    console.print(writes_table)


def _render_result(
    result: SyncResult,
    output_format: str,
    title: str,
    writes: Optional[list[RecordedWrite]] = None,
) -> None:
    if output_format == "json":
        data = result.to_dict()
        if writes is not None:
            data["planned_writes"] = [
                {
                    "operation": write.operation,
                    "target": write.target,
                    "file": write.file,
                    "line": write.line,
                    "status": write.status.name.lower() if write.status is not None else None,
                }
                for write in writes
            ]
        console.print_json(data=data)
        return

    _display_summary(result, title)
    if writes is not None:
        _display_writes(writes)


@click.group()
@click.version_option(version=__version__, prog_name="reviewsync")
def cli():
    """
    💬 reviewsync - Inline review comments without the noise

    Post analysis findings to GitHub or Azure DevOps pull requests without
    duplicates, and resolve comments whose findings have disappeared.
    """
    pass


def _tuning_options(func):
    func = click.option(
        "--max-comments",
        type=click.IntRange(min=0),
        help="Maximum new inline comments per run (default: 20)",
    )(func)
    func = click.option(
        "--grouping-distance",
        type=click.IntRange(min=0),
        help="Max line gap for findings sharing one comment (default: 3)",
    )(func)
    func = click.option(
        "--proximity-threshold",
        type=click.IntRange(min=0),
        help="Line drift still treated as the same finding (default: 20)",
    )(func)
    return func


@cli.command()
@click.argument("findings", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--platform",
    "-p",
    type=click.Choice([p.value for p in Platform]),
    default=Platform.GITHUB.value,
    help="Code review platform (default: github)",
)
@click.option("--pr", "pr_number", type=int, help="Pull request number or id")
@click.option("--owner", help="GitHub repository owner")
@click.option("--repo", help="GitHub repository name")
@click.option("--sha", help="GitHub head commit SHA to comment on")
@click.option("--organization", help="Azure DevOps organization")
@click.option("--project", help="Azure DevOps project")
@click.option("--repository", help="Azure DevOps repository id or name")
@click.option("--api-url", help="Override the platform API base URL")
@click.option("--token", help="API token (default: GITHUB_TOKEN or SYSTEM_ACCESSTOKEN)")
@_tuning_options
@click.option("--dry-run", is_flag=True, help="Read existing comments but write nothing")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (default: table)",
)
@click.option("--debug", is_flag=True, help="Show verbose diagnostic output")
@click.option("--fail-on-error", is_flag=True, help="Exit 1 if any post or resolve failed")
def sync(
    findings: str,
    platform: str,
    pr_number: Optional[int],
    owner: Optional[str],
    repo: Optional[str],
    sha: Optional[str],
    organization: Optional[str],
    project: Optional[str],
    repository: Optional[str],
    api_url: Optional[str],
    token: Optional[str],
    proximity_threshold: Optional[int],
    grouping_distance: Optional[int],
    max_comments: Optional[int],
    dry_run: bool,
    output_format: str,
    debug: bool,
    fail_on_error: bool,
):
    """
    Post new findings and resolve stale comments on a pull request.

    Examples:

        reviewsync sync findings.json --owner acme --repo api --pr 42 --sha abc123

        reviewsync sync findings.json -p ado --organization acme --project web --repository api --pr 7

        reviewsync sync findings.json --owner acme --repo api --pr 42 --sha abc123 --dry-run
    """
    _configure_logging(debug)
    selected = Platform(platform)

    try:
        config = _build_config(proximity_threshold, grouping_distance, max_comments)
        current = load_findings(Path(findings))
        adapter = _build_adapter(
            selected,
            config,
            token=token,
            pr_number=pr_number,
            owner=owner,
            repo=repo,
            sha=sha,
            organization=organization,
            project=project,
            repository=repository,
            api_url=api_url,
        )

        writes = None
        if dry_run:
            adapter = RecordingAdapter(selected, inner=adapter)
            result = sync_review(current, adapter, config, sleep=lambda _seconds: None)
            writes = adapter.writes
        else:
            result = sync_review(current, adapter, config)
    except ReviewSyncError as e:
        console.print(f"[bold red]❌ Error:[/bold red] {e}")
        sys.exit(1)
    except requests.RequestException as e:
        console.print(f"[bold red]❌ Network error:[/bold red] {e}")
        sys.exit(1)

    title = "🧪 Dry Run Results" if dry_run else "📊 Sync Results"
    _render_result(result, output_format, title, writes)

    if fail_on_error and result.has_failures:
        sys.exit(1)


@cli.command()
@click.argument("findings", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--comments",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON dump of the comments already on the pull request",
)
@click.option(
    "--platform",
    "-p",
    type=click.Choice([p.value for p in Platform]),
    default=Platform.GITHUB.value,
    help="Platform whose resolution style to plan for (default: github)",
)
@_tuning_options
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (default: table)",
)
@click.option("--debug", is_flag=True, help="Show verbose diagnostic output")
def plan(
    findings: str,
    comments: Optional[str],
    platform: str,
    proximity_threshold: Optional[int],
    grouping_distance: Optional[int],
    max_comments: Optional[int],
    output_format: str,
    debug: bool,
):
    """
    Show what a sync would post and resolve, without any network access.

    Examples:

        reviewsync plan findings.json

        reviewsync plan findings.json --comments existing.json --format json
    """
    _configure_logging(debug)

    try:
        config = _build_config(proximity_threshold, grouping_distance, max_comments)
        current = load_findings(Path(findings))
        existing = load_existing_comments(Path(comments)) if comments else []
    except ReviewSyncError as e:
        console.print(f"[bold red]❌ Error:[/bold red] {e}")
        sys.exit(1)

    adapter = RecordingAdapter(Platform(platform), comments=existing)
    result = sync_review(current, adapter, config, sleep=lambda _seconds: None)
    _render_result(result, output_format, "📋 Sync Plan", adapter.writes)


@cli.command(name="parse-key")
@click.argument("key")
def parse_key(key: str):
    """
    Decode a dedupe key of the form FILE:LINE:FINGERPRINT.

    Examples:

        reviewsync parse-key src/app.py:42:3f9a1c0b7d2e4f61
    """
    parsed = parse_dedupe_key(key)
    if parsed is None:
        console.print(f"[bold red]❌ Invalid dedupe key:[/bold red] {key}")
        console.print(
            "\n[dim]Expected FILE:LINE:FINGERPRINT with a positive line and a "
            "16-character lowercase hex fingerprint[/dim]"
        )
        sys.exit(1)

    table = Table(show_header=False, box=box.SIMPLE)
    table.add_row("📄 File:", f"[cyan]{parsed.file}[/cyan]")
    table.add_row("📍 Line:", f"[cyan]{parsed.line}[/cyan]")
    table.add_row("🔑 Fingerprint:", f"[cyan]{parsed.fingerprint}[/cyan]")
    console.print(table)


if __name__ == "__main__":
    cli()
