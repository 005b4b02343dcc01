"""CLI commands for reading issues from the offline snapshot."""

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..assets.cache import extract_issue_image_urls
from ..errors import OfflineIssuesError
from ..mutations.models import MutationKind
from .context import CliContext
from .options import ISSUE_NUMBER_ARGUMENT, REPO_ARGUMENT, STATE_FILTER_OPTION

console = Console()

STATE_FILTERS = ("open", "closed", "all")


def _truncate(text: str, width: int = 50) -> str:
    return text[:width] + "..." if len(text) > width else text


def issues(repo: str = REPO_ARGUMENT, state: str = STATE_FILTER_OPTION) -> None:
    """List issues as they will look after the next sync.

    Queued state and label changes are applied, and drafted issues that have
    not been created yet are listed as 'draft'.
    """
    try:
        if state not in STATE_FILTERS:
            raise ValueError(f"--state must be one of {', '.join(STATE_FILTERS)}")
        ctx = CliContext()
        repository = ctx.repository(repo)
        effective = ctx.resolver.effective_issues(repository.id)
        drafts = ctx.queue.pending(MutationKind.NEW_ISSUE, repository.id)
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    shown = [e for e in effective if state == "all" or e.issue.state == state]
    shown.sort(key=lambda e: e.issue.number, reverse=True)

    table = Table(title=f"Issues in {repository.id} ({state})")
    table.add_column("Issue #", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("State", style="green")
    table.add_column("Labels", style="magenta")
    table.add_column("Comments", justify="right", style="yellow")

    if state in ("open", "all"):
        for draft in drafts:
            table.add_row(
                "draft",
                escape(_truncate(draft.title)),
                "open*",
                ", ".join(draft.labels),
                "0",
            )

    for item in shown:
        issue = item.issue
        replies = len(item.pending_replies)
        table.add_row(
            str(issue.number),
            escape(_truncate(issue.title)),
            issue.state + ("*" if item.state_pending else ""),
            ", ".join(label.name for label in issue.labels)
            + ("*" if item.labels_pending else ""),
            str(len(issue.comments_data)) + (f" (+{replies})" if replies else ""),
        )

    console.print(table)
    console.print(f"📊 {len(shown)} issues, {len(drafts)} drafts (* = queued change)")


def show(repo: str = REPO_ARGUMENT, issue_number: int = ISSUE_NUMBER_ARGUMENT) -> None:
    """Show one issue with its comments and queued changes."""
    try:
        ctx = CliContext()
        repository = ctx.repository(repo)
        offline_repo = ctx.storage.load_offline_repository(repository.id)
        issue = offline_repo.get_issue(issue_number) if offline_repo else None
        if issue is None:
            raise ValueError(
                f"Issue #{issue_number} not found in offline data for {repository.id}"
            )
        item = ctx.resolver.effective_issue(
            repository.id, issue, catalog=offline_repo.labels
        )
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    effective = item.issue
    console.print(f"[bold]#{effective.number} {escape(effective.title)}[/bold]")

    details = Table(show_header=False)
    details.add_column("Field", style="cyan")
    details.add_column("Value", style="white")
    state_note = ""
    if item.state_pending:
        state_note = (
            f" (was {issue.state})" if effective.state != issue.state else " (queued)"
        )
    details.add_row("State", effective.state + state_note)
    details.add_row(
        "Labels",
        ", ".join(label.name for label in effective.labels)
        + (" (queued)" if item.labels_pending else ""),
    )
    details.add_row("Author", effective.user.login if effective.user else "unknown")
    details.add_row("Created", effective.created_at.strftime("%Y-%m-%d %H:%M"))
    details.add_row("Updated", effective.updated_at.strftime("%Y-%m-%d %H:%M"))
    if effective.html_url:
        details.add_row("URL", effective.html_url)

    image_urls = extract_issue_image_urls([effective])
    cached = sum(1 for url in image_urls if ctx.storage.get_cached_asset(url))
    details.add_row("Images", f"{cached}/{len(image_urls)} cached")
    console.print(details)

    if effective.body:
        console.print(effective.body, markup=False)

    for comment in effective.comments_data:
        author = comment.user.login if comment.user else "unknown"
        console.print(
            f"\n[cyan]💬 {author}[/cyan] "
            f"[dim]{comment.created_at.strftime('%Y-%m-%d %H:%M')}[/dim]"
        )
        console.print(comment.body, markup=False)

    for pending_reply in item.pending_replies:
        console.print("\n[yellow]📝 queued reply[/yellow]")
        console.print(pending_reply.body, markup=False)
