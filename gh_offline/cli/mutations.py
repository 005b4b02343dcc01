"""CLI commands that queue changes for the next sync, and inspect the queue."""

import typer
from rich.console import Console
from rich.table import Table

from ..errors import OfflineIssuesError
from ..mutations.models import (
    LocalIssue,
    Mutation,
    PendingLabelUpdate,
    PendingReply,
    PendingStateChange,
)
from ..storage.models import Repository
from .context import CliContext
from .options import (
    BODY_OPTION,
    ISSUE_NUMBER_ARGUMENT,
    LABEL_OPTION,
    MUTATION_ID_ARGUMENT,
    REPO_ARGUMENT,
    TITLE_OPTION,
)

console = Console()


def _synced_issue(ctx: CliContext, repo: str, issue_number: int) -> Repository:
    """Resolve a tracked repository and check the issue is in its snapshot."""
    repository = ctx.repository(repo)
    offline_repo = ctx.storage.load_offline_repository(repository.id)
    if offline_repo is None or offline_repo.get_issue(issue_number) is None:
        raise ValueError(
            f"Issue #{issue_number} not found in offline data for {repository.id}. "
            f"Run 'gh-offline sync {repository.id}' first."
        )
    return repository


def _describe(mutation: Mutation) -> str:
    if isinstance(mutation, PendingReply):
        body = mutation.body.replace("\n", " ")
        return f"#{mutation.issue_number} reply: {body[:50]}"
    if isinstance(mutation, PendingStateChange):
        return f"#{mutation.issue_number} → {mutation.state}"
    if isinstance(mutation, PendingLabelUpdate):
        labels = ", ".join(mutation.labels) or "(none)"
        return f"#{mutation.issue_number} labels: {labels}"
    if isinstance(mutation, LocalIssue):
        return f"new issue: {mutation.title}"
    return mutation.kind.value


def reply(
    repo: str = REPO_ARGUMENT,
    issue_number: int = ISSUE_NUMBER_ARGUMENT,
    body: str = typer.Argument(..., help="Comment text (markdown)"),
) -> None:
    """Queue a comment on an issue."""
    try:
        ctx = CliContext()
        repository = _synced_issue(ctx, repo, issue_number)
        if not body.strip():
            raise ValueError("Reply body cannot be empty")
        mutation = ctx.queue.queue_reply(repository.id, issue_number, body)
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)
    console.print(f"📝 Reply to #{issue_number} queued ({mutation.id})")


def _queue_state(repo: str, issue_number: int, state: str) -> None:
    try:
        ctx = CliContext()
        repository = _synced_issue(ctx, repo, issue_number)
        mutation = ctx.queue.queue_state_change(repository.id, issue_number, state)
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)
    console.print(f"📝 #{issue_number} will be {state} on next sync ({mutation.id})")


def close(
    repo: str = REPO_ARGUMENT, issue_number: int = ISSUE_NUMBER_ARGUMENT
) -> None:
    """Queue closing an issue."""
    _queue_state(repo, issue_number, "closed")


def reopen(
    repo: str = REPO_ARGUMENT, issue_number: int = ISSUE_NUMBER_ARGUMENT
) -> None:
    """Queue reopening an issue."""
    _queue_state(repo, issue_number, "open")


def set_labels(
    repo: str = REPO_ARGUMENT,
    issue_number: int = ISSUE_NUMBER_ARGUMENT,
    label: list[str] | None = LABEL_OPTION,
) -> None:
    """Queue replacing an issue's labels with the given set.

    Pass no --label to clear every label.

    Example:
        gh-offline set-labels acme/widgets 5 -l bug -l p1
    """
    try:
        ctx = CliContext()
        repository = _synced_issue(ctx, repo, issue_number)
        mutation = ctx.queue.queue_label_update(
            repository.id, issue_number, label or []
        )
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)
    labels = ", ".join(mutation.labels) or "(none)"
    console.print(f"📝 #{issue_number} labels → {labels} ({mutation.id})")


def new_issue(
    repo: str = REPO_ARGUMENT,
    title: str = TITLE_OPTION,
    body: str = BODY_OPTION,
    label: list[str] | None = LABEL_OPTION,
) -> None:
    """Draft a new issue; it is created on GitHub at the next sync."""
    try:
        ctx = CliContext()
        repository = ctx.repository(repo)
        if not title.strip():
            raise ValueError("Issue title cannot be empty")
        mutation = ctx.queue.queue_new_issue(
            repository.id, title, body=body, labels=label or []
        )
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)
    console.print(f"📝 New issue '{title}' queued ({mutation.id})")


def pending(
    repo: str | None = typer.Argument(None, help="Repository as OWNER/NAME"),
) -> None:
    """List changes waiting for the next sync, in publish order."""
    try:
        ctx = CliContext()
        repo_id = ctx.repository(repo).id if repo else None
        mutations = ctx.queue.pending(repo_id=repo_id)
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    if not mutations:
        console.print("✅ Nothing queued")
        return

    table = Table(title="Queued Changes")
    table.add_column("Id", style="dim")
    table.add_column("Repository", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Change", style="white")
    table.add_column("Queued At", style="yellow")

    for mutation in mutations:
        table.add_row(
            mutation.id,
            mutation.repo_id,
            mutation.kind.value,
            _describe(mutation),
            mutation.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)
    console.print(f"📋 {len(mutations)} queued changes")


def drop(mutation_id: str = MUTATION_ID_ARGUMENT) -> None:
    """Discard a queued change without publishing it."""
    try:
        removed = CliContext().queue.remove(mutation_id)
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    if not removed:
        console.print(f"❌ Error: No queued change with id {mutation_id}")
        raise typer.Exit(1)
    console.print(f"🗑️  Dropped {mutation_id}")
