"""CLI commands for managing tracked repositories."""

import typer
from rich.console import Console
from rich.table import Table

from ..errors import OfflineIssuesError
from ..storage.models import Repository
from .context import CliContext
from .options import HELP_SETTINGS, LIMIT_OPTION, REPO_ARGUMENT

console = Console()
app = typer.Typer(
    help="Track, untrack and find repositories",
    context_settings=HELP_SETTINGS,
)


@app.command()
def add(repo: str = REPO_ARGUMENT) -> None:
    """Start tracking a repository. Run 'gh-offline sync' afterwards."""
    try:
        repository = Repository.from_full_name(repo)
        if CliContext().storage.add_repository(repository):
            console.print(f"✅ Tracking {repository.id}")
        else:
            console.print(f"ℹ️  {repository.id} is already tracked")
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)


@app.command()
def remove(repo: str = REPO_ARGUMENT) -> None:
    """Stop tracking a repository and delete its offline data.

    Queued changes for the repository are discarded too.
    """
    try:
        ctx = CliContext()
        repository = ctx.repository(repo)
        removed_assets = ctx.assets().clear_repository(repository.id)
        dropped = ctx.queue.clear_repository(repository.id)
        ctx.storage.remove_repository(repository.id)
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    console.print(f"🗑️  Removed {repository.id}")
    if removed_assets:
        console.print(f"   {removed_assets} cached images deleted")
    if dropped:
        console.print(f"   {dropped} queued changes discarded")


@app.command(name="list")
def list_repos() -> None:
    """List tracked repositories."""
    try:
        ctx = CliContext()
        repositories = ctx.storage.get_repositories()
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    if not repositories:
        console.print("No repositories tracked. Use 'gh-offline repo add OWNER/NAME'.")
        return

    table = Table(title="Tracked Repositories")
    table.add_column("Repository", style="cyan")
    table.add_column("Issues", justify="right", style="green")
    table.add_column("Queued", justify="right", style="yellow")
    table.add_column("Last Synced", style="white")

    for repository in repositories:
        snapshot = ctx.storage.load_offline_repository(repository.id)
        queued = sum(ctx.queue.counts(repository.id).values())
        table.add_row(
            repository.id,
            str(len(snapshot.issues)) if snapshot else "-",
            str(queued),
            snapshot.last_synced.strftime("%Y-%m-%d %H:%M")
            if snapshot and snapshot.last_synced
            else "never",
        )

    console.print(table)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search text"),
    limit: int = LIMIT_OPTION,
) -> None:
    """Search GitHub for repositories to track."""
    try:
        results = CliContext().client().search_repositories(query, limit=limit)
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    if not results:
        console.print("❌ No repositories found")
        return

    table = Table(title=f"Repositories matching '{query}'")
    table.add_column("Repository", style="cyan")
    table.add_column("Description", style="white")
    for result in results:
        description = result.description or ""
        table.add_row(
            result.full_name,
            description[:60] + "..." if len(description) > 60 else description,
        )
    console.print(table)
