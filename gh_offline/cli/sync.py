"""CLI command for syncing tracked repositories."""

from concurrent.futures import ThreadPoolExecutor, wait

import typer
from rich.console import Console
from rich.table import Table

from ..errors import OfflineIssuesError
from ..storage.models import OfflineRepository, Repository
from ..sync.orchestrator import SyncOrchestrator
from .context import CliContext
from .options import ALL_OPTION, FULL_OPTION

console = Console()

POLL_INTERVAL = 0.1


def _run_sync(
    orchestrator: SyncOrchestrator, repository: Repository, full: bool
) -> OfflineRepository:
    """Run one sync in a worker and show its status until it finishes."""
    run = orchestrator.full_sync if full else orchestrator.incremental_sync
    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(run, repository)
        with console.status(f"🔄 {repository.id}: starting...") as spinner:
            while not wait([future], timeout=POLL_INTERVAL).done:
                status = orchestrator.status(repository.id)
                spinner.update(f"🔄 {repository.id}: {status.message}")
        return future.result()


def sync(
    repo: str | None = typer.Argument(None, help="Repository as OWNER/NAME"),
    full: bool = FULL_OPTION,
    all_repos: bool = ALL_OPTION,
) -> None:
    """Publish queued changes and refresh offline snapshots.

    Syncs are incremental (only issues updated since the last sync) unless
    --full is given or the repository has never been synced.

    Examples:
        gh-offline sync acme/widgets
        gh-offline sync --all
        gh-offline sync acme/widgets --full
    """
    try:
        ctx = CliContext()
        if all_repos:
            repositories = ctx.storage.get_repositories()
        elif repo:
            repositories = [ctx.repository(repo)]
        else:
            raise ValueError("Give a repository as OWNER/NAME or use --all")

        if not repositories:
            console.print("No repositories tracked. Use 'gh-offline repo add OWNER/NAME'.")
            return

        orchestrator = ctx.orchestrator()
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    results_table = Table(title="Sync Results")
    results_table.add_column("Repository", style="cyan")
    results_table.add_column("Issues", justify="right", style="green")
    results_table.add_column("Queued", justify="right", style="yellow")
    results_table.add_column("Result", style="white")

    failed = 0
    for repository in repositories:
        try:
            offline_repo = _run_sync(orchestrator, repository, full)
            results_table.add_row(
                repository.id,
                str(len(offline_repo.issues)),
                str(sum(ctx.queue.counts(repository.id).values())),
                "✅ synced",
            )
        except OfflineIssuesError as e:
            failed += 1
            results_table.add_row(
                repository.id,
                "-",
                str(sum(ctx.queue.counts(repository.id).values())),
                f"❌ {e}",
            )

    console.print(results_table)

    if failed:
        console.print(f"❌ Error: {failed} of {len(repositories)} syncs failed")
        raise typer.Exit(1)
    console.print(f"✨ Synced {len(repositories)} repositories")
