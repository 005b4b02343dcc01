"""Main CLI entry point."""

import logging

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig
from ..errors import OfflineIssuesError
from . import repos
from .auth import login, logout, whoami
from .context import CliContext
from .issues import issues, show
from .mutations import close, drop, new_issue, pending, reopen, reply, set_labels
from .options import HELP_SETTINGS
from .sync import sync

load_dotenv()

app = typer.Typer(
    name="gh-offline",
    help="Offline-first GitHub issue cache",
    add_completion=False,
    context_settings=HELP_SETTINGS,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log at DEBUG level"
    ),
) -> None:
    """Read, triage and answer GitHub issues without a connection."""
    level = "DEBUG" if verbose else AppConfig().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


app.command(name="login", context_settings=HELP_SETTINGS)(login)
app.command(name="logout", context_settings=HELP_SETTINGS)(logout)
app.command(name="whoami", context_settings=HELP_SETTINGS)(whoami)
app.add_typer(repos.app, name="repo")
app.command(name="sync", context_settings=HELP_SETTINGS)(sync)
app.command(name="issues", context_settings=HELP_SETTINGS)(issues)
app.command(name="show", context_settings=HELP_SETTINGS)(show)
app.command(name="reply", context_settings=HELP_SETTINGS)(reply)
app.command(name="close", context_settings=HELP_SETTINGS)(close)
app.command(name="reopen", context_settings=HELP_SETTINGS)(reopen)
app.command(name="set-labels", context_settings=HELP_SETTINGS)(set_labels)
app.command(name="new-issue", context_settings=HELP_SETTINGS)(new_issue)
app.command(name="pending", context_settings=HELP_SETTINGS)(pending)
app.command(name="drop", context_settings=HELP_SETTINGS)(drop)


@app.command(context_settings=HELP_SETTINGS)
def status() -> None:
    """Show storage status and statistics."""
    console.print("📊 Storage Status")

    try:
        ctx = CliContext()
        stats = ctx.storage.get_storage_stats()
        queued = ctx.queue.counts()
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    asset_dir = ctx.config.asset_dir
    asset_bytes = (
        sum(f.stat().st_size for f in asset_dir.iterdir() if f.is_file())
        if asset_dir.exists()
        else 0
    )

    stats_table = Table(title="Storage Statistics")
    stats_table.add_column("Metric", style="cyan")
    stats_table.add_column("Value", style="green")

    stats_table.add_row("Tracked Repositories", str(stats["total_repositories"]))
    stats_table.add_row("Synced Issues", str(stats["total_issues"]))
    stats_table.add_row("Queued Changes", str(sum(queued.values())))
    stats_table.add_row("Cached Images", str(stats["total_cached_assets"]))
    stats_table.add_row("Image Cache Size", f"{round(asset_bytes / 1024 / 1024, 2)} MB")
    stats_table.add_row("Store Size", f"{stats['total_size_mb']} MB")
    stats_table.add_row("Storage Path", stats["storage_path"])

    console.print(stats_table)

    if stats["repositories"]:
        repo_table = Table(title="Snapshots by Repository")
        repo_table.add_column("Repository", style="cyan")
        repo_table.add_column("Issues", justify="right", style="green")
        repo_table.add_column("Last Synced", style="yellow")

        for repo_id, count in sorted(stats["repositories"].items()):
            repo_table.add_row(
                repo_id, str(count), stats["last_synced"][repo_id] or "never"
            )

        console.print(repo_table)
    else:
        console.print("No synced repositories yet.")

    if any(queued.values()):
        queue_table = Table(title="Queued Changes by Kind")
        queue_table.add_column("Kind", style="cyan")
        queue_table.add_column("Count", justify="right", style="green")
        for kind, count in queued.items():
            queue_table.add_row(kind, str(count))
        console.print(queue_table)


@app.command(context_settings=HELP_SETTINGS)
def version() -> None:
    """Show version information."""
    from gh_offline import __version__

    console.print(f"gh-offline v{__version__}")


if __name__ == "__main__":
    app()
