"""CLI commands for storing and checking the GitHub credential."""

import typer
from rich.console import Console

from ..errors import OfflineIssuesError
from ..github_client.client import GitHubClient
from .context import CliContext
from .options import TOKEN_OPTION

console = Console()


def login(token: str | None = TOKEN_OPTION) -> None:
    """Validate a GitHub token and store it for later syncs.

    Example:
        gh-offline login --token ghp_xxx
    """
    try:
        ctx = CliContext()
        token = token or ctx.config.github_token
        if not token:
            raise ValueError("Provide --token or set GITHUB_TOKEN")

        console.print("🔑 Validating token...")
        user = GitHubClient(token=token).validate_token()
        ctx.storage.save_token(token)
        console.print(f"✅ Logged in as {user.login}")
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)


def logout() -> None:
    """Forget the stored GitHub token."""
    try:
        CliContext().storage.clear_token()
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)
    console.print("👋 Logged out")


def whoami() -> None:
    """Show the account the stored token belongs to."""
    try:
        user = CliContext().client().validate_token()
    except (ValueError, OfflineIssuesError) as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)
    console.print(f"👤 {user.login}")
