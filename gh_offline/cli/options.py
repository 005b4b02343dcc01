"""Standardized CLI option definitions for consistent shorthand mappings.

This module provides centralized option and argument definitions so every
command spells repository, issue and token parameters the same way.
"""

import typer

HELP_SETTINGS = {"help_option_names": ["-h", "--help"]}

# Core arguments
REPO_ARGUMENT = typer.Argument(..., help="Repository as OWNER/NAME")

ISSUE_NUMBER_ARGUMENT = typer.Argument(..., help="Issue number")

MUTATION_ID_ARGUMENT = typer.Argument(..., help="Id of a queued change")

# Core options
TOKEN_OPTION = typer.Option(
    None, "--token", "-t", help="GitHub API token (defaults to GITHUB_TOKEN env var)"
)

REPO_OPTION_OPTIONAL = typer.Option(
    None, "--repo", "-r", help="Limit to one repository (OWNER/NAME)"
)

# Sync options
FULL_OPTION = typer.Option(
    False, "--full", "-f", help="Re-fetch every issue instead of only changed ones"
)

ALL_OPTION = typer.Option(False, "--all", "-a", help="Sync every tracked repository")

# Filter options
STATE_FILTER_OPTION = typer.Option(
    "open", "--state", "-s", help="Issue state: open, closed, or all"
)

LIMIT_OPTION = typer.Option(10, "--limit", help="Maximum number of results")

# Mutation options
LABEL_OPTION = typer.Option(
    None, "--label", "-l", help="Label name (can be used multiple times)"
)

TITLE_OPTION = typer.Option(..., "--title", help="Issue title")

BODY_OPTION = typer.Option("", "--body", "-b", help="Issue body (markdown)")
