"""Command-line interface for PR Review Bot."""

import asyncio
import logging
import sys
from pathlib import Path

import click
import yaml
from github.GithubException import GithubException
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pr_review_bot import __version__
from pr_review_bot.agents import ANALYZERS
from pr_review_bot.config import OUTPUT_FORMATS, Config, load_config, validate_config
from pr_review_bot.errors import ConfigError, ReviewError
from pr_review_bot.github.client import GitHubClient
from pr_review_bot.github.formatter import GROUP_BY_CHOICES, ReviewFormatter, format_review_as_json
from pr_review_bot.models.issues import SEVERITY_ORDER
from pr_review_bot.models.review import ReviewResult
from pr_review_bot.retry import RetryableCall
from pr_review_bot.review import (
    publish_review,
    retry_policy_from_config,
    review_local_diff,
    review_pull_request,
)

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config_or_exit(config_path: str | None, require_github: bool) -> Config:
    try:
        config = load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        sys.exit(1)

    errors = validate_config(config, require_github=require_github)
    if errors:
        for error in errors:
            console.print(f"[red]Config error:[/red] {error}")
        sys.exit(1)
    return config


def _print_result_table(result: ReviewResult) -> None:
    table = Table(title=f"Review {result.id}")
    table.add_column("Severity")
    table.add_column("Count", justify="right")
    for severity in SEVERITY_ORDER:
        table.add_row(severity.value, str(result.summary.by_severity.get(severity, 0)))
    console.print(table)

    if result.failures:
        console.print(f"[yellow]⚠️  {len(result.failures)} analyzer runs failed[/yellow]")
        for failure in result.failures:
            console.print(f"   • {failure.describe()}")


def _emit(result: ReviewResult, output: str, group_by: str, file_path: str | None) -> None:
    """Write a markdown or JSON report to a file or stdout."""
    if output == "json":
        text = format_review_as_json(result)
    else:
        text = ReviewFormatter().format_report(result, group_by=group_by)

    if file_path:
        Path(file_path).write_text(text, encoding="utf-8")
        console.print(f"📄 Wrote {output} report to {file_path}")
    else:
        click.echo(text)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """PR Review Bot - automated pull request review."""
    setup_logging(verbose)


@cli.command("review-pr")
@click.argument("repo")
@click.argument("pr_number", type=int, required=False)
@click.option("--branch", help="Find the open PR for this head branch")
@click.option("--output", type=click.Choice(OUTPUT_FORMATS), default=None, help="Output target")
@click.option("--group-by", type=click.Choice(GROUP_BY_CHOICES), default=None, help="Report grouping")
@click.option("--output-file", type=click.Path(dir_okay=False), help="Write the report to a file")
@click.option("--dry-run", is_flag=True, help="Don't post to GitHub")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def review_pr(
    repo: str,
    pr_number: int | None,
    branch: str | None,
    output: str | None,
    group_by: str | None,
    output_file: str | None,
    dry_run: bool,
    config_path: str | None,
) -> None:
    """Review a GitHub pull request by number or head branch."""
    if pr_number is None and not branch:
        console.print("[red]Error:[/red] provide a PR number or --branch")
        sys.exit(1)

    config = _load_config_or_exit(config_path, require_github=True)
    output = output or config.output.format
    group_by = group_by or config.output.group_by
    output_file = output_file or config.output.file_path

    target = f"PR #{pr_number}" if pr_number is not None else f"branch {branch}"
    console.print(f"🔍 Reviewing {target} in [bold]{repo}[/bold]...")

    gh = GitHubClient(config.github.token, base_url=config.github.base_url)
    try:
        pr, result = asyncio.run(
            review_pull_request(config, repo, pr_number=pr_number, branch=branch, github=gh)
        )
    except (ReviewError, GithubException) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.print(
        f"✅ Review complete: {result.summary.total} issues, "
        f"{len(result.plan.placed)} inline, {len(result.plan.unplaced)} in summary "
        f"({result.total_review_time_ms / 1000:.1f}s)"
    )
    _print_result_table(result)

    if output != "github":
        _emit(result, output, group_by, output_file)
        return

    if dry_run:
        console.print("\n[yellow]Dry run - not posting to GitHub[/yellow]")
        click.echo(ReviewFormatter().format_summary(result))
        return

    retry = RetryableCall(retry_policy_from_config(config))
    try:
        asyncio.run(publish_review(gh, pr, result, retry=retry))
    except (ReviewError, GithubException) as e:
        console.print(f"[red]Error posting review:[/red] {e}")
        sys.exit(1)
    console.print(f"📝 Posted review to PR #{pr.number}")


@cli.command("review-diff")
@click.option(
    "--diff",
    "diff_file",
    type=click.File("r"),
    default="-",
    help="Unified diff to review (default: stdin)",
)
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Working tree the diff applies to",
)
@click.option("--output", type=click.Choice(["markdown", "json"]), default="markdown")
@click.option("--group-by", type=click.Choice(GROUP_BY_CHOICES), default=None, help="Report grouping")
@click.option("--output-file", type=click.Path(dir_okay=False), help="Write the report to a file")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def review_diff(
    diff_file,
    root: Path,
    output: str,
    group_by: str | None,
    output_file: str | None,
    config_path: str | None,
) -> None:
    """Review a local diff (e.g. ``git diff | pr-review-bot review-diff``)."""
    config = _load_config_or_exit(config_path, require_github=False)
    diff_text = diff_file.read()
    if not diff_text.strip():
        console.print("[yellow]Empty diff, nothing to review[/yellow]")
        return

    result = asyncio.run(review_local_diff(config, diff_text, root=root))
    _print_result_table(result)
    _emit(result, output, group_by or config.output.group_by, output_file)


@cli.group("config")
def config_group() -> None:
    """Configuration commands."""
    pass


@config_group.command("validate")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def config_validate(config_path: str | None) -> None:
    """Validate configuration file."""
    try:
        config = load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        console.print("[red]Configuration is invalid:[/red]")
        for error in errors:
            console.print(f"  • {error}")
        sys.exit(1)
    console.print("[green]✓ Configuration is valid[/green]")


@config_group.command("show")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def config_show(config_path: str | None) -> None:
    """Show current configuration (secrets masked)."""
    try:
        config = load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        sys.exit(1)

    console.print("\n[bold]Current Configuration[/bold]\n")

    table = Table(title="Enabled Analyzers")
    table.add_column("Name")
    table.add_column("AI")
    for name in config.agents:
        table.add_row(name, "yes" if config.ai.enabled and ANALYZERS.get(name, (None, None))[1] else "no")
    console.print(table)

    console.print(f"\n[bold]AI provider:[/bold] {config.ai.provider} ({config.ai.model or 'default model'})")
    console.print(f"[bold]Retry:[/bold] {config.retry.max_attempts} attempts, {config.retry.base_delay_ms}ms base delay")
    click.echo(yaml.safe_dump(config.to_dict(), sort_keys=False))


if __name__ == "__main__":
    cli()
