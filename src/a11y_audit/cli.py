"""CLI interface for a11y-audit."""

import asyncio
import json
import logging
import sys

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.markup import escape
from rich import box

from . import __version__
from .auditor import INFO_TEXT, Auditor
from .config import load_config
from .errors import A11yAuditError
from .models import AuditFailure, AuditResponse, Priority, ScoreResult
from .summary import issue_title
from .taxonomy import RuleTaxonomy, load_external_dictionary


console = Console()


def priority_style(priority: Priority) -> str:
    """Get Rich style for priority level."""
    return {
        Priority.CRITICAL: "red",
        Priority.WARNING: "yellow",
        Priority.LOW: "blue",
    }.get(priority, "white")


def priority_icon(priority: Priority) -> str:
    """Get icon for priority level."""
    return {
        Priority.CRITICAL: "✗",
        Priority.WARNING: "⚠",
        Priority.LOW: "ℹ",
    }.get(priority, "•")


def print_score_bar(result: ScoreResult, width: int = 20) -> Text:
    """Create a visual score bar in the grade colour."""
    filled = int((result.score / 100) * width)
    empty = width - filled
    color = result.grade_color

    bar = Text()
    bar.append("█" * filled, style=color)
    bar.append("░" * empty, style="dim")
    bar.append(f" {result.score}/100", style=f"bold {color}")
    return bar


def print_failure(failure: AuditFailure) -> None:
    console.print(f"\n[red]Error:[/red] {escape(failure.error)}")
    if failure.hint:
        console.print(f"[dim]{failure.hint}[/dim]")
    console.print(f"[dim]after {failure.analysis_time_ms}ms[/dim]\n")


def print_result(result: AuditResponse, verbose: bool = False) -> None:
    """Print audit result to console."""
    console.print()
    console.print(Panel(
        f"[bold]{escape(result.url)}[/bold]\n"
        f"[dim]{result.standard} • analysed in {result.analysis_time_ms}ms[/dim]",
        title="♿ Accessibility Audit",
        border_style="blue"
    ))

    console.print()
    console.print("  Score: ", end="")
    console.print(print_score_bar(result.result, width=25))
    console.print(f"  Grade: [bold {result.result.grade_color}]{result.result.grade}[/]  [dim]{result.result.assessment}[/dim]")
    console.print()

    # Penalty breakdown
    breakdown = result.result.breakdown
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Type", style="cyan")
    table.add_column("Found", justify="right")
    table.add_column("Penalty", justify="right")
    table.add_row("Errors", str(result.counts.errors), f"-{breakdown.error_penalty}")
    table.add_row("Warnings", str(result.counts.warnings), f"-{breakdown.warning_penalty}")
    table.add_row("Notices", str(result.counts.notices), f"-{breakdown.notice_penalty}")
    console.print(table)

    summary = result.summary
    if summary.top_critical:
        console.print("\n[bold]🚨 Critical Issues:[/bold]\n")
        for item in summary.top_critical:
            console.print(f"  [red]✗[/red] [bold]{escape(item.title)}[/bold] [dim]({item.count}×)[/dim]")
            console.print(f"    [cyan]→ {escape(item.fix)}[/cyan]")

    if summary.quick_wins:
        console.print("\n[bold]🎯 Top Quick Wins:[/bold]\n")
        for i, title in enumerate(summary.quick_wins, 1):
            console.print(f"  {i}. [bold]{escape(title)}[/bold]")

    # verbose shows every rule, otherwise critical and warning only
    shown = [
        issue for issue in result.issues
        if verbose or issue.priority in (Priority.CRITICAL, Priority.WARNING)
    ]
    if shown:
        console.print(f"\n[bold]{'All Issues' if verbose else 'Issues Found'}:[/bold]\n")
        for issue in shown:
            style = priority_style(issue.priority)
            icon = priority_icon(issue.priority)
            console.print(f"  [{style}]{icon}[/] {escape(issue_title(issue))} [dim]({issue.count}×)[/dim]")
            if verbose:
                console.print(f"    [dim]{escape(issue.code)}[/dim]")
                for sample in issue.samples:
                    console.print(f"    [dim]{escape(sample)}[/dim]")

    console.print()
    console.print(
        f"  [dim]{summary.total} rule types • {summary.critical_count} critical • "
        f"{summary.warning_count} warnings • {result.meta.total_issues_found} occurrences[/dim]"
    )

    console.print("[dim]─" * 50 + "[/dim]")
    console.print(f"[dim]a11y-audit v{__version__}[/dim]")
    console.print()


def _load(config_path):
    try:
        return load_config(config_path)
    except (OSError, ValidationError, ValueError) as e:
        raise click.ClickException(f"Invalid config: {e}")


@click.group(invoke_without_command=True)
@click.pass_context
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Logging level (default from config)")
def cli(ctx, log_level):
    """a11y-audit - Automated WCAG 2.1 AA accessibility audit.

    \b
    Quick start:
        a11y-audit scan example.com
        a11y-audit explain WCAG2AA.Principle1.Guideline1_1.1_1_1.H37

    \b
    Commands:
        scan     Audit a URL for accessibility issues
        explain  Show priority and translation for a rule code
        info     What the automated check covers
    """
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@cli.command()
@click.argument("url")
@click.option("-v", "--verbose", is_flag=True, help="Show all issues, including low priority")
@click.option("-t", "--timeout", type=float, default=None, help="Engine timeout in seconds")
@click.option("-c", "--config", "config_path", type=click.Path(dir_okay=False), help="TOML config file")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def scan(ctx, url: str, verbose: bool, timeout: float | None, config_path: str | None, json_output: bool):
    """Audit a URL for accessibility issues.

    \b
    Examples:
        a11y-audit scan example.com
        a11y-audit scan https://example.com --verbose
        a11y-audit scan example.com --json
    """
    cfg = _load(config_path)
    if timeout is not None:
        cfg.engine.timeout_ms = int(timeout * 1000)
    _setup_logging((ctx.obj or {}).get("log_level") or cfg.log_level)

    # Bare domains are accepted on the command line
    if "://" not in url:
        url = "https://" + url

    try:
        auditor = Auditor.from_config(cfg)
        if json_output:
            result = asyncio.run(auditor.run_audit(url))
        else:
            with console.status(f"[bold blue]Auditing {url}...[/bold blue]"):
                result = asyncio.run(auditor.run_audit(url))
    except A11yAuditError as e:
        raise click.ClickException(str(e))

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif isinstance(result, AuditFailure):
        print_failure(result)
    else:
        print_result(result, verbose=verbose)

    if isinstance(result, AuditFailure):
        ctx.exit(1)


@cli.command()
@click.argument("code")
@click.option("-c", "--config", "config_path", type=click.Path(dir_okay=False), help="TOML config file")
def explain(code: str, config_path: str | None):
    """Show priority and translation for a rule code."""
    cfg = _load(config_path)
    external = {}
    if cfg.translations.dictionary_path:
        try:
            external = load_external_dictionary(cfg.translations.dictionary_path)
        except A11yAuditError as e:
            raise click.ClickException(str(e))
    taxonomy = RuleTaxonomy.default(external)

    priority = taxonomy.classify(code)
    translation = taxonomy.translate(code)
    style = priority_style(priority)
    quick_win = priority is Priority.CRITICAL and taxonomy.is_quick_win(code)

    console.print()
    console.print(Panel(
        f"[bold]{escape(translation.title)}[/bold]\n\n"
        f"{escape(translation.description)}\n\n"
        f"[cyan]→ {escape(translation.fix)}[/cyan]",
        title=f"[{style}]{priority.value}[/]" + (" • quick win" if quick_win else ""),
        subtitle=f"[dim]{escape(code)}[/dim]",
        border_style=style,
    ))
    console.print()


@cli.command()
def info():
    """What the automated check covers, and what it does not."""
    click.echo(INFO_TEXT)


def main():
    """Entry point that handles both `a11y-audit URL` and `a11y-audit scan URL`."""
    args = sys.argv[1:]

    # If first arg looks like a URL (not a command), insert 'scan'
    if args and not args[0].startswith('-') and args[0] not in ['scan', 'explain', 'info', '--help', '--version']:
        if '.' in args[0] or args[0].startswith('localhost'):
            sys.argv.insert(1, 'scan')

    cli()


if __name__ == "__main__":
    main()
