"""
Command Line Interface for PyNIH - Python interface for the NIH RePORTER API

This module provides a Typer-based CLI for searching NIH RePORTER projects.
"""

import json
import logging
import traceback
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .client import NIHReporterClient
from .config import CLIConfig, DisplayConfig
from .exceptions import QueryError
from .models import Project
from .query import ProjectQuery
from .utils import get_funding_statistics

logger = logging.getLogger(__name__)

# Main app
app = typer.Typer(
    name="pynih",
    help="PyNIH - Python interface for the NIH RePORTER API",
    epilog="Visit https://api.reporter.nih.gov for API documentation."
)

console = Console()

debug_mode: bool = False


def configure_logging(debug: bool):
    """Route library logging through rich when debugging"""
    global debug_mode
    debug_mode = debug
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, rich_tracebacks=True)]
        )


def save_json_to_file(data: List[dict], filename: str) -> None:
    """Save JSON data to a file"""
    try:
        with open(filename, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=DisplayConfig.JSON_INDENT, ensure_ascii=False, default=str)
    except OSError as e:
        console.print(f"[{DisplayConfig.ERROR_COLOR}]Error saving JSON file: {e}[/{DisplayConfig.ERROR_COLOR}]")
        raise typer.Exit(1)
    console.print(f"[{DisplayConfig.SUCCESS_COLOR}]✓ JSON data saved to: {filename}[/{DisplayConfig.SUCCESS_COLOR}]")


def handle_exception(e: Exception, operation: str = "operation"):
    """Handle exceptions with optional debug information"""
    if debug_mode:
        console.print(f"[red]Error during {operation}:[/red]")
        console.print(f"[red]{type(e).__name__}: {str(e)}[/red]")
        console.print("\n[yellow]Full traceback:[/yellow]")
        console.print(traceback.format_exc())
    else:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[dim]Use --debug flag to see full traceback[/dim]")


def format_project_table(projects: List[Project], title: str = "Projects") -> Table:
    """Format projects as a rich table"""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Appl ID", style="cyan", justify="right")
    table.add_column("Project", style="green", min_width=15)
    table.add_column("Title", style="white", min_width=40)
    table.add_column("Organization", style="yellow", min_width=20)
    table.add_column("FY", justify="right", style="blue")
    table.add_column("Amount (USD)", justify="right", style="red")

    max_len = DisplayConfig.MAX_TITLE_LENGTH
    for project in projects:
        title_text = project.project_title or "N/A"
        title_display = title_text[:max_len] + "..." if len(title_text) > max_len else title_text
        amount = f"${project.award_amount:,.0f}" if project.award_amount is not None else "N/A"

        table.add_row(
            str(project.appl_id),
            project.project_num,
            title_display,
            project.organization.org_name or "N/A",
            str(project.fiscal_year),
            amount
        )

    return table


@app.command("test-connection")
def test_connection(
    debug: bool = typer.Option(False, "--debug", help="Show request details and full tracebacks")
):
    """Test connection to the NIH RePORTER API"""
    configure_logging(debug)
    client = NIHReporterClient(debug=debug)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Testing connection...", total=None)
        success = client.run_async(client.test_connection())
        progress.update(task, completed=100)

    if success:
        console.print("[green]✓ Successfully connected to NIH RePORTER API![/green]")
    else:
        console.print("[red]✗ Failed to connect to NIH RePORTER API[/red]")
        raise typer.Exit(1)


@app.command("projects")
def search_projects(
    pi_ids: List[int] = typer.Option([], "--pi", help="PI profile ID (repeatable, matches ANY)"),
    years: List[int] = typer.Option([], "--year", "-y", help="Fiscal year (repeatable, matches ANY)"),
    relevance: bool = typer.Option(False, "--relevance", help="Rank closest matches first"),
    inactive: bool = typer.Option(False, "--inactive", help="Leave active projects out of the results"),
    exclude: List[str] = typer.Option([], "--exclude", "-x", help="Field to exclude from results (repeatable)"),
    sort_field: Optional[str] = typer.Option(None, "--sort-field", help="Field to sort by (e.g. ApplId)"),
    sort_order: Optional[str] = typer.Option(None, "--sort-order", help="Sort order: asc or desc"),
    limit: int = typer.Option(CLIConfig.DEFAULT_LIMIT, "--limit", "-l", help="Page size"),
    offset: int = typer.Option(0, "--offset", help="Offset of the first record"),
    all_results: bool = typer.Option(False, "--all", help="Fetch all pages, not just the first"),
    show_stats: bool = typer.Option(False, "--stats", help="Show funding statistics"),
    json_file: Optional[str] = typer.Option(None, "--json", help="Save results to JSON file"),
    debug: bool = typer.Option(False, "--debug", help="Show request details and full tracebacks")
):
    """Search NIH RePORTER projects"""
    configure_logging(debug)
    try:
        query = (
            ProjectQuery(client=NIHReporterClient(debug=debug))
            .set_pi_profile_ids(pi_ids)
            .set_fiscal_years(years)
            .set_use_relevance(relevance)
            .set_include_active_projects(not inactive)
            .set_excluded_fields(exclude)
            .set_limit(limit)
            .set_offset(offset)
        )
        if sort_field:
            query.set_sort_field(sort_field)
        if sort_order:
            query.set_sort_order(sort_order)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            if all_results:
                task = progress.add_task("Fetching all projects...", total=None)
                projects = query.fetch_all_sync()
            else:
                task = progress.add_task("Searching projects...", total=None)
                projects = query.execute_sync()
            progress.update(task, completed=100, description=f"Fetched {len(projects)} projects")
    except QueryError as e:
        handle_exception(e, "project search")
        raise typer.Exit(1)

    if show_stats and projects:
        stats = get_funding_statistics(projects)
        stats_panel = Panel(
            f"Total Funding: ${stats['total_funding']:,.2f}\n"
            f"Average Funding: ${stats['average_funding']:,.2f}\n"
            f"Median Funding: ${stats['median_funding']:,.2f}\n"
            f"Number of Projects: {stats['project_count']}",
            title="Funding Statistics",
            border_style="green"
        )
        console.print(stats_panel)

    if json_file:
        save_json_to_file([p.to_dict() for p in projects], json_file)
    elif projects:
        console.print(format_project_table(projects, "NIH RePORTER Projects"))
    else:
        console.print("[yellow]No projects found.[/yellow]")


def main():
    """Main entry point for the CLI"""
    # Load environment variables from .env file in current working directory
    load_dotenv()
    app()


if __name__ == "__main__":
    main()
