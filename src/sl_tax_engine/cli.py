"""Command-line interface for the Sri Lanka tax engine."""

from datetime import date
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from sl_tax_engine.config import settings
from sl_tax_engine.display_utils import (
    print_asset_schedule,
    print_audit_risk,
    print_tax_breakdown,
    print_tax_computation,
    print_tax_report,
)
from sl_tax_engine.engine import get_tax_breakdown
from sl_tax_engine.main import TaxAssessor
from sl_tax_engine.tools.currency import format_lkr, parse_currency_string
from sl_tax_engine.tools.fiscal_year import (
    current_fiscal_year,
    fiscal_years_from,
    format_fiscal_year,
    recent_fiscal_years,
)
from sl_tax_engine.tools.tables import load_tax_tables

app = typer.Typer(
    name="sl-tax",
    help="Sri Lanka personal income tax and audit-risk calculator",
    add_completion=False,
)
console = Console()

SNAPSHOT_OPTION = typer.Option(..., "--snapshot", "-s", help="JSON file with taxpayer records")
YEAR_OPTION = typer.Option(None, "--year", "-y", help="Fiscal year start, e.g. 2024 for 2024/2025")
OWNER_OPTION = typer.Option(None, "--owner", "-o", help="Entity ID to assess (default: whole family)")
TABLES_OPTION = typer.Option(None, "--tables", help="Alternate tax tables JSON")


def _assessor(
    snapshot: Path,
    year: Optional[str],
    owner: Optional[str],
    tables: Optional[Path],
) -> TaxAssessor:
    return TaxAssessor.from_file(
        snapshot,
        year or current_fiscal_year(),
        owner_id=owner,
        tables=load_tax_tables(tables),
        generated_at=date.today(),
    )


@app.command()
def compute(
    snapshot: Path = SNAPSHOT_OPTION,
    year: Optional[str] = YEAR_OPTION,
    owner: Optional[str] = OWNER_OPTION,
    tables: Optional[Path] = TABLES_OPTION,
):
    """Compute income tax payable for a fiscal year."""
    try:
        computation = _assessor(snapshot, year, owner, tables).compute_tax()
        print_tax_computation(computation)
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(1)


@app.command()
def risk(
    snapshot: Path = SNAPSHOT_OPTION,
    year: Optional[str] = YEAR_OPTION,
    owner: Optional[str] = OWNER_OPTION,
    tables: Optional[Path] = TABLES_OPTION,
):
    """Show the audit risk (danger meter) for a fiscal year."""
    try:
        audit_risk = _assessor(snapshot, year, owner, tables).audit_risk()
        print_audit_risk(audit_risk)
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(1)


@app.command()
def assets(
    snapshot: Path = SNAPSHOT_OPTION,
    year: Optional[str] = YEAR_OPTION,
    owner: Optional[str] = OWNER_OPTION,
    tables: Optional[Path] = TABLES_OPTION,
):
    """Show the statement of assets and liabilities for a fiscal year."""
    try:
        schedule = _assessor(snapshot, year, owner, tables).asset_schedule()
        print_asset_schedule(schedule)
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(1)


@app.command()
def assess(
    snapshot: Path = SNAPSHOT_OPTION,
    year: Optional[str] = YEAR_OPTION,
    owner: Optional[str] = OWNER_OPTION,
    tables: Optional[Path] = TABLES_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", help="Write the report as JSON to this file"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON instead of tables"),
):
    """Run the full assessment: tax, audit risk and asset schedule."""
    try:
        report = _assessor(snapshot, year, owner, tables).assess()
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(1)

    if as_json:
        typer.echo(report.model_dump_json(indent=2))
    else:
        print_tax_report(report)

    if output:
        output.write_text(report.model_dump_json(indent=2))
        console.print(f"\n[green]✓[/green] Report written to {output}")


@app.command()
def breakdown(
    income: str = typer.Argument(..., help="Taxable income, e.g. 3,000,000"),
    year: Optional[str] = YEAR_OPTION,
    tables: Optional[Path] = TABLES_OPTION,
):
    """Show how a taxable income is taxed bracket by bracket."""
    try:
        label = year or current_fiscal_year()
        taxable_income = parse_currency_string(income)
        slices = get_tax_breakdown(taxable_income, label, load_tax_tables(tables))
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(1)

    print_tax_breakdown(slices, title=f"{format_lkr(taxable_income)} in {format_fiscal_year(label)}")


@app.command()
def years(
    start: Optional[str] = typer.Option(None, "--from", help="List every fiscal year from this one"),
    count: int = typer.Option(5, "--count", "-n", help="Number of recent fiscal years to list"),
    tables: Optional[Path] = TABLES_OPTION,
):
    """List fiscal years with the personal relief that applies to each."""
    try:
        tax_tables = load_tax_tables(tables)
        labels = fiscal_years_from(start) if start else recent_fiscal_years(count)
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(1)

    years_table = Table(show_header=True, header_style="bold cyan")
    years_table.add_column("Fiscal Year", style="cyan")
    years_table.add_column("Period", style="dim")
    years_table.add_column("Personal Relief", justify="right")
    years_table.add_column("Top Rate", justify="right")
    years_table.add_column("Supported", justify="center")

    for label in labels:
        regime = tax_tables.regime_for(label)
        years_table.add_row(
            format_fiscal_year(label),
            f"1 Apr {label} - 31 Mar {int(label) + 1}",
            format_lkr(regime.personal_relief),
            f"{regime.brackets[-1].rate * 100:g}%",
            "✓" if int(label) in settings.supported_tax_years else "",
        )

    console.print(years_table)


@app.command()
def version():
    """Show version information."""
    try:
        from sl_tax_engine import __version__
        console.print(f"Sri Lanka Tax Engine v{__version__}")
    except ImportError:
        console.print("Sri Lanka Tax Engine (version unknown)")


if __name__ == "__main__":
    app()
