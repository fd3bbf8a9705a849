"""Display utilities for consistent formatting of tax results."""

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from sl_tax_engine.schemas.results import (
    AssetSchedule,
    AuditRisk,
    TaxBracketSlice,
    TaxComputation,
    TaxReport,
)
from sl_tax_engine.tools.currency import format_lkr
from sl_tax_engine.tools.fiscal_year import format_fiscal_year

console = Console()

RISK_STYLES = {"safe": "bold green", "warning": "bold yellow", "danger": "bold red"}


def _amount(value: Optional[float]) -> str:
    return f"{value:,.2f}" if value is not None else "-"


def print_tax_breakdown(slices: list[TaxBracketSlice], title: str = "Tax by Bracket") -> None:
    """Print the per-bracket slices of taxable income.

    Args:
        slices: Slices from get_tax_breakdown
        title: Table title
    """
    if not slices:
        console.print("[dim]No taxable income[/dim]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Band", style="cyan")
    table.add_column("Rate", justify="right", style="green")
    table.add_column("Amount (Rs.)", justify="right")
    table.add_column("Tax (Rs.)", justify="right", style="bold")

    for s in slices:
        band = f"{_amount(s.lower)} - {_amount(s.upper)}" if s.upper is not None else f"over {_amount(s.lower)}"
        table.add_row(band, s.rate_label, _amount(s.amount), _amount(s.tax))

    table.add_row("", "", Text("Total", style="bold"), _amount(sum(s.tax for s in slices)))
    console.print(table)


def print_tax_computation(computation: TaxComputation) -> None:
    """Print the tax computation summary for a fiscal year."""
    income = computation.income

    table = Table(
        title=f"Tax Computation {format_fiscal_year(computation.tax_year)}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Item", style="cyan")
    table.add_column("Amount (Rs.)", justify="right")

    table.add_row("Employment income", _amount(income.employment_income))
    table.add_row("Business income", _amount(income.business_income))
    table.add_row("Investment income", _amount(income.investment_income))
    table.add_row("Other income", _amount(income.other_income))
    table.add_row(Text("Assessable income", style="bold"), _amount(computation.assessable_income))
    table.add_row("Personal relief", f"({_amount(computation.reliefs.personal_relief)})")
    if computation.reliefs.solar_relief:
        table.add_row("Solar relief", f"({_amount(computation.reliefs.solar_relief)})")
    table.add_row(Text("Taxable income", style="bold"), _amount(computation.taxable_income))
    table.add_row("Tax on income", _amount(computation.tax_on_income))
    table.add_row("APIT (cage 903)", f"({_amount(computation.tax_credits.apit)})")
    table.add_row("WHT (cage 908)", f"({_amount(computation.tax_credits.wht)})")
    table.add_row(Text("Tax payable", style="bold green"), Text(_amount(computation.tax_payable), style="bold green"))

    console.print(table)

    if income.derived_income:
        derived = Table(title="Interest and Dividends from Assets", show_header=True, header_style="bold magenta")
        derived.add_column("Source", style="cyan")
        derived.add_column("Type", style="green")
        derived.add_column("Original", justify="right", style="dim")
        derived.add_column("Amount (Rs.)", justify="right")
        for line in income.derived_income:
            derived.add_row(
                line.source,
                line.type,
                f"{line.currency} {_amount(line.original_amount)}",
                _amount(line.amount),
            )
        console.print(derived)


def print_audit_risk(risk: AuditRisk) -> None:
    """Print the danger meter: itemized inflows and outflows with the risk level."""
    table = Table(
        title=f"Audit Risk {format_fiscal_year(risk.tax_year)}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Outflows", style="red")
    table.add_column("Rs.", justify="right")
    table.add_column("Inflows", style="green")
    table.add_column("Rs.", justify="right")

    outflows = [
        ("Asset purchases", risk.outflows.asset_growth),
        ("Savings deposits", risk.outflows.balance_increases),
        ("Broker cash deposits", risk.outflows.stock_cash_deposits),
        ("Property expenses", risk.outflows.property_expenses),
        ("Loan repayments", risk.outflows.loan_payments),
        ("Living expenses (derived)", risk.derived_living_expenses),
    ]
    inflows = [
        ("Net income", risk.inflows.net_income),
        ("New loans", risk.inflows.new_loans),
        ("Asset sales", risk.inflows.asset_sales),
        ("Savings withdrawals", risk.inflows.balance_decreases),
        ("Broker cash withdrawals", risk.inflows.stock_cash_withdrawals),
        ("", None),
    ]
    for (out_label, out_value), (in_label, in_value) in zip(outflows, inflows):
        table.add_row(out_label, _amount(out_value), in_label, _amount(in_value) if in_label else "")

    table.add_row(
        Text("Total", style="bold"),
        _amount(risk.actual_outflows + risk.derived_living_expenses),
        Text("Total", style="bold"),
        _amount(risk.actual_inflows),
    )
    console.print(table)

    style = RISK_STYLES.get(risk.risk_level, "bold")
    console.print(
        f"Risk score: [{style}]{format_lkr(risk.risk_score)}[/{style}]  "
        f"Level: [{style}]{risk.risk_level.upper()}[/{style}]"
    )


def print_asset_schedule(schedule: AssetSchedule) -> None:
    """Print the statement of assets and liabilities."""
    if not schedule.lines:
        console.print("[dim]No assets held in this fiscal year[/dim]")
        return

    table = Table(
        title=f"Assets and Liabilities {format_fiscal_year(schedule.tax_year)}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Cage", style="dim")
    table.add_column("Description", style="cyan", no_wrap=False)
    table.add_column("Acquired", style="yellow")
    table.add_column("Cost (Rs.)", justify="right")
    table.add_column("Market Value (Rs.)", justify="right", style="bold")
    table.add_column("Share", justify="right", style="dim")

    for line in schedule.lines:
        table.add_row(
            line.cage,
            line.description or line.asset_id,
            line.date_acquired.isoformat(),
            _amount(line.cost),
            _amount(line.market_value),
            f"{line.ownership_fraction:.0%}",
        )

    console.print(table)
    console.print(f"  Total assets: [green]{format_lkr(schedule.total_market_value)}[/green]")
    console.print(f"  Total liabilities: [red]{format_lkr(schedule.total_liabilities)}[/red]")
    console.print(f"  Net worth: [bold]{format_lkr(schedule.net_worth)}[/bold]")


def print_tax_report(report: TaxReport) -> None:
    """Print the full assessment report."""
    scope = f"entity {report.owner_id}" if report.owner_id else "family"
    console.print(
        f"\n[bold blue]Sri Lanka Tax Assessment - {format_fiscal_year(report.tax_year)} ({scope})[/bold blue]"
    )
    stamp = f", generated {report.generated_at.isoformat()}" if report.generated_at else ""
    console.print(f"[dim]Tables v{report.tables_version}{stamp}[/dim]\n")

    print_tax_computation(report.computation)
    print_tax_breakdown(report.computation.breakdown)
    print_audit_risk(report.audit_risk)
    print_asset_schedule(report.asset_schedule)

    if report.validation_warnings:
        console.print(f"\n[yellow]⚠️  Warnings ({len(report.validation_warnings)}):[/yellow]")
        for warning in report.validation_warnings:
            console.print(f"  • {warning}")
