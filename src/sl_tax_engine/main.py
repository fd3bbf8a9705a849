"""Main entry point for the Sri Lanka tax engine."""

import logging
from datetime import date
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from sl_tax_engine.config import settings
from sl_tax_engine.engine import (
    build_asset_schedule,
    calculate_audit_risk,
    compute_tax,
    source_of_funds_warnings,
)
from sl_tax_engine.schemas.results import AssetSchedule, AuditRisk, TaxComputation, TaxReport
from sl_tax_engine.schemas.tables import TaxTables
from sl_tax_engine.snapshot import TaxpayerSnapshot, load_snapshot, scope_snapshot
from sl_tax_engine.tools.fiscal_year import format_fiscal_year, in_year
from sl_tax_engine.tools.tables import load_tax_tables

# Setup logging
console = Console(stderr=True)
logging.basicConfig(
    level=settings.log_level,
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True, console=console)],
)

logger = logging.getLogger(__name__)


class TaxAssessor:
    """Orchestrates tax computation, audit risk and the asset schedule for one fiscal year."""

    def __init__(
        self,
        snapshot: TaxpayerSnapshot,
        tax_year: str,
        owner_id: Optional[str] = None,
        tables: Optional[TaxTables] = None,
        generated_at: Optional[date] = None,
    ) -> None:
        """Initialize the assessor.

        Args:
            snapshot: All taxpayer records
            tax_year: Fiscal year label, e.g. "2024" for 2024/2025
            owner_id: Entity to assess; None assesses the whole family
            tables: Regime and index tables (default: packaged tables)
            generated_at: Date stamped on reports (default: unstamped)
        """
        self.tax_year = str(tax_year)
        self.owner_id = owner_id
        self.generated_at = generated_at
        self.tables = tables or load_tax_tables()
        self.snapshot = scope_snapshot(snapshot, owner_id)

        logger.info(
            f"Initialized assessor for {format_fiscal_year(self.tax_year)} "
            f"({'entity ' + owner_id if owner_id else 'family view'})"
        )

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        tax_year: str,
        owner_id: Optional[str] = None,
        tables: Optional[TaxTables] = None,
        generated_at: Optional[date] = None,
    ) -> "TaxAssessor":
        return cls(
            load_snapshot(path), tax_year, owner_id=owner_id, tables=tables, generated_at=generated_at
        )

    def compute_tax(self) -> TaxComputation:
        return compute_tax(
            self.snapshot.incomes,
            self.snapshot.assets,
            self.tax_year,
            self.tables,
            solar_investment=self.snapshot.solar_investment,
            certificates=self.snapshot.certificates,
        )

    def audit_risk(self) -> AuditRisk:
        return calculate_audit_risk(
            self.snapshot.assets,
            self.snapshot.liabilities,
            self.snapshot.incomes,
            self.tax_year,
            self.tables,
            certificates=self.snapshot.certificates,
            warning_threshold=settings.audit_warning_threshold,
            danger_threshold=settings.audit_danger_threshold,
        )

    def asset_schedule(self) -> AssetSchedule:
        return build_asset_schedule(
            self.snapshot.assets,
            self.snapshot.liabilities,
            self.tax_year,
            self.tables,
            owner_id=self.owner_id,
        )

    def validation_warnings(self) -> list[str]:
        """Warnings that do not stop the computation but belong in the report."""
        warnings = []
        if int(self.tax_year) not in settings.supported_tax_years:
            warnings.append(
                f"Fiscal year {format_fiscal_year(self.tax_year)} is outside the supported years; "
                f"the nearest regime was applied"
            )
        if self.owner_id is not None and self.snapshot.entity(self.owner_id) is None:
            warnings.append(f"Entity '{self.owner_id}' is not defined in the snapshot")

        acquired = [a for a in self.snapshot.assets if in_year(a.date_acquired, self.tax_year)]
        warnings.extend(source_of_funds_warnings(acquired))
        return warnings

    def assess(self) -> TaxReport:
        """Run the full assessment for the fiscal year.

        Returns:
            TaxReport with the computation, audit risk and asset schedule
        """
        report = TaxReport(
            tax_year=self.tax_year,
            owner_id=self.owner_id,
            generated_at=self.generated_at,
            tables_version=self.tables.version,
            computation=self.compute_tax(),
            audit_risk=self.audit_risk(),
            asset_schedule=self.asset_schedule(),
            validation_warnings=self.validation_warnings(),
        )
        logger.info(
            f"Assessment complete: payable {report.computation.tax_payable:,.2f}, "
            f"risk {report.audit_risk.risk_level}, {len(report.validation_warnings)} warning(s)"
        )
        return report
