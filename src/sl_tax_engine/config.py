"""Configuration management for the Sri Lanka tax engine."""

from pathlib import Path
from typing import Literal, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    supported_tax_years: Union[str, list[int]] = Field(
        default="2020,2021,2022,2023,2024,2025",
        alias="SUPPORTED_TAX_YEARS",
        validate_default=True,
    )

    # Audit risk (danger meter) thresholds in LKR
    audit_warning_threshold: float = Field(default=100_000.0, alias="AUDIT_WARNING_THRESHOLD")
    audit_danger_threshold: float = Field(default=500_000.0, alias="AUDIT_DANGER_THRESHOLD")

    @field_validator("supported_tax_years", mode="after")
    @classmethod
    def parse_tax_years(cls, v):
        """Parse tax years from comma-separated string or JSON list."""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            # Try JSON first
            if v.strip().startswith("["):
                import json
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Otherwise treat as comma-separated
            return [int(year.strip()) for year in v.split(",") if year.strip()]
        return v

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path(__file__).parent / "data")
    tax_tables_file: Optional[Path] = Field(
        default=None,
        alias="TAX_TABLES_FILE",
        description="Alternate regime/index table JSON (defaults to the packaged tables)",
    )

    @property
    def tax_tables_path(self) -> Path:
        return self.tax_tables_file or self.data_dir / "sl_tax_tables.json"

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False
        populate_by_name = True


# Global settings instance
settings = Settings()
