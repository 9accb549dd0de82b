"""
Report Configuration

Defines the settings that drive the growth report: where the population data
lives in the workbook, how many cities to rank, and how the output sheet and
chart are laid out.
"""

from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


class LatestValuePolicy(Enum):
    """What to do when the latest population of a row is not a number"""

    PROPAGATE = "propagate"  # growth becomes NaN and sorts last
    REJECT = "reject"  # raise DataQualityError


@dataclass
class ReportConfig:
    """
    Configuration for the growth report

    Each field controls one aspect of how the population table is read and how
    the ranking is written back to the workbook.
    """

    # INPUT TABLE
    table_name: str = "PopulationTable"
    """
    Name of the structured table holding the population data.
    Looked up across every worksheet of the workbook (case-insensitive).
    """

    name_column: str = "City"
    """Header of the column holding the city names"""

    latest_column: str = "7/1/2014 population estimate"
    """Header of the column holding the most recent population figure"""

    earliest_column: str = "4/1/1990 census population"
    """
    Header of the column holding the earliest population figure.
    Rows where this value is not a number are left out of the ranking.
    """

    # RANKING
    top_n: int = 10
    """Number of cities kept after sorting by growth (fewer if fewer qualify)"""

    latest_policy: LatestValuePolicy = LatestValuePolicy.PROPAGATE
    """
    Handling of rows whose earliest value is a number but whose latest value
    is not.

    PROPAGATE (default):
    - growth is NaN, a warning is logged
    - NaN rows sort after every numeric row and render as empty cells

    REJECT:
    - the run stops with a DataQualityError naming the row
    """

    # OUTPUT SHEET
    sheet_name: str = "Top 10 Growing Cities"
    """
    Worksheet the ranking is written to. An existing sheet with this name is
    deleted first, so re-running produces one sheet, not two.
    """

    title: str = "Top 10 Growing Cities"
    """Text of the merged title cell above the table"""

    title_range: str = "B2:D2"
    """Merged cell range holding the sheet title"""

    header_range: str = "B4:D4"
    """Header row of the output table; ranked rows are appended below it"""

    number_format: str = "#,##"
    """Number format applied to the growth column"""

    # CHART
    chart_title: str = "Population Growth between 1990 and 2014"

    chart_anchor: str = "F2"
    """Top-left cell of the chart"""

    chart_rows: int = 20
    """Chart height in rows, counted from the anchor"""

    chart_columns: int = 10
    """Chart width in columns, counted from the anchor"""

    # EXTRAS
    save_preview: bool = False
    """Also render the ranking as a PNG bar chart with matplotlib"""

    def __post_init__(self):
        if isinstance(self.latest_policy, str):
            self.latest_policy = LatestValuePolicy(self.latest_policy.lower())
        if self.top_n < 1:
            raise ValueError(f"top_n must be at least 1, got {self.top_n}")
        if self.chart_rows < 1 or self.chart_columns < 1:
            raise ValueError("chart_rows and chart_columns must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown report settings: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ReportConfig":
        """Load settings from a YAML mapping; missing keys keep their defaults"""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        return cls.from_dict(data)

    def with_overrides(self, **overrides: Optional[Any]) -> "ReportConfig":
        """Copy of this config with every non-None override applied"""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ReportConfig.from_dict(values)
