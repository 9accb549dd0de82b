"""
Data Validators

This module provides validation classes for checking the extracted columns
and the resulting ranking. Validators return a list of messages instead of
raising, so the pipeline can log them as warnings.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

import pandas as pd

from ..processors.extractor import ExtractedColumns
from ..processors.ranker import CityGrowth, is_number


class BaseDataValidator(ABC):
    """Base class for data validators"""

    @abstractmethod
    def validate(self, data: Any) -> List[str]:
        """Validate data and return list of error messages"""
        pass


class ColumnValidator(BaseDataValidator):
    """Validator for the three columns read from the population table"""

    def validate(self, columns: ExtractedColumns) -> List[str]:
        errors = []

        lengths = {len(columns.names), len(columns.latest), len(columns.earliest)}
        if len(lengths) > 1:
            errors.append(
                f"Columns are not aligned: names={len(columns.names)}, "
                f"latest={len(columns.latest)}, earliest={len(columns.earliest)}"
            )
            return errors

        if not columns.names:
            errors.append("Columns are empty (no header row)")
            return errors

        if columns.row_count == 0:
            errors.append("Table has a header row but no data rows")
            return errors

        df = columns.to_frame()

        missing_earliest = (~df["earliest"].map(is_number).astype(bool)).sum()
        if missing_earliest > 0:
            errors.append(f"Found {missing_earliest} rows without a numeric earliest value")

        missing_latest = (~df["latest"].map(is_number).astype(bool)).sum()
        if missing_latest > 0:
            errors.append(f"Found {missing_latest} rows without a numeric latest value")

        duplicates = df["name"].duplicated().sum()
        if duplicates > 0:
            errors.append(f"Found {duplicates} duplicate city names")

        return errors


class RankingValidator(BaseDataValidator):
    """Validator for a growth ranking"""

    def __init__(self, top_n: int = 10, columns: Optional[ExtractedColumns] = None):
        self.top_n = top_n
        self.columns = columns

    def validate(self, ranking: List[CityGrowth]) -> List[str]:
        errors = []

        if len(ranking) > self.top_n:
            errors.append(f"Ranking has {len(ranking)} entries, expected at most {self.top_n}")

        growths = pd.Series([r.growth for r in ranking], dtype=float)
        numeric = growths.dropna()
        if not numeric.is_monotonic_decreasing:
            errors.append("Ranking is not sorted by growth in descending order")
        missing = growths.isna().tolist()
        if any(a and not b for a, b in zip(missing, missing[1:])):
            errors.append("Entries without growth are ranked above numeric entries")

        if self.columns is not None:
            errors.extend(self._check_against_source(ranking))

        return errors

    def _check_against_source(self, ranking: List[CityGrowth]) -> List[str]:
        errors = []
        header = self.columns.names[0][0] if self.columns.names else None
        df = self.columns.to_frame()

        for record in ranking:
            if record.name == header and header not in set(df["name"]):
                errors.append(f"Header value {header!r} leaked into the ranking")
                continue
            if not record.has_growth:
                continue
            matches = df[df["name"] == record.name]
            if matches.empty:
                errors.append(f"City {record.name!r} is not in the source table")
                continue
            expected = [
                row.latest - row.earliest
                for row in matches.itertuples(index=False)
                if is_number(row.latest) and is_number(row.earliest)
            ]
            if record.growth not in expected:
                errors.append(
                    f"City {record.name!r}: growth {record.growth} does not match "
                    f"latest - earliest"
                )

        return errors
