"""
Growth Ranker

Builds one record per city from the extracted columns, drops rows without an
earliest population figure, and keeps the cities with the largest growth.
"""

from dataclasses import dataclass
import logging
import math
from numbers import Real
from typing import Any, List, Optional, Tuple

import numpy as np
import pandas as pd

from ...config.report_config import LatestValuePolicy
from ...workbook.errors import DataQualityError
from .extractor import ExtractedColumns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CityGrowth:
    name: Any
    growth: float

    @property
    def has_growth(self) -> bool:
        return not (isinstance(self.growth, float) and math.isnan(self.growth))


@dataclass
class RankingSummary:
    rows_seen: int = 0
    rows_skipped: int = 0  # earliest value not a number
    rows_without_growth: int = 0  # latest value not a number (PROPAGATE)
    rows_qualifying: int = 0
    rows_ranked: int = 0


def is_number(value: Any) -> bool:
    """True for int/float cell values; bools and numeric-looking text are not numbers"""
    return isinstance(value, Real) and not isinstance(value, bool)


def _cell(column: List[List[Any]], index: int) -> Any:
    row = column[index] if index < len(column) else None
    return row[0] if row else None


def rank_with_summary(
    columns: ExtractedColumns,
    top_n: int = 10,
    latest_policy: LatestValuePolicy = LatestValuePolicy.PROPAGATE,
) -> Tuple[List[CityGrowth], RankingSummary]:
    """
    Rank cities by ``latest - earliest`` population, largest growth first.

    Row 0 is the header and is never ranked. Ties keep their input row order.

    Raises:
        DataQualityError: If a latest value is not a number and
            ``latest_policy`` is REJECT
    """
    summary = RankingSummary()
    records: List[CityGrowth] = []

    for i in range(1, len(columns.names)):
        summary.rows_seen += 1
        earliest = _cell(columns.earliest, i)
        latest = _cell(columns.latest, i)
        name = _cell(columns.names, i)

        if not is_number(earliest):
            logger.debug(f"Row {i} ({name!r}): earliest value {earliest!r} is not a number, skipped")
            summary.rows_skipped += 1
            continue

        if is_number(latest):
            growth = latest - earliest
        elif latest_policy == LatestValuePolicy.REJECT:
            raise DataQualityError(
                f"Row {i} ({name!r}): latest value {latest!r} is not a number",
                row_index=i,
                value=latest,
            )
        else:
            logger.warning(
                f"Row {i} ({name!r}): latest value {latest!r} is not a number, growth is NaN"
            )
            growth = np.nan

        record = CityGrowth(name=name, growth=growth)
        if not record.has_growth:
            summary.rows_without_growth += 1
        records.append(record)

    summary.rows_qualifying = len(records)
    if not records:
        return [], summary

    # Growth values stay untouched in the records; the float key is only for sorting
    df = pd.DataFrame(
        {
            "position": range(len(records)),
            "sort_key": pd.to_numeric(pd.Series([r.growth for r in records]), errors="coerce"),
        }
    )
    ordered = df.sort_values(
        "sort_key", ascending=False, kind="mergesort", na_position="last"
    )
    ranked = [records[pos] for pos in ordered["position"].head(top_n)]

    summary.rows_ranked = len(ranked)
    return ranked, summary


def rank_by_growth(
    columns: ExtractedColumns,
    top_n: int = 10,
    latest_policy: LatestValuePolicy = LatestValuePolicy.PROPAGATE,
) -> List[CityGrowth]:
    ranked, _ = rank_with_summary(columns, top_n=top_n, latest_policy=latest_policy)
    return ranked


class GrowthRanker:
    """Ranks extracted columns with the configured size and latest-value policy"""

    def __init__(
        self,
        top_n: int = 10,
        latest_policy: LatestValuePolicy = LatestValuePolicy.PROPAGATE,
    ):
        self.top_n = top_n
        self.latest_policy = latest_policy
        self.last_summary: Optional[RankingSummary] = None

    def rank(self, columns: ExtractedColumns) -> List[CityGrowth]:
        ranked, summary = rank_with_summary(
            columns, top_n=self.top_n, latest_policy=self.latest_policy
        )
        self.last_summary = summary
        logger.info(
            f"Ranked {summary.rows_ranked} of {summary.rows_qualifying} qualifying rows "
            f"({summary.rows_skipped} skipped without earliest value)"
        )
        return ranked
