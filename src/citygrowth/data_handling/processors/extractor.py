"""
Population Column Extractor

This module reads the three columns the growth ranking needs (city name,
latest population, earliest population) out of a structured table.
"""

from dataclasses import dataclass
import logging
from typing import Any, List, Optional

import pandas as pd

from ...config.report_config import ReportConfig
from ...workbook.session import WorkbookSession


@dataclass
class ExtractedColumns:
    """
    Three aligned column reads, each a list of one-cell rows.

    Row 0 of every column is the header row, exactly as the table reports it.
    """

    names: List[List[Any]]
    latest: List[List[Any]]
    earliest: List[List[Any]]

    @property
    def row_count(self) -> int:
        """Number of data rows (header excluded)"""
        return max(len(self.names) - 1, 0)

    def to_frame(self) -> pd.DataFrame:
        """Data rows as a DataFrame of raw cell values (header skipped)"""
        return pd.DataFrame(
            {
                "name": [row[0] for row in self.names[1:]],
                "latest": [row[0] for row in self.latest[1:]],
                "earliest": [row[0] for row in self.earliest[1:]],
            },
            dtype=object,
        )


class ColumnExtractor:
    """
    Loads the configured columns of the population table through a session.

    The three loads are queued together and resolved by a single sync, which
    is the first synchronization point of a report run.
    """

    def __init__(self, config: Optional[ReportConfig] = None):
        self.config = config or ReportConfig()
        self.logger = self._setup_logging()

    def _setup_logging(self) -> logging.Logger:
        """Setup logging for the extractor"""
        logger = logging.getLogger(__name__)
        logger.setLevel(logging.INFO)

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def extract(self, session: WorkbookSession) -> ExtractedColumns:
        """
        Read the name, latest and earliest columns of the configured table.

        Raises:
            NotFoundError: If the table or any of the columns does not exist
        """
        table = session.tables.get_item(self.config.table_name)

        name_column = table.columns.get_item(self.config.name_column)
        latest_column = table.columns.get_item(self.config.latest_column)
        earliest_column = table.columns.get_item(self.config.earliest_column)

        name_column.load("values")
        latest_column.load("values")
        earliest_column.load("values")

        session.sync()

        columns = ExtractedColumns(
            names=name_column.values,
            latest=latest_column.values,
            earliest=earliest_column.values,
        )
        self.logger.info(
            f"Read {columns.row_count} rows from table '{self.config.table_name}'"
        )
        return columns


def extract_columns(
    session: WorkbookSession,
    table_name: str,
    name_column: str,
    latest_column: str,
    earliest_column: str,
) -> ExtractedColumns:
    """Read three named columns of ``table_name`` (header row included)"""
    config = ReportConfig(
        table_name=table_name,
        name_column=name_column,
        latest_column=latest_column,
        earliest_column=earliest_column,
    )
    return ColumnExtractor(config).extract(session)
