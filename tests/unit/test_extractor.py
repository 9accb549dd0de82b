"""
Unit tests for reading the population columns.
"""

import pytest

from citygrowth.config.report_config import ReportConfig
from citygrowth.data_handling.processors.extractor import ColumnExtractor, extract_columns
from citygrowth.workbook.errors import NotFoundError


def test_extract_reads_three_aligned_columns(population_session, population_rows):
    columns = ColumnExtractor().extract(population_session)

    assert columns.names[0] == ["City"]
    assert columns.latest[0] == ["7/1/2014 population estimate"]
    assert columns.earliest[0] == ["4/1/1990 census population"]
    assert columns.row_count == len(population_rows)
    assert columns.names[1:3] == [["New York"], ["Los Angeles"]]
    assert columns.earliest[15] == [None]


def test_extract_uses_one_sync(population_session):
    ColumnExtractor().extract(population_session)

    assert population_session.sync_count == 1
    assert population_session.pending == 0


def test_extract_missing_column(population_session):
    config = ReportConfig(earliest_column="1980 census")

    with pytest.raises(NotFoundError) as exc_info:
        ColumnExtractor(config).extract(population_session)

    assert "1980 census" in str(exc_info.value)


def test_extract_columns_function(population_session):
    columns = extract_columns(
        population_session, "PopulationTable", "State", "City", "State"
    )

    assert columns.names[1] == ["NY"]
    assert columns.latest[1] == ["New York"]


def test_to_frame_skips_header(population_session, population_rows):
    df = ColumnExtractor().extract(population_session).to_frame()

    assert list(df.columns) == ["name", "latest", "earliest"]
    assert len(df) == len(population_rows)
    assert df.iloc[0]["name"] == "New York"
    assert df.iloc[0]["latest"] == 8491079
