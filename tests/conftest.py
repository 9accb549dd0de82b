"""
Pytest configuration and shared fixtures for citygrowth tests.
"""

import os

os.environ.setdefault("MPLBACKEND", "Agg")

from openpyxl import Workbook
from openpyxl.worksheet.table import Table
import pytest

from citygrowth.data_handling.processors.extractor import ExtractedColumns
from citygrowth.workbook.session import WorkbookSession

POPULATION_HEADERS = [
    "City",
    "State",
    "7/1/2014 population estimate",
    "4/1/1990 census population",
]

POPULATION_ROWS = [
    ("New York", "NY", 8491079, 7322564),
    ("Los Angeles", "CA", 3928864, 3485398),
    ("Chicago", "IL", 2722389, 2783726),
    ("Houston", "TX", 2239558, 1630553),
    ("Philadelphia", "PA", 1560297, 1585577),
    ("Phoenix", "AZ", 1537058, 983403),
    ("San Antonio", "TX", 1436697, 935933),
    ("San Diego", "CA", 1381069, 1110549),
    ("Dallas", "TX", 1281047, 1006877),
    ("San Jose", "CA", 1015785, 782248),
    ("Austin", "TX", 912791, 465622),
    ("Jacksonville", "FL", 853382, 635230),
    ("Fort Worth", "TX", 812238, 447619),
    ("Charlotte", "NC", 809958, 395934),
    # Not incorporated in 1990
    ("Frisco", "TX", 136791, None),
    ("Surprise", "AZ", 123546, "n/a"),
    ("Enterprise", "NV", 156000, "-"),
]

EXPECTED_TOP_10 = [
    ("New York", 1168515),
    ("Houston", 609005),
    ("Phoenix", 553655),
    ("San Antonio", 500764),
    ("Austin", 447169),
    ("Los Angeles", 443466),
    ("Charlotte", 414024),
    ("Fort Worth", 364619),
    ("Dallas", 274170),
    ("San Diego", 270520),
]


def write_population_workbook(
    path,
    rows=POPULATION_ROWS,
    headers=POPULATION_HEADERS,
    table_name="PopulationTable",
    sheet_title="Population",
):
    """Save a workbook holding ``rows`` in a structured table at A1."""
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    ws.append(list(headers))
    for row in rows:
        ws.append(list(row))

    last_row = len(rows) + 1 if rows else 2
    last_col = chr(ord("A") + len(headers) - 1)
    ws.add_table(Table(displayName=table_name, ref=f"A1:{last_col}{last_row}"))
    wb.save(path)
    return path


@pytest.fixture
def population_workbook(tmp_path):
    """Workbook file with the sample population table."""
    return write_population_workbook(tmp_path / "population.xlsx")


@pytest.fixture
def population_session(population_workbook):
    """Open session over the sample population workbook."""
    return WorkbookSession.open(population_workbook)


@pytest.fixture
def blank_session():
    """In-memory session over an empty workbook (one default sheet)."""
    return WorkbookSession(Workbook())


@pytest.fixture
def build_columns():
    """Build ExtractedColumns from (name, latest, earliest) tuples."""

    def _build(rows, headers=("City", "7/1/2014 population estimate", "4/1/1990 census population")):
        return ExtractedColumns(
            names=[[headers[0]]] + [[row[0]] for row in rows],
            latest=[[headers[1]]] + [[row[1]] for row in rows],
            earliest=[[headers[2]]] + [[row[2]] for row in rows],
        )

    return _build


@pytest.fixture
def population_rows():
    return list(POPULATION_ROWS)


@pytest.fixture
def expected_top_10():
    """Top 10 (city, growth) pairs of the sample population table."""
    return list(EXPECTED_TOP_10)


@pytest.fixture
def make_population_workbook():
    """Factory fixture wrapping write_population_workbook."""
    return write_population_workbook
