"""
Workbook Session

Deferred-execution access to an Excel workbook backed by openpyxl.

Proxy objects handed out by a session do not touch the workbook when their
methods are called. Reads (``load("values")``, ``get_item_or_none``) and
writes (values, merges, tables, charts, ...) are queued as requests and only
materialized, in order, when ``session.sync()`` is called. Reading a loaded
property before the sync that resolves it raises ``PropertyNotLoadedError``.

Range geometry is resolved lazily as well: a range taken from a table before
rows are appended to it covers those rows once the queue is flushed.
"""

from copy import copy
from dataclasses import dataclass
from enum import Enum
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from openpyxl import load_workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.chart import BarChart, Reference
from openpyxl.drawing.spreadsheet_drawing import AnchorMarker, TwoCellAnchor
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.cell_range import CellRange
from openpyxl.worksheet.table import Table, TableStyleInfo
from openpyxl.worksheet.worksheet import Worksheet
from openpyxl.utils import get_column_letter

from .errors import (
    HostOperationError,
    NotFoundError,
    PropertyNotLoadedError,
    SessionError,
)

logger = logging.getLogger(__name__)

DEFAULT_TABLE_STYLE = "TableStyleMedium2"

RangeResolver = Callable[[Worksheet], CellRange]


class ChartType(Enum):
    """Chart types the session can build"""

    COLUMN_CLUSTERED = "columnClustered"


@dataclass
class _Request:
    description: str
    action: Callable[[], None]


class WorkbookSession:
    """
    Request queue and flush point for one workbook.

    The session is passed explicitly to every stage that reads or writes the
    workbook. Used as a context manager, a clean exit flushes the queue and
    saves the workbook; an exception leaves the file on disk untouched.
    """

    def __init__(
        self,
        workbook: Workbook,
        path: Optional[Union[str, Path]] = None,
        output_path: Optional[Union[str, Path]] = None,
    ):
        self.workbook = workbook
        self.path = Path(path) if path else None
        self.output_path = Path(output_path) if output_path else self.path
        self.sync_count = 0
        self._queue: List[_Request] = []

        self.tables = TableCollection(self)
        self.worksheets = WorksheetCollection(self)

    @classmethod
    def open(
        cls,
        path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
    ) -> "WorkbookSession":
        """Load an .xlsx file and wrap it in a session"""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Workbook not found: {path}")

        logger.info(f"Opening workbook: {path}")
        return cls(load_workbook(path), path=path, output_path=output_path)

    @property
    def pending(self) -> int:
        """Number of requests waiting for the next sync"""
        return len(self._queue)

    def enqueue(self, description: str, action: Callable[[], None]) -> None:
        self._queue.append(_Request(description, action))

    def sync(self) -> None:
        """Materialize every queued request in order.

        The first failing request aborts the flush; requests queued after it
        are discarded.
        """
        requests, self._queue = self._queue, []
        self.sync_count += 1
        logger.debug(f"sync #{self.sync_count}: {len(requests)} request(s)")

        for position, request in enumerate(requests):
            try:
                request.action()
            except SessionError as e:
                e.debug_info.setdefault("statement", request.description)
                e.debug_info.setdefault("position", position)
                raise
            except Exception as e:
                raise HostOperationError(
                    f"{request.description} failed: {e}",
                    debug_info={
                        "statement": request.description,
                        "position": position,
                        "errorLocation": type(e).__name__,
                    },
                ) from e

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        target = Path(path) if path else self.output_path
        if target is None:
            raise ValueError("No output path given and session was not opened from a file")

        target.parent.mkdir(parents=True, exist_ok=True)
        self.workbook.save(target)
        logger.info(f"Saved workbook: {target}")
        return target

    def __enter__(self) -> "WorkbookSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.sync()
            self.save()
        else:
            self._queue = []
        return False

    # Lookups used by proxies at flush time

    def _find_worksheet(self, name: str) -> Optional[Worksheet]:
        for ws in self.workbook.worksheets:
            if ws.title.lower() == name.lower():
                return ws
        return None

    def _find_table(self, name: str) -> Optional[Tuple[Worksheet, Table]]:
        for ws in self.workbook.worksheets:
            # TableList.items() yields (name, ref) pairs, not tables
            for table in ws.tables.values():
                if table.displayName.lower() == name.lower():
                    return ws, table
        return None

    def _next_table_name(self) -> str:
        taken = {
            table_name.lower()
            for ws in self.workbook.worksheets
            for table_name in ws.tables.keys()
        }
        index = 1
        while f"table{index}" in taken:
            index += 1
        return f"Table{index}"


def run_batch(
    path: Union[str, Path],
    batch: Callable[[WorkbookSession], Any],
    output_path: Optional[Union[str, Path]] = None,
) -> Any:
    """Open a workbook, run ``batch`` against it, then flush and save."""
    with WorkbookSession.open(path, output_path=output_path) as session:
        result = batch(session)
    return result


class _ClientObject:
    """Proxy with properties that must be loaded and synced before reading"""

    _loadable: Tuple[str, ...] = ()

    def __init__(self, session: WorkbookSession):
        self._session = session
        self._loaded: Dict[str, Any] = {}

    def _describe(self) -> str:
        raise NotImplementedError

    def _read_property(self, prop: str) -> Any:
        raise NotImplementedError

    def load(self, *properties: str) -> "_ClientObject":
        for prop in properties:
            if prop not in self._loadable:
                raise ValueError(f"{type(self).__name__} cannot load '{prop}'")

            def materialize(prop=prop):
                self._loaded[prop] = self._read_property(prop)

            self._session.enqueue(f"{self._describe()}.load('{prop}')", materialize)
        return self

    def _get_loaded(self, prop: str) -> Any:
        if prop not in self._loaded:
            raise PropertyNotLoadedError(
                f"The property '{prop}' of {self._describe()} is not available. "
                f"Call load('{prop}') and sync() before reading it."
            )
        return self._loaded[prop]


class PendingLookup:
    """Result of a nullable lookup, available after the next sync"""

    def __init__(self, description: str):
        self._description = description
        self._resolved = False
        self._value: Optional["WorksheetProxy"] = None

    def _resolve(self, value: Optional["WorksheetProxy"]) -> None:
        self._value = value
        self._resolved = True

    @property
    def value(self) -> Optional["WorksheetProxy"]:
        if not self._resolved:
            raise PropertyNotLoadedError(
                f"{self._description} has not been resolved. Call sync() first."
            )
        return self._value


# ---------------------------------------------------------------------------
# Worksheets
# ---------------------------------------------------------------------------


class WorksheetCollection:
    def __init__(self, session: WorkbookSession):
        self._session = session

    def get_item(self, name: str) -> "WorksheetProxy":
        return WorksheetProxy(self._session, name)

    def get_item_or_none(self, name: str) -> PendingLookup:
        """Queue a lookup whose ``value`` is the worksheet or ``None``"""
        lookup = PendingLookup(f"worksheets.get_item_or_none('{name}')")

        def materialize():
            found = self._session._find_worksheet(name)
            lookup._resolve(WorksheetProxy(self._session, found.title) if found else None)

        self._session.enqueue(f"worksheets.get_item_or_none('{name}')", materialize)
        return lookup

    def add(self, name: str) -> "WorksheetProxy":
        def materialize():
            if self._session._find_worksheet(name) is not None:
                raise HostOperationError(
                    f"A worksheet named '{name}' already exists",
                    code="ItemAlreadyExists",
                )
            self._session.workbook.create_sheet(title=name)

        self._session.enqueue(f"worksheets.add('{name}')", materialize)
        return WorksheetProxy(self._session, name)


class WorksheetProxy:
    def __init__(self, session: WorkbookSession, name: str):
        self._session = session
        self.name = name
        self.tables = WorksheetTableCollection(self)
        self.charts = ChartCollection(self)

    def _resolve(self) -> Worksheet:
        ws = self._session._find_worksheet(self.name)
        if ws is None:
            raise NotFoundError(f"The worksheet '{self.name}' does not exist")
        return ws

    def delete(self) -> None:
        def materialize():
            workbook = self._session.workbook
            workbook.remove(self._resolve())
            if workbook.active is None and workbook.worksheets:
                workbook.active = len(workbook.worksheets) - 1

        self._session.enqueue(f"worksheets['{self.name}'].delete()", materialize)

    def activate(self) -> None:
        def materialize():
            target = self._resolve()
            for ws in self._session.workbook.worksheets:
                ws.sheet_view.tabSelected = ws is target
            self._session.workbook.active = target

        self._session.enqueue(f"worksheets['{self.name}'].activate()", materialize)

    def get_range(self, address: str) -> "RangeProxy":
        # Validates the address now rather than at flush time
        CellRange(address)
        return RangeProxy(
            self._session,
            self._resolve,
            lambda ws: CellRange(address),
            f"'{self.name}'!{address}",
            f"sheet:{self.name.lower()}",
        )


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------


def _display_text(cell) -> str:
    value = cell.value
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if "#,##" in (cell.number_format or ""):
            return f"{value:,.0f}"
    return str(value)


class RangeProxy(_ClientObject):
    """A rectangular range whose address is resolved at flush time"""

    _loadable = ("values", "address")

    def __init__(
        self,
        session: WorkbookSession,
        sheet: Callable[[], Worksheet],
        resolver: RangeResolver,
        label: str,
        sheet_key: str,
    ):
        super().__init__(session)
        self._sheet = sheet
        self._resolver = resolver
        self._label = label
        # Ranges can only be combined when their sheet keys match
        self._sheet_key = sheet_key

    def _describe(self) -> str:
        return self._label

    def _resolve(self) -> Tuple[Worksheet, CellRange]:
        ws = self._sheet()
        return ws, self._resolver(ws)

    def _read_property(self, prop: str) -> Any:
        ws, cr = self._resolve()
        if prop == "address":
            return f"{ws.title}!{cr.coord}"
        return [
            list(row)
            for row in ws.iter_rows(
                min_row=cr.min_row,
                max_row=cr.max_row,
                min_col=cr.min_col,
                max_col=cr.max_col,
                values_only=True,
            )
        ]

    @property
    def values(self) -> List[List[Any]]:
        return self._get_loaded("values")

    @property
    def address(self) -> str:
        return self._get_loaded("address")

    # Writes

    def set_values(self, values: Sequence[Sequence[Any]]) -> None:
        rows = [list(row) for row in values]

        def materialize():
            ws, cr = self._resolve()
            if len(rows) != cr.size["rows"] or any(
                len(row) != cr.size["columns"] for row in rows
            ):
                raise ValueError(
                    f"values of shape {len(rows)}x{len(rows[0]) if rows else 0} do not fit "
                    f"range {cr.coord}"
                )
            for r_off, row in enumerate(rows):
                for c_off, value in enumerate(row):
                    cell = ws.cell(row=cr.min_row + r_off, column=cr.min_col + c_off)
                    if value == "":
                        value = None
                    if isinstance(cell, MergedCell):
                        if value is not None:
                            raise ValueError(f"cannot write into merged cell {cell.coordinate}")
                        continue
                    cell.value = value

        self._session.enqueue(f"{self._label}.values = ...", materialize)

    def merge(self) -> None:
        def materialize():
            ws, cr = self._resolve()
            ws.merge_cells(cr.coord)

        self._session.enqueue(f"{self._label}.merge()", materialize)

    def set_font(
        self,
        bold: Optional[bool] = None,
        italic: Optional[bool] = None,
        size: Optional[float] = None,
        color: Optional[str] = None,
    ) -> None:
        changes = {
            key: value
            for key, value in {"bold": bold, "italic": italic, "sz": size, "color": color}.items()
            if value is not None
        }

        def materialize():
            ws, cr = self._resolve()
            for row in ws.iter_rows(
                min_row=cr.min_row, max_row=cr.max_row, min_col=cr.min_col, max_col=cr.max_col
            ):
                for cell in row:
                    font = copy(cell.font)
                    for key, value in changes.items():
                        setattr(font, key, value)
                    cell.font = font

        self._session.enqueue(f"{self._label}.format.font = {changes}", materialize)

    def set_number_format(self, number_format: str) -> None:
        def materialize():
            ws, cr = self._resolve()
            for row in ws.iter_rows(
                min_row=cr.min_row, max_row=cr.max_row, min_col=cr.min_col, max_col=cr.max_col
            ):
                for cell in row:
                    cell.number_format = number_format

        self._session.enqueue(f"{self._label}.numberFormat = '{number_format}'", materialize)

    def autofit_columns(self, min_width: float = 10, max_width: float = 60) -> None:
        """Size each column of the range to its longest rendered text.

        Merged cells are ignored, as a spreadsheet's own autofit does.
        """

        def materialize():
            ws, cr = self._resolve()
            merged = set()
            for merged_range in ws.merged_cells.ranges:
                for row, col in merged_range.cells:
                    merged.add((row, col))

            for col_idx in range(cr.min_col, cr.max_col + 1):
                best = 0
                for row_idx in range(cr.min_row, cr.max_row + 1):
                    if (row_idx, col_idx) in merged:
                        continue
                    best = max(best, len(_display_text(ws.cell(row=row_idx, column=col_idx))))
                letter = get_column_letter(col_idx)
                ws.column_dimensions[letter].width = max(min_width, min(best + 2, max_width))

        self._session.enqueue(f"{self._label}.format.autofitColumns()", materialize)

    # Geometry

    def _derive(self, transform: Callable[[Worksheet, CellRange], CellRange], label: str) -> "RangeProxy":
        parent = self._resolver
        return RangeProxy(
            self._session, self._sheet, lambda ws: transform(ws, parent(ws)), label, self._sheet_key
        )

    def get_column(self, index: int) -> "RangeProxy":
        def transform(ws, cr):
            if not 0 <= index < cr.size["columns"]:
                raise IndexError(f"column {index} is outside {cr.coord}")
            col = cr.min_col + index
            return CellRange(min_col=col, min_row=cr.min_row, max_col=col, max_row=cr.max_row)

        return self._derive(transform, f"{self._label}.getColumn({index})")

    def get_last_column(self) -> "RangeProxy":
        def transform(ws, cr):
            return CellRange(min_col=cr.max_col, min_row=cr.min_row, max_col=cr.max_col, max_row=cr.max_row)

        return self._derive(transform, f"{self._label}.getLastColumn()")

    def get_entire_column(self) -> "RangeProxy":
        def transform(ws, cr):
            return CellRange(min_col=cr.min_col, min_row=1, max_col=cr.max_col, max_row=max(ws.max_row, 1))

        return self._derive(transform, f"{self._label}.getEntireColumn()")

    def get_offset_range(self, row_offset: int, column_offset: int) -> "RangeProxy":
        def transform(ws, cr):
            if cr.min_row + row_offset < 1 or cr.min_col + column_offset < 1:
                raise IndexError(f"offset ({row_offset}, {column_offset}) leaves the sheet")
            return CellRange(
                min_col=cr.min_col + column_offset,
                min_row=cr.min_row + row_offset,
                max_col=cr.max_col + column_offset,
                max_row=cr.max_row + row_offset,
            )

        return self._derive(
            transform, f"{self._label}.getOffsetRange({row_offset}, {column_offset})"
        )

    def get_bounding_rect(self, other: "RangeProxy") -> "RangeProxy":
        """Smallest range covering this range and ``other``"""
        if other._sheet_key != self._sheet_key:
            raise ValueError("ranges belong to different worksheets")
        mine, theirs = self._resolver, other._resolver

        def resolver(ws):
            a, b = mine(ws), theirs(ws)
            return CellRange(
                min_col=min(a.min_col, b.min_col),
                min_row=min(a.min_row, b.min_row),
                max_col=max(a.max_col, b.max_col),
                max_row=max(a.max_row, b.max_row),
            )

        return RangeProxy(
            self._session, self._sheet, resolver, f"{self._label}.getBoundingRect(...)", self._sheet_key
        )


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class TableCollection:
    """Workbook-wide table lookup by name"""

    def __init__(self, session: WorkbookSession):
        self._session = session

    def get_item(self, name: str) -> "TableProxy":
        return TableProxy(self._session, name)


class WorksheetTableCollection:
    def __init__(self, worksheet: WorksheetProxy):
        self._worksheet = worksheet

    def add(self, address: str, has_headers: bool = True) -> "TableProxy":
        """Create a table whose first row is the header row.

        A header-only table gets one blank body row, which the first appended
        row fills.
        """
        if not has_headers:
            raise ValueError("Only tables with a header row are supported")
        header = CellRange(address)
        session = self._worksheet._session
        proxy = TableProxy(session, None)

        def materialize():
            ws = self._worksheet._resolve()
            name = session._next_table_name()
            max_row = header.max_row if header.size["rows"] > 1 else header.min_row + 1
            ref = CellRange(
                min_col=header.min_col, min_row=header.min_row, max_col=header.max_col, max_row=max_row
            )
            table = Table(displayName=name, ref=ref.coord)
            table.tableStyleInfo = TableStyleInfo(name=DEFAULT_TABLE_STYLE, showRowStripes=True)
            ws.add_table(table)
            proxy.name = name

        session.enqueue(f"'{self._worksheet.name}'.tables.add('{address}')", materialize)
        return proxy


class TableProxy:
    def __init__(self, session: WorkbookSession, name: Optional[str]):
        self._session = session
        # None until a queued tables.add() has been flushed
        self.name = name
        self.columns = TableColumnCollection(self)
        self.rows = TableRowCollection(self)

    def _describe(self) -> str:
        return f"tables['{self.name}']" if self.name else "tables[<pending>]"

    def _resolve(self) -> Tuple[Worksheet, Table]:
        if self.name is None:
            raise NotFoundError("The table has not been created yet")
        found = self._session._find_table(self.name)
        if found is None:
            raise NotFoundError(f"The table '{self.name}' does not exist")
        return found

    def _range(self, resolver: RangeResolver, label: str) -> RangeProxy:
        return RangeProxy(
            self._session,
            lambda: self._resolve()[0],
            resolver,
            f"{self._describe()}.{label}",
            f"table:{id(self)}",
        )

    def get_range(self) -> RangeProxy:
        return self._range(lambda ws: CellRange(self._resolve()[1].ref), "getRange()")

    def get_data_body_range(self) -> RangeProxy:
        def resolver(ws):
            cr = CellRange(self._resolve()[1].ref)
            return CellRange(min_col=cr.min_col, min_row=cr.min_row + 1, max_col=cr.max_col, max_row=cr.max_row)

        return self._range(resolver, "getDataBodyRange()")


class TableColumnCollection:
    def __init__(self, table: TableProxy):
        self._table = table

    def get_item(self, name: str) -> "ColumnProxy":
        return ColumnProxy(self._table, name)


class ColumnProxy(_ClientObject):
    """One table column, addressed by its header text"""

    _loadable = ("values", "name")

    def __init__(self, table: TableProxy, name: str):
        super().__init__(table._session)
        self.table = table
        self.name = name

    def _describe(self) -> str:
        return f"{self.table._describe()}.columns['{self.name}']"

    def _read_property(self, prop: str) -> Any:
        ws, table = self.table._resolve()
        cr = CellRange(table.ref)
        column = None
        for col_idx in range(cr.min_col, cr.max_col + 1):
            header = ws.cell(row=cr.min_row, column=col_idx).value
            if header is not None and str(header) == self.name:
                column = col_idx
                break
        if column is None:
            raise NotFoundError(
                f"The column '{self.name}' does not exist in table '{table.displayName}'"
            )
        if prop == "name":
            return self.name
        return [
            [value]
            for (value,) in ws.iter_rows(
                min_row=cr.min_row, max_row=cr.max_row, min_col=column, max_col=column, values_only=True
            )
        ]

    @property
    def values(self) -> List[List[Any]]:
        """Column values as rows of one cell each, header row first"""
        return self._get_loaded("values")


class TableRowCollection:
    def __init__(self, table: TableProxy):
        self._table = table

    def add(self, index: Optional[int], values: Sequence[Sequence[Any]]) -> None:
        """Append rows to the end of the table (``index`` must be ``None``)"""
        if index is not None:
            raise ValueError("Only appending rows (index=None) is supported")
        rows = [list(row) for row in values]

        def materialize():
            ws, table = self._table._resolve()
            cr = CellRange(table.ref)
            width = cr.size["columns"]
            for row in rows:
                if len(row) != width:
                    raise ValueError(f"row has {len(row)} values, table has {width} columns")

            next_row = cr.max_row + 1
            if cr.size["rows"] == 2 and all(
                ws.cell(row=cr.max_row, column=c).value is None
                for c in range(cr.min_col, cr.max_col + 1)
            ):
                next_row = cr.max_row

            for row in rows:
                for c_off, value in enumerate(row):
                    ws.cell(row=next_row, column=cr.min_col + c_off, value=value)
                next_row += 1

            table.ref = CellRange(
                min_col=cr.min_col, min_row=cr.min_row, max_col=cr.max_col,
                max_row=max(cr.max_row, next_row - 1),
            ).coord

        self._table._session.enqueue(f"{self._table._describe()}.rows.add(...)", materialize)


# ---------------------------------------------------------------------------
# Charts
# ---------------------------------------------------------------------------


class ChartCollection:
    def __init__(self, worksheet: WorksheetProxy):
        self._worksheet = worksheet

    def add(
        self,
        chart_type: ChartType,
        source: RangeProxy,
    ) -> "ChartProxy":
        """Chart over ``source``: first column as categories, one series per
        remaining column, header row as series names."""
        session = self._worksheet._session
        proxy = ChartProxy(self._worksheet)

        def materialize():
            ws = self._worksheet._resolve()
            source_ws, cr = source._resolve()

            chart = BarChart()
            chart.type = "col"
            chart.grouping = "clustered"

            first_series_col = cr.min_col + 1 if cr.size["columns"] > 1 else cr.min_col
            data = Reference(
                source_ws, min_col=first_series_col, max_col=cr.max_col,
                min_row=cr.min_row, max_row=cr.max_row,
            )
            chart.add_data(data, titles_from_data=True)
            if first_series_col != cr.min_col:
                chart.set_categories(
                    Reference(source_ws, min_col=cr.min_col, max_col=cr.min_col,
                              min_row=cr.min_row + 1, max_row=cr.max_row)
                )

            ws.add_chart(chart, "A1")
            proxy.chart = chart

        session.enqueue(
            f"'{self._worksheet.name}'.charts.add('{chart_type.value}', {source._describe()})",
            materialize,
        )
        return proxy


class ChartProxy:
    def __init__(self, worksheet: WorksheetProxy):
        self._worksheet = worksheet
        self._session = worksheet._session
        # Set when the queued charts.add() is flushed
        self.chart: Optional[BarChart] = None

    def _resolve(self) -> BarChart:
        if self.chart is None:
            raise NotFoundError("The chart has not been created yet")
        return self.chart

    def set_title(self, text: str) -> None:
        def materialize():
            self._resolve().title = text

        self._session.enqueue(f"chart.title.text = '{text}'", materialize)

    def set_position(self, start: RangeProxy, end: RangeProxy) -> None:
        """Anchor the chart from the top-left of ``start`` to the bottom-right of ``end``"""

        def materialize():
            chart = self._resolve()
            _, first = start._resolve()
            _, last = end._resolve()
            # Markers are zero-based; the end marker sits past the last cell
            chart.anchor = TwoCellAnchor(
                _from=AnchorMarker(col=first.min_col - 1, row=first.min_row - 1),
                to=AnchorMarker(col=last.max_col, row=last.max_row),
            )

        self._session.enqueue(f"chart.setPosition({start._describe()})", materialize)
