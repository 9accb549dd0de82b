"""
Ranking Presenter

Writes a ranked city list into its own worksheet: a merged title, a
structured table, thousands-separator formatting, auto-sized columns and a
clustered column chart over the city and growth columns.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional

from openpyxl.worksheet.cell_range import CellRange

from ...config.report_config import ReportConfig
from ...workbook.session import ChartProxy, ChartType, TableProxy, WorkbookSession
from .ranker import CityGrowth

TABLE_HEADERS = ["Rank", "City", "Population Growth"]


@dataclass
class PresentationResult:
    sheet_name: str
    table: TableProxy
    chart: ChartProxy
    row_count: int
    replaced_existing: bool
    chart_anchor: str

    @property
    def table_name(self) -> Optional[str]:
        """Name given to the table once the writes have been synced"""
        return self.table.name


class RankingPresenter:
    """
    Renders a ranking into the configured output worksheet.

    The only sync issued here is the existence check for a previous output
    sheet; every write is left queued for the caller's final sync.
    """

    def __init__(self, config: Optional[ReportConfig] = None):
        self.config = config or ReportConfig()
        self.logger = logging.getLogger(__name__)

    def present(self, session: WorkbookSession, ranking: List[CityGrowth]) -> PresentationResult:
        config = self.config

        # Replace, never merge with, the output of a previous run
        existing = session.worksheets.get_item_or_none(config.sheet_name)
        session.sync()

        replaced = existing.value is not None
        if replaced:
            self.logger.info(f"Deleting previous output sheet '{config.sheet_name}'")
            existing.value.delete()

        output_sheet = session.worksheets.add(config.sheet_name)

        sheet_header = output_sheet.get_range(config.title_range)
        title_width = CellRange(config.title_range).size["columns"]
        sheet_header.set_values([[config.title] + [""] * (title_width - 1)])
        sheet_header.merge()
        sheet_header.set_font(bold=True, size=14)

        table_header = output_sheet.get_range(config.header_range)
        table_header.set_values([TABLE_HEADERS])
        table = output_sheet.tables.add(config.header_range, has_headers=True)

        for index, item in enumerate(ranking):
            table.rows.add(None, [[index + 1, item.name, self._cell_value(item)]])

        # Format before fitting so widths match the rendered numbers
        table.get_data_body_range().get_last_column().set_number_format(config.number_format)
        table.get_range().get_entire_column().autofit_columns()

        full_table_range = table.get_range()
        # Rank is left out of the chart
        data_range_for_chart = full_table_range.get_column(1).get_bounding_rect(
            full_table_range.get_last_column()
        )

        chart = output_sheet.charts.add(ChartType.COLUMN_CLUSTERED, data_range_for_chart)
        chart.set_title(config.chart_title)

        chart_position_start = output_sheet.get_range(config.chart_anchor)
        chart.set_position(
            chart_position_start,
            chart_position_start.get_offset_range(config.chart_rows - 1, config.chart_columns - 1),
        )

        output_sheet.activate()

        self.logger.info(
            f"Queued output sheet '{config.sheet_name}' with {len(ranking)} ranked rows"
        )
        return PresentationResult(
            sheet_name=config.sheet_name,
            table=table,
            chart=chart,
            row_count=len(ranking),
            replaced_existing=replaced,
            chart_anchor=config.chart_anchor,
        )

    @staticmethod
    def _cell_value(item: CityGrowth):
        # NaN cannot be stored in a workbook cell; leave it empty
        return item.growth if item.has_growth else None


def present_ranking(
    session: WorkbookSession,
    ranking: List[CityGrowth],
    sheet_name: str = "Top 10 Growing Cities",
    title: Optional[str] = None,
    chart_title: Optional[str] = None,
    config: Optional[ReportConfig] = None,
) -> PresentationResult:
    config = (config or ReportConfig()).with_overrides(
        sheet_name=sheet_name, title=title, chart_title=chart_title
    )
    return RankingPresenter(config).present(session, ranking)
