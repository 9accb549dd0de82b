"""
Growth Report Pipeline

This module runs the complete report: read the population table, rank the
cities by growth, and write the ranking with its chart into the workbook.
"""

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ...analysis.visualization.growth_plot import save_growth_chart_preview
from ...config.paths import PathManager
from ...config.report_config import ReportConfig
from ...workbook.session import WorkbookSession
from ..validators.data_validator import ColumnValidator, RankingValidator
from .extractor import ColumnExtractor, ExtractedColumns
from .presenter import RankingPresenter
from .ranker import CityGrowth, GrowthRanker, RankingSummary


@dataclass
class PipelineResult:
    ranking: List[CityGrowth]
    summary: RankingSummary
    output_path: Optional[Path]
    sheet_name: str
    table_name: Optional[str] = None
    replaced_existing: bool = False
    preview_path: Optional[Path] = None
    warnings: Optional[List[str]] = None


class GrowthReportPipeline:
    """
    Main report pipeline orchestrator.

    This class coordinates the complete workflow against one workbook session:
    1. Extract the name, latest and earliest columns (first sync)
    2. Rank cities by growth and keep the top N
    3. Replace the output sheet with the ranking table and chart
       (existence check is the second sync)
    4. Flush the queued writes, validate and save

    Stages run strictly in order. A failure in any stage aborts the run and
    nothing is written to disk.
    """

    def __init__(
        self,
        config: Optional[ReportConfig] = None,
        paths: Optional[PathManager] = None,
    ):
        self.config = config or ReportConfig()
        self.paths = paths or PathManager()

        self.extractor = ColumnExtractor(self.config)
        self.ranker = GrowthRanker(self.config.top_n, self.config.latest_policy)
        self.presenter = RankingPresenter(self.config)
        self.column_validator = ColumnValidator()

        self.logger = self._setup_logging()

    def _setup_logging(self) -> logging.Logger:
        """Setup logging for the pipeline"""
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

    def _extract_and_rank(
        self, session: WorkbookSession
    ) -> Tuple[ExtractedColumns, List[CityGrowth], List[str]]:
        self.logger.info("Step 1: Extracting population columns")
        columns = self.extractor.extract(session)
        column_warnings = self.column_validator.validate(columns)
        self._log_warnings(column_warnings)

        self.logger.info("Step 2: Ranking cities by population growth")
        return columns, self.ranker.rank(columns), column_warnings

    def compute_ranking(self, session: WorkbookSession) -> List[CityGrowth]:
        """Extract and rank without writing anything (used by dry runs)"""
        _, ranking, _ = self._extract_and_rank(session)
        return ranking

    def run_in_session(self, session: WorkbookSession) -> PipelineResult:
        """Run every stage against an open session, ending with a sync"""
        columns, ranking, column_warnings = self._extract_and_rank(session)

        self.logger.info(f"Step 3: Writing ranking to sheet '{self.config.sheet_name}'")
        presentation = self.presenter.present(session, ranking)
        session.sync()

        ranking_warnings = RankingValidator(self.config.top_n, columns).validate(ranking)
        self._log_warnings(ranking_warnings)

        return PipelineResult(
            ranking=ranking,
            summary=self.ranker.last_summary,
            output_path=session.output_path,
            sheet_name=presentation.sheet_name,
            table_name=presentation.table_name,
            replaced_existing=presentation.replaced_existing,
            warnings=column_warnings + ranking_warnings,
        )

    def run(
        self,
        input_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
    ) -> PipelineResult:
        """
        Run the complete report against a workbook file.

        Args:
            input_path: Workbook holding the population table
            output_path: Where to save the result (defaults to ``input_path``,
                updating the workbook in place)

        Returns:
            PipelineResult: The ranking and where it was written
        """
        self.logger.info("Starting growth report pipeline")
        self.logger.info(f"Configuration: {self.config}")

        try:
            input_path = self.resolve_input_path(input_path)
            session = WorkbookSession.open(input_path, output_path=output_path)
            result = self.run_in_session(session)

            self.logger.info("Step 4: Saving workbook")
            result.output_path = session.save()

            if self.config.save_preview:
                preview_path = self.paths.get_preview_path(input_path)
                result.preview_path = save_growth_chart_preview(
                    result.ranking, preview_path, self.config.chart_title
                )
                self.logger.info(f"Saved chart preview: {preview_path}")

            self.logger.info(
                f"Pipeline complete! {len(result.ranking)} cities written to "
                f"'{result.sheet_name}' in {result.output_path}"
            )
            return result

        except Exception as e:
            self.logger.error(f"Pipeline failed: {e}")
            raise

    def dry_run(self, input_path: Union[str, Path]) -> List[CityGrowth]:
        """Extract and rank only; the workbook is not modified"""
        session = WorkbookSession.open(self.resolve_input_path(input_path))
        return self.compute_ranking(session)

    def resolve_input_path(self, input_path: Union[str, Path]) -> Path:
        """Bare file names that do not exist locally are looked up in data/raw"""
        input_path = Path(input_path)
        if not input_path.exists() and input_path.parent == Path("."):
            candidate = self.paths.get_input_workbook_path(input_path.name)
            if candidate.exists():
                self.logger.info(f"Using workbook from raw data directory: {candidate}")
                return candidate
        return input_path

    def _log_warnings(self, warnings: List[str]) -> None:
        if warnings:
            self.logger.warning(f"Validation warnings: {warnings}")
