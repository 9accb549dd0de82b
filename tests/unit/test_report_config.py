"""
Unit tests for report configuration and path helpers.
"""

from pathlib import Path

import pytest
import yaml

from citygrowth.config.paths import PathManager
from citygrowth.config.report_config import LatestValuePolicy, ReportConfig


class TestReportConfig:
    def test_defaults(self):
        config = ReportConfig()

        assert config.table_name == "PopulationTable"
        assert config.name_column == "City"
        assert config.latest_column == "7/1/2014 population estimate"
        assert config.earliest_column == "4/1/1990 census population"
        assert config.top_n == 10
        assert config.sheet_name == "Top 10 Growing Cities"
        assert config.chart_title == "Population Growth between 1990 and 2014"
        assert (config.chart_anchor, config.chart_rows, config.chart_columns) == ("F2", 20, 10)
        assert config.latest_policy is LatestValuePolicy.PROPAGATE

    def test_policy_from_string(self):
        assert ReportConfig(latest_policy="REJECT").latest_policy is LatestValuePolicy.REJECT

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            ReportConfig(latest_policy="ignore")

    @pytest.mark.parametrize("kwargs", [{"top_n": 0}, {"chart_rows": 0}, {"chart_columns": -1}])
    def test_invalid_sizes(self, kwargs):
        with pytest.raises(ValueError):
            ReportConfig(**kwargs)

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "report.yaml"
        path.write_text(yaml.safe_dump({"top_n": 5, "latest_policy": "reject", "sheet_name": "Fastest"}))

        config = ReportConfig.from_yaml(path)

        assert config.top_n == 5
        assert config.latest_policy is LatestValuePolicy.REJECT
        assert config.sheet_name == "Fastest"
        assert config.table_name == "PopulationTable"

    def test_from_yaml_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert ReportConfig.from_yaml(path) == ReportConfig()

    def test_from_yaml_unknown_key(self, tmp_path):
        path = tmp_path / "report.yaml"
        path.write_text("top_n: 5\nchart_colour: red\n")

        with pytest.raises(ValueError, match="chart_colour"):
            ReportConfig.from_yaml(path)

    def test_from_yaml_requires_mapping(self, tmp_path):
        path = tmp_path / "report.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ValueError):
            ReportConfig.from_yaml(path)

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ReportConfig.from_yaml(tmp_path / "missing.yaml")

    def test_overrides_skip_none(self):
        config = ReportConfig(top_n=3).with_overrides(top_n=None, sheet_name="Other")

        assert config.top_n == 3
        assert config.sheet_name == "Other"


class TestPathManager:
    def test_layout(self, tmp_path):
        paths = PathManager(tmp_path)

        assert paths.get_input_workbook_path("cities.xlsx") == tmp_path / "data" / "raw" / "cities.xlsx"
        assert paths.get_output_workbook_path("in/cities.xlsx") == (
            tmp_path / "data" / "output" / "cities_growth_report.xlsx"
        )
        assert paths.get_preview_path(Path("cities.xlsx")) == (
            tmp_path / "results" / "previews" / "cities_growth.png"
        )