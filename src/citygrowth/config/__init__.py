"""
Configuration for citygrowth.

Provides default paths for input and output workbooks and the report
configuration used by the pipeline and the CLI.
"""

from .paths import PathManager
from .report_config import LatestValuePolicy, ReportConfig

__all__ = ["PathManager", "ReportConfig", "LatestValuePolicy"]
