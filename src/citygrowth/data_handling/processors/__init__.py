"""
Report processing modules for citygrowth.

This module provides the three stages of the growth report:
- Extracting the population columns from a structured table
- Ranking cities by population growth
- Presenting the ranking as a table and chart in its own worksheet

The pipeline tying them together lives in ``processors.pipeline``.
"""

from .extractor import ColumnExtractor, ExtractedColumns, extract_columns
from .presenter import PresentationResult, RankingPresenter, present_ranking
from .ranker import CityGrowth, GrowthRanker, RankingSummary, rank_by_growth

__all__ = [
    "ColumnExtractor",
    "ExtractedColumns",
    "extract_columns",
    "GrowthRanker",
    "CityGrowth",
    "RankingSummary",
    "rank_by_growth",
    "RankingPresenter",
    "PresentationResult",
    "present_ranking",
]
