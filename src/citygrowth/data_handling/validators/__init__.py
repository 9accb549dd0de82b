"""
Data validation modules for citygrowth.

This module provides validation classes for checking the extracted columns
and the resulting ranking.
"""

from .data_validator import ColumnValidator, RankingValidator

__all__ = ["ColumnValidator", "RankingValidator"]
