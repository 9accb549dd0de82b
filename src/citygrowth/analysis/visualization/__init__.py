# src/citygrowth/analysis/visualization/__init__.py

from .growth_plot import ranking_to_frame, save_growth_chart_preview

__all__ = ["save_growth_chart_preview", "ranking_to_frame"]
