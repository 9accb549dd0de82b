"""
Growth chart preview.

Renders a ranking as a PNG bar chart, mirroring the chart written into the
workbook, for a quick look without opening Excel.
"""

from pathlib import Path
from typing import List

import matplotlib.pyplot as plt
from matplotlib.ticker import FuncFormatter
import pandas as pd
import seaborn as sns


def ranking_to_frame(ranking) -> pd.DataFrame:
    """Ranking as a DataFrame with rank, city and growth columns"""
    return pd.DataFrame(
        {
            "rank": range(1, len(ranking) + 1),
            "city": [str(item.name) for item in ranking],
            "growth": pd.to_numeric(pd.Series([item.growth for item in ranking], dtype=object)),
        }
    )


def save_growth_chart_preview(ranking: List, path: Path, title: str) -> Path:
    """Save a bar chart of growth per city; entries without growth are left out."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = ranking_to_frame(ranking).dropna(subset=["growth"])

    fig, ax = plt.subplots(figsize=(8, 4.5))
    if not df.empty:
        sns.barplot(data=df, x="city", y="growth", color="#4472C4", ax=ax)
    ax.set_xlabel("City")
    ax.set_ylabel("Population Growth")
    ax.set_title(title)
    ax.yaxis.set_major_formatter(FuncFormatter(lambda value, _: f"{value:,.0f}"))
    ax.tick_params(axis="x", labelrotation=45)
    ax.grid(True, axis="y", alpha=0.3)
    fig.tight_layout()
    fig.savefig(path, format="png", dpi=150, bbox_inches="tight")
    plt.close(fig)
    return path
