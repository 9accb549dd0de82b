#!/usr/bin/env python3
"""Run the population growth report from a source checkout.

Thin wrapper around ``citygrowth.cli`` so the report can be produced without
installing the package:

  python run_growth_report.py --input-file data/raw/population.xlsx
  python run_growth_report.py --input-file book.xlsx --output-file report.xlsx --preview

See ``--help`` for every option.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure src package is on path
PROJECT_ROOT = Path(__file__).parent
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from citygrowth.cli import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())
