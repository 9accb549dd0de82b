"""
Workbook access for citygrowth.

This module provides a deferred-execution session over an Excel workbook:
proxies queue reads and writes, and ``WorkbookSession.sync()`` applies them.
"""

from .errors import (
    DataQualityError,
    HostOperationError,
    NotFoundError,
    PropertyNotLoadedError,
    SessionError,
)
from .session import ChartType, WorkbookSession, run_batch

__all__ = [
    "WorkbookSession",
    "run_batch",
    "ChartType",
    "SessionError",
    "NotFoundError",
    "HostOperationError",
    "PropertyNotLoadedError",
    "DataQualityError",
]
