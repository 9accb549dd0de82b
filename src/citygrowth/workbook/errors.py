"""
Workbook Errors

Error taxonomy shared by the workbook session and the report pipeline.
Session errors carry a ``code`` and a ``debug_info`` dictionary describing
which queued statement failed, so the top-level handler can log it.
"""

from typing import Any, Dict, Optional


class SessionError(Exception):
    """Base class for failures raised by a workbook session"""

    default_code = "GeneralException"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        debug_info: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code or self.default_code
        self.debug_info: Dict[str, Any] = dict(debug_info or {})
        self.debug_info.setdefault("code", self.code)


class NotFoundError(SessionError):
    """A referenced table, column or worksheet does not exist"""

    default_code = "ItemNotFound"


class HostOperationError(SessionError):
    """A queued mutation could not be applied to the workbook"""


class PropertyNotLoadedError(SessionError):
    """A proxy property was read before it was loaded and synced"""

    default_code = "PropertyNotLoaded"


class DataQualityError(ValueError):
    """A row holds a value the ranking cannot use"""

    def __init__(self, message: str, row_index: int, value: Any):
        super().__init__(message)
        self.row_index = row_index
        self.value = value
