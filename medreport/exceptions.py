"""Domain exception raised by the medical-report parsers."""
from __future__ import annotations

from typing import Optional

DEFAULT_MESSAGE = "An exception occurred while running medical report parsing."


class MedicalReportException(Exception):
    """Wraps any failure raised while tagging or extracting a unit."""

    def __init__(self, message: str = DEFAULT_MESSAGE, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
