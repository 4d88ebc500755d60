"""Shared contracts for cross-boundary data types.

Configuration, report and error types used by the engine, the CLI and host
test suites.
"""

from bramble.contracts.config import PropertyConfig
from bramble.contracts.enums import ReportStatus
from bramble.contracts.errors import (
    BrambleError,
    CapturedError,
    GenDiscard,
    PropertyFailedError,
    PropertyUsageError,
    RangeError,
    RecheckTokenError,
    capture_error,
)
from bramble.contracts.report import FailureData, GeneratorFault, RecheckData, Report

__all__ = [
    "BrambleError",
    "CapturedError",
    "FailureData",
    "GenDiscard",
    "GeneratorFault",
    "PropertyConfig",
    "PropertyFailedError",
    "PropertyUsageError",
    "RangeError",
    "RecheckData",
    "RecheckTokenError",
    "Report",
    "ReportStatus",
    "capture_error",
]
