"""Status codes used across subsystem boundaries."""

from enum import StrEnum


class ReportStatus(StrEnum):
    """Final status of a property run.

    Values:
        OK: The configured number of trials passed
        FAILED: A trial falsified the property (see FailureData)
        GAVE_UP: Too many trials were discarded to reach the test count
        GENERATOR_ERROR: A generator raised while producing a trial's input
        CANCELLED: The run was cancelled before reaching a verdict
    """

    OK = "ok"
    FAILED = "failed"
    GAVE_UP = "gave_up"
    GENERATOR_ERROR = "generator_error"
    CANCELLED = "cancelled"
