"""Job board: ordering and drag reconciliation for a job-application tracker."""

__version__ = "0.1.0"
