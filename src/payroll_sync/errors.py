"""
Exceptions for faults that abort a sync run.

Row-level problems (schema failures, shifts pointing at unknown employees)
are never raised: they are collected as RowError values in the run's error
log. Only adapter-level faults below escape a run.
"""


class PayrollSyncError(RuntimeError):
    """Base class for unrecoverable payroll sync faults."""


# ── Row sources ───────────────────────────────────────────────────────────────

class SourceUnavailableError(PayrollSyncError):
    """The row source could not produce rows."""


class SourceNotFoundError(SourceUnavailableError):
    """A file-backed source points at a file that does not exist."""


class SourceTransportError(SourceUnavailableError):
    """The remote provider is unreachable or answered with a non-2xx status."""


class SourceFormatError(SourceUnavailableError):
    """The source was read but does not hold a list of rows."""


# ── Persistence ───────────────────────────────────────────────────────────────

class StorageError(PayrollSyncError):
    """A read or write against the persistent store failed."""


# ── Queries ───────────────────────────────────────────────────────────────────

class EmployeeNotFoundError(LookupError):
    """No employee exists with the requested external identifier."""
