"""Domain-specific exceptions for POS Order Summary.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from SummaryAPIError for easy catching.
"""


class SummaryAPIError(Exception):
    """Base exception for all POS Order Summary errors.

    Users can catch this exception to handle any error raised by the package.
    """

    pass


class ConfigError(SummaryAPIError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Required credentials (HR_USER / HR_PASS / HR_BASE) are missing
    - Invalid configuration values are provided

    It is fatal for the request: no fetch is attempted and no fallback
    data is produced.
    """

    pass


class ReportSourceError(SummaryAPIError):
    """Raised when the report source cannot produce order rows.

    The service catches every subclass at its boundary and answers with
    a fallback summary instead of propagating the error.
    """

    pass


class SourceUnavailableError(ReportSourceError):
    """Raised when the vendor portal cannot be reached or authenticated.

    This exception is raised when:
    - Network connection to the portal fails
    - Login fails or the session is redirected back to the logon page
    - The download folder to watch does not exist
    """

    pass


class ExportFailedError(ReportSourceError):
    """Raised when no export artifact materialises within the bounded wait.

    This exception is raised when:
    - The export endpoint answers with an unexpected payload
    - No order-details workbook appears in the download folder in time
    - The overall fetch ceiling elapses
    """

    pass


class ParseFailedError(ReportSourceError):
    """Raised when an export artifact exists but its rows cannot be decoded."""

    pass


class MalformedRowError(SummaryAPIError):
    """Raised when a single order row cannot be parsed.

    Never escapes the aggregation pipeline: the row is logged and skipped.
    """

    pass


class BusyError(SummaryAPIError):
    """Raised when a report fetch is already in flight and the queue wait expired."""

    pass
