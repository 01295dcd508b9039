"""Error taxonomy raised by the report and inquiry services.

Every error carries the HTTP status and error type the boundary renders.
Each service owns a closed set of variants (``ReportError`` and
``InquiryError`` subclasses); each variant also belongs to one family
(validation, not-found, conflict) which the boundary maps to a status.
"""

from __future__ import annotations

from typing import Iterable


class AccountDeskError(Exception):
    """Base class for domain failures surfaced to API callers."""

    status_code = 500
    error_type = "ServerError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(AccountDeskError):
    status_code = 400
    error_type = "ValidationError"


class NotFoundError(AccountDeskError):
    status_code = 404
    error_type = "NotFoundError"


class ConflictError(AccountDeskError):
    status_code = 409
    error_type = "ConflictError"


class ReportError(AccountDeskError):
    """Base class for report workflow failures."""


class SelfReportError(ReportError, ValidationFailed):
    def __init__(self) -> None:
        super().__init__("Users cannot report themselves")


class InvalidReportReasonError(ReportError, ValidationFailed):
    def __init__(self, reason: str, allowed: Iterable[str]):
        self.reason = reason
        self.allowed = tuple(allowed)
        super().__init__(f"Invalid report reason: {reason}. Must be one of: {', '.join(self.allowed)}")


class ReportValidationError(ReportError, ValidationFailed):
    pass


class DuplicateReportError(ReportError, ConflictError):
    def __init__(self) -> None:
        super().__init__("A report for this user already exists within the last 24 hours")


class ReportNotFoundError(ReportError, NotFoundError):
    def __init__(self, report_id: int):
        self.report_id = report_id
        super().__init__(f"Report not found: {report_id}")


class InquiryError(AccountDeskError):
    """Base class for inquiry workflow failures."""


class InquiryValidationError(InquiryError, ValidationFailed):
    pass


class InquiryNotFoundError(InquiryError, NotFoundError):
    def __init__(self, inquiry_id: int):
        self.inquiry_id = inquiry_id
        super().__init__(f"Inquiry not found: {inquiry_id}")
