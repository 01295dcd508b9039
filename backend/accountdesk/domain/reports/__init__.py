"""User moderation reports."""

from accountdesk.domain.reports.models import VALID_REPORT_REASONS, VALID_REPORT_STATUSES, UserReport
from accountdesk.domain.reports.service import ReportService

__all__ = ["ReportService", "UserReport", "VALID_REPORT_REASONS", "VALID_REPORT_STATUSES"]
