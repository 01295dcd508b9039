"""Moderation report workflow: validation, duplicate windowing, status updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from accountdesk.domain.common.database import Database, extract_single_row
from accountdesk.domain.common.pagination import (
    DEFAULT_PAGE_SIZE,
    PaginationResponse,
    create_pagination_params,
    create_pagination_response,
)
from accountdesk.domain.common.rows import build_where_clause
from accountdesk.domain.errors import (
    DuplicateReportError,
    InvalidReportReasonError,
    ReportNotFoundError,
    ReportValidationError,
    SelfReportError,
)
from accountdesk.domain.reports.models import (
    REPORT_FIELDS,
    VALID_REPORT_REASONS,
    VALID_REPORT_STATUSES,
    UserReport,
)
from accountdesk.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LEN = 1000
DUPLICATE_WINDOW = timedelta(hours=24)
PENDING_PAGE_LIMIT = 50

_COLUMNS = REPORT_FIELDS.select_list()

INSERT_REPORT_SQL = f"""
INSERT INTO user_reports (reporter_id, reported_user_id, reason, description, status, created_at)
VALUES ($1, $2, $3, $4, 'pending', $5::timestamptz)
RETURNING {_COLUMNS}
"""

DUPLICATE_REPORT_SQL = """
SELECT report_id FROM user_reports
WHERE reporter_id = $1
  AND reported_user_id = $2
  AND status = 'pending'
  AND created_at > $3::timestamptz
LIMIT 1
"""

REPORTS_BY_REPORTER_SQL = f"SELECT {_COLUMNS} FROM user_reports WHERE reporter_id = $1 ORDER BY created_at DESC"

REPORTS_FOR_USER_SQL = f"SELECT {_COLUMNS} FROM user_reports WHERE reported_user_id = $1 ORDER BY created_at DESC"

REPORT_BY_ID_SQL = f"SELECT {_COLUMNS} FROM user_reports WHERE report_id = $1"

UPDATE_REPORT_STATUS_SQL = f"""
UPDATE user_reports
SET status = $1, reviewed_at = $2::timestamptz
WHERE report_id = $3
RETURNING {_COLUMNS}
"""

PENDING_REPORTS_SQL = f"""
SELECT {_COLUMNS} FROM user_reports
WHERE status = 'pending'
ORDER BY created_at DESC
LIMIT $1 OFFSET $2
"""

REPORT_COUNT_FOR_USER_SQL = "SELECT COUNT(*) AS count FROM user_reports WHERE reported_user_id = $1"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ReportService:
    """Stateless mediator between report callers and the ``user_reports`` table.

    The duplicate check and the insert in :meth:`create_report` are two
    separate round trips without a transaction, so two concurrent submissions
    for the same pair can both pass the check and both persist.
    """

    db: Database
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def create_report(
        self,
        reporter_id: str,
        reported_user_id: str,
        reason: str,
        description: Optional[str] = None,
    ) -> UserReport:
        if reporter_id == reported_user_id:
            obs_metrics.inc_report_rejected("self_report")
            raise SelfReportError()
        if reason not in VALID_REPORT_REASONS:
            obs_metrics.inc_report_rejected("invalid_reason")
            raise InvalidReportReasonError(reason, VALID_REPORT_REASONS)
        if description and len(description) > DESCRIPTION_MAX_LEN:
            obs_metrics.inc_report_rejected("invalid_description")
            raise ReportValidationError(f"Description must not exceed {DESCRIPTION_MAX_LEN} characters")
        if await self.check_duplicate_report(reporter_id, reported_user_id):
            obs_metrics.inc_report_rejected("duplicate")
            raise DuplicateReportError()

        result = await self.db.execute(
            INSERT_REPORT_SQL,
            [reporter_id, reported_user_id, reason, description or None, self.clock()],
        )
        report = UserReport.from_row(result.rows[0])
        obs_metrics.inc_report_created(reason)
        logger.info("report_created", extra={"report_id": report.report_id, "reason": reason})
        return report

    async def check_duplicate_report(self, reporter_id: str, reported_user_id: str) -> bool:
        cutoff = self.clock() - DUPLICATE_WINDOW
        result = await self.db.execute(DUPLICATE_REPORT_SQL, [reporter_id, reported_user_id, cutoff])
        return len(result.rows) > 0

    async def get_reports_by_reporter(self, reporter_id: str) -> list[UserReport]:
        result = await self.db.execute(REPORTS_BY_REPORTER_SQL, [reporter_id])
        return [UserReport.from_row(row) for row in result.rows]

    async def get_reports_for_user(self, reported_user_id: str) -> list[UserReport]:
        result = await self.db.execute(REPORTS_FOR_USER_SQL, [reported_user_id])
        return [UserReport.from_row(row) for row in result.rows]

    async def get_report_by_id(self, report_id: int) -> Optional[UserReport]:
        row = extract_single_row(await self.db.execute(REPORT_BY_ID_SQL, [report_id]))
        return UserReport.from_row(row) if row is not None else None

    async def update_report_status(self, report_id: int, status: str) -> UserReport:
        # Any status change, including back to pending, stamps reviewed_at.
        if status not in VALID_REPORT_STATUSES:
            if await self.get_report_by_id(report_id) is None:
                raise ReportNotFoundError(report_id)
            raise ReportValidationError(
                f"Invalid report status: {status}. Must be one of: {', '.join(VALID_REPORT_STATUSES)}"
            )
        row = extract_single_row(
            await self.db.execute(UPDATE_REPORT_STATUS_SQL, [status, self.clock(), report_id])
        )
        if row is None:
            raise ReportNotFoundError(report_id)
        obs_metrics.inc_status_update("report", status)
        logger.info("report_status_updated", extra={"report_id": report_id, "status": status})
        return UserReport.from_row(row)

    async def get_pending_reports(self, limit: int = PENDING_PAGE_LIMIT, offset: int = 0) -> list[UserReport]:
        result = await self.db.execute(PENDING_REPORTS_SQL, [limit, offset])
        return [UserReport.from_row(row) for row in result.rows]

    async def get_report_count_for_user(self, reported_user_id: str) -> int:
        result = await self.db.execute(REPORT_COUNT_FOR_USER_SQL, [reported_user_id])
        return int(result.rows[0]["count"])

    async def search_reports(
        self,
        *,
        reporter_id: Optional[str] = None,
        reported_user_id: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> PaginationResponse[UserReport]:
        where = build_where_clause(
            {"reporter_id": reporter_id, "reported_user_id": reported_user_id, "status": status}
        )
        counted = await self.db.execute(f"SELECT COUNT(*) AS count FROM user_reports {where.clause}", where.values)
        total = int(counted.rows[0]["count"])
        params = create_pagination_params(page, page_size)
        limit_idx = len(where.values) + 1
        result = await self.db.execute(
            f"SELECT {_COLUMNS} FROM user_reports {where.clause} "
            f"ORDER BY created_at DESC LIMIT ${limit_idx} OFFSET ${limit_idx + 1}",
            [*where.values, params.limit, params.offset],
        )
        reports = [UserReport.from_row(row) for row in result.rows]
        return create_pagination_response(reports, total, max(1, page), params.limit)
