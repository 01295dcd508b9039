"""Support inquiry workflow."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from accountdesk.domain.common.database import Database, extract_single_row
from accountdesk.domain.common.pagination import (
    DEFAULT_PAGE_SIZE,
    PaginationResponse,
    create_pagination_params,
    create_pagination_response,
)
from accountdesk.domain.common.rows import build_where_clause
from accountdesk.domain.errors import InquiryNotFoundError, InquiryValidationError
from accountdesk.domain.inquiries.models import INQUIRY_FIELDS, VALID_INQUIRY_STATUSES, UserInquiry
from accountdesk.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

SUBJECT_MAX_LEN = 200
MESSAGE_MAX_LEN = 2000
PENDING_PAGE_LIMIT = 50

_COLUMNS = INQUIRY_FIELDS.select_list()

INSERT_INQUIRY_SQL = f"""
INSERT INTO user_inquiries (user_id, subject, message, status, created_at)
VALUES ($1, $2, $3, 'pending', $4::timestamptz)
RETURNING {_COLUMNS}
"""

USER_INQUIRIES_SQL = f"""
SELECT {_COLUMNS} FROM user_inquiries
WHERE user_id = $1
ORDER BY created_at DESC
"""

INQUIRY_BY_ID_SQL = f"SELECT {_COLUMNS} FROM user_inquiries WHERE inquiry_id = $1"

UPDATE_INQUIRY_STATUS_SQL = f"""
UPDATE user_inquiries
SET status = $1,
    response = $2,
    answered_at = CASE WHEN $1::text = 'answered' THEN $3::timestamptz ELSE answered_at END
WHERE inquiry_id = $4
RETURNING {_COLUMNS}
"""

PENDING_INQUIRIES_SQL = f"""
SELECT {_COLUMNS} FROM user_inquiries
WHERE status = 'pending'
ORDER BY created_at DESC
LIMIT $1 OFFSET $2
"""

INQUIRY_COUNT_FOR_USER_SQL = "SELECT COUNT(*) AS count FROM user_inquiries WHERE user_id = $1"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate_text(value: Optional[str], label: str, max_len: int) -> str:
    if not value or not value.strip():
        raise InquiryValidationError(f"{label} is required")
    # Length is checked before trimming.
    if len(value) > max_len:
        raise InquiryValidationError(f"{label} must not exceed {max_len} characters")
    return value.strip()


@dataclass
class InquiryService:
    db: Database
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def create_inquiry(self, user_id: str, subject: Optional[str], message: Optional[str]) -> UserInquiry:
        try:
            clean_subject = _validate_text(subject, "Subject", SUBJECT_MAX_LEN)
            clean_message = _validate_text(message, "Message", MESSAGE_MAX_LEN)
        except InquiryValidationError:
            obs_metrics.inc_inquiry_rejected()
            raise
        result = await self.db.execute(INSERT_INQUIRY_SQL, [user_id, clean_subject, clean_message, self.clock()])
        inquiry = UserInquiry.from_row(result.rows[0])
        obs_metrics.inc_inquiry_created()
        logger.info("inquiry_created", extra={"inquiry_id": inquiry.inquiry_id})
        return inquiry

    async def get_user_inquiries(self, user_id: str) -> list[UserInquiry]:
        result = await self.db.execute(USER_INQUIRIES_SQL, [user_id])
        return [UserInquiry.from_row(row) for row in result.rows]

    async def get_inquiry_by_id(self, inquiry_id: int) -> Optional[UserInquiry]:
        row = extract_single_row(await self.db.execute(INQUIRY_BY_ID_SQL, [inquiry_id]))
        return UserInquiry.from_row(row) if row is not None else None

    async def update_inquiry_status(
        self,
        inquiry_id: int,
        status: str,
        response: Optional[str] = None,
    ) -> UserInquiry:
        """Set status and response in one statement.

        ``response`` always overwrites the stored value, so omitting it clears
        any earlier answer. ``answered_at`` is stamped only when the new
        status is ``answered`` and is never cleared afterwards.
        """
        if status not in VALID_INQUIRY_STATUSES:
            if await self.get_inquiry_by_id(inquiry_id) is None:
                raise InquiryNotFoundError(inquiry_id)
            raise InquiryValidationError(
                f"Invalid inquiry status: {status}. Must be one of: {', '.join(VALID_INQUIRY_STATUSES)}"
            )
        row = extract_single_row(
            await self.db.execute(
                UPDATE_INQUIRY_STATUS_SQL,
                [status, response or None, self.clock(), inquiry_id],
            )
        )
        if row is None:
            raise InquiryNotFoundError(inquiry_id)
        obs_metrics.inc_status_update("inquiry", status)
        logger.info("inquiry_status_updated", extra={"inquiry_id": inquiry_id, "status": status})
        return UserInquiry.from_row(row)

    async def get_pending_inquiries(self, limit: int = PENDING_PAGE_LIMIT, offset: int = 0) -> list[UserInquiry]:
        result = await self.db.execute(PENDING_INQUIRIES_SQL, [limit, offset])
        return [UserInquiry.from_row(row) for row in result.rows]

    async def get_inquiry_count_for_user(self, user_id: str) -> int:
        result = await self.db.execute(INQUIRY_COUNT_FOR_USER_SQL, [user_id])
        return int(result.rows[0]["count"])

    async def search_inquiries(
        self,
        *,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> PaginationResponse[UserInquiry]:
        where = build_where_clause({"user_id": user_id, "status": status})
        counted = await self.db.execute(f"SELECT COUNT(*) AS count FROM user_inquiries {where.clause}", where.values)
        total = int(counted.rows[0]["count"])
        params = create_pagination_params(page, page_size)
        limit_idx = len(where.values) + 1
        result = await self.db.execute(
            f"SELECT {_COLUMNS} FROM user_inquiries {where.clause} "
            f"ORDER BY created_at DESC LIMIT ${limit_idx} OFFSET ${limit_idx + 1}",
            [*where.values, params.limit, params.offset],
        )
        inquiries = [UserInquiry.from_row(row) for row in result.rows]
        return create_pagination_response(inquiries, total, max(1, page), params.limit)
