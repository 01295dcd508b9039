from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Literal, Mapping, Optional, get_args

from accountdesk.domain.common.rows import FieldMap

ReportReason = Literal["spam", "harassment", "inappropriate_content", "other"]
ReportStatus = Literal["pending", "reviewed", "resolved"]

VALID_REPORT_REASONS: tuple[str, ...] = get_args(ReportReason)
VALID_REPORT_STATUSES: tuple[str, ...] = get_args(ReportStatus)

REPORT_FIELDS = FieldMap.of(
    "report_id",
    "reporter_id",
    "reported_user_id",
    "reason",
    "description",
    "status",
    "created_at",
    "reviewed_at",
)


@dataclass(slots=True)
class UserReport:
    report_id: int
    reporter_id: str
    reported_user_id: str
    reason: str
    description: Optional[str]
    status: str
    created_at: datetime
    reviewed_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "UserReport":
        return cls(**REPORT_FIELDS.pick(row))

    def to_payload(self) -> dict[str, Any]:
        return REPORT_FIELDS.to_application(asdict(self))
