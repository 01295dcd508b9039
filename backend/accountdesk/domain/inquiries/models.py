from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Literal, Mapping, Optional, get_args

from accountdesk.domain.common.rows import FieldMap

InquiryStatus = Literal["pending", "answered", "closed"]

VALID_INQUIRY_STATUSES: tuple[str, ...] = get_args(InquiryStatus)

INQUIRY_FIELDS = FieldMap.of(
    "inquiry_id",
    "user_id",
    "subject",
    "message",
    "status",
    "response",
    "created_at",
    "answered_at",
)


@dataclass(slots=True)
class UserInquiry:
    inquiry_id: int
    user_id: str
    subject: str
    message: str
    status: str
    response: Optional[str]
    created_at: datetime
    answered_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "UserInquiry":
        return cls(**INQUIRY_FIELDS.pick(row))

    def to_payload(self) -> dict[str, Any]:
        return INQUIRY_FIELDS.to_application(asdict(self))
