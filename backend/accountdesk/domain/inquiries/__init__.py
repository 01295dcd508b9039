"""User support inquiries."""

from accountdesk.domain.inquiries.models import VALID_INQUIRY_STATUSES, UserInquiry
from accountdesk.domain.inquiries.service import InquiryService

__all__ = ["InquiryService", "UserInquiry", "VALID_INQUIRY_STATUSES"]
