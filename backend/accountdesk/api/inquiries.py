"""Support inquiries for the authenticated caller."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from accountdesk.domain.common.pagination import DEFAULT_PAGE_SIZE
from accountdesk.domain.container import get_inquiry_service
from accountdesk.domain.errors import InquiryNotFoundError
from accountdesk.domain.inquiries.models import InquiryStatus
from accountdesk.domain.inquiries.service import InquiryService
from accountdesk.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/api/user/inquiries", tags=["inquiries"])


class InquiryIn(BaseModel):
    # Blank and oversized values are rejected by the service with its own messages.
    subject: Optional[str] = None
    message: Optional[str] = None


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_inquiry(
    inquiry: InquiryIn,
    service: InquiryService = Depends(get_inquiry_service),
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    created = await service.create_inquiry(user.id, inquiry.subject, inquiry.message)
    return created.to_payload()


@router.get("")
async def list_my_inquiries(
    status_filter: Optional[InquiryStatus] = Query(default=None, alias="status"),
    page: int = Query(default=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, alias="pageSize"),
    service: InquiryService = Depends(get_inquiry_service),
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    result = await service.search_inquiries(
        user_id=user.id,
        status=status_filter,
        page=page,
        page_size=page_size,
    )
    return result.to_payload()


@router.get("/{inquiry_id}")
async def get_my_inquiry(
    inquiry_id: int,
    service: InquiryService = Depends(get_inquiry_service),
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    inquiry = await service.get_inquiry_by_id(inquiry_id)
    # Other users' inquiries are indistinguishable from missing ones.
    if inquiry is None or inquiry.user_id != user.id:
        raise InquiryNotFoundError(inquiry_id)
    return inquiry.to_payload()
