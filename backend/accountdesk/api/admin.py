"""Operator endpoints for reviewing reports and answering inquiries.

Guarded by the static operator token (``X-Admin-Token``); there is no
per-user role model.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from accountdesk.domain.container import get_inquiry_service, get_report_service
from accountdesk.domain.errors import InquiryNotFoundError, ReportNotFoundError
from accountdesk.domain.inquiries.service import PENDING_PAGE_LIMIT as INQUIRY_PAGE_LIMIT
from accountdesk.domain.inquiries.service import InquiryService
from accountdesk.domain.reports.service import PENDING_PAGE_LIMIT as REPORT_PAGE_LIMIT
from accountdesk.domain.reports.service import ReportService
from accountdesk.infra.auth import require_admin

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


class ReportStatusIn(BaseModel):
    status: str


class InquiryStatusIn(BaseModel):
    status: str
    response: Optional[str] = None


@router.get("/reports/pending")
async def pending_reports(
    limit: int = Query(default=REPORT_PAGE_LIMIT, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    reports = await service.get_pending_reports(limit=limit, offset=offset)
    return {"data": [report.to_payload() for report in reports]}


@router.get("/reports/{report_id}")
async def get_report(report_id: int, service: ReportService = Depends(get_report_service)) -> dict[str, Any]:
    report = await service.get_report_by_id(report_id)
    if report is None:
        raise ReportNotFoundError(report_id)
    return report.to_payload()


@router.patch("/reports/{report_id}/status")
async def update_report_status(
    report_id: int,
    body: ReportStatusIn,
    service: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    report = await service.update_report_status(report_id, body.status)
    return report.to_payload()


@router.get("/users/{user_id}/reports")
async def reports_against_user(user_id: str, service: ReportService = Depends(get_report_service)) -> dict[str, Any]:
    reports = await service.get_reports_for_user(user_id)
    count = await service.get_report_count_for_user(user_id)
    return {"data": [report.to_payload() for report in reports], "count": count}


@router.get("/users/{user_id}/reports/submitted")
async def reports_by_user(user_id: str, service: ReportService = Depends(get_report_service)) -> dict[str, Any]:
    reports = await service.get_reports_by_reporter(user_id)
    return {"data": [report.to_payload() for report in reports]}


@router.get("/inquiries/pending")
async def pending_inquiries(
    limit: int = Query(default=INQUIRY_PAGE_LIMIT, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: InquiryService = Depends(get_inquiry_service),
) -> dict[str, Any]:
    inquiries = await service.get_pending_inquiries(limit=limit, offset=offset)
    return {"data": [inquiry.to_payload() for inquiry in inquiries]}


@router.get("/inquiries/{inquiry_id}")
async def get_inquiry(inquiry_id: int, service: InquiryService = Depends(get_inquiry_service)) -> dict[str, Any]:
    inquiry = await service.get_inquiry_by_id(inquiry_id)
    if inquiry is None:
        raise InquiryNotFoundError(inquiry_id)
    return inquiry.to_payload()


@router.patch("/inquiries/{inquiry_id}/status")
async def update_inquiry_status(
    inquiry_id: int,
    body: InquiryStatusIn,
    service: InquiryService = Depends(get_inquiry_service),
) -> dict[str, Any]:
    inquiry = await service.update_inquiry_status(inquiry_id, body.status, body.response)
    return inquiry.to_payload()


@router.get("/users/{user_id}/inquiries")
async def inquiries_for_user(user_id: str, service: InquiryService = Depends(get_inquiry_service)) -> dict[str, Any]:
    inquiries = await service.get_user_inquiries(user_id)
    count = await service.get_inquiry_count_for_user(user_id)
    return {"data": [inquiry.to_payload() for inquiry in inquiries], "count": count}
