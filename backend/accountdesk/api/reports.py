"""Report submission and listing for the authenticated caller."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field

from accountdesk.domain.container import get_report_service
from accountdesk.domain.common.pagination import DEFAULT_PAGE_SIZE
from accountdesk.domain.reports.models import ReportStatus
from accountdesk.domain.reports.service import ReportService
from accountdesk.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/api/user/reports", tags=["reports"])


class ReportIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reported_user_id: str = Field(..., alias="reportedUserId", min_length=1)
    # The closed reason set is enforced by the service so callers get its error message.
    reason: str
    description: Optional[str] = None


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_report(
    report: ReportIn,
    service: ReportService = Depends(get_report_service),
    reporter: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    created = await service.create_report(
        reporter.id,
        report.reported_user_id,
        report.reason,
        report.description,
    )
    return created.to_payload()


@router.get("")
async def list_my_reports(
    status_filter: Optional[ReportStatus] = Query(default=None, alias="status"),
    page: int = Query(default=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, alias="pageSize"),
    service: ReportService = Depends(get_report_service),
    reporter: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    result = await service.search_reports(
        reporter_id=reporter.id,
        status=status_filter,
        page=page,
        page_size=page_size,
    )
    return result.to_payload()
