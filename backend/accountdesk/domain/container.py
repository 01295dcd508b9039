"""Explicit service wiring built once at process start."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from accountdesk.domain.common.database import Database
from accountdesk.domain.inquiries.service import InquiryService
from accountdesk.domain.reports.service import ReportService


@dataclass(slots=True)
class Services:
	reports: ReportService
	inquiries: InquiryService


def build_services(db: Database) -> Services:
	return Services(reports=ReportService(db=db), inquiries=InquiryService(db=db))


def get_services(request: Request) -> Services:
	services = getattr(request.app.state, "services", None)
	if services is None:
		raise RuntimeError("services not configured")
	return services


def get_report_service(request: Request) -> ReportService:
	return get_services(request).reports


def get_inquiry_service(request: Request) -> InquiryService:
	return get_services(request).inquiries
