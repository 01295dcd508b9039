import asyncio
import os
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault("JWT_SECRET", "test-secret-key-for-accountdesk-tests")
os.environ.setdefault("OBS_ADMIN_TOKEN", "test-admin-token")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("LOG_SAMPLING_RATE_INFO", "1.0")

from accountdesk.domain.common.database import QueryResult
from accountdesk.domain.container import Services
from accountdesk.domain.inquiries import service as inquiry_sql
from accountdesk.domain.inquiries.service import InquiryService
from accountdesk.domain.reports import service as report_sql
from accountdesk.domain.reports.service import ReportService
from accountdesk.infra import jwt as jwt_helper
from accountdesk.main import app
from accountdesk.settings import settings

ADMIN_TOKEN = "test-admin-token"


class FakeClock:
	def __init__(self, start: datetime) -> None:
		self.now = start

	def __call__(self) -> datetime:
		return self.now

	def advance(self, **kwargs: float) -> datetime:
		self.now = self.now + timedelta(**kwargs)
		return self.now


def _desc(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
	return sorted(rows, key=lambda row: row["created_at"], reverse=True)


class InMemoryDatabase:
	"""Evaluates the statements issued by the report and inquiry services.

	Each call yields to the event loop before reading state so concurrent
	callers interleave the way they would against a real pool.
	"""

	def __init__(self) -> None:
		self.reports: list[dict[str, Any]] = []
		self.inquiries: list[dict[str, Any]] = []
		self.calls: list[tuple[str, list[Any]]] = []
		self._next_report_id = 1
		self._next_inquiry_id = 1
		self._handlers: dict[str, Callable[[list[Any]], list[dict[str, Any]]]] = {
			report_sql.INSERT_REPORT_SQL: self._insert_report,
			report_sql.DUPLICATE_REPORT_SQL: self._duplicate_report,
			report_sql.REPORTS_BY_REPORTER_SQL: lambda p: _desc([r for r in self.reports if r["reporter_id"] == p[0]]),
			report_sql.REPORTS_FOR_USER_SQL: lambda p: _desc([r for r in self.reports if r["reported_user_id"] == p[0]]),
			report_sql.REPORT_BY_ID_SQL: lambda p: [r for r in self.reports if r["report_id"] == p[0]],
			report_sql.UPDATE_REPORT_STATUS_SQL: self._update_report_status,
			report_sql.PENDING_REPORTS_SQL: lambda p: _desc([r for r in self.reports if r["status"] == "pending"])[p[1] : p[1] + p[0]],
			report_sql.REPORT_COUNT_FOR_USER_SQL: lambda p: [
				{"count": sum(1 for r in self.reports if r["reported_user_id"] == p[0])}
			],
			inquiry_sql.INSERT_INQUIRY_SQL: self._insert_inquiry,
			inquiry_sql.USER_INQUIRIES_SQL: lambda p: _desc([i for i in self.inquiries if i["user_id"] == p[0]]),
			inquiry_sql.INQUIRY_BY_ID_SQL: lambda p: [i for i in self.inquiries if i["inquiry_id"] == p[0]],
			inquiry_sql.UPDATE_INQUIRY_STATUS_SQL: self._update_inquiry_status,
			inquiry_sql.PENDING_INQUIRIES_SQL: lambda p: _desc([i for i in self.inquiries if i["status"] == "pending"])[p[1] : p[1] + p[0]],
			inquiry_sql.INQUIRY_COUNT_FOR_USER_SQL: lambda p: [
				{"count": sum(1 for i in self.inquiries if i["user_id"] == p[0])}
			],
		}

	async def execute(self, query: str, params: Sequence[Any] = ()) -> QueryResult:
		params = list(params)
		self.calls.append((query, params))
		await asyncio.sleep(0)
		handler = self._handlers.get(query)
		if handler is None:
			raise AssertionError(f"unexpected query: {query}")
		rows = [dict(row) for row in handler(params)]
		return QueryResult(rows=rows, row_count=len(rows))

	def add_report(self, **values: Any) -> dict[str, Any]:
		row = {
			"report_id": self._next_report_id,
			"reporter_id": "reporter",
			"reported_user_id": "target",
			"reason": "spam",
			"description": None,
			"status": "pending",
			"created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
			"reviewed_at": None,
		}
		row.update(values)
		self._next_report_id = max(self._next_report_id, row["report_id"]) + 1
		self.reports.append(row)
		return row

	def add_inquiry(self, **values: Any) -> dict[str, Any]:
		row = {
			"inquiry_id": self._next_inquiry_id,
			"user_id": "user-1",
			"subject": "Subject",
			"message": "Message",
			"status": "pending",
			"response": None,
			"created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
			"answered_at": None,
		}
		row.update(values)
		self._next_inquiry_id = max(self._next_inquiry_id, row["inquiry_id"]) + 1
		self.inquiries.append(row)
		return row

	def _insert_report(self, params: list[Any]) -> list[dict[str, Any]]:
		reporter_id, reported_user_id, reason, description, created_at = params
		return [
			self.add_report(
				reporter_id=reporter_id,
				reported_user_id=reported_user_id,
				reason=reason,
				description=description,
				created_at=created_at,
			)
		]

	def _duplicate_report(self, params: list[Any]) -> list[dict[str, Any]]:
		reporter_id, reported_user_id, cutoff = params
		matches = [
			{"report_id": r["report_id"]}
			for r in self.reports
			if r["reporter_id"] == reporter_id
			and r["reported_user_id"] == reported_user_id
			and r["status"] == "pending"
			and r["created_at"] > cutoff
		]
		return matches[:1]

	def _update_report_status(self, params: list[Any]) -> list[dict[str, Any]]:
		status, reviewed_at, report_id = params
		for row in self.reports:
			if row["report_id"] == report_id:
				row["status"] = status
				row["reviewed_at"] = reviewed_at
				return [row]
		return []

	def _insert_inquiry(self, params: list[Any]) -> list[dict[str, Any]]:
		user_id, subject, message, created_at = params
		return [self.add_inquiry(user_id=user_id, subject=subject, message=message, created_at=created_at)]

	def _update_inquiry_status(self, params: list[Any]) -> list[dict[str, Any]]:
		status, response, answered_at, inquiry_id = params
		for row in self.inquiries:
			if row["inquiry_id"] == inquiry_id:
				row["status"] = status
				row["response"] = response
				if status == "answered":
					row["answered_at"] = answered_at
				return [row]
		return []


class RecordingDatabase:
	"""Returns queued results in order and records every statement.

	A queued exception is raised instead of returned.
	"""

	def __init__(self, *results: QueryResult | BaseException) -> None:
		self.results: list[QueryResult | BaseException] = list(results)
		self.calls: list[tuple[str, list[Any]]] = []

	async def execute(self, query: str, params: Sequence[Any] = ()) -> QueryResult:
		self.calls.append((query, list(params)))
		if not self.results:
			raise AssertionError(f"no result queued for: {query}")
		result = self.results.pop(0)
		if isinstance(result, BaseException):
			raise result
		return result


@pytest.fixture
def clock():
	return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_db():
	return InMemoryDatabase()


@pytest.fixture
def report_service(memory_db, clock):
	return ReportService(db=memory_db, clock=clock)


@pytest.fixture
def inquiry_service(memory_db, clock):
	return InquiryService(db=memory_db, clock=clock)


@pytest.fixture(autouse=True)
def force_test_settings():
	original_env = settings.environment
	original_admin = settings.obs_admin_token
	original_public = settings.obs_metrics_public
	settings.environment = "test"
	settings.obs_admin_token = ADMIN_TOKEN
	try:
		yield
	finally:
		settings.environment = original_env
		settings.obs_admin_token = original_admin
		settings.obs_metrics_public = original_public


@pytest.fixture
def bearer():
	def _make(user_id: str, **claims: Any) -> dict[str, str]:
		token = jwt_helper.encode_access({"sub": user_id, **claims})
		return {"Authorization": f"Bearer {token}"}

	return _make


@pytest.fixture
def admin_headers():
	return {"X-Admin-Token": ADMIN_TOKEN}


@pytest_asyncio.fixture
async def api_client(report_service, inquiry_service):
	previous = getattr(app.state, "services", None)
	app.state.services = Services(reports=report_service, inquiries=inquiry_service)
	transport = ASGITransport(app=app)
	try:
		async with AsyncClient(transport=transport, base_url="http://testserver") as client:
			yield client
	finally:
		app.state.services = previous


@pytest.fixture
def client_for(clock):
	"""Build a client whose services run against the given database.

	Unhandled errors are rendered instead of re-raised into the test.
	"""

	@asynccontextmanager
	async def _make(db: Any):
		previous = getattr(app.state, "services", None)
		app.state.services = Services(
			reports=ReportService(db=db, clock=clock),
			inquiries=InquiryService(db=db, clock=clock),
		)
		transport = ASGITransport(app=app, raise_app_exceptions=False)
		try:
			async with AsyncClient(transport=transport, base_url="http://testserver") as client:
				yield client
		finally:
			app.state.services = previous

	return _make
