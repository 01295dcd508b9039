from datetime import datetime, timezone

import asyncpg
import pytest

from accountdesk.domain.common.database import QueryResult
from accountdesk.settings import settings

from conftest import RecordingDatabase


@pytest.mark.asyncio
async def test_create_report_requires_authentication(api_client, memory_db):
    response = await api_client.post("/api/user/reports", json={"reportedUserId": "bob", "reason": "spam"})
    assert response.status_code == 401
    body = response.json()
    assert body["error"] == "AuthenticationError"
    assert body["message"] == "Missing or invalid authorization header"
    assert body["request_id"]
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert memory_db.reports == []


@pytest.mark.asyncio
async def test_create_report_rejects_bad_token(api_client):
    response = await api_client.post(
        "/api/user/reports",
        json={"reportedUserId": "bob", "reason": "spam"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_create_report_returns_created_report(api_client, bearer):
    response = await api_client.post(
        "/api/user/reports",
        json={"reportedUserId": "bob", "reason": "harassment", "description": "spam DMs"},
        headers=bearer("alice"),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["reportId"] == 1
    assert body["reporterId"] == "alice"
    assert body["reportedUserId"] == "bob"
    assert body["status"] == "pending"
    assert body["createdAt"] == "2026-03-01T12:00:00+00:00"
    assert body["reviewedAt"] is None


@pytest.mark.asyncio
async def test_self_report_is_a_validation_error(api_client, bearer):
    response = await api_client.post(
        "/api/user/reports",
        json={"reportedUserId": "alice", "reason": "spam"},
        headers=bearer("alice"),
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "ValidationError"
    assert body["message"] == "Users cannot report themselves"


@pytest.mark.asyncio
async def test_invalid_reason_is_a_validation_error(api_client, bearer):
    response = await api_client.post(
        "/api/user/reports",
        json={"reportedUserId": "bob", "reason": "abuse"},
        headers=bearer("alice"),
    )
    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid report reason: abuse.")


@pytest.mark.asyncio
async def test_duplicate_report_is_a_conflict(api_client, bearer, clock):
    payload = {"reportedUserId": "bob", "reason": "spam"}
    first = await api_client.post("/api/user/reports", json=payload, headers=bearer("alice"))
    assert first.status_code == 201

    clock.advance(hours=1)
    second = await api_client.post("/api/user/reports", json=payload, headers=bearer("alice"))
    assert second.status_code == 409
    assert second.json() == {
        "error": "ConflictError",
        "message": "A report for this user already exists within the last 24 hours",
        "request_id": second.headers["X-Request-Id"],
    }


@pytest.mark.asyncio
async def test_missing_target_is_rejected_by_request_validation(api_client, bearer):
    response = await api_client.post("/api/user/reports", json={"reason": "spam"}, headers=bearer("alice"))
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "ValidationError"
    assert any(error["loc"][-1] == "reportedUserId" for error in body["errors"])


@pytest.mark.asyncio
async def test_list_my_reports_is_paginated(client_for, bearer):
    row = {
        "report_id": 4,
        "reporter_id": "alice",
        "reported_user_id": "bob",
        "reason": "spam",
        "description": None,
        "status": "pending",
        "created_at": datetime(2026, 2, 1, tzinfo=timezone.utc),
        "reviewed_at": None,
    }
    db = RecordingDatabase(QueryResult(rows=[{"count": 3}], row_count=1), QueryResult(rows=[row], row_count=1))

    async with client_for(db) as client:
        response = await client.get(
            "/api/user/reports",
            params={"status": "pending", "page": 2, "pageSize": 2},
            headers=bearer("alice"),
        )

    assert response.status_code == 200
    body = response.json()
    assert body["data"][0]["reportId"] == 4
    assert body["pagination"] == {
        "page": 2,
        "pageSize": 2,
        "totalItems": 3,
        "totalPages": 2,
        "hasNext": False,
        "hasPrevious": True,
    }
    assert db.calls[0][1] == ["alice", "pending"]
    assert db.calls[1][1] == ["alice", "pending", 2, 2]


@pytest.mark.asyncio
async def test_list_my_reports_rejects_unknown_status(api_client, bearer):
    response = await api_client.get("/api/user/reports", params={"status": "archived"}, headers=bearer("alice"))
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unique_violation_maps_to_conflict(client_for, bearer):
    db = RecordingDatabase(QueryResult())
    db.results.append(asyncpg.UniqueViolationError("duplicate key value"))

    async with client_for(db) as client:
        response = await client.post(
            "/api/user/reports", json={"reportedUserId": "bob", "reason": "spam"}, headers=bearer("alice")
        )

    assert response.status_code == 409
    assert response.json()["message"] == "Resource already exists"


@pytest.mark.asyncio
async def test_foreign_key_violation_maps_to_validation_error(client_for, bearer):
    db = RecordingDatabase(QueryResult())
    db.results.append(asyncpg.ForeignKeyViolationError("violates foreign key"))

    async with client_for(db) as client:
        response = await client.post(
            "/api/user/reports", json={"reportedUserId": "ghost", "reason": "spam"}, headers=bearer("alice")
        )

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"
    assert response.json()["message"] == "Invalid reference"


@pytest.mark.asyncio
async def test_unexpected_errors_are_redacted(client_for, bearer):
    db = RecordingDatabase(QueryResult())
    db.results.append(RuntimeError("connection string leaked"))

    async with client_for(db) as client:
        response = await client.post(
            "/api/user/reports", json={"reportedUserId": "bob", "reason": "spam"}, headers=bearer("alice")
        )

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "ServerError"
    assert body["message"] == "An unexpected error occurred"
    assert "stack" not in body


@pytest.mark.asyncio
async def test_unexpected_errors_are_detailed_in_development(client_for, bearer):
    settings.environment = "development"
    db = RecordingDatabase(QueryResult())
    db.results.append(RuntimeError("boom"))

    async with client_for(db) as client:
        response = await client.post(
            "/api/user/reports", json={"reportedUserId": "bob", "reason": "spam"}, headers=bearer("alice")
        )

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "boom"
    assert body["stack"]


@pytest.mark.asyncio
async def test_dev_user_id_header_authenticates(api_client):
    settings.environment = "development"
    response = await api_client.post(
        "/api/user/reports",
        json={"reportedUserId": "bob", "reason": "other"},
        headers={"X-User-Id": "alice"},
    )
    assert response.status_code == 201
    assert response.json()["reporterId"] == "alice"


@pytest.mark.asyncio
async def test_me_echoes_token_claims(api_client, bearer):
    response = await api_client.get("/api/user/me", headers=bearer("alice", email="alice@example.com"))
    assert response.status_code == 200
    assert response.json() == {"userId": "alice", "email": "alice@example.com", "nickname": None}
