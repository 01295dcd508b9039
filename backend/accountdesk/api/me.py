from __future__ import annotations

from fastapi import APIRouter, Depends

from accountdesk.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/api/user", tags=["identity"])


@router.get("/me")
async def whoami(user: AuthenticatedUser = Depends(get_current_user)) -> dict[str, object]:
    return user.to_payload()
