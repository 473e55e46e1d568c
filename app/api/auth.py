"""
app/api/auth.py

Purpose: Sign in / sign out against the course platform

- Login stores user + token under the session id
- /me returns the stored user
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_auth_session
from app.core.logging import get_logger
from app.schemas.auth import LoginRequest, SessionResponse, UserResponse
from app.services.auth_service import AuthSession

logger = get_logger(__name__)
router = APIRouter()


@router.post("/auth/login", response_model=SessionResponse)
async def login(body: LoginRequest, auth: AuthSession = Depends(get_auth_session)):
    user = await auth.login(body.model_dump())
    return SessionResponse(session_id=auth.session_id, user=user.to_storage())


@router.post("/auth/logout")
async def logout(auth: AuthSession = Depends(get_auth_session)):
    await auth.logout()
    return {"status": "signed_out"}


@router.get("/auth/me", response_model=UserResponse)
async def me(auth: AuthSession = Depends(get_auth_session)):
    user = auth.require_user()
    return UserResponse(user=user.to_storage())
