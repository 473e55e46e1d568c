"""
app/api/deps.py

Purpose: Shared request dependencies

- Resolves the browser session from the X-Session-Id header
- Hands out the global services so tests can override them
"""

import uuid
from typing import Optional

from fastapi import Depends, Header

from app.services.auth_service import AuthSession
from app.services.course_api import CourseAPIClient, get_course_api
from app.services.enrollment_service import EnrollmentService, get_enrollment_service
from app.services.payment_gateway import PaymentGateway, get_payment_gateway
from app.services.session_service import SessionStore, get_session_store


def session_store() -> SessionStore:
    return get_session_store()


def course_api() -> CourseAPIClient:
    return get_course_api()


def payment_gateway() -> PaymentGateway:
    return get_payment_gateway()


def enrollment_service() -> EnrollmentService:
    return get_enrollment_service()


async def get_auth_session(
    x_session_id: Optional[str] = Header(default=None),
    store: SessionStore = Depends(session_store),
    api: CourseAPIClient = Depends(course_api),
) -> AuthSession:
    """
    Restores the caller's session. Without a header a fresh,
    signed-out session id is issued.
    """
    session_id = x_session_id or uuid.uuid4().hex
    return await AuthSession.restore(session_id, store, api)
