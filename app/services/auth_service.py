"""
app/services/auth_service.py

Purpose: Signed-in user for one browser session

- Restores user + token from the session store, dropping expired tokens
- Login / logout against the course platform
- update_user merges changes and persists the whole record
"""

from typing import Any, Dict, Optional

import jwt

from app.core.exceptions import AuthenticationError
from app.core.logging import get_logger
from app.models.user import User
from app.services.course_api import CourseAPIClient
from app.services.session_service import SessionStore
from utils.constants import MESSAGE_SIGN_IN_REQUIRED
from utils.payment_utils import extract_error_message
from utils.time_utils import is_expired

logger = get_logger(__name__)

FIELD_ALIASES = {
    "profile_complete": "profileComplete",
    "enrolled_courses": "enrolledCourses",
}


def is_token_expired(token: Optional[str]) -> bool:
    """
    Reads the JWT 'exp' claim without checking the signature
    (the platform verifies tokens; we only avoid sending stale ones).

    Unreadable tokens count as expired; tokens without 'exp' never expire.
    """
    if not token:
        return True
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return True
    return is_expired(claims.get("exp"))


class AuthSession:
    """
    The current user and token of a browser session.
    """

    def __init__(self, session_id: str, store: SessionStore, api: CourseAPIClient):
        self.session_id = session_id
        self.store = store
        self.api = api
        self.user: Optional[User] = None
        self.token: Optional[str] = None

    @classmethod
    async def restore(cls, session_id: str, store: SessionStore, api: CourseAPIClient) -> "AuthSession":
        """
        Loads a session, clearing it if the stored data is unusable.
        """
        session = cls(session_id, store, api)
        stored_user = await store.get(session_id, "user")
        token = await store.get(session_id, "token")

        if not (stored_user and token):
            return session

        try:
            user = User.from_payload(stored_user)
        except Exception as e:
            logger.error(f"Error parsing stored user data: {e}", extra={"session_id": session_id})
            await store.clear(session_id)
            return session

        if is_token_expired(token):
            logger.info("Stored token expired, clearing session", extra={"session_id": session_id})
            await store.clear(session_id)
            return session

        session.user = user
        session.token = token
        return session

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def require_user(self) -> User:
        """
        Raises:
            AuthenticationError: If nobody is signed in
        """
        if self.user is None:
            raise AuthenticationError(MESSAGE_SIGN_IN_REQUIRED)
        return self.user

    async def login(self, credentials: Dict[str, Any]) -> User:
        """
        Signs in against the platform and stores user + token.

        Raises:
            AuthenticationError: If the platform refuses the credentials
        """
        response = await self.api.login(credentials)
        token = response.get("token")

        if response.get("success") is False or not token:
            raise AuthenticationError(
                extract_error_message(response, "Login failed. Please check your credentials.")
            )

        user = User.from_payload(response)
        await self.store.set(self.session_id, "user", user.to_storage())
        await self.store.set(self.session_id, "token", token)

        self.user = user
        self.token = token
        logger.info("User signed in", extra={"user_id": user.user_id, "session_id": self.session_id})
        return user

    async def logout(self) -> None:
        user_id = self.user.user_id if self.user else None
        self.user = None
        self.token = None
        await self.store.clear(self.session_id)
        logger.info("User signed out", extra={"user_id": user_id, "session_id": self.session_id})

    async def _stored_user(self) -> Optional[User]:
        """
        The user currently persisted for this session, or None when the
        session was cleared (logout, expiry) since this object was loaded.
        """
        stored_user = await self.store.get(self.session_id, "user")
        token = await self.store.get(self.session_id, "token")
        if not (stored_user and token):
            return None
        return User.from_payload(stored_user)

    async def update_user(self, updates: Dict[str, Any]) -> User:
        """
        Merges `updates` into the stored user and persists the result.

        The merge starts from the store, not from this object's copy, so
        changes written by other requests of the same session are kept.
        A session cleared in the meantime is not written back.

        Args:
            updates: Fields to overwrite

        Returns:
            Updated user
        """
        current = self.require_user()
        updates = {FIELD_ALIASES.get(key, key): value for key, value in updates.items()}

        stored = await self._stored_user()
        if stored is None:
            logger.warning("Session cleared, user update not stored", extra={"session_id": self.session_id})
            return User.from_payload({**current.to_storage(), **updates})

        merged = User.from_payload({**stored.to_storage(), **updates})
        await self.store.set(self.session_id, "user", merged.to_storage())
        self.user = merged
        return merged

    async def add_enrollment(self, course_id: Any) -> User:
        """
        Adds `course_id` to the stored user's enrolled courses, once.
        """
        current = (await self._stored_user()) or self.require_user()
        enrolled = list(current.enrolled_courses)
        if not current.is_enrolled(course_id):
            enrolled.append(course_id)
        return await self.update_user({"enrolledCourses": enrolled})
