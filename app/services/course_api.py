"""
app/services/course_api.py

Purpose: Course platform REST integration

- Auth / user profile calls
- Course lookup
- Payment order creation and verification
- Maps transport and HTTP failures onto our exception types
"""

import httpx
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    ResourceNotFoundError,
)
from app.core.logging import get_logger
from utils.payment_utils import extract_error_message

logger = get_logger(__name__)


class CourseAPIClient:
    """
    Async client for the course platform API.
    One shared httpx.AsyncClient, created on first use.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.BACKEND_API_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.BACKEND_TIMEOUT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        fallback_error: str = "Request failed. Please try again.",
        **kwargs: Any
    ) -> Dict[str, Any]:
        """
        Sends a request and returns the decoded JSON body.

        Raises:
            AuthenticationError: 401 from the platform
            ResourceNotFoundError: 404 from the platform
            ExternalServiceError: Any other failure
        """
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._get_client().request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException:
            logger.error(f"Course platform timeout: {method} {path}")
            raise ExternalServiceError("Course platform is taking too long to respond. Please try again.")
        except httpx.RequestError as e:
            logger.error(f"Network error calling course platform: {method} {path}: {e}")
            raise ExternalServiceError("Unable to connect to the course platform.")

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message = extract_error_message(body, fallback_error)
            details = {"status_code": response.status_code, "path": path}
            logger.warning(f"Course platform error {response.status_code} on {method} {path}: {message}")

            if response.status_code == 401:
                raise AuthenticationError(message, details=details)
            if response.status_code == 404:
                raise ResourceNotFoundError(message, details=details)
            raise ExternalServiceError(message, details=details)

        if not isinstance(body, dict):
            logger.error(f"Unexpected response body from {method} {path}")
            raise ExternalServiceError(fallback_error, details={"path": path})

        return body

    # ------------------------------------------------------------------
    # Auth & users
    # ------------------------------------------------------------------

    async def login(self, credentials: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request(
            "POST", "/login",
            json=credentials,
            fallback_error="Login failed. Please check your credentials."
        )

    async def update_profile(
        self,
        user_id: Any,
        profile: Dict[str, Any],
        token: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self._request(
            "PUT", f"/users/{user_id}",
            token=token,
            json=profile,
            fallback_error="Failed to save profile. Please try again."
        )

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    async def get_course(self, course_id: Any, token: Optional[str] = None) -> Dict[str, Any]:
        return await self._request(
            "GET", f"/courses/{course_id}",
            token=token,
            fallback_error="Failed to load course."
        )

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    async def create_order(self, order: Dict[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        """
        POST /payments/create-order

        Returns:
            {"success": bool, "data": {"order": {...}, "key_id": str}}
        """
        return await self._request(
            "POST", "/payments/create-order",
            token=token,
            json=order,
            fallback_error="Payment initialization failed. Please try again."
        )

    async def verify_payment(self, verification: Dict[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        """
        POST /payments/verify-payment

        Returns:
            {"success": bool, "paymentId": str}
        """
        return await self._request(
            "POST", "/payments/verify-payment",
            token=token,
            json=verification,
            fallback_error="Payment verification failed. Please contact support."
        )

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Global client instance
_course_api: Optional[CourseAPIClient] = None


def get_course_api() -> CourseAPIClient:
    """Get or create the global course platform client."""
    global _course_api
    if _course_api is None:
        _course_api = CourseAPIClient()
    return _course_api


async def close_course_api():
    """Close the shared HTTP client."""
    global _course_api
    if _course_api:
        await _course_api.close()
        _course_api = None
