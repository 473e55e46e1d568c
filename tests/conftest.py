import asyncio
import json
import time

import httpx
import jwt
import pytest

from app.models.course import Course
from app.models.user import User
from app.services.auth_service import AuthSession
from app.services.course_api import CourseAPIClient
from app.services.payment_gateway import CheckoutSession, PaymentGateway
from app.services.session_service import MemorySessionStore

BACKEND_URL = "http://backend.test/api"


def run(coro):
    return asyncio.run(coro)


def make_token(exp_offset: int = 3600, **claims) -> str:
    payload = {"sub": "u1", "exp": int(time.time()) + exp_offset, **claims}
    return jwt.encode(payload, "enrollease-test-signing-secret-0123456789", algorithm="HS256")


class FakeBackend:
    """
    Course platform stand-in served through httpx.MockTransport.
    Records every call as (method, path, json body).
    """

    def __init__(self):
        self.calls = []
        self.courses = {
            "101": {"id": 101, "title": "ABAP Fundamentals", "fee": 15000},
            "102": {"id": 102, "title": "SAP FICO Essentials", "fee": 12000},
        }
        self.login_status = 200
        self.login_response = {
            "success": True,
            "token": make_token(),
            "user": {"id": "u1", "full_name": "Asha Rao", "email": "asha@example.com"},
        }
        self.profile_status = 200
        self.profile_response = {"message": "User updated successfully"}
        self.order_status = 200
        self.order_response = {
            "success": True,
            "data": {
                "order": {"id": "order_abc", "amount": 1500000, "currency": "INR"},
                "key_id": "rzp_test_key",
            },
        }
        # Order ids handed out in turn before falling back to order_response
        self.order_ids = []
        self.verify_status = 200
        self.verify_response = {"success": True, "paymentId": "pay_123"}

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path[len("/api"):]
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, body))

        if request.method == "POST" and path == "/login":
            return httpx.Response(self.login_status, json=self.login_response)
        if request.method == "PUT" and path.startswith("/users/"):
            return httpx.Response(self.profile_status, json=self.profile_response)
        if request.method == "GET" and path.startswith("/courses/"):
            course = self.courses.get(path.rsplit("/", 1)[-1])
            if course is None:
                return httpx.Response(404, json={"message": "Course not found"})
            return httpx.Response(200, json={"success": True, "data": course})
        if path == "/payments/create-order":
            response = self.order_response
            if self.order_ids:
                data = response["data"]
                order = {**data["order"], "id": self.order_ids.pop(0)}
                response = {**response, "data": {**data, "order": order}}
            return httpx.Response(self.order_status, json=response)
        if path == "/payments/verify-payment":
            return httpx.Response(self.verify_status, json=self.verify_response)
        return httpx.Response(404, json={"message": "Not found"})

    def calls_to(self, path: str):
        return [call for call in self.calls if call[1] == path]


class FakePaymentGateway(PaymentGateway):
    """Opens checkouts in memory; tests deliver results through on_result."""

    def __init__(self, sdk_available: bool = True):
        self.sdk_available = sdk_available
        self.sessions = {}
        self.opened = []

    async def load_sdk(self) -> bool:
        return self.sdk_available

    async def create_checkout_session(self, options, handlers) -> CheckoutSession:
        session = CheckoutSession(order_id=options["order_id"], options=options, handlers=handlers)
        self.sessions[session.order_id] = session
        self.opened.append(options)
        return session

    def get_session(self, order_id):
        return self.sessions.get(order_id)

    def discard(self, order_id):
        self.sessions.pop(order_id, None)

    def open_sessions(self):
        return list(self.sessions.values())


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api(backend):
    return CourseAPIClient(base_url=BACKEND_URL, timeout=5.0, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def course():
    return Course(course_id=101, title="ABAP Fundamentals", fee=15000)


def signed_in(store, api, session_id="s1", **user_fields) -> AuthSession:
    """AuthSession with a stored user and a valid token."""
    user = User(user_id="u1", full_name="Asha Rao", email="asha@example.com", **user_fields)
    token = make_token()
    run(store.set(session_id, "user", user.to_storage()))
    run(store.set(session_id, "token", token))
    auth = AuthSession(session_id, store, api)
    auth.user = user
    auth.token = token
    return auth


@pytest.fixture
def auth(store, api):
    return signed_in(store, api)


@pytest.fixture
def complete_auth(store, api):
    return signed_in(store, api, profile_complete=True, phone_number="9876543210")
