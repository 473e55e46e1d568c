import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.main import app
from app.services.enrollment_service import EnrollmentService
from app.services.payment_gateway import HostedCheckoutGateway
from tests.conftest import signed_in

PREFIX = "/api/v1"

PROFILE = {
    "full_name": "Asha Rao",
    "phone_number": "9876543210",
    "occupation": "Working Professional",
    "profession": "SAP Consultant",
    "experience": "3-5",
    "goals": ["Skill Upgrade", "Career Change"],
    "time_commitment": "5-10",
}

SUCCESS = {"razorpay_payment_id": "pay_123", "razorpay_signature": "sig"}


@pytest.fixture
def hosted_gateway():
    return HostedCheckoutGateway(script_url="https://checkout.example/checkout.js")


@pytest.fixture
def client(store, api, hosted_gateway):
    service = EnrollmentService(api, hosted_gateway)
    app.dependency_overrides[deps.session_store] = lambda: store
    app.dependency_overrides[deps.course_api] = lambda: api
    app.dependency_overrides[deps.payment_gateway] = lambda: hosted_gateway
    app.dependency_overrides[deps.enrollment_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def headers(store, api):
    signed_in(store, api, session_id="browser-1", profile_complete=True)
    return {"X-Session-Id": "browser-1"}


def open_at_payment(client, headers):
    wizard = client.post(f"{PREFIX}/enrollments", json={"course_id": 101}, headers=headers).json()
    path = f"{PREFIX}/enrollments/{wizard['wizard_id']}"
    client.post(f"{path}/continue", headers=headers)
    view = client.post(f"{path}/payment", headers=headers).json()
    return path, view


def test_full_enrollment_flow(client):
    login = client.post(f"{PREFIX}/auth/login", json={"email": "asha@example.com", "password": "pw"})
    assert login.status_code == 200
    headers = {"X-Session-Id": login.json()["session_id"]}

    opened = client.post(f"{PREFIX}/enrollments", json={"course_id": 101}, headers=headers)
    assert opened.status_code == 201
    view = opened.json()
    assert view["step"] == 0
    assert view["progress"] == "Step 1 of 4"
    path = f"{PREFIX}/enrollments/{view['wizard_id']}"

    view = client.post(f"{path}/profile", json=PROFILE, headers=headers).json()
    assert view["step"] == 1
    assert view["success_message"] == "Profile completed successfully!"

    view = client.post(f"{path}/plan", json={"plan_id": "installment"}, headers=headers).json()
    assert view["enrollment"]["payment_plan"] == "installment"

    view = client.post(f"{path}/continue", headers=headers).json()
    assert view["step"] == 2

    view = client.post(f"{path}/payment", headers=headers).json()
    checkout = view["checkout"]
    assert view["payment_processing"] is True
    assert checkout["order_id"] == "order_abc"
    assert checkout["script_url"] == "https://checkout.example/checkout.js"
    assert checkout["callbacks"]["success"] == f"{PREFIX}/checkout/order_abc/success"

    result = client.post(checkout["callbacks"]["success"], json=SUCCESS, headers=headers)
    assert result.status_code == 200
    assert result.json()["enrolled_courses"] == [101]

    view = client.get(path, headers=headers).json()
    assert view["step"] == 3
    assert view["payment_processing"] is False

    me = client.get(f"{PREFIX}/auth/me", headers=headers).json()
    assert me["user"]["enrolledCourses"] == [101]
    assert me["user"]["profileComplete"] is True


def test_open_requires_sign_in(client):
    response = client.post(f"{PREFIX}/enrollments", json={"course_id": 101})
    assert response.status_code == 401
    data = response.json()
    assert data["code"] == "AUTHENTICATION_FAILED"
    assert data["error"] == "Please sign in to enroll in this course."


def test_open_unknown_course(client, headers):
    response = client.post(f"{PREFIX}/enrollments", json={"course_id": 404}, headers=headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Course not found"


def test_wizard_is_private_to_its_session(client, headers, store, api):
    wizard = client.post(f"{PREFIX}/enrollments", json={"course_id": 101}, headers=headers).json()
    signed_in(store, api, session_id="browser-2", profile_complete=True)

    response = client.get(f"{PREFIX}/enrollments/{wizard['wizard_id']}", headers={"X-Session-Id": "browser-2"})

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_profile_form_rules(client, store, api):
    signed_in(store, api, session_id="browser-3")
    headers = {"X-Session-Id": "browser-3"}
    wizard = client.post(f"{PREFIX}/enrollments", json={"course_id": 101}, headers=headers).json()
    path = f"{PREFIX}/enrollments/{wizard['wizard_id']}"

    bad_phone = client.post(f"{path}/profile", json={**PROFILE, "phone_number": "12"}, headers=headers)
    assert bad_phone.status_code == 422
    assert bad_phone.json()["code"] == "VALIDATION_ERROR"

    missing = client.post(f"{path}/profile", json={"full_name": "Asha Rao"}, headers=headers)
    assert missing.status_code == 422
    assert "occupation" in missing.json()["details"]["missing"]

    view = client.get(path, headers=headers).json()
    assert view["step"] == 0
    assert "occupation" in view["error"]


def test_unknown_plan_rejected(client, headers):
    wizard = client.post(f"{PREFIX}/enrollments", json={"course_id": 101}, headers=headers).json()
    response = client.post(
        f"{PREFIX}/enrollments/{wizard['wizard_id']}/plan",
        json={"plan_id": "weekly"},
        headers=headers,
    )
    assert response.status_code == 422


def test_back_blocked_while_paying(client, headers):
    path, _ = open_at_payment(client, headers)
    response = client.post(f"{path}/back", headers=headers)
    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_TRANSITION"


def test_widget_failure_reported(client, headers):
    path, _ = open_at_payment(client, headers)

    response = client.post(
        f"{PREFIX}/checkout/order_abc/failed",
        json={"error": {"code": "BAD_REQUEST_ERROR", "description": "Card declined"}},
        headers=headers,
    )

    assert response.status_code == 402
    assert response.json()["code"] == "PAYMENT_FAILED"
    view = client.get(path, headers=headers).json()
    assert view["step"] == 2
    assert view["error"] == "Payment failed: Card declined"
    assert view["payment_processing"] is False


def test_widget_dismissed(client, headers, hosted_gateway):
    path, _ = open_at_payment(client, headers)

    response = client.post(f"{PREFIX}/checkout/order_abc/dismiss", headers=headers)

    assert response.json()["status"] == "dismissed"
    assert hosted_gateway.get_session("order_abc") is None
    view = client.get(path, headers=headers).json()
    assert view["step"] == 2
    assert view["payment_processing"] is False
    assert view["checkout"] is None


def test_result_for_unknown_order(client, headers):
    response = client.post(f"{PREFIX}/checkout/order_missing/dismiss", headers=headers)
    assert response.status_code == 404


def test_checkout_results_only_from_owning_session(client, headers, store, api, hosted_gateway):
    path, _ = open_at_payment(client, headers)
    signed_in(store, api, session_id="browser-2", profile_complete=True)
    other = {"X-Session-Id": "browser-2"}

    dismissed = client.post(f"{PREFIX}/checkout/order_abc/dismiss", headers=other)
    failed = client.post(
        f"{PREFIX}/checkout/order_abc/failed",
        json={"error": {"description": "Card declined"}},
        headers=other,
    )
    anonymous = client.post(f"{PREFIX}/checkout/order_abc/success", json=SUCCESS)

    assert [r.status_code for r in (dismissed, failed, anonymous)] == [404, 404, 404]
    assert hosted_gateway.get_session("order_abc") is not None
    view = client.get(path, headers=headers).json()
    assert view["payment_processing"] is True
    assert view["error"] is None


def test_two_enrollments_in_one_session(client, headers, backend):
    backend.order_ids = ["order_one", "order_two"]
    paths = []
    for course_id in (101, 102):
        wizard = client.post(f"{PREFIX}/enrollments", json={"course_id": course_id}, headers=headers).json()
        path = f"{PREFIX}/enrollments/{wizard['wizard_id']}"
        client.post(f"{path}/continue", headers=headers)
        client.post(f"{path}/payment", headers=headers)
        paths.append(path)

    client.post(f"{PREFIX}/checkout/order_one/success", json=SUCCESS, headers=headers)
    result = client.post(f"{PREFIX}/checkout/order_two/success", json=SUCCESS, headers=headers)

    assert result.json()["enrolled_courses"] == [101, 102]
    me = client.get(f"{PREFIX}/auth/me", headers=headers).json()
    assert me["user"]["enrolledCourses"] == [101, 102]


def test_verification_rejected(client, headers, backend):
    backend.verify_response = {"success": False, "message": "Signature mismatch"}
    path, _ = open_at_payment(client, headers)

    response = client.post(f"{PREFIX}/checkout/order_abc/success", json=SUCCESS, headers=headers)

    assert response.status_code == 402
    assert response.json()["error"] == "Signature mismatch"
    assert client.get(path, headers=headers).json()["step"] == 2


def test_order_creation_failure(client, headers, backend):
    backend.order_status = 500
    backend.order_response = {"error": "Razorpay unavailable"}
    wizard = client.post(f"{PREFIX}/enrollments", json={"course_id": 101}, headers=headers).json()
    path = f"{PREFIX}/enrollments/{wizard['wizard_id']}"
    client.post(f"{path}/continue", headers=headers)

    response = client.post(f"{path}/payment", headers=headers)

    assert response.status_code == 502
    assert response.json()["error"] == "Razorpay unavailable"
    assert client.get(path, headers=headers).json()["payment_processing"] is False


def test_close_enrollment(client, headers):
    wizard = client.post(f"{PREFIX}/enrollments", json={"course_id": 101}, headers=headers).json()
    path = f"{PREFIX}/enrollments/{wizard['wizard_id']}"

    closed = client.delete(path, headers=headers)

    assert closed.json()["closed"] is True
    assert client.get(path, headers=headers).status_code == 404


def test_close_drops_open_checkout(client, headers, hosted_gateway):
    path, _ = open_at_payment(client, headers)

    closed = client.delete(path, headers=headers).json()

    assert closed["checkout"] is None
    assert hosted_gateway.get_session("order_abc") is None
    response = client.post(f"{PREFIX}/checkout/order_abc/dismiss", headers=headers)
    assert response.status_code == 404


def test_course_plans(client):
    data = client.get(f"{PREFIX}/courses/101/plans").json()
    assert data["fee"] == 15000
    assert [plan["price"] for plan in data["plans"]] == [15000, 5000]


def test_logout(client, headers):
    assert client.post(f"{PREFIX}/auth/logout", headers=headers).status_code == 200
    assert client.get(f"{PREFIX}/auth/me", headers=headers).status_code == 401


def test_probes(client):
    assert client.get("/live").json() == {"status": "alive"}
    assert client.get("/ready").json() == {"status": "ready"}
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["checks"]["database"] == "not_used"


def test_profile_options(client):
    data = client.get(f"{PREFIX}/profile/options").json()
    assert "SAP Consultant" in data["professions"]
    assert data["required_fields"][0] == "full_name"
