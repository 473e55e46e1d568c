"""
app/api/checkout.py

Purpose: Checkout widget callbacks

- The browser posts the widget's handler / payment.failed / modal.ondismiss
  outcomes here, keyed by order id
- Results are accepted only from the session that opened the checkout
- Results are routed to the wizard that opened the checkout
"""

from fastapi import APIRouter, Depends

from app.api.deps import enrollment_service, get_auth_session, payment_gateway
from app.core.logging import get_logger
from app.schemas.enrollment import PaymentFailedPayload, PaymentSuccessPayload
from app.services.auth_service import AuthSession
from app.services.enrollment_service import EnrollmentService
from app.services.payment_gateway import PaymentGateway

logger = get_logger(__name__)
router = APIRouter()


@router.post("/checkout/{order_id}/success")
async def payment_success(
    order_id: str,
    body: PaymentSuccessPayload,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
    gateway: PaymentGateway = Depends(payment_gateway),
):
    await service.find_checkout(order_id, auth)
    payload = body.model_dump(exclude_none=True)
    payload.setdefault("razorpay_order_id", order_id)
    user = await gateway.on_result(order_id, "success", payload)
    return {
        "status": "enrolled",
        "order_id": order_id,
        "enrolled_courses": user.enrolled_courses,
    }


@router.post("/checkout/{order_id}/failed")
async def payment_failed(
    order_id: str,
    body: PaymentFailedPayload,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
    gateway: PaymentGateway = Depends(payment_gateway),
):
    await service.find_checkout(order_id, auth)
    # The wizard raises PaymentError, rendered as a 402 error response
    await gateway.on_result(order_id, "failed", body.model_dump())
    return {"status": "failed", "order_id": order_id}


@router.post("/checkout/{order_id}/dismiss")
async def payment_dismissed(
    order_id: str,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
    gateway: PaymentGateway = Depends(payment_gateway),
):
    await service.find_checkout(order_id, auth)
    await gateway.on_result(order_id, "dismiss")
    return {"status": "dismissed", "order_id": order_id}
