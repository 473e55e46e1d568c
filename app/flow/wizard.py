"""
app/flow/wizard.py

Purpose: Enrollment wizard (profile -> plan -> payment -> confirmation)

- Starts on PROFILE when the user's profile is incomplete, else PLAN
- Saves the profile, prices the chosen plan
- Creates the payment order and opens the checkout widget
- Verifies the widget's signed result before enrolling the user
- Keeps the last user-facing error so the browser can show it
"""

import uuid
from datetime import datetime
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.exceptions import (
    EnrollEaseError,
    ExternalServiceError,
    InvalidTransitionError,
    PaymentError,
    PreconditionError,
    ValidationError,
)
from app.core.logging import get_logger, LogContext
from app.flow.plans import PaymentPlan, PlanQuote, get_plan_quotes, parse_plan, quote_plan
from app.flow.states import (
    EnrollmentStep,
    get_initial_step,
    get_progress_message,
    get_step_metadata,
    is_valid_transition,
)
from app.models.course import Course
from app.models.user import User
from app.services.auth_service import AuthSession
from app.services.course_api import CourseAPIClient
from app.services.payment_gateway import CheckoutHandlers, CheckoutSession, PaymentGateway
from utils.constants import (
    ERROR_COURSE_ID_MISSING,
    ERROR_ORDER_CREATION_FAILED,
    ERROR_PAYMENT_IN_PROGRESS,
    ERROR_PAYMENT_INIT_FAILED,
    ERROR_PROFILE_SAVE_FAILED,
    ERROR_SDK_LOAD_FAILED,
    ERROR_VERIFICATION_CONTACT_SUPPORT,
    ERROR_VERIFICATION_FAILED,
    MESSAGE_ENROLLMENT_COMPLETED,
    MESSAGE_PROFILE_COMPLETED,
    PAYMENT_FAILED_TEMPLATE,
    PROFILE_REQUIRED_FIELDS,
    PROFILE_UPDATED_BACKEND_MESSAGE,
)
from utils.payment_utils import extract_error_message, to_minor_units
from utils.time_utils import now_ms
from utils.validation_utils import missing_required_fields

logger = get_logger(__name__)

SUCCESS_FIELDS = ("razorpay_payment_id", "razorpay_order_id", "razorpay_signature")


@dataclass
class EnrollmentData:
    """Wizard-scoped choices; discarded with the wizard."""
    course_id: Any
    payment_plan: PaymentPlan = PaymentPlan.FULL
    profile_complete: bool = False
    completed_enrollment: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["payment_plan"] = self.payment_plan.value
        return data


@dataclass
class PaymentOrder:
    """Order issued by the platform, used once to open the widget."""
    order_id: str
    amount: int
    currency: str
    key_id: str

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "PaymentOrder":
        data = response.get("data") or {}
        order = data.get("order") or {}
        if not order.get("id"):
            raise ExternalServiceError("Payment order response is missing the order id")
        return cls(
            order_id=str(order["id"]),
            amount=int(order.get("amount") or 0),
            currency=order.get("currency") or settings.PAYMENT_CURRENCY,
            key_id=data.get("key_id") or "",
        )


def profile_update_succeeded(response: Dict[str, Any]) -> bool:
    return bool(response.get("success")) or response.get("message") == PROFILE_UPDATED_BACKEND_MESSAGE


class EnrollmentWizard:
    """
    One user enrolling in one course.

    The wizard does no retrying of its own: every failure is recorded in
    `error`, clears `payment_processing` and is re-raised to the caller.
    """

    def __init__(
        self,
        course: Course,
        auth: AuthSession,
        api: CourseAPIClient,
        gateway: PaymentGateway,
        wizard_id: Optional[str] = None
    ):
        user = auth.require_user()

        self.wizard_id = wizard_id or uuid.uuid4().hex
        self.course = course
        self.auth = auth
        self.api = api
        self.gateway = gateway

        self.includes_profile_step = not user.profile_complete
        self.step = get_initial_step(user.profile_complete)
        self.data = EnrollmentData(
            course_id=course.course_id,
            profile_complete=bool(user.profile_complete),
        )

        self.loading = False
        self.payment_processing = False
        self.error: Optional[str] = None
        self.success_message: Optional[str] = None
        self.checkout: Optional[CheckoutSession] = None
        self.closed = False
        self.last_active = datetime.utcnow()

        logger.info(
            f"Enrollment wizard opened at {self.step.name}",
            extra={"user_id": user.user_id, "course_id": course.course_id}
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def user(self) -> User:
        return self.auth.require_user()

    def _log_extra(self, **kwargs) -> Dict[str, Any]:
        extra = {"course_id": self.course.course_id, "step": self.step.name}
        if self.auth.user is not None:
            extra["user_id"] = self.auth.user.user_id
        extra.update(kwargs)
        return extra

    def _move_to(self, target: EnrollmentStep):
        if not is_valid_transition(self.step, target):
            raise InvalidTransitionError(
                f"Cannot move from {self.step.name} to {target.name}",
                details={"step": self.step.value}
            )
        with LogContext(course_id=self.course.course_id, step=target.name):
            logger.info(f"Step {self.step.name} -> {target.name}")
        self.step = target
        self.error = None
        self.success_message = None

    def _require_step(self, step: EnrollmentStep):
        if self.step != step:
            raise InvalidTransitionError(
                f"Action not available on {self.step.name} step",
                details={"step": self.step.value, "expected": step.value}
            )

    def _record_error(self, message: str):
        self.error = message
        logger.warning(f"Wizard error: {message}", extra=self._log_extra())

    # ------------------------------------------------------------------
    # PROFILE
    # ------------------------------------------------------------------

    async def submit_profile(self, profile: Dict[str, Any]) -> User:
        """
        Saves the profile form and moves on to plan selection.

        Args:
            profile: Profile form values

        Returns:
            Updated user

        Raises:
            ValidationError: Required fields left empty
            ExternalServiceError: Platform refused the update
        """
        self._require_step(EnrollmentStep.PROFILE)

        missing = missing_required_fields(profile, PROFILE_REQUIRED_FIELDS)
        if missing:
            message = f"Please fill in: {', '.join(missing)}"
            self._record_error(message)
            raise ValidationError(message, details={"missing": missing})

        self.loading = True
        self.error = None
        try:
            user = self.user
            response = await self.api.update_profile(user.user_id, profile, token=self.auth.token)
            if not profile_update_succeeded(response):
                raise ExternalServiceError(extract_error_message(response, ERROR_PROFILE_SAVE_FAILED))

            updated = await self.auth.update_user({**profile, "profileComplete": True})
            self.data.profile_complete = True
            self._move_to(EnrollmentStep.PLAN)
            self.success_message = MESSAGE_PROFILE_COMPLETED
            return updated

        except EnrollEaseError as e:
            self._record_error(e.message)
            raise
        finally:
            self.loading = False

    # ------------------------------------------------------------------
    # PLAN
    # ------------------------------------------------------------------

    def plan_quotes(self):
        return get_plan_quotes(self.course.fee)

    def select_plan(self, plan_id: Any) -> PlanQuote:
        """
        Chooses the payment plan. Only wizard-local state changes.
        """
        self._require_step(EnrollmentStep.PLAN)
        plan = parse_plan(plan_id)
        quote = quote_plan(plan, self.course.fee)
        self.data.payment_plan = plan

        with LogContext(course_id=self.course.course_id, step=self.step.name):
            logger.info(f"Plan selected: {plan.value} ({quote.price} now, {quote.total} total)")
        return quote

    def continue_to_payment(self):
        self._require_step(EnrollmentStep.PLAN)
        self._move_to(EnrollmentStep.PAYMENT)

    def go_back(self):
        """
        PAYMENT -> PLAN, or PLAN -> PROFILE when the profile form was shown.
        """
        if self.payment_processing and get_step_metadata(self.step).requires_payment_lock:
            raise InvalidTransitionError(ERROR_PAYMENT_IN_PROGRESS)

        if self.step == EnrollmentStep.PAYMENT:
            self._move_to(EnrollmentStep.PLAN)
        elif self.step == EnrollmentStep.PLAN and self.includes_profile_step:
            self._move_to(EnrollmentStep.PROFILE)
        else:
            raise InvalidTransitionError(
                f"Cannot go back from {self.step.name}",
                details={"step": self.step.value}
            )

    # ------------------------------------------------------------------
    # PAYMENT
    # ------------------------------------------------------------------

    def build_order_request(self) -> Dict[str, Any]:
        """
        Order body for POST /payments/create-order.
        The charge is the course fee in paise.
        """
        user = self.user
        course = self.course
        fee = course.fee
        return {
            "amount": to_minor_units(fee),
            "currency": settings.PAYMENT_CURRENCY,
            "receipt": f"course_{course.course_id}_{now_ms()}",
            "courseId": course.course_id,
            "notes": {
                "courseId": course.course_id,
                "courseTitle": course.title,
                "userId": user.user_id,
                "userName": user.full_name,
                "userEmail": user.email,
                "paymentPlan": self.data.payment_plan.value,
                "actualAmount": fee,
            },
        }

    def build_checkout_options(self, order: PaymentOrder) -> Dict[str, Any]:
        user = self.user
        course = self.course
        return {
            "key": order.key_id,
            "amount": order.amount,
            "currency": order.currency,
            "name": settings.CHECKOUT_NAME,
            "description": f"Enrollment for {course.title}",
            "image": settings.CHECKOUT_IMAGE,
            "order_id": order.order_id,
            "prefill": {
                "name": user.full_name,
                "email": user.email,
                "contact": user.phone_number or "",
            },
            "notes": {
                "course": course.title,
                "courseId": course.course_id,
                "userId": user.user_id,
                "paymentPlan": self.data.payment_plan.value,
                "actualAmount": course.fee,
            },
            "theme": {"color": settings.CHECKOUT_THEME_COLOR},
        }

    async def initiate_payment(self) -> CheckoutSession:
        """
        Creates the payment order and opens the checkout widget.

        Returns:
            The opened checkout session

        Raises:
            PreconditionError: Course has no id (nothing is sent)
            InvalidTransitionError: Not on PAYMENT, or a payment is already running
            ExternalServiceError: Widget unavailable or order creation failed
        """
        self._require_step(EnrollmentStep.PAYMENT)
        if self.payment_processing:
            raise InvalidTransitionError(ERROR_PAYMENT_IN_PROGRESS)

        self.payment_processing = True
        self.error = None
        logger.info("Starting payment process", extra=self._log_extra())

        try:
            if not self.course.has_id:
                raise PreconditionError(ERROR_COURSE_ID_MISSING)

            if not await self.gateway.load_sdk():
                raise ExternalServiceError(ERROR_SDK_LOAD_FAILED)

            order_request = self.build_order_request()
            response = await self.api.create_order(order_request, token=self.auth.token)
            if not response.get("success"):
                raise ExternalServiceError(extract_error_message(response, ERROR_ORDER_CREATION_FAILED))

            order = PaymentOrder.from_response(response)
            handlers = CheckoutHandlers(
                on_success=self.on_payment_success,
                on_failure=self.on_payment_failed,
                on_dismiss=self.on_widget_dismiss,
            )
            self.checkout = await self.gateway.create_checkout_session(
                self.build_checkout_options(order), handlers
            )
            logger.info(f"Checkout opened for order {order.order_id}", extra=self._log_extra(order_id=order.order_id))
            return self.checkout

        except EnrollEaseError as e:
            self.payment_processing = False
            self._record_error(e.message)
            raise
        except Exception as e:
            self.payment_processing = False
            logger.error(f"Payment initialization failed: {e}", exc_info=True, extra=self._log_extra())
            self._record_error(ERROR_PAYMENT_INIT_FAILED)
            raise ExternalServiceError(ERROR_PAYMENT_INIT_FAILED) from e

    async def on_payment_success(self, response: Dict[str, Any]) -> User:
        """
        Widget success handler: verify the signature server-side, then enroll.

        A second success after enrollment is ignored. Closing the wizard
        does not stop verification; it only keeps the step where it was.

        Raises:
            PaymentError: Missing callback fields or verification rejected
            ExternalServiceError: Verification call failed
        """
        if self.data.completed_enrollment is not None:
            logger.warning("Duplicate payment success ignored", extra=self._log_extra())
            return self.user

        order_id = response.get("razorpay_order_id") or (self.checkout.order_id if self.checkout else None)
        missing = [name for name in SUCCESS_FIELDS if not response.get(name)]
        if order_id:
            missing = [name for name in missing if name != "razorpay_order_id"]

        try:
            if missing:
                raise PaymentError(ERROR_VERIFICATION_FAILED, details={"missing": missing})

            user = self.user
            course_id = self.course.course_id
            verification = {
                "razorpay_order_id": order_id,
                "razorpay_payment_id": response["razorpay_payment_id"],
                "razorpay_signature": response["razorpay_signature"],
                "courseId": course_id,
                "userId": user.user_id,
                "amount": self.course.fee,
                "paymentPlan": self.data.payment_plan.value,
            }

            result = await self.api.verify_payment(verification, token=self.auth.token)
            if not result.get("success"):
                raise PaymentError(extract_error_message(result, ERROR_VERIFICATION_FAILED))

            payment_id = result.get("paymentId") or (result.get("data") or {}).get("rzpPaymentId")
            self.data.completed_enrollment = {
                "course_id": course_id,
                "payment_id": payment_id,
                "order_id": order_id,
                "payment_plan": self.data.payment_plan.value,
                "amount": self.course.fee,
            }

            updated = await self.auth.add_enrollment(course_id)

            self.checkout = None
            if self.closed:
                logger.info("Payment verified after wizard was closed", extra=self._log_extra(order_id=order_id))
            else:
                self._move_to(EnrollmentStep.CONFIRMATION)
                self.success_message = MESSAGE_ENROLLMENT_COMPLETED

            logger.info(f"Enrollment completed, payment {payment_id}", extra=self._log_extra(order_id=order_id))
            return updated

        except EnrollEaseError as e:
            self._record_error(e.message)
            raise
        except Exception as e:
            logger.error(f"Payment verification failed: {e}", exc_info=True, extra=self._log_extra())
            self._record_error(ERROR_VERIFICATION_CONTACT_SUPPORT)
            raise PaymentError(ERROR_VERIFICATION_CONTACT_SUPPORT) from e
        finally:
            self.payment_processing = False

    async def on_payment_failed(self, payload: Dict[str, Any]):
        """
        Widget 'payment.failed' event. The user stays on PAYMENT.

        Raises:
            PaymentError: Always, carrying the widget's description
        """
        error = payload.get("error") if isinstance(payload.get("error"), dict) else payload
        description = (error or {}).get("description") or "Unknown error"

        self.payment_processing = False
        message = PAYMENT_FAILED_TEMPLATE.format(description=description)
        self._record_error(message)
        raise PaymentError(message, details={"error": error})

    async def on_widget_dismiss(self):
        """Widget closed without paying. Step is unchanged."""
        self.payment_processing = False
        self.checkout = None
        logger.info("Payment modal dismissed", extra=self._log_extra())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self):
        self.closed = True
        logger.info("Enrollment wizard closed", extra=self._log_extra())

    def view(self) -> Dict[str, Any]:
        """
        Snapshot of the wizard for the browser.
        """
        metadata = get_step_metadata(self.step)
        can_go_back = (
            self.step == EnrollmentStep.PAYMENT
            or (self.step == EnrollmentStep.PLAN and self.includes_profile_step)
        ) and not self.payment_processing

        return {
            "wizard_id": self.wizard_id,
            "step": self.step.value,
            "step_name": self.step.name,
            "title": metadata.display_name,
            "progress": get_progress_message(self.step, self.includes_profile_step),
            "can_go_back": can_go_back,
            "course": {
                "course_id": self.course.course_id,
                "title": self.course.title,
                "fee": self.course.fee,
                "image": self.course.image_url(),
            },
            "enrollment": self.data.to_dict(),
            "plans": [quote.to_dict() for quote in self.plan_quotes()],
            "loading": self.loading,
            "payment_processing": self.payment_processing,
            "error": self.error,
            "success_message": self.success_message,
            "checkout": self.checkout.options if self.checkout else None,
            "closed": self.closed,
        }
