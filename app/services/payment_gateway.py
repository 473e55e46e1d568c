"""
app/services/payment_gateway.py

Purpose: Checkout widget integration

- PaymentGateway port used by the enrollment wizard
- Hosted Razorpay checkout: options are handed to the browser, which
  runs the widget and posts the outcome back to us
- Routes success / failure / dismiss results to the wizard's handlers
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional

from app.core.config import settings
from app.core.exceptions import ResourceNotFoundError
from app.core.logging import get_logger

logger = get_logger(__name__)

SuccessHandler = Callable[[Dict[str, Any]], Awaitable[Any]]
FailureHandler = Callable[[Dict[str, Any]], Awaitable[Any]]
DismissHandler = Callable[[], Awaitable[Any]]


@dataclass
class CheckoutHandlers:
    """Callbacks the widget result is delivered to."""
    on_success: SuccessHandler
    on_failure: FailureHandler
    on_dismiss: DismissHandler


@dataclass
class CheckoutSession:
    """An opened checkout, keyed by the platform's order id."""
    order_id: str
    options: Dict[str, Any]
    handlers: CheckoutHandlers
    created_at: datetime = field(default_factory=datetime.utcnow)


class PaymentGateway(ABC):
    """
    Port for the third-party checkout widget.
    """

    @abstractmethod
    async def load_sdk(self) -> bool:
        """True when the checkout widget can be opened."""

    @abstractmethod
    async def create_checkout_session(
        self,
        options: Dict[str, Any],
        handlers: CheckoutHandlers
    ) -> CheckoutSession:
        """Opens the widget for options['order_id'] and wires its callbacks."""

    async def on_result(self, order_id: str, event: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Delivers a widget outcome to the session's handlers.

        Args:
            order_id: Order the widget was opened for
            event: 'success', 'failed' or 'dismiss'
            payload: Widget callback data

        Raises:
            ResourceNotFoundError: Unknown order or event
        """
        session = self.get_session(order_id)
        if session is None:
            raise ResourceNotFoundError(f"No open checkout for order {order_id}")

        payload = payload or {}
        logger.info(f"Checkout result '{event}' for order {order_id}")

        if event == "success":
            self.discard(order_id)
            return await session.handlers.on_success(payload)
        if event == "failed":
            # The widget stays open after a failed attempt, so the session does too
            return await session.handlers.on_failure(payload)
        if event == "dismiss":
            self.discard(order_id)
            return await session.handlers.on_dismiss()

        raise ResourceNotFoundError(f"Unknown checkout event: {event}")

    @abstractmethod
    def get_session(self, order_id: str) -> Optional[CheckoutSession]:
        ...

    @abstractmethod
    def discard(self, order_id: str) -> None:
        ...

    @abstractmethod
    def open_sessions(self) -> List[CheckoutSession]:
        ...

    def expire_sessions(self, max_age: timedelta, now: Optional[datetime] = None) -> List[str]:
        """
        Discards checkouts opened more than `max_age` ago without a result.

        Returns:
            Order ids of the discarded checkouts
        """
        now = now or datetime.utcnow()
        expired = [s.order_id for s in self.open_sessions() if now - s.created_at > max_age]
        for order_id in expired:
            self.discard(order_id)
        if expired:
            logger.info(f"Expired {len(expired)} unanswered checkout(s)")
        return expired


class HostedCheckoutGateway(PaymentGateway):
    """
    Razorpay Checkout running in the user's browser.

    The options returned from create_checkout_session are what the
    browser passes to `new Razorpay(options)`; the browser reports the
    handler / payment.failed / modal.ondismiss callbacks to the
    callback URLs we add to them.
    """

    def __init__(self, script_url: Optional[str] = None, callback_base: Optional[str] = None):
        self.script_url = script_url if script_url is not None else settings.CHECKOUT_SCRIPT_URL
        self.callback_base = callback_base if callback_base is not None else f"{settings.API_PREFIX}/checkout"
        self._sessions: Dict[str, CheckoutSession] = {}

    async def load_sdk(self) -> bool:
        return bool(self.script_url)

    async def create_checkout_session(
        self,
        options: Dict[str, Any],
        handlers: CheckoutHandlers
    ) -> CheckoutSession:
        order_id = options["order_id"]
        browser_options = {
            **options,
            "script_url": self.script_url,
            "callbacks": {
                "success": f"{self.callback_base}/{order_id}/success",
                "failed": f"{self.callback_base}/{order_id}/failed",
                "dismiss": f"{self.callback_base}/{order_id}/dismiss",
            },
        }
        session = CheckoutSession(order_id=order_id, options=browser_options, handlers=handlers)
        self._sessions[order_id] = session
        logger.info(f"Checkout opened for order {order_id}")
        return session

    def get_session(self, order_id: str) -> Optional[CheckoutSession]:
        return self._sessions.get(order_id)

    def discard(self, order_id: str) -> None:
        self._sessions.pop(order_id, None)

    def open_sessions(self) -> List[CheckoutSession]:
        return list(self._sessions.values())


# Global gateway instance
_gateway: Optional[PaymentGateway] = None


def get_payment_gateway() -> PaymentGateway:
    """Get or create the global checkout gateway."""
    global _gateway
    if _gateway is None:
        _gateway = HostedCheckoutGateway()
    return _gateway
