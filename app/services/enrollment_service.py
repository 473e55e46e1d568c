"""
app/services/enrollment_service.py

Purpose: Open enrollment wizards

- Loads the course and opens a wizard for the signed-in user
- Keeps wizards in memory, each owned by one browser session
- Looks wizards up for the HTTP layer and drops them on close
- Sweeps idle wizards and unanswered checkouts
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from app.core.config import settings
from app.core.exceptions import ResourceNotFoundError
from app.core.logging import get_logger
from app.flow.wizard import EnrollmentWizard
from app.models.course import Course
from app.services.auth_service import AuthSession
from app.services.course_api import CourseAPIClient
from app.services.payment_gateway import PaymentGateway

logger = get_logger(__name__)


class EnrollmentService:
    """
    Registry of live wizards keyed by wizard id.
    """

    def __init__(
        self,
        api: CourseAPIClient,
        gateway: PaymentGateway,
        idle_minutes: Optional[int] = None,
        checkout_minutes: Optional[int] = None
    ):
        self.api = api
        self.gateway = gateway
        self.idle_timeout = timedelta(
            minutes=idle_minutes if idle_minutes is not None else settings.WIZARD_IDLE_MINUTES
        )
        self.checkout_timeout = timedelta(
            minutes=checkout_minutes if checkout_minutes is not None else settings.CHECKOUT_TTL_MINUTES
        )
        self._wizards: Dict[str, EnrollmentWizard] = {}
        self._owners: Dict[str, str] = {}

    async def open_wizard(self, auth: AuthSession, course_id) -> EnrollmentWizard:
        """
        Opens a wizard for `course_id`.

        Raises:
            AuthenticationError: Nobody is signed in
            ResourceNotFoundError: Course does not exist
        """
        await self.sweep_expired()
        auth.require_user()
        payload = await self.api.get_course(course_id, token=auth.token)
        course = Course.from_payload(payload)
        if not course.has_id:
            course.course_id = course_id

        wizard = EnrollmentWizard(course, auth, self.api, self.gateway)
        self._wizards[wizard.wizard_id] = wizard
        self._owners[wizard.wizard_id] = auth.session_id
        return wizard

    def get_wizard(self, wizard_id: str, auth: AuthSession) -> EnrollmentWizard:
        """
        Returns the wizard, rebinding it to the request's session.

        Raises:
            ResourceNotFoundError: Unknown wizard, or owned by another session
        """
        wizard = self._wizards.get(wizard_id)
        if wizard is None or self._owners.get(wizard_id) != auth.session_id:
            raise ResourceNotFoundError(f"Enrollment {wizard_id} not found")
        wizard.auth = auth
        wizard.last_active = datetime.utcnow()
        return wizard

    async def find_checkout(self, order_id: str, auth: AuthSession) -> EnrollmentWizard:
        """
        Returns the wizard whose open checkout is `order_id`.

        Only the session that opened the checkout may report its result.

        Raises:
            ResourceNotFoundError: No such checkout for this session
        """
        await self.sweep_expired()
        for wizard_id, wizard in self._wizards.items():
            if wizard.checkout is None or wizard.checkout.order_id != order_id:
                continue
            if self._owners.get(wizard_id) != auth.session_id:
                logger.warning(
                    f"Checkout result for order {order_id} from another session",
                    extra={"session_id": auth.session_id, "wizard_id": wizard_id}
                )
                break
            return self.get_wizard(wizard_id, auth)
        raise ResourceNotFoundError(f"No open checkout for order {order_id}")

    def close_wizard(self, wizard_id: str, auth: AuthSession) -> EnrollmentWizard:
        wizard = self.get_wizard(wizard_id, auth)
        self._drop(wizard_id)
        return wizard

    def _drop(self, wizard_id: str):
        wizard = self._wizards.pop(wizard_id)
        self._owners.pop(wizard_id, None)
        if wizard.checkout is not None:
            self.gateway.discard(wizard.checkout.order_id)
            wizard.checkout = None
            wizard.payment_processing = False
        wizard.close()

    async def sweep_expired(self, now: Optional[datetime] = None) -> List[str]:
        """
        Drops unanswered checkouts and idle wizards.

        A checkout open longer than the checkout timeout is treated as
        dismissed. A wizard untouched for longer than the idle timeout is
        closed and forgotten.

        Returns:
            Ids of the wizards dropped
        """
        now = now or datetime.utcnow()

        expired_orders = set(self.gateway.expire_sessions(self.checkout_timeout, now=now))
        for wizard in list(self._wizards.values()):
            if wizard.checkout is not None and wizard.checkout.order_id in expired_orders:
                await wizard.on_widget_dismiss()

        idle = [
            wizard_id for wizard_id, wizard in self._wizards.items()
            if now - wizard.last_active > self.idle_timeout
        ]
        for wizard_id in idle:
            self._drop(wizard_id)

        if idle:
            logger.info(f"Dropped {len(idle)} idle enrollment wizard(s)")
        return idle


# Global service instance
_enrollment_service: Optional[EnrollmentService] = None


def get_enrollment_service() -> EnrollmentService:
    """Get or create the global enrollment service."""
    global _enrollment_service
    if _enrollment_service is None:
        from app.services.course_api import get_course_api
        from app.services.payment_gateway import get_payment_gateway
        _enrollment_service = EnrollmentService(get_course_api(), get_payment_gateway())
    return _enrollment_service
