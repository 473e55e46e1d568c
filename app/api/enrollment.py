"""
app/api/enrollment.py

Purpose: Enrollment wizard endpoints

- Open / view / close a wizard
- One endpoint per wizard action; each returns the updated wizard view
- Plan quotes and profile form choices without opening a wizard
"""

from fastapi import APIRouter, Depends

from app.api.deps import course_api, enrollment_service, get_auth_session
from app.core.logging import get_logger
from app.flow.plans import get_plan_quotes
from app.models.course import Course
from app.schemas.enrollment import (
    OpenEnrollmentRequest,
    PlanSelectionRequest,
    ProfileCompletion,
    WizardView,
)
from app.services.auth_service import AuthSession
from app.services.course_api import CourseAPIClient
from app.services.enrollment_service import EnrollmentService
from utils.constants import (
    EXPERIENCE_LEVELS,
    LEARNING_GOALS,
    PROFESSIONS,
    PROFILE_REQUIRED_FIELDS,
    TIME_COMMITMENTS,
)

logger = get_logger(__name__)
router = APIRouter()


@router.get("/courses/{course_id}/plans")
async def course_plans(course_id: str, api: CourseAPIClient = Depends(course_api)):
    course = Course.from_payload(await api.get_course(course_id))
    return {
        "course_id": course.course_id or course_id,
        "title": course.title,
        "fee": course.fee,
        "plans": [quote.to_dict() for quote in get_plan_quotes(course.fee)],
    }


@router.get("/profile/options")
async def profile_options():
    """Choices for the profile form's select fields."""
    return {
        "professions": PROFESSIONS,
        "experience_levels": EXPERIENCE_LEVELS,
        "learning_goals": LEARNING_GOALS,
        "time_commitments": TIME_COMMITMENTS,
        "required_fields": list(PROFILE_REQUIRED_FIELDS),
    }


@router.post("/enrollments", response_model=WizardView, status_code=201)
async def open_enrollment(
    body: OpenEnrollmentRequest,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
):
    wizard = await service.open_wizard(auth, body.course_id)
    return wizard.view()


@router.get("/enrollments/{wizard_id}", response_model=WizardView)
async def get_enrollment(
    wizard_id: str,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
):
    return service.get_wizard(wizard_id, auth).view()


@router.post("/enrollments/{wizard_id}/profile", response_model=WizardView)
async def submit_profile(
    wizard_id: str,
    body: ProfileCompletion,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
):
    wizard = service.get_wizard(wizard_id, auth)
    await wizard.submit_profile(body.model_dump(exclude_none=True))
    return wizard.view()


@router.post("/enrollments/{wizard_id}/plan", response_model=WizardView)
async def select_plan(
    wizard_id: str,
    body: PlanSelectionRequest,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
):
    wizard = service.get_wizard(wizard_id, auth)
    wizard.select_plan(body.plan_id)
    return wizard.view()


@router.post("/enrollments/{wizard_id}/continue", response_model=WizardView)
async def continue_to_payment(
    wizard_id: str,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
):
    wizard = service.get_wizard(wizard_id, auth)
    wizard.continue_to_payment()
    return wizard.view()


@router.post("/enrollments/{wizard_id}/back", response_model=WizardView)
async def go_back(
    wizard_id: str,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
):
    wizard = service.get_wizard(wizard_id, auth)
    wizard.go_back()
    return wizard.view()


@router.post("/enrollments/{wizard_id}/payment", response_model=WizardView)
async def initiate_payment(
    wizard_id: str,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
):
    """
    Creates the payment order. The view's 'checkout' field holds the
    options the browser opens the widget with.
    """
    wizard = service.get_wizard(wizard_id, auth)
    await wizard.initiate_payment()
    return wizard.view()


@router.delete("/enrollments/{wizard_id}", response_model=WizardView)
async def close_enrollment(
    wizard_id: str,
    auth: AuthSession = Depends(get_auth_session),
    service: EnrollmentService = Depends(enrollment_service),
):
    return service.close_wizard(wizard_id, auth).view()
