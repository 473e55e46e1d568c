"""
app/flow/states.py

Purpose: Defines all enrollment wizard steps

- Enum for each step in the flow (PROFILE, PLAN, PAYMENT, CONFIRMATION)
- Single source of truth for flow stages
- Step transition validation
- Metadata for each step (title, back navigation)
"""

from enum import IntEnum
from typing import Dict, List, Optional
from dataclasses import dataclass

from utils.constants import (
    STEP_TITLE_PROFILE,
    STEP_TITLE_PLAN,
    STEP_TITLE_PAYMENT,
    STEP_TITLE_CONFIRMATION,
)


class EnrollmentStep(IntEnum):
    """
    Steps of the enrollment wizard, in order.
    The numeric value is the step index shown to the browser.
    """

    PROFILE = 0
    PLAN = 1
    PAYMENT = 2
    CONFIRMATION = 3


@dataclass
class StepMetadata:
    """
    Metadata associated with each wizard step.
    """
    name: EnrollmentStep
    display_name: str
    can_go_back: bool = False  # Whether user can navigate back
    requires_payment_lock: bool = False  # Whether actions are blocked while paying
    description: str = ""  # Internal description


STEP_METADATA: Dict[EnrollmentStep, StepMetadata] = {
    EnrollmentStep.PROFILE: StepMetadata(
        name=EnrollmentStep.PROFILE,
        display_name=STEP_TITLE_PROFILE,
        description="Collect missing profile details"
    ),
    EnrollmentStep.PLAN: StepMetadata(
        name=EnrollmentStep.PLAN,
        display_name=STEP_TITLE_PLAN,
        can_go_back=True,
        description="Pick full payment or installments"
    ),
    EnrollmentStep.PAYMENT: StepMetadata(
        name=EnrollmentStep.PAYMENT,
        display_name=STEP_TITLE_PAYMENT,
        can_go_back=True,
        requires_payment_lock=True,
        description="Create order, open checkout, verify"
    ),
    EnrollmentStep.CONFIRMATION: StepMetadata(
        name=EnrollmentStep.CONFIRMATION,
        display_name=STEP_TITLE_CONFIRMATION,
        description="Enrollment finished - only closing is possible"
    ),
}


# Valid step transitions - forward only, plus explicit Back
STEP_TRANSITIONS: Dict[EnrollmentStep, List[EnrollmentStep]] = {
    EnrollmentStep.PROFILE: [
        EnrollmentStep.PLAN,
    ],
    EnrollmentStep.PLAN: [
        EnrollmentStep.PAYMENT,
        EnrollmentStep.PROFILE,  # Back
    ],
    EnrollmentStep.PAYMENT: [
        EnrollmentStep.CONFIRMATION,
        EnrollmentStep.PLAN,  # Back
    ],
    EnrollmentStep.CONFIRMATION: [],
}


def is_valid_transition(from_step: EnrollmentStep, to_step: EnrollmentStep) -> bool:
    """
    Checks if a step transition is valid.

    Args:
        from_step: Current step
        to_step: Target step

    Returns:
        True if transition is allowed, False otherwise
    """
    return to_step in STEP_TRANSITIONS.get(from_step, [])


def get_step_metadata(step: EnrollmentStep) -> StepMetadata:
    return STEP_METADATA[step]


def get_initial_step(profile_complete: Optional[bool]) -> EnrollmentStep:
    """
    First step for a user: the profile form unless it is already complete.
    """
    return EnrollmentStep.PLAN if profile_complete else EnrollmentStep.PROFILE


def get_progress_message(step: EnrollmentStep, includes_profile: bool = True) -> str:
    """
    Generates a progress message for the current step.

    Users who skipped the profile form see a three-step wizard.

    Returns:
        Progress message (e.g., "Step 2 of 4")
    """
    total = len(EnrollmentStep) if includes_profile else len(EnrollmentStep) - 1
    position = step.value + 1 if includes_profile else step.value
    return f"Step {max(position, 1)} of {total}"
