from app.flow.states import (
    EnrollmentStep,
    get_initial_step,
    get_progress_message,
    get_step_metadata,
    is_valid_transition,
)


def test_initial_step():
    assert get_initial_step(False) == EnrollmentStep.PROFILE
    assert get_initial_step(None) == EnrollmentStep.PROFILE
    assert get_initial_step(True) == EnrollmentStep.PLAN


def test_forward_transitions():
    assert is_valid_transition(EnrollmentStep.PROFILE, EnrollmentStep.PLAN)
    assert is_valid_transition(EnrollmentStep.PLAN, EnrollmentStep.PAYMENT)
    assert is_valid_transition(EnrollmentStep.PAYMENT, EnrollmentStep.CONFIRMATION)


def test_back_transitions():
    assert is_valid_transition(EnrollmentStep.PLAN, EnrollmentStep.PROFILE)
    assert is_valid_transition(EnrollmentStep.PAYMENT, EnrollmentStep.PLAN)


def test_no_skipping_or_leaving_confirmation():
    assert not is_valid_transition(EnrollmentStep.PROFILE, EnrollmentStep.PAYMENT)
    assert not is_valid_transition(EnrollmentStep.PLAN, EnrollmentStep.CONFIRMATION)
    for step in EnrollmentStep:
        assert not is_valid_transition(EnrollmentStep.CONFIRMATION, step)


def test_payment_step_is_locked_while_paying():
    assert get_step_metadata(EnrollmentStep.PAYMENT).requires_payment_lock
    assert not get_step_metadata(EnrollmentStep.PLAN).requires_payment_lock


def test_progress_message():
    assert get_progress_message(EnrollmentStep.PROFILE) == "Step 1 of 4"
    assert get_progress_message(EnrollmentStep.CONFIRMATION) == "Step 4 of 4"
    assert get_progress_message(EnrollmentStep.PLAN, includes_profile=False) == "Step 1 of 3"
    assert get_progress_message(EnrollmentStep.CONFIRMATION, includes_profile=False) == "Step 3 of 3"
