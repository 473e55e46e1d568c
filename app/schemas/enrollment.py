"""
app/schemas/enrollment.py

Purpose: Enrollment API request / response bodies

- Profile form with the same rules the browser form applies
- Plan choice and checkout widget callbacks
- Wizard snapshot returned after every action
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional, Union

from utils.validation_utils import sanitize_input, validate_phone_number


class OpenEnrollmentRequest(BaseModel):
    course_id: Union[int, str]


class ProfileCompletion(BaseModel):
    """
    Profile form. Emptiness of required fields is reported by the wizard
    so the message names every missing field at once.
    """
    full_name: str = ""
    phone_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = Field(default=None, max_length=500)
    occupation: str = ""
    profession: str = ""
    experience: str = ""
    goals: List[str] = Field(default_factory=list)
    time_commitment: str = ""

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, v):
        v = v.strip()
        if v and not 2 <= len(v) <= 50:
            raise ValueError("Full name must be between 2 and 50 characters")
        return v

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, v):
        if v and not validate_phone_number(v):
            raise ValueError("Phone number must be 10 to 15 digits")
        return v or None

    @field_validator("address")
    @classmethod
    def clean_address(cls, v):
        return sanitize_input(v) if v else None

    class Config:
        json_schema_extra = {
            "example": {
                "full_name": "Asha Rao",
                "phone_number": "9876543210",
                "occupation": "Working Professional",
                "profession": "SAP Consultant",
                "experience": "3-5",
                "goals": ["Skill Upgrade"],
                "time_commitment": "5-10"
            }
        }


class PlanSelectionRequest(BaseModel):
    plan_id: str = Field(..., description="'full' or 'installment'")


class PaymentSuccessPayload(BaseModel):
    """Arguments of the checkout widget's success handler."""
    razorpay_payment_id: str
    razorpay_order_id: Optional[str] = None
    razorpay_signature: str


class PaymentFailureDetail(BaseModel):
    code: Optional[str] = None
    description: Optional[str] = None
    reason: Optional[str] = None
    source: Optional[str] = None
    step: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class PaymentFailedPayload(BaseModel):
    """Body of the widget's 'payment.failed' event."""
    error: PaymentFailureDetail = Field(default_factory=PaymentFailureDetail)


class WizardView(BaseModel):
    wizard_id: str
    step: int
    step_name: str
    title: str
    progress: str
    can_go_back: bool
    course: Dict[str, Any]
    enrollment: Dict[str, Any]
    plans: List[Dict[str, Any]]
    loading: bool
    payment_processing: bool
    error: Optional[str] = None
    success_message: Optional[str] = None
    checkout: Optional[Dict[str, Any]] = None
    closed: bool = False
