"""
app/models/user.py

Purpose: User record

- Single normalized shape for the signed-in user
- Built once from whatever the course platform returns
  ({"user": {...}} wrappers, "id" vs "user_id", first/last names)
- Profile fields collected by the enrollment wizard
- Enrolled course ids
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.core.exceptions import ValidationError


Identifier = Union[int, str]


class User(BaseModel):
    """Signed-in platform user."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    user_id: Identifier
    full_name: str = ""
    email: str = ""
    role: str = "student"
    profile_complete: bool = Field(default=False, alias="profileComplete")
    enrolled_courses: List[Identifier] = Field(default_factory=list, alias="enrolledCourses")

    # Profile details
    phone_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    occupation: Optional[str] = None
    profession: Optional[str] = None
    experience: Optional[str] = None
    goals: List[str] = Field(default_factory=list)
    time_commitment: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "User":
        """
        Normalizes a backend user payload.

        Args:
            payload: Login/profile response body, or a bare user dict

        Returns:
            User

        Raises:
            ValidationError: If no user id can be found
        """
        if not isinstance(payload, dict):
            raise ValidationError("User payload must be an object")

        data = payload.get("user") if isinstance(payload.get("user"), dict) else payload
        data = dict(data)
        for key in ("token", "success"):
            data.pop(key, None)

        user_id = data.pop("user_id", None)
        if user_id in (None, ""):
            user_id = data.pop("id", None)
        if user_id in (None, ""):
            raise ValidationError("User payload has no user id")

        if not data.get("full_name"):
            first = data.get("firstName") or data.get("first_name") or ""
            last = data.get("lastName") or data.get("last_name") or ""
            data["full_name"] = f"{first} {last}".strip()

        if data.get("goals") is None:
            data.pop("goals", None)
        if data.get("enrolledCourses") is None and data.get("enrolled_courses") is None:
            data.pop("enrolledCourses", None)
            data.pop("enrolled_courses", None)

        return cls.model_validate({**data, "user_id": user_id})

    def to_storage(self) -> Dict[str, Any]:
        """Plain JSON-ready dict, camelCase where the platform uses it."""
        return self.model_dump(by_alias=True, mode="json")

    def is_enrolled(self, course_id: Identifier) -> bool:
        return any(str(existing) == str(course_id) for existing in self.enrolled_courses)
