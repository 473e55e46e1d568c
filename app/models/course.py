"""
app/models/course.py

Purpose: Course record (read-only on our side)

- Normalizes course payloads from the platform API
- Lenient fee parsing
- Thumbnail fallback
"""

import random
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from app.core.exceptions import ValidationError
from app.models.user import Identifier
from utils.constants import SAMPLE_COURSE_IMAGES
from utils.payment_utils import parse_amount


class Course(BaseModel):
    """Course offered on the platform."""

    model_config = ConfigDict(extra="allow")

    course_id: Optional[Identifier] = None
    title: str = ""
    fee: float = 0.0
    duration: Optional[Any] = None
    instructor: Optional[Any] = None
    thumbnail_image: Optional[str] = None

    @field_validator("fee", mode="before")
    @classmethod
    def parse_fee(cls, v):
        return parse_amount(v)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Course":
        """
        Accepts a bare course, or one wrapped in 'data' / 'course'.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Course payload must be an object")

        data = payload
        for key in ("data", "course"):
            if isinstance(data.get(key), dict):
                data = data[key]

        data = dict(data)
        if data.get("course_id") in (None, "") and data.get("id") not in (None, ""):
            data["course_id"] = data.pop("id")

        return cls.model_validate(data)

    @property
    def has_id(self) -> bool:
        return self.course_id not in (None, "")

    def image_url(self) -> str:
        """
        Thumbnail, or a stock image picked from the course id.
        """
        if self.thumbnail_image:
            return self.thumbnail_image
        if self.has_id:
            try:
                index = int(self.course_id) % len(SAMPLE_COURSE_IMAGES)
            except (TypeError, ValueError):
                index = sum(ord(ch) for ch in str(self.course_id)) % len(SAMPLE_COURSE_IMAGES)
            return SAMPLE_COURSE_IMAGES[index]
        return random.choice(SAMPLE_COURSE_IMAGES)
