"""Technician data models."""

from datetime import datetime
from typing import Union

from pydantic import BaseModel, Field, field_validator

from fieldservice.schemas.booking_schema import utcnow
from fieldservice.utils import parse_skills

DEFAULT_SKILLS = "Split AC, Window AC"


class Technician(BaseModel):
    """A field worker eligible to be assigned to bookings."""
    id: str
    name: str
    phone: str
    skills: list[str] = Field(default_factory=list)
    active: bool = True
    created_at: datetime = Field(default_factory=utcnow)


class TechnicianRequest(BaseModel):
    """Admin registration form. Skills may arrive comma-separated or as a list."""
    name: str = ""
    phone: str = ""
    skills: Union[str, list[str]] = Field(default=DEFAULT_SKILLS, validate_default=True)

    @field_validator("skills", mode="after")
    @classmethod
    def _split_skills(cls, value: Union[str, list[str]]) -> list[str]:
        if isinstance(value, str):
            return parse_skills(value)
        return parse_skills(",".join(value))
