"""Customer log records."""

from datetime import datetime

from pydantic import BaseModel, Field

from fieldservice.schemas.booking_schema import utcnow


class Customer(BaseModel):
    """Write-only record of who submitted a booking. Never read back by the services."""
    name: str
    phone: str
    address: str
    booking_id: str
    created_at: datetime = Field(default_factory=utcnow)
