from fieldservice.lifecycle.state_machine import (
    CREATED_TEXT,
    BookingAction,
    BookingLifecycle,
    Transition,
    parse_amount,
)

__all__ = [
    "BookingLifecycle",
    "BookingAction",
    "Transition",
    "CREATED_TEXT",
    "parse_amount",
]
