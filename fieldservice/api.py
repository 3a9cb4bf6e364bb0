"""HTTP boundary for the booking store."""

from dataclasses import asdict
from typing import Any, Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from fieldservice.config import settings
from fieldservice.errors import (
    AlreadyAssignedError,
    BookingStoreError,
    ConcurrentUpdateError,
    InactiveTechnicianError,
    InvalidTransitionError,
    NotFound,
    ValidationError,
)
from fieldservice.logging_context import get_request_logger, new_request_id, set_request_id
from fieldservice.schemas.booking_schema import Booking, BookingRequest
from fieldservice.schemas.technician_schema import Technician, TechnicianRequest
from fieldservice.services import ServiceDesk, build_desk

logger = get_request_logger(__name__)

_STATUS_CODES: dict[type, int] = {
    ValidationError: 422,
    NotFound: 404,
    InvalidTransitionError: 409,
    AlreadyAssignedError: 409,
    InactiveTechnicianError: 409,
    ConcurrentUpdateError: 409,
}


class AssignBody(BaseModel):
    technician_id: str


class StatusBody(BaseModel):
    status: str


class CompleteBody(BaseModel):
    amount: Any = None


class CancelBody(BaseModel):
    reason: Optional[str] = None


def error_payload(exc: BookingStoreError) -> dict[str, Any]:
    payload: dict[str, Any] = {"error": exc.kind, "detail": exc.message}
    if isinstance(exc, ValidationError):
        payload["fields"] = exc.fields
    return payload


def _field_name(loc: Any) -> str:
    """Dotted field path without the request part (body, query, path) it came from."""
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in ("body", "query", "path", "header"):
        parts = parts[1:]
    return ".".join(parts)


def create_app(desk: Optional[ServiceDesk] = None) -> FastAPI:
    """Create the FastAPI application around ``desk`` (configured backend by default)."""
    desk = desk or build_desk()
    app = FastAPI(title=settings.business.name, description="Field service booking store")
    app.state.desk = desk

    @app.exception_handler(BookingStoreError)
    async def booking_store_error_handler(request: Request, exc: BookingStoreError) -> JSONResponse:
        status_code = next(
            (code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls)), 400
        )
        return JSONResponse(status_code=status_code, content=error_payload(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = [_field_name(err["loc"]) for err in exc.errors()]
        error = ValidationError(f"Invalid value for: {', '.join(fields)}.", fields)
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, error.message)
        return JSONResponse(status_code=422, content=error_payload(error))

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or new_request_id()
        set_request_id(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "bookings": desk.store.booking_count()}

    # --- Bookings ---

    @app.post("/bookings", response_model=Booking, status_code=201)
    def create_booking(body: BookingRequest) -> Booking:
        return desk.bookings.create_booking(body)

    @app.get("/bookings", response_model=list[Booking])
    def list_bookings(query: str = Query(default="")) -> list[Booking]:
        return desk.search.search(query)

    @app.get("/bookings/unassigned", response_model=list[Booking])
    def list_unassigned() -> list[Booking]:
        return desk.assignment.list_unassigned()

    @app.get("/bookings/summary")
    def booking_summary() -> dict[str, Any]:
        return asdict(desk.reporting.summary())

    @app.get("/bookings/{booking_id}", response_model=Booking)
    def get_booking(booking_id: str) -> Booking:
        return desk.bookings.get_booking(booking_id)

    @app.post("/bookings/{booking_id}/confirm", response_model=Booking)
    def confirm_booking(booking_id: str) -> Booking:
        return desk.bookings.confirm(booking_id)

    @app.post("/bookings/{booking_id}/assign", response_model=Booking)
    def assign_booking(booking_id: str, body: AssignBody) -> Booking:
        return desk.assignment.assign(booking_id, body.technician_id)

    @app.post("/bookings/{booking_id}/status", response_model=Booking)
    def update_status(booking_id: str, body: StatusBody) -> Booking:
        return desk.bookings.update_status(booking_id, body.status)

    @app.post("/bookings/{booking_id}/complete", response_model=Booking)
    def complete_booking(booking_id: str, body: CompleteBody) -> Booking:
        return desk.bookings.complete(booking_id, body.amount)

    @app.post("/bookings/{booking_id}/cancel", response_model=Booking)
    def cancel_booking(booking_id: str, body: Optional[CancelBody] = None) -> Booking:
        return desk.bookings.cancel(booking_id, body.reason if body else None)

    # --- Technicians ---

    @app.post("/technicians", response_model=Technician, status_code=201)
    def create_technician(body: TechnicianRequest) -> Technician:
        return desk.bookings.create_technician(body)

    @app.get("/technicians", response_model=list[Technician])
    def list_technicians(active_only: bool = False) -> list[Technician]:
        if active_only:
            return desk.assignment.list_candidates()
        return desk.bookings.list_technicians()

    @app.post("/technicians/{technician_id}/deactivate", response_model=Technician)
    def deactivate_technician(technician_id: str) -> Technician:
        return desk.bookings.set_technician_active(technician_id, False)

    @app.post("/technicians/{technician_id}/activate", response_model=Technician)
    def activate_technician(technician_id: str) -> Technician:
        return desk.bookings.set_technician_active(technician_id, True)

    @app.get("/technicians/{technician_id}/jobs", response_model=list[Booking])
    def technician_jobs(technician_id: str) -> list[Booking]:
        return desk.assignment.list_jobs_for(technician_id)

    @app.get("/technicians/{technician_id}/earnings")
    def technician_earnings(technician_id: str) -> dict[str, Any]:
        return asdict(desk.reporting.technician_earnings(technician_id))

    logger.info("API ready for '%s'", settings.business.name)
    return app
