import time
import uuid

from fastapi import APIRouter, Body, Depends, Query

from app.api.v1.schemas import (
    AnalyticsSchema,
    BookingSchema,
    CancelBookingSchema,
    CreateBookingSchema,
    RescheduleBookingSchema,
    ServiceSchema,
    SlotSchema,
    StylistSchema,
    TestMessageSchema,
    envelope,
)
from app.application.exceptions import InvalidInputError
from app.application.use_cases.analytics import AnalyticsDashboardUseCase
from app.application.use_cases.availability import AvailabilityEngine
from app.application.use_cases.booking import BookingUseCase
from app.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from app.domain.entities.booking_request import BookingRequest
from app.domain.entities.message import Message
from app.infrastructure.knowledge.catalog_store import StaticCatalog
from app.wiring.dependencies import (
    get_analytics_use_case,
    get_availability_engine,
    get_booking_use_case,
    get_catalog,
    get_test_message_use_case,
)

router = APIRouter()


@router.get("/availability")
def availability(
    date: str | None = Query(None),
    service_id: str | None = Query(None, alias="serviceId"),
    stylist_id: str | None = Query(None, alias="stylistId"),
    engine: AvailabilityEngine = Depends(get_availability_engine),
):
    if not date or not service_id:
        raise InvalidInputError("Date and service ID are required")
    slots = engine.get_available_slots(date, service_id, stylist_id)
    return envelope([SlotSchema.from_slot(s) for s in slots])


@router.post("/bookings", status_code=201)
def create_booking(
    req: CreateBookingSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    outcome = uc.create_booking(
        BookingRequest(
            customer_name=req.customer_name,
            customer_phone=req.customer_phone,
            customer_email=req.customer_email,
            service_id=req.service_id,
            date=req.date,
            time=req.time,
            stylist_id=req.stylist_id,
            notes=req.notes,
        )
    )
    body = envelope(BookingSchema.from_booking(outcome.booking))
    body["message"] = outcome.message
    return body


@router.put("/bookings/{booking_id}/reschedule")
def reschedule_booking(
    booking_id: str,
    req: RescheduleBookingSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    if not req.new_date or not req.new_time:
        raise InvalidInputError("New date and time are required")
    outcome = uc.reschedule_booking(booking_id, req.new_date, req.new_time)
    body = envelope(BookingSchema.from_booking(outcome.booking))
    body["message"] = outcome.message
    return body


@router.delete("/bookings/{booking_id}")
def cancel_booking(
    booking_id: str,
    req: CancelBookingSchema | None = Body(None),
    reason: str | None = Query(None),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    outcome = uc.cancel_booking(booking_id, (req.reason if req else None) or reason)
    body = envelope(BookingSchema.from_booking(outcome.booking))
    body["message"] = outcome.message
    return body


@router.get("/bookings/{customer_id}")
def customer_bookings(
    customer_id: str,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    return envelope([BookingSchema.from_booking(b) for b in uc.list_customer_bookings(customer_id)])


@router.get("/services")
def services(catalog: StaticCatalog = Depends(get_catalog)):
    return envelope([ServiceSchema.from_service(s) for s in catalog.list_services()])


@router.get("/stylists")
def stylists(catalog: StaticCatalog = Depends(get_catalog)):
    return envelope([StylistSchema.from_stylist(s) for s in catalog.list_stylists()])


@router.get("/analytics/{period}")
def analytics(
    period: str,
    uc: AnalyticsDashboardUseCase = Depends(get_analytics_use_case),
):
    return envelope(AnalyticsSchema.from_dashboard(uc.execute(period)))


@router.post("/test/message")
def test_message(
    req: TestMessageSchema,
    uc: HandleIncomingMessageUseCase = Depends(get_test_message_use_case),
):
    """Run one chat turn without going through the messaging gateway."""
    message = Message(
        id=req.message_id or f"test-{uuid.uuid4().hex}",
        sender_id=req.customer_id,
        text=req.message,
        timestamp=int(time.time()),
        contact_name=req.contact_name,
        platform="test",
    )
    result = uc.handle(message)
    return envelope(
        {
            "response": result.response_text,
            "context": result.context,
            "duplicate": result.duplicate,
            "actions": [
                {
                    "action": a.action,
                    "success": a.success,
                    "code": a.code,
                    "requiresInput": a.requires_input,
                    "data": a.data,
                }
                for a in result.actions
            ],
        }
    )
