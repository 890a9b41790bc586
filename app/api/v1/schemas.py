from pydantic import BaseModel, ConfigDict, Field
from typing import Any

from app.application.use_cases.analytics import Dashboard
from app.application.utils.time_format import format_hhmm
from app.domain.entities.booking import Booking
from app.domain.entities.catalog import Service, Stylist
from app.domain.entities.slot import Slot


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateBookingSchema(CamelModel):
    # Everything optional here; missing fields are reported as INVALID_INPUT by the use case.
    customer_name: str | None = Field(None, alias="customerName")
    customer_phone: str | None = Field(None, alias="customerPhone")
    customer_email: str | None = Field(None, alias="customerEmail")
    service_id: str | None = Field(None, alias="serviceId")
    date: str | None = None
    time: str | None = None
    stylist_id: str | None = Field(None, alias="stylistId")
    notes: str = ""


class RescheduleBookingSchema(CamelModel):
    new_date: str | None = Field(None, alias="newDate")
    new_time: str | None = Field(None, alias="newTime")


class CancelBookingSchema(CamelModel):
    reason: str | None = None


class TestMessageSchema(CamelModel):
    customer_id: str = Field(alias="customerId")
    message: str
    contact_name: str | None = Field(None, alias="contactName")
    message_id: str | None = Field(None, alias="messageId")


class SlotSchema(CamelModel):
    date: str
    time: str
    end_time: str = Field(alias="endTime")
    duration: int

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotSchema":
        return cls(
            date=slot.date.isoformat(),
            time=format_hhmm(slot.time),
            end_time=format_hhmm(slot.end_time),
            duration=slot.duration_minutes,
        )


class BookingSchema(CamelModel):
    id: str
    customer_name: str = Field(alias="customerName")
    customer_phone: str = Field(alias="customerPhone")
    customer_email: str | None = Field(None, alias="customerEmail")
    service_id: str = Field(alias="serviceId")
    service_name: str = Field(alias="serviceName")
    date: str
    time: str
    duration: int
    price: int
    stylist_id: str | None = Field(None, alias="stylistId")
    stylist_name: str = Field(alias="stylistName")
    status: str
    notes: str = ""
    cancellation_reason: str | None = Field(None, alias="cancellationReason")
    created_at: str | None = Field(None, alias="createdAt")
    updated_at: str | None = Field(None, alias="updatedAt")

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingSchema":
        return cls(
            id=booking.id,
            customer_name=booking.customer.name,
            customer_phone=booking.customer.phone,
            customer_email=booking.customer.email,
            service_id=booking.service_id,
            service_name=booking.service_name,
            date=booking.date.isoformat(),
            time=format_hhmm(booking.time),
            duration=booking.duration_minutes,
            price=booking.price,
            stylist_id=booking.stylist_id,
            stylist_name=booking.stylist_name,
            status=booking.status.value,
            notes=booking.notes,
            cancellation_reason=booking.cancellation_reason,
            created_at=booking.created_at.isoformat() if booking.created_at else None,
            updated_at=booking.updated_at.isoformat() if booking.updated_at else None,
        )


class ServiceSchema(CamelModel):
    id: str
    name: str
    duration: int
    price: int

    @classmethod
    def from_service(cls, service: Service) -> "ServiceSchema":
        return cls(id=service.id, name=service.name, duration=service.duration_minutes, price=service.price)


class StylistSchema(CamelModel):
    id: str
    name: str
    specialties: list[str] = Field(default_factory=list)

    @classmethod
    def from_stylist(cls, stylist: Stylist) -> "StylistSchema":
        return cls(id=stylist.id, name=stylist.name, specialties=sorted(stylist.specialties))


class AnalyticsSchema(CamelModel):
    period: str
    date_range: dict[str, str] = Field(alias="dateRange")
    kpis: dict[str, int]
    conversations: dict[str, Any]
    bookings: dict[str, Any]

    @classmethod
    def from_dashboard(cls, d: Dashboard) -> "AnalyticsSchema":
        return cls(
            period=d.period,
            date_range={"start": d.start.isoformat(), "end": d.end.isoformat()},
            kpis={
                "totalConversations": d.total_conversations,
                "totalBookings": d.total_bookings,
                "totalRevenue": d.total_revenue,
                "averageResponseTime": d.average_response_time_ms,
                "conversionRate": d.conversion_rate,
            },
            conversations={
                "total": d.total_conversations,
                "byChannel": d.conversations_by_channel,
                "byContext": d.conversations_by_context,
                "averageResponseTime": d.average_response_time_ms,
            },
            bookings={
                "total": d.total_bookings,
                "cancelled": d.cancelled_bookings,
                "revenue": d.total_revenue,
                "byService": d.bookings_by_service,
                "byStylist": d.bookings_by_stylist,
                "conversionRate": d.conversion_rate,
            },
        )


def envelope(data: Any) -> dict[str, Any]:
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    elif isinstance(data, list):
        data = [d.model_dump(by_alias=True) if isinstance(d, BaseModel) else d for d in data]
    return {"success": True, "data": data}


def error_envelope(code: str, message: str, details: list[str] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "error": message, "code": code}
    if details:
        body["details"] = details
    return body
