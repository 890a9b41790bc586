class LLMUpstreamError(RuntimeError):
    """Raised when LLM provider fails (timeouts, network errors, service unavailable)."""
    pass


class LLMContractError(RuntimeError):
    """Raised when LLM adapter violates contract (bad format or missing data)."""
    pass


class BookingError(Exception):
    """Base class for booking failures returned to the immediate caller."""

    code = "BOOKING_ERROR"
    status_code = 400
    retryable = False
    user_message = "Sorry, something went wrong with your booking."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        self.message = message or self.user_message


class InvalidInputError(BookingError):
    code = "INVALID_INPUT"
    status_code = 400
    user_message = "Some booking details are missing or invalid."

    def __init__(self, message: str | None = None, errors: list[str] | None = None) -> None:
        super().__init__(message or "; ".join(errors or []) or None)
        self.errors = list(errors or [])


class NotFoundError(BookingError):
    code = "NOT_FOUND"
    status_code = 404
    user_message = "That booking doesn't exist. Please check the booking ID."


class PastDateError(BookingError):
    code = "PAST_DATE"
    status_code = 400
    user_message = "Appointments can only be booked for a future date and time."


class SlotUnavailableError(BookingError):
    code = "SLOT_UNAVAILABLE"
    status_code = 409
    user_message = "That time slot is no longer available. Please pick another time."


class SlotBusyError(BookingError):
    """Another request is deciding the same slot. Safe to retry after a short delay."""

    code = "BUSY"
    status_code = 429
    retryable = True
    user_message = "That slot is being booked by someone else right now. Please try again shortly."


class AlreadyCancelledError(BookingError):
    code = "ALREADY_CANCELLED"
    status_code = 409
    user_message = "That booking has already been cancelled."


class InternalError(BookingError):
    code = "INTERNAL"
    status_code = 500
    user_message = "Something went wrong on our side. Please try again later."
