class EventBookError(Exception):
    """Base class for errors surfaced to API callers; `error` is the wire code."""

    error = "error"

    def __init__(self, message: str | None = None):
        self.message = message or self.error
        super().__init__(self.message)


class InvalidInput(EventBookError):
    error = "invalid_input"

    def __init__(self, message: str | None = None, error: str | None = None):
        if error:
            self.error = error
        super().__init__(message)


class NotFound(EventBookError):
    error = "not_found"


class EventNotFound(NotFound):
    error = "event_not_found"

    def __init__(self, event_id: int):
        self.event_id = event_id
        super().__init__(f"event {event_id} not found")


class BookingNotFound(NotFound):
    def __init__(self, booking_id: int):
        self.booking_id = booking_id
        super().__init__(f"booking {booking_id} not found")


class InsufficientInventory(EventBookError):
    error = "insufficient_seats"

    def __init__(self, event_id: int, requested: int, available: int):
        self.event_id = event_id
        self.requested = requested
        self.available = available
        super().__init__(f"requested {requested} seats, {available} available")


class InfrastructureFailure(EventBookError):
    """Storage failure; the transaction was rolled back and the call may be retried."""

    error = "db_error"


class AdminRequired(EventBookError):
    error = "admin_required"
