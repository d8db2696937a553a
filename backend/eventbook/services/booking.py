# booking.py
import logging
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.db import claim_write_lock, end_implicit_transaction
from eventbook.errors import BookingNotFound, EventNotFound, InfrastructureFailure, InsufficientInventory, InvalidInput
from eventbook.models import BOOKING_CONFIRMED, MAX_ROW_ID, Booking
from eventbook.services.events import lock_event

logger = logging.getLogger(__name__)


def _validate_request(quantity: int, name: str, email: str) -> tuple[str, str]:
    """Reject malformed requests before any transaction starts. Returns (name, email) normalized."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidInput("quantity must be an integer >= 1")
    name = (name or "").strip()
    if not name:
        raise InvalidInput("name is required")
    try:
        checked = validate_email((email or "").strip(), check_deliverability=False)
    except EmailNotValidError as exc:
        raise InvalidInput(f"invalid email: {exc}") from exc
    return name, checked.normalized.lower()


async def create_booking(session: AsyncSession, event_id: int, quantity: int, name: str,
                         email: str, mobile: Optional[str] = None) -> Booking:
    """
    Book `quantity` seats of an event.

    The event row is locked for the whole check-decrement-insert sequence, so two
    requests for the same event are serialized and the second sees the first's
    decrement. Either the decrement and the booking row both commit, or neither does.

    Raises InvalidInput, EventNotFound, InsufficientInventory or InfrastructureFailure.
    """
    name, email = _validate_request(quantity, name, email)
    mobile = (mobile or "").strip() or None

    await end_implicit_transaction(session)

    try:
        async with session.begin():
            await claim_write_lock(session)
            event = await lock_event(session, event_id)
            if event is None:
                raise EventNotFound(event_id)

            if event.available_seats < quantity:
                logger.warning("booking rejected: event=%s requested=%s available=%s",
                               event_id, quantity, event.available_seats)
                raise InsufficientInventory(event_id, quantity, event.available_seats)

            # price is frozen on the booking; later price edits do not touch it
            total_amount = event.price * quantity
            event.available_seats -= quantity
            booking = Booking(event_id=event_id, name=name, email=email, mobile=mobile,
                              quantity=quantity, total_amount=total_amount, status=BOOKING_CONFIRMED)
            session.add(booking)
            await session.flush()  # ensure booking.id populated
            await session.refresh(booking)
    except SQLAlchemyError as exc:
        logger.exception("booking transaction rolled back: event=%s quantity=%s", event_id, quantity)
        raise InfrastructureFailure("booking could not be committed") from exc

    logger.info("booking %s confirmed: event=%s quantity=%s total=%s",
                booking.id, event_id, quantity, booking.total_amount)
    return booking


async def get_booking(session: AsyncSession, booking_id: int) -> Booking:
    if not 1 <= booking_id <= MAX_ROW_ID:
        raise BookingNotFound(booking_id)
    res = await session.execute(select(Booking).where(Booking.id == booking_id))
    booking = res.scalars().first()
    if booking is None:
        raise BookingNotFound(booking_id)
    return booking


async def list_bookings(session: AsyncSession, event_id: Optional[int] = None) -> List[Booking]:
    """All bookings, or those of one event, newest first."""
    q = select(Booking)
    if event_id is not None:
        q = q.where(Booking.event_id == event_id)
    q = q.order_by(Booking.booking_date.desc(), Booking.id.desc())
    res = await session.execute(q)
    return list(res.scalars().all())
