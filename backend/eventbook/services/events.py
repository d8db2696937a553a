import logging
from datetime import date as date_type, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import delete as sqla_delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.db import claim_write_lock, end_implicit_transaction
from eventbook.errors import EventNotFound, InvalidInput
from eventbook.models import MAX_ROW_ID, Booking, Event

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "location", "date", "total_seats", "available_seats", "price", "img")


def _valid_id(row_id: int) -> bool:
    # ids outside the column range cannot exist; the driver would reject them
    return 1 <= row_id <= MAX_ROW_ID


def _contains_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _check_seat_counts(total_seats: int, available_seats: int) -> None:
    if available_seats < 0 or available_seats > total_seats:
        raise InvalidInput(
            f"available_seats ({available_seats}) must be between 0 and total_seats ({total_seats})",
            error="invalid_seat_counts",
        )


async def get_event(session: AsyncSession, event_id: int) -> Event:
    if not _valid_id(event_id):
        raise EventNotFound(event_id)
    res = await session.execute(select(Event).where(Event.id == event_id))
    event = res.scalars().first()
    if event is None:
        raise EventNotFound(event_id)
    return event


async def lock_event(session: AsyncSession, event_id: int) -> Optional[Event]:
    """SELECT ... FOR UPDATE on one event row. Only meaningful inside a transaction."""
    if not _valid_id(event_id):
        return None
    res = await session.execute(
        select(Event).where(Event.id == event_id).with_for_update().execution_options(populate_existing=True)
    )
    return res.scalars().first()


async def list_events(session: AsyncSession, q: Optional[str] = None, location: Optional[str] = None,
                      date: Optional[date_type] = None, limit: int = 100) -> List[Event]:
    stmt = select(Event)
    if q:
        pattern = _contains_pattern(q)
        stmt = stmt.where(or_(Event.title.ilike(pattern, escape="\\"), Event.description.ilike(pattern, escape="\\")))
    if location:
        stmt = stmt.where(Event.location.ilike(_contains_pattern(location), escape="\\"))
    if date is not None:
        day_start = datetime.combine(date, time.min)
        stmt = stmt.where(Event.date >= day_start, Event.date < day_start + timedelta(days=1))
    stmt = stmt.order_by(Event.date.asc(), Event.id.asc()).limit(limit)
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def create_event(session: AsyncSession, data: Dict[str, Any]) -> Event:
    values = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
    if values.get("available_seats") is None:
        values["available_seats"] = values["total_seats"]
    _check_seat_counts(values["total_seats"], values["available_seats"])

    await end_implicit_transaction(session)
    async with session.begin():
        await claim_write_lock(session)
        event = Event(**values)
        session.add(event)
        await session.flush()  # ensure event.id exists
        await session.refresh(event)
    logger.info("event %s created: title=%r seats=%s", event.id, event.title, event.total_seats)
    return event


async def update_event(session: AsyncSession, event_id: int, changes: Dict[str, Any]) -> Event:
    """
    Field-wise update under a row lock.
    Changing total_seats does not adjust available_seats; callers set both explicitly.
    """
    changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
    if not changes:
        raise InvalidInput("no fields to update", error="no_fields")

    await end_implicit_transaction(session)
    async with session.begin():
        await claim_write_lock(session)
        event = await lock_event(session, event_id)
        if event is None:
            raise EventNotFound(event_id)
        _check_seat_counts(changes.get("total_seats", event.total_seats),
                           changes.get("available_seats", event.available_seats))
        for key, value in changes.items():
            setattr(event, key, value)
        await session.flush()
        await session.refresh(event)
    logger.info("event %s updated: fields=%s", event_id, sorted(changes))
    return event


async def delete_event(session: AsyncSession, event_id: int) -> None:
    await end_implicit_transaction(session)
    async with session.begin():
        await claim_write_lock(session)
        # Lock and verify event exists
        if await lock_event(session, event_id) is None:
            raise EventNotFound(event_id)
        # Delete dependent bookings explicitly (FK cascade may be missing on older schemas)
        await session.execute(sqla_delete(Booking).where(Booking.event_id == event_id))
        await session.execute(sqla_delete(Event).where(Event.id == event_id))
    logger.info("event %s deleted with its bookings", event_id)
