from datetime import date as date_type, datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.auth import require_admin
from eventbook.db import get_session
from eventbook.models import MAX_ROW_ID
from eventbook.routes.booking import BookingOut
from eventbook.services import booking as booking_service
from eventbook.services import events as event_service


router = APIRouter(prefix="/events")

NULLABLE_FIELDS = ("description", "img")


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    location: str
    date: datetime
    total_seats: int
    available_seats: int
    price: Decimal
    img: Optional[str] = None
    created_at: Optional[datetime] = None


class EventCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    location: str = Field(..., min_length=2, max_length=255)
    date: datetime
    total_seats: int = Field(..., ge=1)
    # defaults to total_seats
    available_seats: Optional[int] = Field(None, ge=0)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    img: Optional[str] = None


class EventUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, min_length=2, max_length=255)
    date: Optional[datetime] = None
    total_seats: Optional[int] = Field(None, ge=1)
    available_seats: Optional[int] = Field(None, ge=0)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    img: Optional[str] = None


@router.get("", response_model=List[EventOut])
async def list_events(q: Optional[str] = Query(None), location: Optional[str] = Query(None),
                      date: Optional[date_type] = Query(None), limit: int = Query(100, ge=1, le=500),
                      session: AsyncSession = Depends(get_session)):
    return await event_service.list_events(
        session,
        q=(q.strip() or None) if q else None,
        location=(location.strip() or None) if location else None,
        date=date,
        limit=limit,
    )


@router.get("/{event_id}", response_model=EventOut)
async def get_event(event_id: int = Path(..., ge=1, le=MAX_ROW_ID), session: AsyncSession = Depends(get_session)):
    return await event_service.get_event(session, event_id)


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def create_event(payload: EventCreate, session: AsyncSession = Depends(get_session),
                       _=Depends(require_admin)):
    return await event_service.create_event(session, payload.model_dump())


@router.put("/{event_id}", response_model=EventOut)
async def update_event(payload: EventUpdate, event_id: int = Path(..., ge=1, le=MAX_ROW_ID),
                       session: AsyncSession = Depends(get_session), _=Depends(require_admin)):
    # only fields the client actually sent; explicit nulls clear optional text fields
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items()
               if v is not None or k in NULLABLE_FIELDS}
    return await event_service.update_event(session, event_id, changes)


@router.delete("/{event_id}")
async def delete_event(event_id: int = Path(..., ge=1, le=MAX_ROW_ID), session: AsyncSession = Depends(get_session),
                       _=Depends(require_admin)):
    await event_service.delete_event(session, event_id)
    return {"success": True}


@router.get("/{event_id}/bookings", response_model=List[BookingOut])
async def event_bookings(event_id: int = Path(..., ge=1, le=MAX_ROW_ID), session: AsyncSession = Depends(get_session),
                         _=Depends(require_admin)):
    await event_service.get_event(session, event_id)
    return await booking_service.list_bookings(session, event_id=event_id)
