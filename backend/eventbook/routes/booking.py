from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.auth import require_admin
from eventbook.db import get_session
from eventbook.models import MAX_ROW_ID
from eventbook.services.booking import create_booking, get_booking, list_bookings


router = APIRouter(prefix="/bookings")


class BookingRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    event_id: int = Field(..., ge=1, le=MAX_ROW_ID)
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    mobile: Optional[str] = Field(None, max_length=32)
    quantity: int = Field(..., ge=1)


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    name: str
    email: str
    mobile: Optional[str] = None
    quantity: int
    total_amount: Decimal
    status: str
    booking_date: Optional[datetime] = None


class BookingCreated(BaseModel):
    booking: BookingOut


@router.post("", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
async def post_booking(req: BookingRequest, session: AsyncSession = Depends(get_session)):
    booking = await create_booking(
        session=session,
        event_id=req.event_id,
        quantity=req.quantity,
        name=req.name,
        email=req.email,
        mobile=req.mobile,
    )
    return BookingCreated(booking=BookingOut.model_validate(booking))


@router.get("", response_model=List[BookingOut])
async def all_bookings(session: AsyncSession = Depends(get_session), _=Depends(require_admin)):
    return await list_bookings(session)


@router.get("/{booking_id}", response_model=BookingOut)
async def booking_detail(booking_id: int = Path(..., ge=1, le=MAX_ROW_ID), session: AsyncSession = Depends(get_session),
                         _=Depends(require_admin)):
    return await get_booking(session, booking_id)
