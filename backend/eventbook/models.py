from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import declarative_base, Mapped, mapped_column, relationship
from sqlalchemy import CheckConstraint, Integer, Numeric, String, DateTime, func, ForeignKey, Text


Base = declarative_base()

BOOKING_CONFIRMED = "confirmed"
# upper bound of the Integer primary keys
MAX_ROW_ID = 2**31 - 1


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("available_seats >= 0", name="ck_events_available_non_negative"),
        CheckConstraint("available_seats <= total_seats", name="ck_events_available_le_total"),
        CheckConstraint("price >= 0", name="ck_events_price_non_negative"),
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    img: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


    bookings = relationship("Booking", back_populates="event", passive_deletes=True)


    def __repr__(self):
        return f"<Event id={self.id} title={self.title} available_seats={self.available_seats}/{self.total_seats}>"


class Booking(Base):
    __tablename__ = "bookings"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[str | None] = mapped_column(String(32), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default=BOOKING_CONFIRMED)
    booking_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


    event = relationship("Event", back_populates="bookings")


    def __repr__(self):
        return f"<Booking id={self.id} event_id={self.event_id} quantity={self.quantity} status={self.status}>"
