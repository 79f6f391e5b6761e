from app.core.database import Base
from enum import Enum
from decimal import Decimal
from datetime import datetime, date
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Identity, Text, ForeignKey, Numeric, TIMESTAMP, func, Enum as SQLEnum, UniqueConstraint, \
    CheckConstraint, Date, Integer, String


class BookingStatus(str, Enum):
    BOOKED = "booked"


class Seat(Base):
    __tablename__ = "seats"

    id: Mapped[int] = mapped_column(Identity(always=True), primary_key=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(3), nullable=False)
    row: Mapped[str] = mapped_column(String(1), nullable=False)
    column: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    event: Mapped["Event"] = relationship(back_populates="seats")
    bookings: Mapped[list["SeatBooking"]] = relationship(back_populates="seat", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("event_id", "code", name="uq_seat_event_code"),
        CheckConstraint("row BETWEEN 'A' AND 'Z'", name="chk_seat_row_letter"),
        CheckConstraint("\"column\" BETWEEN 1 AND 10", name="chk_seat_column_range"),
        CheckConstraint("price >= 0", name="chk_seat_price_nonneg"),
    )


class SeatBooking(Base):
    __tablename__ = "seat_bookings"

    id: Mapped[int] = mapped_column(Identity(always=True), primary_key=True)
    seat_id: Mapped[int] = mapped_column(ForeignKey("seats.id", ondelete="RESTRICT"), nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="RESTRICT"), nullable=False, index=True)
    booking_date: Mapped[date] = mapped_column(Date, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        SQLEnum(BookingStatus, name="booking_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BookingStatus.BOOKED
    )
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    seat: Mapped["Seat"] = relationship(back_populates="bookings")

    __table_args__ = (
        UniqueConstraint("seat_id", "booking_date", name="uq_seat_booking_date"),
    )
