from sqlalchemy.orm import mapped_column, Mapped, relationship
from sqlalchemy import Identity, Text, Integer, CheckConstraint, TIMESTAMP, Date, Time, func
from app.core.database import Base
from datetime import datetime, date, time

MAX_TOTAL_SEATS = 260


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Identity(always=True), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False, unique=True)
    event_time: Mapped[time] = mapped_column(Time, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    venue: Mapped[str] = mapped_column(Text, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    seats: Mapped[list['Seat']] = relationship(
        back_populates='event',
        passive_deletes=True,
        order_by='Seat.id'
    )

    __table_args__ = (
        CheckConstraint(f"total_seats BETWEEN 1 AND {MAX_TOTAL_SEATS}", name="chk_event_total_seats"),
    )
