from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import Base, TimeStamp, UTCDateTime


class Event(Base, TimeStamp):
    __tablename__ = TableNames.EVENTS.value

    organizer_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    geolocation_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Capacity (None = unbounded; the lottery needs a positive max_attendees)
    max_attendees: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_waiting_list: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Unique user ids. Always assign a new list, in-place mutation is not tracked.
    waiting_list: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    registration_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    registration_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    # Monotonic: never reset to False once set
    lottery_complete: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Event {self.name} ({self.uuid})>"


class EntrantLocation(Base, TimeStamp):
    """Where an entrant was when joining a waiting list."""

    __tablename__ = TableNames.ENTRANT_LOCATIONS.value
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_entrant_location"),)

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"<EntrantLocation {self.user_id} @ {self.latitude},{self.longitude}>"
