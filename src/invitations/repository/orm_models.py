from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import Base, UTCDateTime, utcnow


class Invitation(Base):
    __tablename__ = TableNames.INVITATIONS.value

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Copied from the event when the invitation is created; only this user may cancel
    organizer_id: Mapped[str] = mapped_column(String(255), nullable=False)
    recipient_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # None while pending; set once, on the first response
    accepted: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=None)
    cancelled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    send_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    response_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    cancel_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Invitation {self.uuid} event={self.event_id} to={self.recipient_id}>"
