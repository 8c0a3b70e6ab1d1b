from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import Base, UTCDateTime, utcnow
from src.notifications.dtos import NotificationKind


class Notification(Base):
    """A notification body, shared by every recipient through UserNotification rows."""

    __tablename__ = TableNames.NOTIFICATIONS.value

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    kind: Mapped[NotificationKind] = mapped_column(
        Enum(
            NotificationKind,
            name="notification_kind_enum",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    event_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    organizer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Soft delete so that open feeds can retract what they already show
    deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Notification {self.kind.value}: {self.title}>"


class UserNotification(Base):
    __tablename__ = TableNames.USER_NOTIFICATIONS.value
    __table_args__ = (
        UniqueConstraint("user_id", "notification_id", name="uq_user_notification"),
    )

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    notification_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.NOTIFICATIONS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<UserNotification {self.user_id} -> {self.notification_id}>"
