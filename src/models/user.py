from sqlalchemy import Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import TimeStamp
from src.users.roles import Role


class User(TimeStamp):
    """A person using the app, keyed by the installation id of their device."""

    __tablename__ = TableNames.USERS.value

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="role_enum", values_callable=lambda x: [e.value for e in x]),
        default=Role.ENTRANT,
        nullable=False,
    )
    # Sticky: once a user has been demoted this never goes back to False
    demoted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    system_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    organizer_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.user_id} ({self.role.value})>"
