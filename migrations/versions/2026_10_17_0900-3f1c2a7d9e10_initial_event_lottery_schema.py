"""initial event lottery schema

Revision ID: 3f1c2a7d9e10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy_utils import UUIDType

# revision identifiers, used by Alembic.
revision: str = "3f1c2a7d9e10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ROLES = ("entrant", "organizer", "admin")
NOTIFICATION_KINDS = (
    "lottery_won",
    "lottery_not_selected",
    "invitation_cancelled",
    "invitation_accepted",
    "invitation_rejected",
    "organizer_message",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(255), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True, index=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("role", sa.Enum(*ROLES, name="role_enum"), nullable=False),
        sa.Column("demoted", sa.Boolean, nullable=False),
        sa.Column("system_notifications", sa.Boolean, nullable=False),
        sa.Column("organizer_notifications", sa.Boolean, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "events",
        sa.Column("uuid", UUIDType(binary=False), primary_key=True),
        sa.Column("organizer_id", sa.String(255), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location_name", sa.String(500), nullable=True),
        sa.Column("geolocation_required", sa.Boolean, nullable=False),
        sa.Column("max_attendees", sa.Integer, nullable=True),
        sa.Column("max_waiting_list", sa.Integer, nullable=True),
        sa.Column("waiting_list", sa.JSON, nullable=False),
        sa.Column("registration_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("registration_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("lottery_complete", sa.Boolean, nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "entrant_locations",
        sa.Column("uuid", UUIDType(binary=False), primary_key=True),
        sa.Column(
            "event_id",
            UUIDType(binary=False),
            sa.ForeignKey("events.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("event_id", "user_id", name="uq_entrant_location"),
    )

    op.create_table(
        "invitations",
        sa.Column("uuid", UUIDType(binary=False), primary_key=True),
        sa.Column(
            "event_id",
            UUIDType(binary=False),
            sa.ForeignKey("events.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("organizer_id", sa.String(255), nullable=False),
        sa.Column("recipient_id", sa.String(255), nullable=False, index=True),
        sa.Column("accepted", sa.Boolean, nullable=True),
        sa.Column("cancelled", sa.Boolean, nullable=False),
        sa.Column("send_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("response_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancel_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer, nullable=False),
    )

    op.create_table(
        "notifications",
        sa.Column("uuid", UUIDType(binary=False), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("kind", sa.Enum(*NOTIFICATION_KINDS, name="notification_kind_enum"), nullable=False),
        sa.Column(
            "event_id",
            UUIDType(binary=False),
            sa.ForeignKey("events.uuid", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column("organizer_id", sa.String(255), nullable=True),
        sa.Column("deleted", sa.Boolean, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "user_notifications",
        sa.Column("uuid", UUIDType(binary=False), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False, index=True),
        sa.Column(
            "notification_id",
            UUIDType(binary=False),
            sa.ForeignKey("notifications.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "notification_id", name="uq_user_notification"),
    )


def downgrade() -> None:
    op.drop_table("user_notifications")
    op.drop_table("notifications")
    op.drop_table("invitations")
    op.drop_table("entrant_locations")
    op.drop_table("events")
    op.drop_table("users")
    sa.Enum(name="notification_kind_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="role_enum").drop(op.get_bind(), checkfirst=True)
