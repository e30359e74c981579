from __future__ import annotations

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship
from tripline.models import Base
from tripline.models.enums import DestinationCategory, DestinationStatus, TransportMode


def _enum_values(enum_cls: type) -> list[str]:
    return [member.value for member in enum_cls]


def _string_enum(enum_cls: type, name: str) -> sa.Enum:
    return sa.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        validate_strings=True,
        values_callable=_enum_values,
    )


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
        onupdate=sa.func.now(),
    )


class TripRecord(TimestampMixin, Base):
    __tablename__ = "trips"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(255), default="")
    start_date: Mapped[str] = mapped_column(sa.String(10), default="")
    end_date: Mapped[str] = mapped_column(sa.String(10), default="")
    # flat, user-controlled destination order; the only sequencing source
    destination_order: Mapped[list[str]] = mapped_column(sa.JSON, default=list)
    vehicle_config: Mapped[dict[str, Any] | None] = mapped_column(
        sa.JSON, nullable=True
    )
    home_point: Mapped[dict[str, Any] | None] = mapped_column(sa.JSON, nullable=True)

    destinations: Mapped[list["DestinationRecord"]] = relationship(
        back_populates="trip",
        cascade="all, delete-orphan",
    )


class DestinationRecord(TimestampMixin, Base):
    __tablename__ = "destinations"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    trip_id: Mapped[str] = mapped_column(
        sa.String(64),
        sa.ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(sa.String(255))
    location: Mapped[str | None] = mapped_column(sa.String(512), nullable=True)
    lat: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    category: Mapped[DestinationCategory] = mapped_column(
        _string_enum(DestinationCategory, "destination_category"),
        default=DestinationCategory.ATTRACTION,
    )
    status: Mapped[DestinationStatus] = mapped_column(
        _string_enum(DestinationStatus, "destination_status"),
        default=DestinationStatus.PLANNED,
    )
    start_date: Mapped[str] = mapped_column(sa.String(10), default="")
    end_date: Mapped[str] = mapped_column(sa.String(10), default="")
    transport_mode: Mapped[TransportMode | None] = mapped_column(
        _string_enum(TransportMode, "transport_mode"), nullable=True
    )
    transport_duration: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    transport_distance: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    return_destination_id: Mapped[str | None] = mapped_column(
        sa.String(64), nullable=True
    )
    budget: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    actual_cost: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    notes: Mapped[str] = mapped_column(sa.Text, default="")
    tags: Mapped[list[str]] = mapped_column(sa.JSON, default=list)

    trip: Mapped["TripRecord"] = relationship(back_populates="destinations")


__all__ = ["TimestampMixin", "TripRecord", "DestinationRecord"]
