"""Dynamic UI component descriptors and their usage log."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from roome.database import Base, JSONType


class UIComponent(Base):
    """A reusable, data-driven UI fragment."""

    __tablename__ = "ui_components"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Classification
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    component_type: Mapped[str] = mapped_column(String(50), nullable=False)

    # Presentation data; config shape depends on component_type
    config: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    template: Mapped[str | None] = mapped_column(Text, nullable=True)
    styles: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    interactions: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    responsive: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)

    # Lifecycle flags
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Approximate counter; component_usage rows are the source of truth
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Audit trail
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    updated_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


class ComponentUsage(Base):
    """Append-only record of one rendered-and-displayed occurrence."""

    __tablename__ = "component_usage"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Soft reference: deleting a component leaves its usage history in place
    component_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    page: Mapped[str] = mapped_column(String(500), nullable=False)
    context: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    performance_metrics: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    # Copy of performance_metrics["loadTime"] for aggregation
    load_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), index=True
    )
