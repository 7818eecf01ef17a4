"""
Layout Geometry Models.

Read-side view of the layout data this engine consumes:
- RouteMarker: start point, stop point and cart parking spots
- WarehouseElement: positioned storage locations on the layout canvas
- PickTransaction: element-level pick history
- Item / ItemPickTransaction: item-level pick history

Coordinates are canvas units, where 1 unit = 1 inch.
"""
import uuid
from datetime import datetime, timezone, date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    String, DateTime, ForeignKey, Integer, Numeric, Date, Index, CheckConstraint
)
from sqlalchemy.orm import Mapped, mapped_column

from pickpath.core.enum_utils import enum_comment, enum_values
from pickpath.database import Base
from pickpath.db_types import UUIDType


# ============================================================================
# ENUMS
# ============================================================================

class MarkerType(str, Enum):
    """Route marker categories."""
    START_POINT = "start_point"
    STOP_POINT = "stop_point"
    CART_PARKING = "cart_parking"


# ============================================================================
# MODELS
# ============================================================================

class RouteMarker(Base):
    """
    Route marker placed on a layout.

    At most one start point and one stop point exist per layout; cart
    parking spots are ordered by sequence_order when it is set.
    """
    __tablename__ = "route_markers"
    __table_args__ = (
        CheckConstraint(
            "marker_type IN (" + ", ".join(f"'{v}'" for v in enum_values(MarkerType)) + ")",
            name="valid_marker_type"
        ),
        Index("idx_route_markers_type", "layout_id", "marker_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    layout_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        nullable=False,
        index=True
    )
    marker_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment=enum_comment(MarkerType)
    )
    label: Mapped[Optional[str]] = mapped_column(String(100))
    x_coordinate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    y_coordinate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    sequence_order: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Order of cart parking spots in the pick path (1, 2, 3...)"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<RouteMarker {self.marker_type} ({self.x_coordinate}, {self.y_coordinate})>"


class WarehouseElement(Base):
    """Positioned storage element (bay, rack, shelf) on a layout."""
    __tablename__ = "warehouse_elements"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    layout_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        nullable=False,
        index=True
    )
    label: Mapped[Optional[str]] = mapped_column(String(100))
    x_coordinate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    y_coordinate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    width: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    height: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))

    def __repr__(self) -> str:
        return f"<WarehouseElement {self.label}>"


class PickTransaction(Base):
    """Element-level pick count for a single day."""
    __tablename__ = "pick_transactions"
    __table_args__ = (
        Index("idx_pick_transactions_layout_date", "layout_id", "pick_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    layout_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False)
    element_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("warehouse_elements.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    pick_date: Mapped[date] = mapped_column(Date, nullable=False)
    pick_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class Item(Base):
    """SKU tracked at item level."""
    __tablename__ = "items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    layout_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False, index=True)
    item_code: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="External item identifier (SKU)"
    )
    description: Mapped[Optional[str]] = mapped_column(String(255))


class ItemPickTransaction(Base):
    """Item-level pick count for a single day at a given element."""
    __tablename__ = "item_pick_transactions"
    __table_args__ = (
        Index("idx_item_pick_transactions_layout_date", "layout_id", "pick_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    layout_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False)
    element_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("warehouse_elements.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    item_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    pick_date: Mapped[date] = mapped_column(Date, nullable=False)
    pick_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
