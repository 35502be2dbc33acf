"""
Transfer-Model: Abhol- und Liefertour für eine Bestellung
"""
import uuid
from datetime import datetime, date
from decimal import Decimal
from typing import Optional
from sqlalchemy import String, Numeric, DateTime, Date, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.types import Uuid, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nursery.database import Base
from nursery.models.enums import TransferStatus


class Transfer(Base):
    """
    Transfer - Logistiklauf zu genau einer Bestellung.

    stops ist eine geordnete Liste von Halten:
        [{"nursery_id": "...", "role": "pickup", "nursery_name": "..."}, ...]

    Ein Transfer verändert nie den Bestand; das ist allein Sache der Bestellung.
    """
    __tablename__ = "nursery_transfers"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("nursery_orders.id"), nullable=False, index=True
    )

    status: Mapped[TransferStatus] = mapped_column(
        SQLEnum(TransferStatus), default=TransferStatus.PLANNED, nullable=False, index=True
    )

    # Tour
    stops: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    total_distance_km: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=Decimal("0"))
    estimated_duration: Mapped[str] = mapped_column(String(50), default="")

    # Fahrer & Fahrzeug
    driver_id: Mapped[str] = mapped_column(String(100), default="")
    driver_name: Mapped[str] = mapped_column(String(200), default="")
    vehicle_info: Mapped[str] = mapped_column(String(200), default="")

    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    notes: Mapped[str] = mapped_column(Text, default="")

    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    order: Mapped["Order"] = relationship("Order", back_populates="transfers")

    @property
    def order_number(self) -> Optional[str]:
        return self.order.order_number if self.order else None

    def __repr__(self) -> str:
        return f"<Transfer(order={self.order_id}, status={self.status.value})>"


# Imports für Type Hints (am Ende um zirkuläre Imports zu vermeiden)
from nursery.models.order import Order
