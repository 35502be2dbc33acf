"""
Stammdaten: Pépinière (Standort) und Container (Topfformat)
"""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import String, Integer, Numeric, Boolean, DateTime, Text, Enum as SQLEnum
from sqlalchemy.types import Uuid, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nursery.database import Base
from nursery.models.enums import NurseryType, IntegrationMode


class Nursery(Base):
    """
    Pépinière - eigener oder Partner-Standort.

    Geschäftsregeln:
    - Wird nie hart gelöscht, sobald Chargen oder Bestellungen darauf zeigen
    - Bei manueller Integration sind nur grobe Verfügbarkeiten bekannt
    """
    __tablename__ = "nursery_nurseries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    nursery_type: Mapped[NurseryType] = mapped_column(
        SQLEnum(NurseryType), default=NurseryType.SEMISTO, nullable=False
    )
    integration: Mapped[IntegrationMode] = mapped_column(
        SQLEnum(IntegrationMode), default=IntegrationMode.PLATFORM, nullable=False
    )

    # ==================== ADRESSE ====================
    address: Mapped[str] = mapped_column(String(255), default="")
    city: Mapped[str] = mapped_column(String(100), default="")
    postal_code: Mapped[str] = mapped_column(String(20), default="")
    country: Mapped[str] = mapped_column(String(100), default="")
    latitude: Mapped[Decimal] = mapped_column(Numeric(10, 6), default=Decimal("0"))
    longitude: Mapped[Decimal] = mapped_column(Numeric(10, 6), default=Decimal("0"))

    # ==================== KONTAKT ====================
    contact_name: Mapped[str] = mapped_column(String(200), default="")
    contact_email: Mapped[str] = mapped_column(String(200), default="")
    contact_phone: Mapped[str] = mapped_column(String(50), default="")
    website: Mapped[str] = mapped_column(String(255), default="")

    description: Mapped[str] = mapped_column(Text, default="")
    specialties: Mapped[list] = mapped_column(JSON, default=list)
    is_pickup_point: Mapped[bool] = mapped_column(Boolean, default=True)

    # Soft-Delete
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Beziehungen
    stock_batches: Mapped[list["StockBatch"]] = relationship(
        "StockBatch", back_populates="nursery"
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def tracks_quantities(self) -> bool:
        """Exakte Mengen nur bei Plattform-Integration"""
        return self.integration == IntegrationMode.PLATFORM

    def soft_delete(self) -> None:
        self.deleted_at = datetime.utcnow()

    def __repr__(self) -> str:
        return f"<Nursery(name='{self.name}', integration={self.integration.value})>"


class Container(Base):
    """
    Container - Topf-/Formatbeschreibung einer Charge (z.B. Godet 9cm, Pot 3L)
    """
    __tablename__ = "nursery_containers"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    short_name: Mapped[str] = mapped_column(String(20), nullable=False)
    volume_liters: Mapped[Optional[Decimal]] = mapped_column(Numeric(7, 2))
    description: Mapped[str] = mapped_column(Text, default="")
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    stock_batches: Mapped[list["StockBatch"]] = relationship(
        "StockBatch", back_populates="container"
    )

    def __repr__(self) -> str:
        return f"<Container(short_name='{self.short_name}')>"


# Imports für Type Hints (am Ende um zirkuläre Imports zu vermeiden)
from nursery.models.stock import StockBatch
