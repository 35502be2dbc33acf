"""
Bestands-Models: StockBatch (Charge) und StockMovement (Bestandsjournal)

Die drei Zähler einer Charge (quantity, available_quantity, reserved_quantity)
liegen in privaten Spalten und sind nach außen nur lesbar.
Geschrieben werden sie ausschließlich vom StockLedger.
"""
import uuid
from datetime import datetime, date
from decimal import Decimal
from typing import Optional
from sqlalchemy import (
    String, Integer, Numeric, Boolean, DateTime, Date, ForeignKey, Text,
    CheckConstraint, Enum as SQLEnum,
)
from sqlalchemy.types import Uuid
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nursery.database import Base
from nursery.models.enums import GrowthStage, MovementType


class StockBatch(Base):
    """
    Charge - homogene Partie einer Art/Sorte in einem Container an einer Pépinière.

    Invariante (immer):
        0 <= available_quantity
        0 <= reserved_quantity
        available_quantity + reserved_quantity <= quantity

    quantity ist die historische Partiegröße; abgeholte Pflanzen (consume)
    verringern sie nicht, sodass der verfügbare Bestand dauerhaft sinkt.
    """
    __tablename__ = "nursery_stock_batches"
    __table_args__ = (
        CheckConstraint("available_quantity >= 0", name="ck_batch_available_non_negative"),
        CheckConstraint("reserved_quantity >= 0", name="ck_batch_reserved_non_negative"),
        CheckConstraint(
            "available_quantity + reserved_quantity <= quantity",
            name="ck_batch_counters_within_quantity",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    # ==================== REFERENZEN ====================
    nursery_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("nursery_nurseries.id"), nullable=False, index=True
    )
    container_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("nursery_containers.id"), nullable=False, index=True
    )

    # ==================== ART / SORTE ====================
    species_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    species_name: Mapped[str] = mapped_column(String(200), nullable=False)
    variety_id: Mapped[str] = mapped_column(String(100), default="")
    variety_name: Mapped[str] = mapped_column(String(200), default="")

    growth_stage: Mapped[GrowthStage] = mapped_column(
        SQLEnum(GrowthStage), default=GrowthStage.YOUNG, nullable=False
    )
    origin: Mapped[str] = mapped_column(String(200), default="")
    sowing_date: Mapped[Optional[date]] = mapped_column(Date)

    # ==================== ZÄHLER (nur StockLedger) ====================
    _quantity: Mapped[int] = mapped_column(
        "quantity", Integer, default=0, nullable=False
    )
    _available_quantity: Mapped[int] = mapped_column(
        "available_quantity", Integer, default=0, nullable=False
    )
    _reserved_quantity: Mapped[int] = mapped_column(
        "reserved_quantity", Integer, default=0, nullable=False
    )

    # ==================== PREISE ====================
    price_euros: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    accepts_semos: Mapped[bool] = mapped_column(Boolean, default=False)
    price_semos: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))

    notes: Mapped[str] = mapped_column(Text, default="")

    # Soft-Delete
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # ==================== BEZIEHUNGEN ====================
    nursery: Mapped["Nursery"] = relationship("Nursery", back_populates="stock_batches")
    container: Mapped["Container"] = relationship("Container", back_populates="stock_batches")
    movements: Mapped[list["StockMovement"]] = relationship(
        "StockMovement",
        back_populates="stock_batch",
        order_by="StockMovement.created_at",
    )

    @hybrid_property
    def quantity(self) -> int:
        """Partiegröße (Zugänge minus Abschreibungen)"""
        return self._quantity

    @hybrid_property
    def available_quantity(self) -> int:
        """Aktuell verkäuflich"""
        return self._available_quantity

    @hybrid_property
    def reserved_quantity(self) -> int:
        """Für offene Bestellungen reserviert"""
        return self._reserved_quantity

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def nursery_name(self) -> Optional[str]:
        return self.nursery.name if self.nursery else None

    @property
    def nursery_integration(self):
        return self.nursery.integration if self.nursery else None

    @property
    def container_name(self) -> Optional[str]:
        return self.container.short_name if self.container else None

    def soft_delete(self) -> None:
        self.deleted_at = datetime.utcnow()

    @property
    def counters(self) -> dict:
        """Momentaufnahme der Zähler (für Journal und Tests)"""
        return {
            "quantity": self._quantity,
            "available_quantity": self._available_quantity,
            "reserved_quantity": self._reserved_quantity,
        }

    def __repr__(self) -> str:
        return (
            f"<StockBatch(species='{self.species_name}', qty={self._quantity}, "
            f"available={self._available_quantity}, reserved={self._reserved_quantity})>"
        )


class StockMovement(Base):
    """
    Bestandsbewegung - unveränderliches Journal aller Ledger-Operationen.
    Vorher/Nachher-Stände erlauben die nächtliche Abstimmung.
    """
    __tablename__ = "nursery_stock_movements"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    stock_batch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("nursery_stock_batches.id"), nullable=False, index=True
    )
    movement_type: Mapped[MovementType] = mapped_column(
        SQLEnum(MovementType), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Stände vor und nach der Buchung
    quantity_before: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_after: Mapped[int] = mapped_column(Integer, nullable=False)
    available_before: Mapped[int] = mapped_column(Integer, nullable=False)
    available_after: Mapped[int] = mapped_column(Integer, nullable=False)
    reserved_before: Mapped[int] = mapped_column(Integer, nullable=False)
    reserved_after: Mapped[int] = mapped_column(Integer, nullable=False)

    # Bezug zur Bestellposition (reserve/release/consume)
    order_line_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("nursery_order_lines.id", ondelete="SET NULL")
    )

    reason: Mapped[Optional[str]] = mapped_column(Text)
    created_by: Mapped[Optional[str]] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    stock_batch: Mapped["StockBatch"] = relationship("StockBatch", back_populates="movements")

    def __repr__(self) -> str:
        return f"<StockMovement(type={self.movement_type.value}, qty={self.quantity})>"


# Imports für Type Hints (am Ende um zirkuläre Imports zu vermeiden)
from nursery.models.nursery import Nursery, Container
