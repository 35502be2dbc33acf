"""
Bestell-Models: Order (Header), OrderLine (Positionen) und OrderAuditLog
"""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import String, Integer, Numeric, Boolean, DateTime, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.types import Uuid, JSON
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nursery.database import Base
from nursery.models.enums import OrderStatus, PriceLevel


class Order(Base):
    """
    Bestellung (Header) - Abholbestellung an einer Pépinière.

    Geschäftsregeln:
    - Statuswechsel nur über den OrderService
    - picked-up und cancelled sind Endzustände
    - Summen werden bei Anlage aus den Chargenpreisen eingefroren
    """
    __tablename__ = "nursery_orders"

    # ==================== IDENTIFIKATION ====================
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    # Human-readable, sequentielle Bestellnummer (z.B. "PEP-2026-0001")
    order_number: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )

    # ==================== KUNDE ====================
    customer_id: Mapped[str] = mapped_column(String(100), default="")
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(200), default="")
    customer_phone: Mapped[str] = mapped_column(String(50), default="")
    is_member: Mapped[bool] = mapped_column(Boolean, default=False)

    price_level: Mapped[PriceLevel] = mapped_column(
        SQLEnum(PriceLevel), default=PriceLevel.STANDARD, nullable=False
    )

    # ==================== ABHOLUNG ====================
    pickup_nursery_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("nursery_nurseries.id"), nullable=False, index=True
    )

    # ==================== STATUS ====================
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus), default=OrderStatus.NEW, nullable=False, index=True
    )

    # ==================== BETRÄGE ====================
    subtotal_euros: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    subtotal_semos: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    total_euros: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    total_semos: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )

    notes: Mapped[str] = mapped_column(Text, default="")

    # ==================== ZEITSTEMPEL ====================
    prepared_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    ready_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    picked_up_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # ==================== BEZIEHUNGEN ====================
    pickup_nursery: Mapped["Nursery"] = relationship("Nursery")
    lines: Mapped[list["OrderLine"]] = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.position"
    )
    transfers: Mapped[list["Transfer"]] = relationship(
        "Transfer", back_populates="order", order_by="Transfer.created_at"
    )
    audit_logs: Mapped[list["OrderAuditLog"]] = relationship(
        "OrderAuditLog",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderAuditLog.created_at"
    )

    def calculate_totals(self) -> None:
        """
        Berechnet die Summen aus den Positionen.
        Nur bei Anlage aufgerufen - spätere Preisänderungen am Katalog
        wirken nicht auf bestehende Bestellungen.
        """
        subtotal_euros = sum((line.total_euros for line in self.lines), Decimal("0.00"))
        subtotal_semos = sum((line.total_semos for line in self.lines), Decimal("0.00"))

        self.subtotal_euros = subtotal_euros.quantize(Decimal("0.01"))
        self.subtotal_semos = subtotal_semos.quantize(Decimal("0.01"))
        self.total_euros = self.subtotal_euros
        self.total_semos = self.subtotal_semos

    @property
    def pickup_nursery_name(self) -> Optional[str]:
        return self.pickup_nursery.name if self.pickup_nursery else None

    def __repr__(self) -> str:
        return f"<Order(number='{self.order_number}', status={self.status.value})>"


class OrderLine(Base):
    """
    Bestellposition - Beitrag einer Charge zu einer Bestellung.

    Namen und Preise sind Snapshots zum Zeitpunkt der Bestellung.
    reserved_quantity zeigt, wie viel diese Position aktuell in der Charge
    reserviert hält; geschrieben nur vom StockLedger.
    """
    __tablename__ = "nursery_order_lines"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("nursery_orders.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    # ==================== REFERENZEN ====================
    stock_batch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("nursery_stock_batches.id"), nullable=False, index=True
    )
    nursery_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("nursery_nurseries.id"), nullable=False
    )

    # ==================== SNAPSHOT ====================
    nursery_name: Mapped[str] = mapped_column(String(200), nullable=False)
    species_name: Mapped[str] = mapped_column(String(200), nullable=False)
    variety_name: Mapped[str] = mapped_column(String(200), default="")
    container_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # ==================== MENGE & PREISE ====================
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_euros: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    unit_price_semos: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    pay_in_semos: Mapped[bool] = mapped_column(Boolean, default=False)
    total_euros: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    total_semos: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )

    # Reservierung dieser Position (nur StockLedger)
    _reserved_quantity: Mapped[int] = mapped_column(
        "reserved_quantity", Integer, default=0, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # ==================== BEZIEHUNGEN ====================
    order: Mapped["Order"] = relationship("Order", back_populates="lines")
    stock_batch: Mapped["StockBatch"] = relationship("StockBatch")

    @hybrid_property
    def reserved_quantity(self) -> int:
        return self._reserved_quantity

    def calculate_line_totals(self) -> None:
        """Euro- oder Semos-Betrag je nach Zahlungsart"""
        if self.pay_in_semos:
            self.total_euros = Decimal("0.00")
            self.total_semos = (self.quantity * self.unit_price_semos).quantize(Decimal("0.01"))
        else:
            self.total_euros = (self.quantity * self.unit_price_euros).quantize(Decimal("0.01"))
            self.total_semos = Decimal("0.00")

    def __repr__(self) -> str:
        return f"<OrderLine(pos={self.position}, species='{self.species_name}', qty={self.quantity})>"


class OrderAuditLog(Base):
    """
    Audit-Log für Statuswechsel einer Bestellung.
    """
    __tablename__ = "nursery_order_audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("nursery_orders.id", ondelete="CASCADE"), nullable=False
    )

    action: Mapped[str] = mapped_column(String(50), nullable=False)  # CREATE, PROCESS, READY, PICKED_UP, CANCEL

    old_values: Mapped[Optional[dict]] = mapped_column(JSON)
    new_values: Mapped[Optional[dict]] = mapped_column(JSON)

    user_name: Mapped[Optional[str]] = mapped_column(String(200))
    reason: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    order: Mapped["Order"] = relationship("Order", back_populates="audit_logs")

    def __repr__(self) -> str:
        return f"<OrderAuditLog(order={self.order_id}, action='{self.action}')>"


# Imports für Type Hints (am Ende um zirkuläre Imports zu vermeiden)
from nursery.models.nursery import Nursery
from nursery.models.stock import StockBatch
from nursery.models.transfer import Transfer
