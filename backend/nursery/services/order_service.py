"""
Bestell-Service - Lebenszyklus von Bestellungen

Statusmaschine:
    new        -> processing  : alle Positionen reservieren (alles oder nichts)
    processing -> ready       : kein Bestandseffekt
    ready      -> picked-up   : alle Positionen verbrauchen (consume)
    new | processing | ready -> cancelled : gehaltene Reservierungen freigeben
    picked-up, cancelled      : Endzustände
"""
import logging
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from nursery.config import get_settings
from nursery.core.exceptions import (
    InsufficientStock, InvalidTransition, NotFound, OrderNumberConflict,
)
from nursery.models.enums import OrderStatus, PriceLevel
from nursery.models.nursery import Nursery
from nursery.models.order import Order, OrderLine, OrderAuditLog
from nursery.models.stock import StockBatch
from nursery.services.stock_ledger import StockLedger

logger = logging.getLogger(__name__)

OPEN_STATUSES = tuple(status for status in OrderStatus if not status.is_terminal)


class OrderService:
    """Service für Bestell-Operationen"""

    def __init__(self, db: Session, user_name: Optional[str] = None):
        self.db = db
        self.user_name = user_name
        self.ledger = StockLedger(db, actor=user_name)

    # ========================================
    # ABFRAGEN
    # ========================================

    def get_order(self, order_id: UUID, for_update: bool = False) -> Order:
        """Lädt eine Bestellung, optional mit Zeilensperre"""
        query = select(Order).where(Order.id == order_id)
        if for_update:
            self.db.flush()
            query = query.with_for_update().execution_options(populate_existing=True)
        else:
            query = query.options(joinedload(Order.lines), joinedload(Order.pickup_nursery))

        order = self.db.execute(query).unique().scalar_one_or_none()
        if not order:
            raise NotFound("Bestellung nicht gefunden", order_id=order_id)
        return order

    def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        pickup_nursery_id: Optional[UUID] = None,
        customer_email: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Order], int]:
        """Bestellungen mit Filtern, neueste zuerst"""
        query = select(Order)
        if status:
            query = query.where(Order.status == status)
        if pickup_nursery_id:
            query = query.where(Order.pickup_nursery_id == pickup_nursery_id)
        if customer_email:
            query = query.where(func.lower(Order.customer_email) == customer_email.lower())

        total = self.db.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar() or 0

        orders = self.db.execute(
            query.options(joinedload(Order.lines), joinedload(Order.pickup_nursery))
            .order_by(Order.created_at.desc())
            .offset(offset)
            .limit(limit)
        ).unique().scalars().all()

        return list(orders), total

    # ========================================
    # ANLAGE
    # ========================================

    def create_order(
        self,
        pickup_nursery_id: UUID,
        customer_name: str,
        lines: list[dict],
        customer_id: str = "",
        customer_email: str = "",
        customer_phone: str = "",
        is_member: bool = False,
        price_level: PriceLevel = PriceLevel.STANDARD,
        notes: str = "",
        process_immediately: bool = False,
    ) -> Order:
        """
        Legt eine Bestellung im Status new an.

        lines: [{"stock_batch_id": UUID, "quantity": int, "pay_in_semos": bool}, ...]

        Preise und Namen werden aus der Charge übernommen und eingefroren.
        Mit process_immediately wird in derselben Transaktion reserviert.
        """
        nursery = self.db.get(Nursery, pickup_nursery_id)
        if not nursery or nursery.is_deleted:
            raise NotFound("Abhol-Pépinière nicht gefunden", nursery_id=pickup_nursery_id)

        if not lines:
            raise ValueError("Bestellung muss mindestens eine Position enthalten")

        order = Order(
            order_number=self._generate_order_number(),
            pickup_nursery_id=nursery.id,
            customer_id=customer_id or "",
            customer_name=customer_name,
            customer_email=customer_email or "",
            customer_phone=customer_phone or "",
            is_member=is_member,
            price_level=price_level,
            status=OrderStatus.NEW,
            notes=notes or "",
        )
        self.db.add(order)

        for position, line_data in enumerate(lines, start=1):
            order.lines.append(self._build_line(position, line_data))

        order.calculate_totals()
        order_number = order.order_number
        try:
            self.db.flush()
        except IntegrityError as e:
            if "order_number" not in str(e.orig):
                raise
            logger.warning(f"Bestellnummer {order_number} bereits vergeben")
            raise OrderNumberConflict(order_number=order_number) from e

        self._create_audit_log(
            order, "CREATE",
            new_values={
                "status": order.status.value,
                "total_euros": str(order.total_euros),
                "total_semos": str(order.total_semos),
            },
        )
        logger.info(
            f"Bestellung {order.order_number} angelegt: {len(order.lines)} Positionen, "
            f"{order.total_euros} EUR / {order.total_semos} Semos"
        )

        if process_immediately:
            self.process_order(order.id)

        return order

    def _build_line(self, position: int, line_data: dict) -> OrderLine:
        """Baut eine Position mit Preis-Snapshot aus der Charge"""
        batch_id = line_data["stock_batch_id"]
        quantity = line_data["quantity"]
        pay_in_semos = bool(line_data.get("pay_in_semos", False))

        batch = self.db.get(StockBatch, batch_id)
        if not batch or batch.is_deleted or batch.nursery.is_deleted:
            raise NotFound(f"Charge {batch_id} nicht gefunden", batch_id=batch_id)

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValueError(f"Menge für {batch.species_name} muss positiv sein")

        if pay_in_semos and (not batch.accepts_semos or batch.price_semos is None):
            raise ValueError(f"{batch.species_name} kann nicht in Semos bezahlt werden")

        line = OrderLine(
            position=position,
            stock_batch_id=batch.id,
            nursery_id=batch.nursery_id,
            nursery_name=batch.nursery.name,
            species_name=batch.species_name,
            variety_name=batch.variety_name or "",
            container_name=batch.container.short_name,
            quantity=quantity,
            unit_price_euros=batch.price_euros,
            unit_price_semos=batch.price_semos,
            pay_in_semos=pay_in_semos,
        )
        line.calculate_line_totals()
        return line

    def _generate_order_number(self) -> str:
        """Generiert sequenzielle Bestellnummer im Format PEP-YYYY-NNNN."""
        prefix = f"{get_settings().order_number_prefix}-{date.today().year}"

        # Höchste Nummer des Jahres: längere Nummern zuerst, sonst käme 9999 vor 10000
        last_number = self.db.execute(
            select(Order.order_number)
            .where(Order.order_number.like(f"{prefix}-%"))
            .order_by(func.length(Order.order_number).desc(), Order.order_number.desc())
            .limit(1)
        ).scalar_one_or_none()

        next_num = int(last_number.split("-")[-1]) + 1 if last_number else 1
        return f"{prefix}-{next_num:04d}"

    # ========================================
    # STATUSWECHSEL
    # ========================================

    def process_order(self, order_id: UUID) -> Order:
        """
        new -> processing: reserviert alle Positionen.

        Schlägt eine Position fehl, wird nichts reserviert, die Bestellung
        bleibt new und InsufficientStock nennt die betroffene Charge.
        """
        order = self.get_order(order_id, for_update=True)
        self._require_status(order, (OrderStatus.NEW,), OrderStatus.PROCESSING)

        batches = self._lock_batches(order)
        self._check_availability(order, batches)

        reserved: list[OrderLine] = []
        try:
            for line in order.lines:
                self.ledger.reserve(
                    batches[line.stock_batch_id], line.quantity,
                    line=line, reason=f"Bestellung {order.order_number}",
                )
                reserved.append(line)
        except InsufficientStock:
            for line in reversed(reserved):
                self.ledger.release(
                    batches[line.stock_batch_id], line.quantity,
                    line=line, reason=f"Rückabwicklung {order.order_number}",
                )
            raise

        now = datetime.utcnow()
        self._transition(order, OrderStatus.PROCESSING, "PROCESS")
        if order.prepared_at is None:
            order.prepared_at = now
        self.db.flush()
        return order

    def mark_ready(self, order_id: UUID) -> Order:
        """processing -> ready (nur Vorbereitung, kein Bestandseffekt)"""
        order = self.get_order(order_id, for_update=True)
        self._require_status(order, (OrderStatus.PROCESSING,), OrderStatus.READY)

        self._transition(order, OrderStatus.READY, "READY")
        order.ready_at = datetime.utcnow()
        self.db.flush()
        return order

    def mark_picked_up(self, order_id: UUID) -> Order:
        """ready -> picked-up: verbraucht die Reservierungen aller Positionen"""
        order = self.get_order(order_id, for_update=True)
        self._require_status(order, (OrderStatus.READY,), OrderStatus.PICKED_UP)

        batches = self._lock_batches(order)
        for line in order.lines:
            self.ledger.consume(
                batches[line.stock_batch_id], line.quantity,
                line=line, reason=f"Abholung {order.order_number}",
            )

        self._transition(order, OrderStatus.PICKED_UP, "PICKED_UP")
        order.picked_up_at = datetime.utcnow()
        self.db.flush()
        return order

    def cancel_order(self, order_id: UUID, reason: Optional[str] = None) -> Order:
        """
        new | processing | ready -> cancelled.

        Gibt jede Position frei, die noch eine Reservierung hält.
        Eine zweite Freigabe derselben Position wird vom Ledger abgelehnt.
        """
        order = self.get_order(order_id, for_update=True)
        self._require_status(order, OPEN_STATUSES, OrderStatus.CANCELLED)

        holding = [line for line in order.lines if line.reserved_quantity > 0]
        if holding:
            batches = self.ledger.lock_many(line.stock_batch_id for line in holding)
            for line in holding:
                self.ledger.release(
                    batches[line.stock_batch_id], line.quantity,
                    line=line, reason=f"Stornierung {order.order_number}",
                )

        self._transition(order, OrderStatus.CANCELLED, "CANCEL", reason=reason)
        order.cancelled_at = datetime.utcnow()
        self.db.flush()
        return order

    # ========================================
    # HILFSFUNKTIONEN
    # ========================================

    def _require_status(
        self, order: Order, allowed: tuple[OrderStatus, ...], target: OrderStatus
    ) -> None:
        if order.status not in allowed:
            raise InvalidTransition(
                f"Bestellung {order.order_number} hat Status {order.status.value}, "
                f"Wechsel nach {target.value} nicht möglich",
                order_id=order.id,
                current=order.status.value,
                target=target.value,
            )

    def _lock_batches(self, order: Order) -> dict[UUID, StockBatch]:
        batches = self.ledger.lock_many(line.stock_batch_id for line in order.lines)
        for batch in batches.values():
            if batch.is_deleted:
                raise NotFound(
                    f"Charge {batch.species_name} wurde gelöscht", batch_id=batch.id
                )
        return batches

    def _check_availability(self, order: Order, batches: dict[UUID, StockBatch]) -> None:
        """Prüft alle Positionen vor der ersten Buchung (mehrere Positionen je Charge summiert)"""
        requested: dict[UUID, int] = defaultdict(int)
        for line in order.lines:
            requested[line.stock_batch_id] += line.quantity

        for batch_id, quantity in requested.items():
            batch = batches[batch_id]
            if batch.available_quantity < quantity:
                logger.warning(
                    f"Bestellung {order.order_number}: Charge {batch.id} "
                    f"verfügbar {batch.available_quantity}, benötigt {quantity}"
                )
                raise InsufficientStock(
                    f"Nicht genug Bestand für {batch.species_name}. "
                    f"Verfügbar: {batch.available_quantity}, Benötigt: {quantity}",
                    batch_id=batch.id,
                    species_name=batch.species_name,
                    available=batch.available_quantity,
                    requested=quantity,
                )

    def _transition(
        self, order: Order, new_status: OrderStatus, action: str, reason: Optional[str] = None
    ) -> None:
        old_status = order.status
        order.status = new_status
        self._create_audit_log(
            order, action,
            old_values={"status": old_status.value},
            new_values={"status": new_status.value},
            reason=reason,
        )
        logger.info(
            f"Bestellung {order.order_number}: {old_status.value} -> {new_status.value}"
        )

    def _create_audit_log(
        self,
        order: Order,
        action: str,
        old_values: Optional[dict] = None,
        new_values: Optional[dict] = None,
        reason: Optional[str] = None,
    ) -> OrderAuditLog:
        """Erstellt Audit-Log-Eintrag für Bestellung."""
        audit_log = OrderAuditLog(
            order_id=order.id,
            action=action,
            old_values=old_values,
            new_values=new_values,
            user_name=self.user_name,
            reason=reason,
        )
        self.db.add(audit_log)
        return audit_log
