"""
Stock Ledger - einzige Schnittstelle für Bestandszähler einer Charge.

Verwendung:
    ledger = StockLedger(db)
    ledger.reserve(batch, 4, line=line)   # verfügbar -> reserviert
    ledger.release(batch, 4, line=line)   # reserviert -> verfügbar
    ledger.consume(batch, 4, line=line)   # reserviert -> abgeholt
    ledger.add_stock(batch, 20)           # Zugang

Jede Operation sperrt die Charge (SELECT ... FOR UPDATE), prüft danach,
schreibt ein StockMovement und lässt die Charge bei Fehlern unverändert.
"""
import logging
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from nursery.core.exceptions import InsufficientStock, InvariantViolation, NotFound
from nursery.models.enums import MovementType
from nursery.models.order import OrderLine
from nursery.models.stock import StockBatch, StockMovement

logger = logging.getLogger(__name__)


def _require_positive(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValueError(f"Menge muss eine positive Ganzzahl sein (erhalten: {quantity!r})")
    return quantity


class StockLedger:
    """Service für alle Bestandsbuchungen"""

    def __init__(self, db: Session, actor: Optional[str] = None):
        self.db = db
        self.actor = actor

    # ========================================
    # SPERREN
    # ========================================

    def lock(self, batch_or_id) -> StockBatch:
        """
        Sperrt eine Charge für die laufende Transaktion und lädt die Zähler neu.
        """
        # Offene Änderungen zuerst schreiben, populate_existing würde sie sonst verwerfen
        self.db.flush()
        batch_id = batch_or_id if isinstance(batch_or_id, UUID) else batch_or_id.id
        batch = self.db.execute(
            select(StockBatch)
            .where(StockBatch.id == batch_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if batch is None:
            raise NotFound("Charge nicht gefunden", batch_id=batch_id)
        return batch

    def lock_many(self, batch_ids: Iterable[UUID]) -> dict[UUID, StockBatch]:
        """Sperrt mehrere Chargen in stabiler Reihenfolge (vermeidet Deadlocks)"""
        return {batch_id: self.lock(batch_id) for batch_id in sorted(set(batch_ids), key=str)}

    # ========================================
    # RESERVIERUNGEN
    # ========================================

    def reserve(
        self,
        batch: StockBatch,
        quantity: int,
        line: Optional[OrderLine] = None,
        reason: Optional[str] = None,
    ) -> StockMovement:
        """
        Reserviert Menge: available -= qty, reserved += qty.

        Raises:
            InsufficientStock: available_quantity < quantity (keine Teilreservierung)
        """
        _require_positive(quantity)
        batch = self.lock(batch)

        if batch._available_quantity < quantity:
            logger.warning(
                f"Reservierung abgelehnt: Charge {batch.id} ({batch.species_name}) "
                f"verfügbar {batch._available_quantity}, angefragt {quantity}"
            )
            raise InsufficientStock(
                f"Nicht genug Bestand für {batch.species_name}. "
                f"Verfügbar: {batch._available_quantity}, Angefragt: {quantity}",
                batch_id=batch.id,
                species_name=batch.species_name,
                available=batch._available_quantity,
                requested=quantity,
            )

        before = batch.counters
        batch._available_quantity -= quantity
        batch._reserved_quantity += quantity
        if line is not None:
            line._reserved_quantity += quantity

        return self._book(batch, MovementType.RESERVE, quantity, before, line, reason)

    def release(
        self,
        batch: StockBatch,
        quantity: int,
        line: Optional[OrderLine] = None,
        reason: Optional[str] = None,
    ) -> StockMovement:
        """
        Gibt Reservierung frei: reserved -= qty, available += qty.

        Raises:
            InvariantViolation: Mehr freigegeben als reserviert ist
        """
        _require_positive(quantity)
        batch = self.lock(batch)
        self._check_reserved(batch, quantity, line, "Freigabe")

        before = batch.counters
        batch._reserved_quantity -= quantity
        batch._available_quantity += quantity
        if line is not None:
            line._reserved_quantity -= quantity

        return self._book(batch, MovementType.RELEASE, quantity, before, line, reason)

    def consume(
        self,
        batch: StockBatch,
        quantity: int,
        line: Optional[OrderLine] = None,
        reason: Optional[str] = None,
    ) -> StockMovement:
        """
        Verbucht Abholung: reserved -= qty.

        quantity (Partiegröße) bleibt unverändert, available wird nicht
        wieder aufgefüllt - der Bestand ist damit dauerhaft verringert.
        """
        _require_positive(quantity)
        batch = self.lock(batch)
        self._check_reserved(batch, quantity, line, "Abholung")

        before = batch.counters
        batch._reserved_quantity -= quantity
        if line is not None:
            line._reserved_quantity -= quantity

        return self._book(batch, MovementType.CONSUME, quantity, before, line, reason)

    # ========================================
    # ZUGÄNGE / ABGÄNGE
    # ========================================

    def add_stock(self, batch: StockBatch, delta: int, reason: str = "Zugang") -> StockMovement:
        """
        Zugang oder Korrektur nach oben: quantity und available steigen gemeinsam.
        """
        _require_positive(delta)
        batch = self.lock(batch)

        before = batch.counters
        batch._quantity += delta
        batch._available_quantity += delta

        return self._book(batch, MovementType.RECEIPT, delta, before, None, reason)

    def shrink(self, batch: StockBatch, quantity: int, reason: str) -> StockMovement:
        """
        Verlust / Abschreibung: quantity und available sinken gemeinsam.
        Reservierte Pflanzen können nicht abgeschrieben werden.

        Raises:
            InsufficientStock: available_quantity < quantity
        """
        _require_positive(quantity)
        if not reason:
            raise ValueError("Grund für Abschreibung ist erforderlich")
        batch = self.lock(batch)

        if batch._available_quantity < quantity:
            raise InsufficientStock(
                f"Abschreibung nicht möglich. "
                f"Verfügbar: {batch._available_quantity}, Angefragt: {quantity}",
                batch_id=batch.id,
                species_name=batch.species_name,
                available=batch._available_quantity,
                requested=quantity,
            )

        before = batch.counters
        batch._quantity -= quantity
        batch._available_quantity -= quantity

        return self._book(batch, MovementType.SHRINK, quantity, before, None, reason)

    def receive_batch(self, quantity: int = 0, reason: str = "Neue Charge", **fields) -> StockBatch:
        """
        Legt eine neue Charge an und bucht die Anfangsmenge als Zugang.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise ValueError(f"Menge darf nicht negativ sein (erhalten: {quantity!r})")

        batch = StockBatch(**fields)
        self.db.add(batch)
        self.db.flush()

        if quantity > 0:
            self.add_stock(batch, quantity, reason=reason)
        return batch

    # ========================================
    # INVARIANTEN
    # ========================================

    @staticmethod
    def check_invariants(batch: StockBatch) -> None:
        """
        Prüft 0 <= available, 0 <= reserved, available + reserved <= quantity.
        """
        available = batch._available_quantity
        reserved = batch._reserved_quantity
        if available < 0 or reserved < 0 or available + reserved > batch._quantity:
            logger.error(f"Bestandsinvariante verletzt: {batch!r}")
            raise InvariantViolation(
                f"Bestandsinvariante für Charge {batch.id} verletzt",
                batch_id=batch.id,
                **batch.counters,
            )

    def _check_reserved(
        self, batch: StockBatch, quantity: int, line: Optional[OrderLine], action: str
    ) -> None:
        if quantity > batch._reserved_quantity:
            logger.error(
                f"{action} über Reservierung hinaus: Charge {batch.id} "
                f"reserviert {batch._reserved_quantity}, angefragt {quantity}"
            )
            raise InvariantViolation(
                f"{action} von {quantity} übersteigt Reservierung der Charge "
                f"({batch._reserved_quantity})",
                batch_id=batch.id,
                reserved=batch._reserved_quantity,
                requested=quantity,
            )
        if line is not None and quantity > line._reserved_quantity:
            logger.error(
                f"{action} über Positionsreservierung hinaus: Position {line.id} "
                f"hält {line._reserved_quantity}, angefragt {quantity}"
            )
            raise InvariantViolation(
                f"{action} von {quantity} übersteigt Reservierung der Position "
                f"({line._reserved_quantity})",
                batch_id=batch.id,
                order_line_id=line.id,
                reserved=line._reserved_quantity,
                requested=quantity,
            )

    def _book(
        self,
        batch: StockBatch,
        movement_type: MovementType,
        quantity: int,
        before: dict,
        line: Optional[OrderLine],
        reason: Optional[str],
    ) -> StockMovement:
        """Prüft die Invariante und schreibt die Bewegung ins Journal"""
        self.check_invariants(batch)

        movement = StockMovement(
            stock_batch_id=batch.id,
            movement_type=movement_type,
            quantity=quantity,
            quantity_before=before["quantity"],
            quantity_after=batch._quantity,
            available_before=before["available_quantity"],
            available_after=batch._available_quantity,
            reserved_before=before["reserved_quantity"],
            reserved_after=batch._reserved_quantity,
            order_line_id=line.id if line is not None else None,
            reason=reason,
            created_by=self.actor,
        )
        self.db.add(movement)
        self.db.flush()

        logger.info(
            f"{movement_type.value} {quantity}x {batch.species_name} (Charge {batch.id}): "
            f"verfügbar {before['available_quantity']} -> {batch._available_quantity}, "
            f"reserviert {before['reserved_quantity']} -> {batch._reserved_quantity}"
        )
        return movement
