"""
Celery Tasks für den Bestand
"""
import logging
from collections import defaultdict

from sqlalchemy import select, func
from sqlalchemy.orm import Session, joinedload

from nursery.celery_app import celery_app
from nursery.config import get_settings
from nursery.core.exceptions import InvariantViolation
from nursery.database import SessionLocal
from nursery.models.enums import MovementType
from nursery.models.nursery import Nursery
from nursery.models.stock import StockBatch, StockMovement
from nursery.services.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


def find_low_stock(db: Session) -> list[dict]:
    """Sichtbare Chargen mit verfügbarem Bestand unter der Warnschwelle"""
    settings = get_settings()
    batches = db.execute(
        select(StockBatch)
        .join(Nursery, StockBatch.nursery_id == Nursery.id)
        .options(joinedload(StockBatch.nursery))
        .where(
            StockBatch.deleted_at.is_(None),
            Nursery.deleted_at.is_(None),
            StockBatch.available_quantity <= settings.low_stock_threshold,
        )
        .order_by(StockBatch.available_quantity)
    ).scalars().all()

    alerts = []
    for batch in batches:
        alert = {
            "batch_id": str(batch.id),
            "species_name": batch.species_name,
            "nursery_name": batch.nursery.name,
            "available_quantity": batch.available_quantity,
            "reserved_quantity": batch.reserved_quantity,
            "priority": (
                "high" if batch.available_quantity <= settings.low_stock_high_priority
                else "medium"
            ),
        }
        alerts.append(alert)
        logger.warning(
            f"Niedriger Bestand: {alert['species_name']} bei {alert['nursery_name']} "
            f"(verfügbar {alert['available_quantity']})"
        )
    return alerts


def audit_batches(db: Session) -> list[dict]:
    """
    Prüft die Invariante jeder Charge und vergleicht die Zähler mit der
    Summe der Journalbuchungen. Korrigiert nichts, meldet nur.
    """
    sums: dict = defaultdict(lambda: defaultdict(int))
    rows = db.execute(
        select(
            StockMovement.stock_batch_id,
            StockMovement.movement_type,
            func.sum(StockMovement.quantity),
        ).group_by(StockMovement.stock_batch_id, StockMovement.movement_type)
    ).all()
    for batch_id, movement_type, total in rows:
        sums[batch_id][movement_type] = total or 0

    discrepancies = []
    for batch in db.execute(select(StockBatch)).scalars():
        try:
            StockLedger.check_invariants(batch)
        except InvariantViolation as e:
            discrepancies.append({**e.data, "batch_id": str(batch.id), "problem": "invariant"})
            continue

        booked = sums[batch.id]
        expected = {
            "quantity": booked[MovementType.RECEIPT] - booked[MovementType.SHRINK],
            "available_quantity": (
                booked[MovementType.RECEIPT] - booked[MovementType.SHRINK]
                - booked[MovementType.RESERVE] + booked[MovementType.RELEASE]
            ),
            "reserved_quantity": (
                booked[MovementType.RESERVE] - booked[MovementType.RELEASE]
                - booked[MovementType.CONSUME]
            ),
        }
        if expected != batch.counters:
            logger.error(
                f"Charge {batch.id} weicht vom Journal ab: "
                f"Zähler {batch.counters}, Journal {expected}"
            )
            discrepancies.append({
                "batch_id": str(batch.id),
                "problem": "journal",
                "counters": batch.counters,
                "journal": expected,
            })

    return discrepancies


@celery_app.task(name="nursery.tasks.stock_tasks.check_low_stock")
def check_low_stock():
    """
    Prüft Chargen auf niedrigen Bestand.
    Wird täglich um 7:00 ausgeführt.
    """
    logger.info("Prüfe Bestände")

    db = SessionLocal()
    try:
        alerts = find_low_stock(db)
        return {
            "status": "success",
            "alerts_count": len(alerts),
            "alerts": alerts,
        }
    except Exception as e:
        logger.error(f"Fehler bei Bestandsprüfung: {e}")
        raise
    finally:
        db.close()


@celery_app.task(name="nursery.tasks.stock_tasks.audit_stock_ledger")
def audit_stock_ledger():
    """
    Nächtlicher Abgleich der Bestandszähler mit dem Journal.
    """
    logger.info("Starte Bestandsabgleich")

    db = SessionLocal()
    try:
        discrepancies = audit_batches(db)
        if discrepancies:
            logger.error(f"Bestandsabgleich: {len(discrepancies)} Abweichungen gefunden")
        else:
            logger.info("Bestandsabgleich ohne Abweichungen")
        return {
            "status": "success" if not discrepancies else "discrepancies",
            "discrepancies_count": len(discrepancies),
            "discrepancies": discrepancies,
        }
    finally:
        db.close()
