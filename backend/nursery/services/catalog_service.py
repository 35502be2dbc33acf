"""
Katalog-Service - netzwerkweite, nur lesende Sicht auf Chargen

Schreibt niemals. Bestandszähler werden nur gelesen, nicht gesperrt.
"""
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.orm import Session, joinedload

from nursery.config import get_settings
from nursery.models.enums import MotherPlantStatus, OrderStatus
from nursery.models.mother_plant import MotherPlant
from nursery.models.nursery import Nursery
from nursery.models.order import Order
from nursery.models.stock import StockBatch
from nursery.models.transfer import Transfer
from nursery.services.transfer_service import ACTIVE_STATUSES

logger = logging.getLogger(__name__)


class CatalogService:
    """Katalog und Dashboard (Lesezugriffe)"""

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def _visible_batches(self):
        """Chargen, die weder selbst noch über ihre Pépinière gelöscht sind"""
        return (
            select(StockBatch)
            .join(Nursery, StockBatch.nursery_id == Nursery.id)
            .where(StockBatch.deleted_at.is_(None), Nursery.deleted_at.is_(None))
        )

    # ========================================
    # KATALOG
    # ========================================

    def catalog(
        self,
        nursery_id: Optional[UUID] = None,
        species_id: Optional[str] = None,
        species_query: Optional[str] = None,
        available_only: bool = False,
    ) -> list[dict]:
        """
        Katalogeinträge je Charge.

        Bei manuell geführten Pépinières werden keine exakten Mengen
        ausgegeben, nur das Verfügbarkeits-Flag.
        """
        query = self._visible_batches().options(
            joinedload(StockBatch.nursery), joinedload(StockBatch.container)
        )
        if nursery_id:
            query = query.where(StockBatch.nursery_id == nursery_id)
        if species_id:
            query = query.where(StockBatch.species_id == species_id)
        if species_query:
            query = query.where(
                func.lower(StockBatch.species_name).like(f"%{species_query.lower()}%")
            )
        if available_only:
            query = query.where(StockBatch.available_quantity > 0)

        batches = self.db.execute(
            query.order_by(StockBatch.species_name, Nursery.name)
        ).scalars().all()

        return [self._catalog_entry(batch) for batch in batches]

    @staticmethod
    def _catalog_entry(batch: StockBatch) -> dict:
        nursery = batch.nursery
        exact = nursery.tracks_quantities
        return {
            "stock_batch_id": batch.id,
            "species_id": batch.species_id,
            "species_name": batch.species_name,
            "variety_name": batch.variety_name or None,
            "nursery_id": nursery.id,
            "nursery_name": nursery.name,
            "nursery_integration": nursery.integration,
            "container_name": batch.container.short_name,
            "growth_stage": batch.growth_stage,
            "price_euros": batch.price_euros,
            "accepts_semos": batch.accepts_semos,
            "price_semos": batch.price_semos,
            "available": batch.available_quantity > 0,
            "available_quantity": batch.available_quantity if exact else None,
            "reserved_quantity": batch.reserved_quantity if exact else None,
        }

    # ========================================
    # DASHBOARD
    # ========================================

    def dashboard(self) -> dict:
        """Kennzahlen, Warnungen und die letzten Bestellungen"""
        threshold = self.settings.low_stock_threshold
        low_stock_query = self._visible_batches().where(
            StockBatch.available_quantity <= threshold
        )

        low_stock_count = self._count(low_stock_query)
        pending_orders = self._count(select(Order).where(Order.status == OrderStatus.NEW))
        pending_transfers = self._count(
            select(Transfer).where(
                Transfer.status.in_(ACTIVE_STATUSES)
            )
        )
        pending_validations = self._count(
            select(MotherPlant).where(MotherPlant.status == MotherPlantStatus.PENDING)
        )

        recent_orders = self.db.execute(
            select(Order)
            .options(joinedload(Order.lines), joinedload(Order.pickup_nursery))
            .order_by(Order.created_at.desc())
            .limit(6)
        ).unique().scalars().all()

        return {
            "low_stock_count": low_stock_count,
            "pending_orders_count": pending_orders,
            "pending_transfers_count": pending_transfers,
            "pending_validations_count": pending_validations,
            "alerts": self._alerts(
                low_stock_query, pending_orders, pending_transfers, pending_validations
            ),
            "recent_orders": list(recent_orders),
        }

    def _alerts(
        self,
        low_stock_query,
        pending_orders: int,
        pending_transfers: int,
        pending_validations: int,
    ) -> list[dict]:
        now = datetime.utcnow()
        alerts = []

        low_batches = self.db.execute(
            low_stock_query.order_by(StockBatch.available_quantity).limit(5)
        ).scalars().all()
        for batch in low_batches:
            high = batch.available_quantity <= self.settings.low_stock_high_priority
            alerts.append({
                "id": f"low-{batch.id}",
                "type": "low-stock",
                "title": f"Niedriger Bestand: {batch.species_name}",
                "description": f"Verfügbar: {batch.available_quantity}",
                "priority": "high" if high else "medium",
                "related_id": str(batch.id),
                "created_at": now,
            })

        if pending_orders:
            first = self.db.execute(
                select(Order.id).where(Order.status == OrderStatus.NEW)
                .order_by(Order.created_at).limit(1)
            ).scalar_one()
            alerts.append({
                "id": "pending-orders",
                "type": "pending-order",
                "title": f"{pending_orders} neue Bestellungen",
                "description": "Bestellungen zu bearbeiten",
                "priority": "high",
                "related_id": str(first),
                "created_at": now,
            })

        if pending_transfers:
            first = self.db.execute(
                select(Transfer.id)
                .where(Transfer.status.in_(ACTIVE_STATUSES))
                .order_by(Transfer.scheduled_date).limit(1)
            ).scalar_one()
            alerts.append({
                "id": "pending-transfers",
                "type": "pending-transfer",
                "title": "Transfer zu organisieren",
                "description": f"{pending_transfers} Transfers offen",
                "priority": "medium",
                "related_id": str(first),
                "created_at": now,
            })

        if pending_validations:
            first = self.db.execute(
                select(MotherPlant.id).where(MotherPlant.status == MotherPlantStatus.PENDING)
                .order_by(MotherPlant.created_at).limit(1)
            ).scalar_one()
            alerts.append({
                "id": "pending-validations",
                "type": "pending-validation",
                "title": f"{pending_validations} Mutterpflanzen warten auf Prüfung",
                "description": "Vorschläge zu validieren",
                "priority": "low",
                "related_id": str(first),
                "created_at": now,
            })

        return alerts

    def _count(self, query) -> int:
        return self.db.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar() or 0
