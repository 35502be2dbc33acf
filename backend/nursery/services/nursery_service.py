"""
Stammdaten-Service: Pépinières, Container und Chargen-Stammdaten
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.orm import Session, joinedload

from nursery.core.exceptions import NotFound, ResourceInUse
from nursery.models.enums import GrowthStage, IntegrationMode, NurseryType
from nursery.models.nursery import Nursery, Container
from nursery.models.stock import StockBatch, StockMovement
from nursery.services.stock_ledger import StockLedger

logger = logging.getLogger(__name__)

# Felder einer Charge, die ohne Ledger geändert werden dürfen
BATCH_DESCRIPTIVE_FIELDS = {
    "species_id", "species_name", "variety_id", "variety_name", "container_id",
    "growth_stage", "origin", "sowing_date", "price_euros", "accepts_semos",
    "price_semos", "notes",
}

# Davon die Felder, die geleert werden dürfen
BATCH_NULLABLE_FIELDS = {"sowing_date", "price_semos"}


class NurseryService:
    """Service für Stammdaten"""

    def __init__(self, db: Session, user_name: Optional[str] = None):
        self.db = db
        self.ledger = StockLedger(db, actor=user_name)

    # ==================== PÉPINIÈRES ====================

    def get_nursery(self, nursery_id: UUID) -> Nursery:
        nursery = self.db.get(Nursery, nursery_id)
        if not nursery or nursery.is_deleted:
            raise NotFound("Pépinière nicht gefunden", nursery_id=nursery_id)
        return nursery

    def list_nurseries(
        self,
        nursery_type: Optional[NurseryType] = None,
        integration: Optional[IntegrationMode] = None,
        pickup_only: bool = False,
    ) -> list[Nursery]:
        query = select(Nursery).where(Nursery.deleted_at.is_(None))
        if nursery_type:
            query = query.where(Nursery.nursery_type == nursery_type)
        if integration:
            query = query.where(Nursery.integration == integration)
        if pickup_only:
            query = query.where(Nursery.is_pickup_point == True)
        return list(self.db.execute(query.order_by(Nursery.name)).scalars().all())

    def create_nursery(self, **fields) -> Nursery:
        nursery = Nursery(**fields)
        self.db.add(nursery)
        self.db.flush()
        logger.info(f"Pépinière angelegt: {nursery.name} ({nursery.integration.value})")
        return nursery

    def update_nursery(self, nursery_id: UUID, **fields) -> Nursery:
        nursery = self.get_nursery(nursery_id)
        for field, value in fields.items():
            setattr(nursery, field, value)
        self.db.flush()
        return nursery

    def delete_nursery(self, nursery_id: UUID) -> Nursery:
        """Soft-Delete: Chargen und Bestellungen behalten ihre Referenz"""
        nursery = self.get_nursery(nursery_id)
        nursery.soft_delete()
        self.db.flush()
        logger.info(f"Pépinière gelöscht (soft): {nursery.name}")
        return nursery

    # ==================== CONTAINER ====================

    def get_container(self, container_id: UUID) -> Container:
        container = self.db.get(Container, container_id)
        if not container:
            raise NotFound("Container nicht gefunden", container_id=container_id)
        return container

    def list_containers(self) -> list[Container]:
        return list(self.db.execute(
            select(Container).order_by(Container.sort_order, Container.name)
        ).scalars().all())

    def create_container(self, **fields) -> Container:
        container = Container(**fields)
        self.db.add(container)
        self.db.flush()
        return container

    def update_container(self, container_id: UUID, **fields) -> Container:
        container = self.get_container(container_id)
        for field, value in fields.items():
            setattr(container, field, value)
        self.db.flush()
        return container

    def delete_container(self, container_id: UUID) -> None:
        """Löscht einen Container, solange keine Charge darauf verweist"""
        container = self.get_container(container_id)
        in_use = self.db.execute(
            select(func.count(StockBatch.id)).where(StockBatch.container_id == container.id)
        ).scalar() or 0
        if in_use:
            raise ResourceInUse(
                f"Container {container.short_name} wird von {in_use} Chargen verwendet",
                container_id=container.id,
                batch_count=in_use,
            )
        self.db.delete(container)
        self.db.flush()

    # ==================== CHARGEN ====================

    def get_batch(self, batch_id: UUID) -> StockBatch:
        batch = self.db.execute(
            select(StockBatch)
            .options(joinedload(StockBatch.nursery), joinedload(StockBatch.container))
            .where(StockBatch.id == batch_id)
        ).scalar_one_or_none()
        if not batch or batch.is_deleted:
            raise NotFound("Charge nicht gefunden", batch_id=batch_id)
        return batch

    def list_batches(
        self,
        nursery_id: Optional[UUID] = None,
        species_id: Optional[str] = None,
        container_id: Optional[UUID] = None,
        growth_stage: Optional[GrowthStage] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[StockBatch], int]:
        query = (
            select(StockBatch)
            .join(Nursery, StockBatch.nursery_id == Nursery.id)
            .where(StockBatch.deleted_at.is_(None), Nursery.deleted_at.is_(None))
        )
        if nursery_id:
            query = query.where(StockBatch.nursery_id == nursery_id)
        if species_id:
            query = query.where(StockBatch.species_id == species_id)
        if container_id:
            query = query.where(StockBatch.container_id == container_id)
        if growth_stage:
            query = query.where(StockBatch.growth_stage == growth_stage)

        total = self.db.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar() or 0

        batches = self.db.execute(
            query.options(joinedload(StockBatch.nursery), joinedload(StockBatch.container))
            .order_by(StockBatch.updated_at.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()
        return list(batches), total

    def create_batch(self, nursery_id: UUID, container_id: UUID, quantity: int = 0, **fields) -> StockBatch:
        """Neue Charge; die Anfangsmenge wird über den Ledger gebucht"""
        nursery = self.get_nursery(nursery_id)
        container = self.get_container(container_id)
        if fields.get("accepts_semos") and fields.get("price_semos") is None:
            raise ValueError("Semos-Preis ist erforderlich, wenn Semos akzeptiert werden")

        batch = self.ledger.receive_batch(
            quantity=quantity,
            nursery_id=nursery.id,
            container_id=container.id,
            **fields,
        )
        logger.info(
            f"Charge angelegt: {batch.species_name} bei {nursery.name}, {quantity} Stück"
        )
        return batch

    def update_batch(
        self,
        batch_id: UUID,
        quantity_delta: int = 0,
        reason: Optional[str] = None,
        **fields,
    ) -> StockBatch:
        """
        Ändert beschreibende Felder; Mengenkorrekturen laufen über den Ledger
        (positiv: add_stock, negativ: shrink).
        """
        batch = self.get_batch(batch_id)

        unknown = set(fields) - BATCH_DESCRIPTIVE_FIELDS
        if unknown:
            raise ValueError(f"Felder nicht änderbar: {', '.join(sorted(unknown))}")
        nulled = {f for f, v in fields.items() if v is None} - BATCH_NULLABLE_FIELDS
        if nulled:
            raise ValueError(f"Felder dürfen nicht leer sein: {', '.join(sorted(nulled))}")
        if "container_id" in fields:
            self.get_container(fields["container_id"])

        for field, value in fields.items():
            setattr(batch, field, value)
        if batch.accepts_semos and batch.price_semos is None:
            raise ValueError("Semos-Preis ist erforderlich, wenn Semos akzeptiert werden")

        if quantity_delta > 0:
            self.ledger.add_stock(batch, quantity_delta, reason=reason or "Korrektur")
        elif quantity_delta < 0:
            self.ledger.shrink(batch, -quantity_delta, reason=reason or "Korrektur")

        self.db.flush()
        return self.get_batch(batch_id)

    def delete_batch(self, batch_id: UUID) -> None:
        """Soft-Delete; Chargen mit offenen Reservierungen bleiben erhalten"""
        batch = self.ledger.lock(self.get_batch(batch_id))
        if batch.reserved_quantity > 0:
            raise ResourceInUse(
                f"Charge {batch.species_name} hat {batch.reserved_quantity} reservierte Pflanzen",
                batch_id=batch.id,
                reserved=batch.reserved_quantity,
            )
        batch.soft_delete()
        self.db.flush()

    def list_movements(self, batch_id: UUID) -> list[StockMovement]:
        batch = self.get_batch(batch_id)
        return list(self.db.execute(
            select(StockMovement)
            .where(StockMovement.stock_batch_id == batch.id)
            .order_by(StockMovement.created_at)
        ).scalars().all())
