"""
Mutterpflanzen-Service - Vorschläge von Mitgliedern und Design-Studio prüfen
"""
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from nursery.config import get_settings
from nursery.core.exceptions import InvalidTransition, NotFound
from nursery.models.enums import MotherPlantStatus, MotherPlantSource
from nursery.models.mother_plant import MotherPlant

logger = logging.getLogger(__name__)


class ContributionService:
    """
    Service für Mutterpflanzen.

    pending -> validated | rejected. Beide Entscheidungen sind final.
    Keine Auswirkung auf Chargen oder Bestellungen.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, mother_plant_id: UUID) -> MotherPlant:
        mother_plant = self.db.get(MotherPlant, mother_plant_id)
        if not mother_plant:
            raise NotFound("Mutterpflanze nicht gefunden", mother_plant_id=mother_plant_id)
        return mother_plant

    def list(
        self,
        status: Optional[MotherPlantStatus] = None,
        source: Optional[MotherPlantSource] = None,
        species_id: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[MotherPlant], int]:
        query = select(MotherPlant)
        if status:
            query = query.where(MotherPlant.status == status)
        if source:
            query = query.where(MotherPlant.source == source)
        if species_id:
            query = query.where(MotherPlant.species_id == species_id)

        total = self.db.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar() or 0

        items = self.db.execute(
            query.order_by(MotherPlant.created_at.desc()).offset(offset).limit(limit)
        ).scalars().all()
        return list(items), total

    def submit(self, **fields) -> MotherPlant:
        """Neuer Vorschlag, immer im Status pending"""
        quantity = fields.get("quantity", 0)
        if quantity is not None and quantity < 0:
            raise ValueError("Anzahl darf nicht negativ sein")

        fields.pop("status", None)
        mother_plant = MotherPlant(status=MotherPlantStatus.PENDING, **fields)
        self.db.add(mother_plant)
        self.db.flush()

        logger.info(
            f"Mutterpflanze vorgeschlagen: {mother_plant.species_name} "
            f"({mother_plant.source.value})"
        )
        return mother_plant

    def validate(self, mother_plant_id: UUID, validated_by: Optional[str] = None) -> MotherPlant:
        """pending -> validated"""
        mother_plant = self._decide(mother_plant_id, MotherPlantStatus.VALIDATED, validated_by)
        self.db.flush()
        return mother_plant

    def reject(
        self,
        mother_plant_id: UUID,
        validated_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> MotherPlant:
        """pending -> rejected; ein angegebener Grund ersetzt die Notizen"""
        mother_plant = self._decide(mother_plant_id, MotherPlantStatus.REJECTED, validated_by)
        if notes:
            mother_plant.notes = notes
        self.db.flush()
        return mother_plant

    def _decide(
        self, mother_plant_id: UUID, target: MotherPlantStatus, validated_by: Optional[str]
    ) -> MotherPlant:
        mother_plant = self.get(mother_plant_id)
        if mother_plant.status != MotherPlantStatus.PENDING:
            raise InvalidTransition(
                f"Mutterpflanze ist bereits {mother_plant.status.value}",
                mother_plant_id=mother_plant.id,
                current=mother_plant.status.value,
                target=target.value,
            )

        mother_plant.status = target
        mother_plant.validated_by = validated_by or get_settings().default_validator_name
        mother_plant.validated_at = datetime.utcnow()

        logger.info(
            f"Mutterpflanze {mother_plant.species_name} {target.value} "
            f"von {mother_plant.validated_by}"
        )
        return mother_plant
