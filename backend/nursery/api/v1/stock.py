"""
API Endpoints für Chargen (Bestand)

Zähler werden nie direkt gesetzt; Anlage und Mengenkorrekturen
laufen über den StockLedger.
"""
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, status
from fastapi.responses import Response

from nursery.api.deps import DBSession, Pagination, Actor
from nursery.models.enums import GrowthStage
from nursery.schemas.stock import (
    StockBatchCreate, StockBatchUpdate, StockBatchResponse, StockBatchListResponse,
    StockMovementResponse,
)
from nursery.services.label_service import LabelService
from nursery.services.nursery_service import NurseryService

router = APIRouter()


@router.get("/stock-batches", response_model=StockBatchListResponse)
async def list_stock_batches(
    db: DBSession,
    pagination: Pagination,
    nursery_id: Optional[UUID] = None,
    species_id: Optional[str] = None,
    container_id: Optional[UUID] = None,
    growth_stage: Optional[GrowthStage] = None,
):
    """
    Chargen abrufen.

    Filter:
    - **nursery_id**: Chargen einer Pépinière
    - **species_id**: Chargen einer Art
    - **container_id**: Chargen eines Containers
    - **growth_stage**: seed, seedling, young, established, mature
    """
    batches, total = NurseryService(db).list_batches(
        nursery_id=nursery_id,
        species_id=species_id,
        container_id=container_id,
        growth_stage=growth_stage,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return StockBatchListResponse(
        items=[StockBatchResponse.model_validate(b) for b in batches],
        total=total
    )


@router.get("/stock-batches/{batch_id}", response_model=StockBatchResponse)
async def get_stock_batch(batch_id: UUID, db: DBSession):
    """Einzelne Charge abrufen."""
    return StockBatchResponse.model_validate(NurseryService(db).get_batch(batch_id))


@router.post("/stock-batches", response_model=StockBatchResponse, status_code=status.HTTP_201_CREATED)
async def create_stock_batch(batch_data: StockBatchCreate, db: DBSession, actor: Actor):
    """
    Neue Charge anlegen.
    Die Anfangsmenge wird als Zugang gebucht (verfügbar = Menge, reserviert = 0).
    """
    batch = NurseryService(db, user_name=actor).create_batch(**batch_data.model_dump())
    db.commit()
    db.refresh(batch)
    return StockBatchResponse.model_validate(batch)


@router.patch("/stock-batches/{batch_id}", response_model=StockBatchResponse)
async def update_stock_batch(
    batch_id: UUID, batch_data: StockBatchUpdate, db: DBSession, actor: Actor
):
    """
    Charge aktualisieren.

    - Beschreibende Felder werden direkt übernommen
    - **quantity_delta** > 0 bucht einen Zugang, < 0 eine Abschreibung
    """
    data = batch_data.model_dump(exclude_unset=True)
    quantity_delta = data.pop("quantity_delta", 0)
    reason = data.pop("reason", None)

    batch = NurseryService(db, user_name=actor).update_batch(
        batch_id, quantity_delta=quantity_delta, reason=reason, **data
    )
    db.commit()
    db.refresh(batch)
    return StockBatchResponse.model_validate(batch)


@router.delete("/stock-batches/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stock_batch(batch_id: UUID, db: DBSession):
    """Charge löschen (Soft-Delete, nicht bei offenen Reservierungen)."""
    NurseryService(db).delete_batch(batch_id)
    db.commit()
    return None


@router.get("/stock-batches/{batch_id}/movements", response_model=list[StockMovementResponse])
async def list_stock_movements(batch_id: UUID, db: DBSession):
    """Bestandsjournal einer Charge."""
    movements = NurseryService(db).list_movements(batch_id)
    return [StockMovementResponse.model_validate(m) for m in movements]


@router.get("/stock-batches/{batch_id}/label")
async def get_stock_batch_label(batch_id: UUID, db: DBSession):
    """Topf-Etikett als PDF."""
    batch = NurseryService(db).get_batch(batch_id)
    pdf = LabelService.generate_batch_label(batch)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="charge-{batch.id}.pdf"'},
    )
