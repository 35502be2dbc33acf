"""
API Endpoints für Transfers
"""
from datetime import date
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, status

from nursery.api.deps import DBSession, Pagination
from nursery.models.enums import TransferStatus
from nursery.schemas.transfer import TransferCreate, TransferResponse, TransferListResponse
from nursery.services.transfer_service import TransferService

router = APIRouter()


def _transfer_response(db, transfer_id: UUID) -> TransferResponse:
    return TransferResponse.model_validate(TransferService(db).get_transfer(transfer_id))


@router.get("/transfers", response_model=TransferListResponse)
async def list_transfers(
    db: DBSession,
    pagination: Pagination,
    status: Optional[TransferStatus] = None,
    order_id: Optional[UUID] = None,
    scheduled_from: Optional[date] = None,
    scheduled_to: Optional[date] = None,
):
    """
    Transfers abrufen, nach geplantem Datum sortiert.

    Filter:
    - **status**: planned, in-progress, completed, cancelled
    - **order_id**: Transfers einer Bestellung
    - **scheduled_from** / **scheduled_to**: Zeitraum
    """
    transfers, total = TransferService(db).list_transfers(
        status=status,
        order_id=order_id,
        scheduled_from=scheduled_from,
        scheduled_to=scheduled_to,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return TransferListResponse(
        items=[TransferResponse.model_validate(t) for t in transfers],
        total=total
    )


@router.get("/transfers/{transfer_id}", response_model=TransferResponse)
async def get_transfer(transfer_id: UUID, db: DBSession):
    """Einzelnen Transfer abrufen."""
    return _transfer_response(db, transfer_id)


@router.post("/transfers", response_model=TransferResponse, status_code=status.HTTP_201_CREATED)
async def create_transfer(transfer_data: TransferCreate, db: DBSession):
    """Transfer für eine Bestellung planen (höchstens ein aktiver je Bestellung)."""
    data = transfer_data.model_dump()
    transfer = TransferService(db).create_transfer(**data)
    db.commit()
    return _transfer_response(db, transfer.id)


@router.patch("/transfers/{transfer_id}/start", response_model=TransferResponse)
async def start_transfer(transfer_id: UUID, db: DBSession):
    """planned -> in-progress."""
    TransferService(db).start_transfer(transfer_id)
    db.commit()
    return _transfer_response(db, transfer_id)


@router.patch("/transfers/{transfer_id}/complete", response_model=TransferResponse)
async def complete_transfer(transfer_id: UUID, db: DBSession):
    """in-progress -> completed."""
    TransferService(db).complete_transfer(transfer_id)
    db.commit()
    return _transfer_response(db, transfer_id)


@router.patch("/transfers/{transfer_id}/cancel", response_model=TransferResponse)
async def cancel_transfer(transfer_id: UUID, db: DBSession):
    """planned | in-progress -> cancelled."""
    TransferService(db).cancel_transfer(transfer_id)
    db.commit()
    return _transfer_response(db, transfer_id)
