"""
API Endpoints für Mutterpflanzen
"""
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, status

from nursery.api.deps import DBSession, Pagination
from nursery.models.enums import MotherPlantStatus, MotherPlantSource
from nursery.schemas.mother_plant import (
    MotherPlantCreate, MotherPlantValidate, MotherPlantReject,
    MotherPlantResponse, MotherPlantListResponse,
)
from nursery.services.contribution_service import ContributionService

router = APIRouter()


@router.get("/mother-plants", response_model=MotherPlantListResponse)
async def list_mother_plants(
    db: DBSession,
    pagination: Pagination,
    status: Optional[MotherPlantStatus] = None,
    source: Optional[MotherPlantSource] = None,
    species_id: Optional[str] = None,
):
    """
    Mutterpflanzen abrufen.

    Filter:
    - **status**: pending, validated, rejected
    - **source**: design-studio, member-proposal
    """
    items, total = ContributionService(db).list(
        status=status,
        source=source,
        species_id=species_id,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return MotherPlantListResponse(
        items=[MotherPlantResponse.model_validate(m) for m in items],
        total=total
    )


@router.get("/mother-plants/{mother_plant_id}", response_model=MotherPlantResponse)
async def get_mother_plant(mother_plant_id: UUID, db: DBSession):
    """Einzelne Mutterpflanze abrufen."""
    return MotherPlantResponse.model_validate(ContributionService(db).get(mother_plant_id))


@router.post("/mother-plants", response_model=MotherPlantResponse, status_code=status.HTTP_201_CREATED)
async def submit_mother_plant(data: MotherPlantCreate, db: DBSession):
    """Mutterpflanze vorschlagen (Status pending)."""
    mother_plant = ContributionService(db).submit(**data.model_dump())
    db.commit()
    db.refresh(mother_plant)
    return MotherPlantResponse.model_validate(mother_plant)


@router.patch("/mother-plants/{mother_plant_id}/validate", response_model=MotherPlantResponse)
async def validate_mother_plant(
    mother_plant_id: UUID, db: DBSession, data: Optional[MotherPlantValidate] = None
):
    """pending -> validated."""
    validated_by = data.validated_by if data else None
    mother_plant = ContributionService(db).validate(mother_plant_id, validated_by=validated_by)
    db.commit()
    db.refresh(mother_plant)
    return MotherPlantResponse.model_validate(mother_plant)


@router.patch("/mother-plants/{mother_plant_id}/reject", response_model=MotherPlantResponse)
async def reject_mother_plant(
    mother_plant_id: UUID, db: DBSession, data: Optional[MotherPlantReject] = None
):
    """pending -> rejected; der Grund wird in den Notizen gespeichert."""
    mother_plant = ContributionService(db).reject(
        mother_plant_id,
        validated_by=data.validated_by if data else None,
        notes=data.notes if data else None,
    )
    db.commit()
    db.refresh(mother_plant)
    return MotherPlantResponse.model_validate(mother_plant)
