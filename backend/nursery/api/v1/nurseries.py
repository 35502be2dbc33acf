"""
API Endpoints für Stammdaten (Pépinières, Container)
"""
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, status

from nursery.api.deps import DBSession
from nursery.models.enums import NurseryType, IntegrationMode
from nursery.schemas.nursery import (
    NurseryCreate, NurseryUpdate, NurseryResponse,
    ContainerCreate, ContainerUpdate, ContainerResponse,
)
from nursery.services.nursery_service import NurseryService

router = APIRouter()


# ============== Pépinière Endpoints ==============

@router.get("/nurseries", response_model=list[NurseryResponse])
async def list_nurseries(
    db: DBSession,
    nursery_type: Optional[NurseryType] = None,
    integration: Optional[IntegrationMode] = None,
    pickup_only: bool = False,
):
    """
    Pépinières abrufen (gelöschte werden nie angezeigt).

    Filter:
    - **nursery_type**: semisto, partner
    - **integration**: platform, manual
    - **pickup_only**: Nur Abholpunkte
    """
    nurseries = NurseryService(db).list_nurseries(nursery_type, integration, pickup_only)
    return [NurseryResponse.model_validate(n) for n in nurseries]


@router.get("/nurseries/{nursery_id}", response_model=NurseryResponse)
async def get_nursery(nursery_id: UUID, db: DBSession):
    """Einzelne Pépinière abrufen."""
    return NurseryResponse.model_validate(NurseryService(db).get_nursery(nursery_id))


@router.post("/nurseries", response_model=NurseryResponse, status_code=status.HTTP_201_CREATED)
async def create_nursery(nursery_data: NurseryCreate, db: DBSession):
    """Neue Pépinière anlegen."""
    nursery = NurseryService(db).create_nursery(**nursery_data.model_dump())
    db.commit()
    db.refresh(nursery)
    return NurseryResponse.model_validate(nursery)


@router.patch("/nurseries/{nursery_id}", response_model=NurseryResponse)
async def update_nursery(nursery_id: UUID, nursery_data: NurseryUpdate, db: DBSession):
    """Pépinière aktualisieren."""
    nursery = NurseryService(db).update_nursery(
        nursery_id, **nursery_data.model_dump(exclude_unset=True)
    )
    db.commit()
    db.refresh(nursery)
    return NurseryResponse.model_validate(nursery)


@router.delete("/nurseries/{nursery_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_nursery(nursery_id: UUID, db: DBSession):
    """
    Pépinière löschen (Soft-Delete).

    Chargen und Bestellungen behalten ihre Referenz, die Pépinière
    erscheint aber in keiner Liste und keinem Katalog mehr.
    """
    NurseryService(db).delete_nursery(nursery_id)
    db.commit()
    return None


# ============== Container Endpoints ==============

@router.get("/containers", response_model=list[ContainerResponse])
async def list_containers(db: DBSession):
    """Container nach Sortierung abrufen."""
    return [ContainerResponse.model_validate(c) for c in NurseryService(db).list_containers()]


@router.post("/containers", response_model=ContainerResponse, status_code=status.HTTP_201_CREATED)
async def create_container(container_data: ContainerCreate, db: DBSession):
    """Neuen Container anlegen."""
    container = NurseryService(db).create_container(**container_data.model_dump())
    db.commit()
    db.refresh(container)
    return ContainerResponse.model_validate(container)


@router.patch("/containers/{container_id}", response_model=ContainerResponse)
async def update_container(container_id: UUID, container_data: ContainerUpdate, db: DBSession):
    """Container aktualisieren."""
    container = NurseryService(db).update_container(
        container_id, **container_data.model_dump(exclude_unset=True)
    )
    db.commit()
    db.refresh(container)
    return ContainerResponse.model_validate(container)


@router.delete("/containers/{container_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_container(container_id: UUID, db: DBSession):
    """Container löschen (nur wenn keine Charge darauf verweist)."""
    NurseryService(db).delete_container(container_id)
    db.commit()
    return None
