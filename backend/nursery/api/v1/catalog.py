"""
API Endpoints für Katalog und Dashboard (nur lesend)
"""
from typing import Optional
from uuid import UUID
from fastapi import APIRouter

from nursery.api.deps import DBSession
from nursery.schemas.catalog import CatalogEntry, CatalogResponse, DashboardResponse
from nursery.schemas.order import OrderResponse
from nursery.services.catalog_service import CatalogService

router = APIRouter()


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog(
    db: DBSession,
    nursery_id: Optional[UUID] = None,
    species_id: Optional[str] = None,
    species_query: Optional[str] = None,
    available_only: bool = False,
):
    """
    Netzwerkweiter Katalog.

    - **species_query**: Teilstring im Artnamen (ohne Groß-/Kleinschreibung)
    - **available_only**: Nur Chargen mit verfügbarem Bestand

    Bei Partner-Pépinières mit manueller Integration wird keine exakte
    Menge ausgegeben, nur das Flag **available**.
    """
    entries = CatalogService(db).catalog(
        nursery_id=nursery_id,
        species_id=species_id,
        species_query=species_query,
        available_only=available_only,
    )
    return CatalogResponse(
        items=[CatalogEntry(**entry) for entry in entries],
        total=len(entries)
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(db: DBSession):
    """Kennzahlen und Warnungen für die Pépinière-Übersicht."""
    data = CatalogService(db).dashboard()
    data["recent_orders"] = [OrderResponse.model_validate(o) for o in data["recent_orders"]]
    return DashboardResponse(**data)
