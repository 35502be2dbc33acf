"""
Pydantic Schemas für Mutterpflanzen
"""
from datetime import date, datetime
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

from nursery.models.enums import MotherPlantSource, MotherPlantStatus


class MotherPlantCreate(BaseModel):
    """Vorschlag einer Mutterpflanze"""
    species_id: str = Field(..., min_length=1, max_length=100)
    species_name: str = Field(..., min_length=1, max_length=200)
    variety_id: str = ""
    variety_name: str = ""
    place_id: str = ""
    place_name: str = ""
    place_address: str = ""
    planting_date: date
    quantity: int = Field(default=1, ge=0)
    source: MotherPlantSource = MotherPlantSource.MEMBER_PROPOSAL
    project_id: str = ""
    project_name: str = ""
    member_id: str = ""
    member_name: str = ""
    notes: str = ""
    last_harvest_date: Optional[date] = None


class MotherPlantValidate(BaseModel):
    validated_by: Optional[str] = None


class MotherPlantReject(BaseModel):
    validated_by: Optional[str] = None
    notes: Optional[str] = Field(None, description="Ablehnungsgrund")


class MotherPlantResponse(MotherPlantCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: MotherPlantStatus
    validated_by: str
    validated_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class MotherPlantListResponse(BaseModel):
    items: list[MotherPlantResponse]
    total: int
