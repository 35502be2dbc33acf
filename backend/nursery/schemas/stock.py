"""
Pydantic Schemas für Chargen und Bestandsbewegungen
"""
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional

from nursery.models.enums import GrowthStage, MovementType, IntegrationMode


class StockBatchBase(BaseModel):
    """Beschreibende Felder einer Charge"""
    species_id: str = Field(..., min_length=1, max_length=100)
    species_name: str = Field(..., min_length=1, max_length=200)
    variety_id: str = ""
    variety_name: str = ""
    growth_stage: GrowthStage = GrowthStage.YOUNG
    origin: str = ""
    sowing_date: Optional[date] = None
    price_euros: Decimal = Field(default=Decimal("0.00"), ge=0)
    accepts_semos: bool = False
    price_semos: Optional[Decimal] = Field(None, ge=0)
    notes: str = ""


class StockBatchCreate(StockBatchBase):
    """
    Schema zum Anlegen einer Charge.
    Die Anfangsmenge wird als Zugang gebucht (available = quantity).
    """
    nursery_id: UUID
    container_id: UUID
    quantity: int = Field(default=0, ge=0, description="Anfangsmenge")


class StockBatchUpdate(BaseModel):
    """
    Schema zum Aktualisieren einer Charge.

    Zähler sind nicht direkt änderbar; quantity_delta bucht einen Zugang
    (positiv) oder eine Abschreibung (negativ) über den Ledger.
    """
    species_id: Optional[str] = Field(None, min_length=1, max_length=100)
    species_name: Optional[str] = Field(None, min_length=1, max_length=200)
    variety_id: Optional[str] = None
    variety_name: Optional[str] = None
    container_id: Optional[UUID] = None
    growth_stage: Optional[GrowthStage] = None
    origin: Optional[str] = None
    sowing_date: Optional[date] = None
    price_euros: Optional[Decimal] = Field(None, ge=0)
    accepts_semos: Optional[bool] = None
    price_semos: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None

    quantity_delta: int = Field(default=0, description="Zugang (+) oder Abschreibung (-)")
    reason: Optional[str] = Field(None, description="Grund der Mengenkorrektur")

    @field_validator(
        "species_id", "species_name", "variety_id", "variety_name", "container_id",
        "growth_stage", "origin", "price_euros", "accepts_semos", "notes",
    )
    @classmethod
    def reject_null(cls, v, info):
        """Pflichtfelder dürfen weggelassen, aber nicht geleert werden"""
        if v is None:
            raise ValueError(f"{info.field_name} darf nicht null sein")
        return v


class StockBatchResponse(StockBatchBase):
    """Schema für Charge-Antwort"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    nursery_id: UUID
    container_id: UUID
    quantity: int
    available_quantity: int
    reserved_quantity: int
    created_at: datetime
    updated_at: datetime

    # Aufgelöste Namen
    nursery_name: Optional[str] = None
    nursery_integration: Optional[IntegrationMode] = None
    container_name: Optional[str] = None


class StockBatchListResponse(BaseModel):
    items: list[StockBatchResponse]
    total: int


class StockMovementResponse(BaseModel):
    """Eintrag im Bestandsjournal"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    stock_batch_id: UUID
    movement_type: MovementType
    quantity: int
    quantity_before: int
    quantity_after: int
    available_before: int
    available_after: int
    reserved_before: int
    reserved_after: int
    order_line_id: Optional[UUID]
    reason: Optional[str]
    created_by: Optional[str]
    created_at: datetime
