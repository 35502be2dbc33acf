"""
Pydantic Schemas für Transfers
"""
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

from nursery.models.enums import StopRole, TransferStatus


class TransferStop(BaseModel):
    """Halt auf der Tour"""
    nursery_id: UUID
    role: StopRole
    nursery_name: Optional[str] = None


class TransferCreate(BaseModel):
    """Schema zum Planen eines Transfers"""
    order_id: UUID
    scheduled_date: date
    stops: list[TransferStop] = Field(..., min_length=1)
    total_distance_km: Decimal = Field(default=Decimal("0"), ge=0)
    estimated_duration: str = ""
    driver_id: str = ""
    driver_name: str = ""
    vehicle_info: str = ""
    notes: str = ""


class TransferResponse(BaseModel):
    """Schema für Transfer-Antwort"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_id: UUID
    order_number: Optional[str] = None
    status: TransferStatus
    stops: list[TransferStop]
    total_distance_km: Decimal
    estimated_duration: str
    driver_id: str
    driver_name: str
    vehicle_info: str
    scheduled_date: date
    notes: str
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class TransferListResponse(BaseModel):
    items: list[TransferResponse]
    total: int
