"""
Pydantic Schemas für Pépinières und Container
"""
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

from nursery.models.enums import NurseryType, IntegrationMode


# ==================== PÉPINIÈRE ====================

class NurseryBase(BaseModel):
    """Basis-Schema für Pépinière"""
    name: str = Field(..., min_length=1, max_length=200)
    nursery_type: NurseryType = NurseryType.SEMISTO
    integration: IntegrationMode = IntegrationMode.PLATFORM
    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""
    latitude: Decimal = Decimal("0")
    longitude: Decimal = Decimal("0")
    contact_name: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    website: str = ""
    description: str = ""
    specialties: list[str] = Field(default_factory=list)
    is_pickup_point: bool = True


class NurseryCreate(NurseryBase):
    """Schema zum Anlegen einer Pépinière"""
    pass


class NurseryUpdate(BaseModel):
    """Schema zum Aktualisieren einer Pépinière"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    nursery_type: Optional[NurseryType] = None
    integration: Optional[IntegrationMode] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    specialties: Optional[list[str]] = None
    is_pickup_point: Optional[bool] = None


class NurseryResponse(NurseryBase):
    """Schema für Pépinière-Antwort"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


# ==================== CONTAINER ====================

class ContainerBase(BaseModel):
    """Basis-Schema für Container"""
    name: str = Field(..., min_length=1, max_length=100)
    short_name: str = Field(..., min_length=1, max_length=20)
    volume_liters: Optional[Decimal] = Field(None, ge=0)
    description: str = ""
    sort_order: int = 0


class ContainerCreate(ContainerBase):
    pass


class ContainerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    short_name: Optional[str] = Field(None, min_length=1, max_length=20)
    volume_liters: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    sort_order: Optional[int] = None


class ContainerResponse(ContainerBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime
