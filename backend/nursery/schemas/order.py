"""
Pydantic Schemas für Bestellungen (Header-Line Architektur)
"""
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

from nursery.models.enums import OrderStatus, PriceLevel


# ==================== ORDER LINE SCHEMAS ====================

class OrderLineCreate(BaseModel):
    """Position beim Checkout - Preise kommen immer aus der Charge"""
    stock_batch_id: UUID = Field(..., description="Charge")
    quantity: int = Field(..., gt=0, description="Anzahl Pflanzen")
    pay_in_semos: bool = Field(default=False, description="In Semos bezahlen")


class OrderLineResponse(BaseModel):
    """Schema für Bestellposition-Antwort"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    position: int
    stock_batch_id: UUID
    nursery_id: UUID

    # Snapshot
    nursery_name: str
    species_name: str
    variety_name: str
    container_name: str

    # Mengen & Preise
    quantity: int
    reserved_quantity: int
    unit_price_euros: Decimal
    unit_price_semos: Optional[Decimal]
    pay_in_semos: bool
    total_euros: Decimal
    total_semos: Decimal


# ==================== ORDER HEADER SCHEMAS ====================

class OrderCreate(BaseModel):
    """Schema zum Erstellen einer Bestellung (Checkout)"""
    pickup_nursery_id: UUID = Field(..., description="Abhol-Pépinière")
    customer_id: str = Field(default="", description="Externe Kunden-Referenz")
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_email: str = ""
    customer_phone: str = ""
    is_member: bool = False
    price_level: PriceLevel = PriceLevel.STANDARD
    notes: str = ""
    lines: list[OrderLineCreate] = Field(..., min_length=1, description="Bestellpositionen")
    process_immediately: bool = Field(
        default=False, description="Direkt reservieren (new -> processing)"
    )


class OrderCancel(BaseModel):
    """Optionaler Stornogrund"""
    reason: Optional[str] = None


class OrderResponse(BaseModel):
    """Schema für Bestellungs-Antwort"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_number: str
    status: OrderStatus

    customer_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    is_member: bool
    price_level: PriceLevel

    pickup_nursery_id: UUID
    pickup_nursery_name: Optional[str] = None

    subtotal_euros: Decimal
    subtotal_semos: Decimal
    total_euros: Decimal
    total_semos: Decimal
    notes: str

    prepared_at: Optional[datetime]
    ready_at: Optional[datetime]
    picked_up_at: Optional[datetime]
    cancelled_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    lines: list[OrderLineResponse] = []


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int


class OrderAuditLogResponse(BaseModel):
    """Audit-Log Eintrag"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_id: UUID
    action: str
    old_values: Optional[dict]
    new_values: Optional[dict]
    user_name: Optional[str]
    reason: Optional[str]
    created_at: datetime
