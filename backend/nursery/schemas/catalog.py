"""
Pydantic Schemas für Katalog und Dashboard
"""
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel
from typing import Optional

from nursery.models.enums import GrowthStage, IntegrationMode
from nursery.schemas.order import OrderResponse


class CatalogEntry(BaseModel):
    """
    Katalogeintrag je Charge.
    available_quantity/reserved_quantity sind bei manueller Integration null.
    """
    stock_batch_id: UUID
    species_id: str
    species_name: str
    variety_name: Optional[str] = None
    nursery_id: UUID
    nursery_name: str
    nursery_integration: IntegrationMode
    container_name: str
    growth_stage: GrowthStage
    price_euros: Decimal
    accepts_semos: bool
    price_semos: Optional[Decimal] = None
    available: bool
    available_quantity: Optional[int] = None
    reserved_quantity: Optional[int] = None


class CatalogResponse(BaseModel):
    items: list[CatalogEntry]
    total: int


class DashboardAlert(BaseModel):
    id: str
    type: str
    title: str
    description: str
    priority: str  # high, medium, low
    related_id: Optional[str] = None
    created_at: datetime


class DashboardResponse(BaseModel):
    low_stock_count: int
    pending_orders_count: int
    pending_transfers_count: int
    pending_validations_count: int
    alerts: list[DashboardAlert]
    recent_orders: list[OrderResponse]
