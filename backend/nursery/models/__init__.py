"""
SQLAlchemy Models für die Pépinière
"""
# Stammdaten
from nursery.models.nursery import Nursery, Container

# Bestand
from nursery.models.stock import StockBatch, StockMovement

# Bestellungen und Logistik
from nursery.models.order import Order, OrderLine, OrderAuditLog
from nursery.models.transfer import Transfer

# Mutterpflanzen
from nursery.models.mother_plant import MotherPlant

from nursery.models.enums import (
    NurseryType,
    IntegrationMode,
    GrowthStage,
    MovementType,
    OrderStatus,
    PriceLevel,
    TransferStatus,
    StopRole,
    MotherPlantStatus,
    MotherPlantSource,
)

__all__ = [
    # Stammdaten
    "Nursery",
    "Container",
    # Bestand
    "StockBatch",
    "StockMovement",
    # Bestellungen
    "Order",
    "OrderLine",
    "OrderAuditLog",
    "Transfer",
    # Mutterpflanzen
    "MotherPlant",
    # Enums
    "NurseryType",
    "IntegrationMode",
    "GrowthStage",
    "MovementType",
    "OrderStatus",
    "PriceLevel",
    "TransferStatus",
    "StopRole",
    "MotherPlantStatus",
    "MotherPlantSource",
]
