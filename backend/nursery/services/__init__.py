"""
Business Logic Services für die Pépinière
"""
from nursery.services.stock_ledger import StockLedger
from nursery.services.order_service import OrderService
from nursery.services.transfer_service import TransferService
from nursery.services.contribution_service import ContributionService
from nursery.services.catalog_service import CatalogService
from nursery.services.nursery_service import NurseryService
from nursery.services.label_service import LabelService

__all__ = [
    "StockLedger",
    "OrderService",
    "TransferService",
    "ContributionService",
    "CatalogService",
    "NurseryService",
    "LabelService",
]
