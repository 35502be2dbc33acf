"""
Pydantic Schemas für die Pépinière-API
"""
# Stammdaten
from nursery.schemas.nursery import (
    NurseryCreate, NurseryUpdate, NurseryResponse,
    ContainerCreate, ContainerUpdate, ContainerResponse,
)

# Bestand
from nursery.schemas.stock import (
    StockBatchCreate, StockBatchUpdate, StockBatchResponse, StockBatchListResponse,
    StockMovementResponse,
)

# Bestellungen
from nursery.schemas.order import (
    OrderLineCreate, OrderLineResponse, OrderCreate, OrderCancel,
    OrderResponse, OrderListResponse, OrderAuditLogResponse,
)

# Transfers
from nursery.schemas.transfer import (
    TransferStop, TransferCreate, TransferResponse, TransferListResponse,
)

# Mutterpflanzen
from nursery.schemas.mother_plant import (
    MotherPlantCreate, MotherPlantValidate, MotherPlantReject,
    MotherPlantResponse, MotherPlantListResponse,
)

# Katalog & Dashboard
from nursery.schemas.catalog import (
    CatalogEntry, CatalogResponse, DashboardAlert, DashboardResponse,
)
