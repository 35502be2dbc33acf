"""
API Endpoints für Bestellungen (Checkout und Statuswechsel)

Jeder Statuswechsel ist genau eine Transaktion: der Service bucht,
der Endpoint committet. Bei Fehlern wird die Session zurückgerollt.
"""
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, status

from nursery.api.deps import DBSession, Pagination, Actor
from nursery.models.enums import OrderStatus
from nursery.schemas.order import (
    OrderCreate, OrderCancel, OrderResponse, OrderListResponse, OrderAuditLogResponse,
)
from nursery.services.order_service import OrderService

router = APIRouter()


def _order_response(db, order_id: UUID) -> OrderResponse:
    return OrderResponse.model_validate(OrderService(db).get_order(order_id))


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    db: DBSession,
    pagination: Pagination,
    status: Optional[OrderStatus] = None,
    pickup_nursery_id: Optional[UUID] = None,
    customer_email: Optional[str] = None,
):
    """
    Bestellungen abrufen (neueste zuerst).

    Filter:
    - **status**: new, processing, ready, picked-up, cancelled
    - **pickup_nursery_id**: Abhol-Pépinière
    - **customer_email**: Bestellungen eines Kunden
    """
    orders, total = OrderService(db).list_orders(
        status=status,
        pickup_nursery_id=pickup_nursery_id,
        customer_email=customer_email,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        total=total
    )


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: UUID, db: DBSession):
    """Einzelne Bestellung mit Positionen abrufen."""
    return _order_response(db, order_id)


@router.get("/orders/{order_id}/audit-log", response_model=list[OrderAuditLogResponse])
async def get_order_audit_log(order_id: UUID, db: DBSession):
    """Statushistorie einer Bestellung."""
    order = OrderService(db).get_order(order_id)
    return [OrderAuditLogResponse.model_validate(log) for log in order.audit_logs]


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(order_data: OrderCreate, db: DBSession, actor: Actor):
    """
    Bestellung anlegen (Checkout).

    Preise werden aus den Chargen übernommen und eingefroren.
    Mit **process_immediately** wird in derselben Transaktion reserviert;
    reicht der Bestand nicht, wird gar nichts angelegt.
    """
    data = order_data.model_dump()
    order = OrderService(db, user_name=actor).create_order(**data)
    db.commit()
    return _order_response(db, order.id)


@router.patch("/orders/{order_id}/process", response_model=OrderResponse)
async def process_order(order_id: UUID, db: DBSession, actor: Actor):
    """new -> processing: reserviert alle Positionen (alles oder nichts)."""
    OrderService(db, user_name=actor).process_order(order_id)
    db.commit()
    return _order_response(db, order_id)


@router.patch("/orders/{order_id}/ready", response_model=OrderResponse)
async def mark_order_ready(order_id: UUID, db: DBSession, actor: Actor):
    """processing -> ready."""
    OrderService(db, user_name=actor).mark_ready(order_id)
    db.commit()
    return _order_response(db, order_id)


@router.patch("/orders/{order_id}/picked-up", response_model=OrderResponse)
async def mark_order_picked_up(order_id: UUID, db: DBSession, actor: Actor):
    """ready -> picked-up: Reservierungen werden verbraucht."""
    OrderService(db, user_name=actor).mark_picked_up(order_id)
    db.commit()
    return _order_response(db, order_id)


@router.patch("/orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: UUID, db: DBSession, actor: Actor, cancel_data: Optional[OrderCancel] = None
):
    """Bestellung stornieren; gehaltene Reservierungen werden freigegeben."""
    reason = cancel_data.reason if cancel_data else None
    OrderService(db, user_name=actor).cancel_order(order_id, reason=reason)
    db.commit()
    return _order_response(db, order_id)
