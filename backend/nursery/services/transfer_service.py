"""
Transfer-Service - Abhol- und Liefertouren zu Bestellungen

Ein Transfer bewegt keine Bestandszähler. Er beschreibt nur die Logistik,
mit der eine Bestellung aus mehreren Pépinières zusammengeführt wird.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.orm import Session, joinedload

from nursery.core.exceptions import InvalidTransition, NotFound, ResourceInUse
from nursery.models.enums import StopRole, TransferStatus
from nursery.models.nursery import Nursery
from nursery.models.order import Order
from nursery.models.transfer import Transfer

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = tuple(status for status in TransferStatus if status.is_active)


class TransferService:
    """Service für Transfer-Operationen"""

    def __init__(self, db: Session):
        self.db = db

    def get_transfer(self, transfer_id: UUID, for_update: bool = False) -> Transfer:
        query = select(Transfer).where(Transfer.id == transfer_id)
        if for_update:
            self.db.flush()
            query = query.with_for_update().execution_options(populate_existing=True)
        else:
            query = query.options(joinedload(Transfer.order))

        transfer = self.db.execute(query).scalar_one_or_none()
        if not transfer:
            raise NotFound("Transfer nicht gefunden", transfer_id=transfer_id)
        return transfer

    def list_transfers(
        self,
        status: Optional[TransferStatus] = None,
        order_id: Optional[UUID] = None,
        scheduled_from: Optional[date] = None,
        scheduled_to: Optional[date] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Transfer], int]:
        query = select(Transfer)
        if status:
            query = query.where(Transfer.status == status)
        if order_id:
            query = query.where(Transfer.order_id == order_id)
        if scheduled_from:
            query = query.where(Transfer.scheduled_date >= scheduled_from)
        if scheduled_to:
            query = query.where(Transfer.scheduled_date <= scheduled_to)

        total = self.db.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar() or 0

        transfers = self.db.execute(
            query.options(joinedload(Transfer.order))
            .order_by(Transfer.scheduled_date, Transfer.created_at)
            .offset(offset)
            .limit(limit)
        ).scalars().all()

        return list(transfers), total

    def create_transfer(
        self,
        order_id: UUID,
        scheduled_date: date,
        stops: list[dict],
        total_distance_km: Decimal = Decimal("0"),
        estimated_duration: str = "",
        driver_id: str = "",
        driver_name: str = "",
        vehicle_info: str = "",
        notes: str = "",
    ) -> Transfer:
        """
        Plant einen Transfer für eine Bestellung.

        stops: [{"nursery_id": UUID, "role": "pickup" | "dropoff"}, ...]

        Raises:
            NotFound: Bestellung existiert nicht
            ResourceInUse: Bestellung hat bereits einen aktiven Transfer
            ValueError: keine oder ungültige Halte
        """
        order = self.db.execute(
            select(Order).where(Order.id == order_id).with_for_update()
        ).scalar_one_or_none()
        if not order:
            raise NotFound("Bestellung nicht gefunden", order_id=order_id)

        active = self.db.execute(
            select(Transfer.id).where(
                Transfer.order_id == order.id,
                Transfer.status.in_(ACTIVE_STATUSES),
            )
        ).first()
        if active:
            raise ResourceInUse(
                f"Bestellung {order.order_number} hat bereits einen aktiven Transfer",
                order_id=order.id,
                transfer_id=active[0],
            )

        transfer = Transfer(
            order_id=order.id,
            status=TransferStatus.PLANNED,
            stops=self._normalize_stops(stops),
            total_distance_km=total_distance_km,
            estimated_duration=estimated_duration or "",
            driver_id=driver_id or "",
            driver_name=driver_name or "",
            vehicle_info=vehicle_info or "",
            scheduled_date=scheduled_date,
            notes=notes or "",
        )
        self.db.add(transfer)
        self.db.flush()

        logger.info(
            f"Transfer für {order.order_number} geplant am {scheduled_date}: "
            f"{len(transfer.stops)} Halte"
        )
        return transfer

    def start_transfer(self, transfer_id: UUID) -> Transfer:
        """planned -> in-progress"""
        transfer = self.get_transfer(transfer_id, for_update=True)
        self._move(transfer, (TransferStatus.PLANNED,), TransferStatus.IN_PROGRESS)
        transfer.started_at = datetime.utcnow()
        self.db.flush()
        return transfer

    def complete_transfer(self, transfer_id: UUID) -> Transfer:
        """in-progress -> completed"""
        transfer = self.get_transfer(transfer_id, for_update=True)
        self._move(transfer, (TransferStatus.IN_PROGRESS,), TransferStatus.COMPLETED)
        transfer.completed_at = datetime.utcnow()
        self.db.flush()
        return transfer

    def cancel_transfer(self, transfer_id: UUID) -> Transfer:
        """planned | in-progress -> cancelled"""
        transfer = self.get_transfer(transfer_id, for_update=True)
        self._move(transfer, ACTIVE_STATUSES, TransferStatus.CANCELLED)
        self.db.flush()
        return transfer

    def _move(
        self,
        transfer: Transfer,
        allowed: tuple[TransferStatus, ...],
        target: TransferStatus,
    ) -> None:
        if transfer.status not in allowed:
            raise InvalidTransition(
                f"Transfer hat Status {transfer.status.value}, "
                f"Wechsel nach {target.value} nicht möglich",
                transfer_id=transfer.id,
                current=transfer.status.value,
                target=target.value,
            )
        old_status = transfer.status
        transfer.status = target
        logger.info(f"Transfer {transfer.id}: {old_status.value} -> {target.value}")

    def _normalize_stops(self, stops: list[dict]) -> list[dict]:
        """Prüft die Halte syntaktisch und ergänzt den Namen der Pépinière"""
        if not stops:
            raise ValueError("Transfer muss mindestens einen Halt haben")

        normalized = []
        for index, stop in enumerate(stops, start=1):
            try:
                nursery_id = UUID(str(stop["nursery_id"]))
                role = StopRole(stop["role"])
            except (KeyError, ValueError, TypeError):
                raise ValueError(f"Halt {index} ist ungültig (nursery_id und role erforderlich)")

            nursery = self.db.get(Nursery, nursery_id)
            normalized.append({
                "nursery_id": str(nursery_id),
                "role": role.value,
                "nursery_name": stop.get("nursery_name") or (nursery.name if nursery else ""),
            })
        return normalized
