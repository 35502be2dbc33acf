"""
Transfer Scheduler Tests
"""
import uuid
import pytest
from datetime import date

from nursery.core.exceptions import InvalidTransition, NotFound, ResourceInUse
from nursery.models.enums import OrderStatus, TransferStatus
from nursery.services.order_service import OrderService
from nursery.services.transfer_service import TransferService


@pytest.fixture
def order(db, batch, platform_nursery):
    order = OrderService(db).create_order(
        pickup_nursery_id=platform_nursery.id,
        customer_name="Paul Lambert",
        lines=[{"stock_batch_id": batch.id, "quantity": 4}],
        process_immediately=True,
    )
    db.commit()
    return order


@pytest.fixture
def stops(platform_nursery, manual_nursery):
    return [
        {"nursery_id": manual_nursery.id, "role": "pickup"},
        {"nursery_id": platform_nursery.id, "role": "dropoff"},
    ]


class TestCreateTransfer:

    def test_create_transfer(self, db, order, stops):
        """Test: Transfer wird geplant, Halte werden mit Namen ergänzt"""
        transfer = TransferService(db).create_transfer(
            order_id=order.id,
            scheduled_date=date(2026, 11, 3),
            stops=stops,
            driver_name="Luc",
        )
        db.commit()

        assert transfer.status == TransferStatus.PLANNED
        assert transfer.order_number == order.order_number
        assert [s["role"] for s in transfer.stops] == ["pickup", "dropoff"]
        assert transfer.stops[0]["nursery_name"] == "Les Jardins du Partenaire"

    def test_unknown_order(self, db, stops):
        with pytest.raises(NotFound):
            TransferService(db).create_transfer(
                order_id=uuid.uuid4(), scheduled_date=date.today(), stops=stops
            )

    def test_requires_stops(self, db, order):
        with pytest.raises(ValueError):
            TransferService(db).create_transfer(
                order_id=order.id, scheduled_date=date.today(), stops=[]
            )

    def test_invalid_role(self, db, order, platform_nursery):
        with pytest.raises(ValueError):
            TransferService(db).create_transfer(
                order_id=order.id,
                scheduled_date=date.today(),
                stops=[{"nursery_id": platform_nursery.id, "role": "detour"}],
            )

    def test_second_active_transfer_refused(self, db, order, stops):
        """Test: Höchstens ein aktiver Transfer je Bestellung"""
        service = TransferService(db)
        service.create_transfer(order_id=order.id, scheduled_date=date.today(), stops=stops)
        db.commit()

        with pytest.raises(ResourceInUse):
            service.create_transfer(order_id=order.id, scheduled_date=date.today(), stops=stops)

    def test_new_transfer_after_cancel(self, db, order, stops):
        service = TransferService(db)
        first = service.create_transfer(order_id=order.id, scheduled_date=date.today(), stops=stops)
        service.cancel_transfer(first.id)
        db.commit()

        second = service.create_transfer(order_id=order.id, scheduled_date=date.today(), stops=stops)
        assert second.status == TransferStatus.PLANNED


class TestTransferLifecycle:

    def test_full_lifecycle_has_no_stock_effect(self, db, batch, order, stops):
        """Test: planned -> in-progress -> completed, Bestand unverändert"""
        service = TransferService(db)
        transfer = service.create_transfer(order_id=order.id, scheduled_date=date.today(), stops=stops)
        before = batch.counters

        service.start_transfer(transfer.id)
        assert transfer.status == TransferStatus.IN_PROGRESS
        assert transfer.started_at is not None

        service.complete_transfer(transfer.id)
        db.commit()
        assert transfer.status == TransferStatus.COMPLETED
        assert transfer.completed_at is not None
        assert batch.counters == before

    def test_cancel_in_progress_keeps_stock_and_order(self, db, batch, order, stops):
        """Test: Abbruch unterwegs macht keine Bestandsbuchung rückgängig"""
        service = TransferService(db)
        transfer = service.create_transfer(order_id=order.id, scheduled_date=date.today(), stops=stops)
        service.start_transfer(transfer.id)
        db.commit()
        before = batch.counters

        service.cancel_transfer(transfer.id)
        db.commit()

        assert transfer.status == TransferStatus.CANCELLED
        assert before == {"quantity": 10, "available_quantity": 6, "reserved_quantity": 4}
        assert batch.counters == before
        assert order.status == OrderStatus.PROCESSING
        assert order.lines[0].reserved_quantity == 4

    def test_complete_requires_in_progress(self, db, order, stops):
        service = TransferService(db)
        transfer = service.create_transfer(order_id=order.id, scheduled_date=date.today(), stops=stops)
        with pytest.raises(InvalidTransition):
            service.complete_transfer(transfer.id)

    def test_completed_transfer_cannot_be_cancelled(self, db, order, stops):
        service = TransferService(db)
        transfer = service.create_transfer(order_id=order.id, scheduled_date=date.today(), stops=stops)
        service.start_transfer(transfer.id)
        service.complete_transfer(transfer.id)

        with pytest.raises(InvalidTransition):
            service.cancel_transfer(transfer.id)

    def test_list_by_status(self, db, order, stops):
        service = TransferService(db)
        transfer = service.create_transfer(order_id=order.id, scheduled_date=date.today(), stops=stops)
        db.commit()

        items, total = service.list_transfers(status=TransferStatus.PLANNED)
        assert total == 1
        assert items[0].id == transfer.id
        assert service.list_transfers(status=TransferStatus.COMPLETED)[1] == 0
