"""
Order Engine Tests
Checkout, Statusmaschine und Bestandseffekte
"""
import pytest
from datetime import date
from decimal import Decimal

from nursery.core.exceptions import (
    InsufficientStock, InvalidTransition, InvariantViolation, NotFound, OrderNumberConflict,
)
from nursery.models.enums import OrderStatus, PriceLevel, MovementType
from nursery.models.order import Order, OrderAuditLog
from nursery.models.stock import StockMovement
from nursery.services.order_service import OrderService
from nursery.services.stock_ledger import StockLedger


def counters(batch):
    return (batch.quantity, batch.available_quantity, batch.reserved_quantity)


@pytest.fixture
def create_order(db, platform_nursery):
    """Legt eine Bestellung über den Service an"""
    def _create(lines, **kwargs):
        order = OrderService(db, user_name="Testkasse").create_order(
            pickup_nursery_id=platform_nursery.id,
            customer_name="Julie Martin",
            customer_email="julie@example.org",
            lines=lines,
            **kwargs,
        )
        db.commit()
        return order
    return _create


class TestCreateOrder:
    """Checkout"""

    def test_create_order_snapshots_prices(self, db, batch, create_order):
        """Test: Preise und Namen werden aus der Charge übernommen"""
        order = create_order([{"stock_batch_id": batch.id, "quantity": 3}])

        assert order.status == OrderStatus.NEW
        assert len(order.lines) == 1
        line = order.lines[0]
        assert line.species_name == "Malus domestica"
        assert line.container_name == "P3L"
        assert line.nursery_name == "Pépinière de Liège"
        assert line.unit_price_euros == Decimal("12.50")
        assert line.total_euros == Decimal("37.50")
        assert order.total_euros == Decimal("37.50")
        assert order.total_semos == Decimal("0.00")

    def test_create_order_does_not_touch_stock(self, db, batch, create_order):
        """Test: Anlage reserviert noch nichts"""
        create_order([{"stock_batch_id": batch.id, "quantity": 3}])
        assert counters(batch) == (10, 10, 0)

    def test_later_price_change_does_not_affect_order(self, db, batch, create_order):
        order = create_order([{"stock_batch_id": batch.id, "quantity": 2}])
        batch.price_euros = Decimal("20.00")
        db.commit()

        db.refresh(order)
        assert order.lines[0].unit_price_euros == Decimal("12.50")
        assert order.total_euros == Decimal("25.00")

    def test_order_number_format(self, db, batch, create_order):
        """Test: Bestellnummern PEP-<Jahr>-<NNNN>, fortlaufend"""
        first = create_order([{"stock_batch_id": batch.id, "quantity": 1}])
        second = create_order([{"stock_batch_id": batch.id, "quantity": 1}])

        year = date.today().year
        assert first.order_number == f"PEP-{year}-0001"
        assert second.order_number == f"PEP-{year}-0002"

    def test_order_number_beyond_9999(self, db, batch, platform_nursery, create_order):
        """Test: Nach 9999 geht es mit 10000, 10001 weiter"""
        year = date.today().year
        db.add(Order(
            order_number=f"PEP-{year}-9999",
            pickup_nursery_id=platform_nursery.id,
            customer_name="Altbestand",
        ))
        db.commit()

        first = create_order([{"stock_batch_id": batch.id, "quantity": 1}])
        second = create_order([{"stock_batch_id": batch.id, "quantity": 1}])

        assert first.order_number == f"PEP-{year}-10000"
        assert second.order_number == f"PEP-{year}-10001"

    def test_order_number_collision_is_conflict(self, db, batch, create_order, monkeypatch):
        """Test: Gleichzeitig vergebene Nummer -> OrderNumberConflict statt Datenbankfehler"""
        taken = create_order([{"stock_batch_id": batch.id, "quantity": 1}]).order_number
        monkeypatch.setattr(OrderService, "_generate_order_number", lambda self: taken)

        with pytest.raises(OrderNumberConflict) as exc_info:
            create_order([{"stock_batch_id": batch.id, "quantity": 1}])
        db.rollback()

        assert exc_info.value.code == "ORDER_NUMBER_CONFLICT"
        assert exc_info.value.status_code == 409
        assert db.query(Order).count() == 1

    def test_semos_line(self, db, make_batch, create_order):
        """Test: Semos-Position rechnet in Semos"""
        semos_batch = make_batch(
            quantity=5, accepts_semos=True, price_semos=Decimal("8.00")
        )
        order = create_order(
            [{"stock_batch_id": semos_batch.id, "quantity": 2, "pay_in_semos": True}],
            is_member=True,
            price_level=PriceLevel.SOLIDARITY,
        )

        assert order.lines[0].total_semos == Decimal("16.00")
        assert order.lines[0].total_euros == Decimal("0.00")
        assert order.total_semos == Decimal("16.00")
        assert order.total_euros == Decimal("0.00")
        assert order.price_level == PriceLevel.SOLIDARITY

    def test_semos_not_accepted(self, db, batch, create_order):
        """Test: Semos nur bei Chargen, die Semos akzeptieren"""
        with pytest.raises(ValueError):
            create_order([{"stock_batch_id": batch.id, "quantity": 1, "pay_in_semos": True}])

    def test_empty_order_rejected(self, db, create_order):
        with pytest.raises(ValueError):
            create_order([])

    def test_unknown_pickup_nursery(self, db, batch):
        import uuid
        with pytest.raises(NotFound):
            OrderService(db).create_order(
                pickup_nursery_id=uuid.uuid4(),
                customer_name="X",
                lines=[{"stock_batch_id": batch.id, "quantity": 1}],
            )

    def test_deleted_pickup_nursery(self, db, batch, platform_nursery):
        platform_nursery.soft_delete()
        db.commit()
        with pytest.raises(NotFound):
            OrderService(db).create_order(
                pickup_nursery_id=platform_nursery.id,
                customer_name="X",
                lines=[{"stock_batch_id": batch.id, "quantity": 1}],
            )

    def test_zero_quantity_rejected(self, db, batch, create_order):
        with pytest.raises(ValueError):
            create_order([{"stock_batch_id": batch.id, "quantity": 0}])

    def test_create_writes_audit_log(self, db, batch, create_order):
        order = create_order([{"stock_batch_id": batch.id, "quantity": 1}])
        logs = db.query(OrderAuditLog).filter(OrderAuditLog.order_id == order.id).all()
        assert [log.action for log in logs] == ["CREATE"]
        assert logs[0].user_name == "Testkasse"


class TestOrderLifecycle:
    """Statusmaschine mit Bestandseffekten"""

    def test_pickup_scenario(self, db, batch, create_order):
        """Test: qty 4 -> processing (6/4) -> picked-up (6/0, quantity 10)"""
        order = create_order([{"stock_batch_id": batch.id, "quantity": 4}])
        service = OrderService(db)

        service.process_order(order.id)
        db.commit()
        assert order.status == OrderStatus.PROCESSING
        assert (batch.available_quantity, batch.reserved_quantity) == (6, 4)
        assert order.prepared_at is not None

        service.mark_ready(order.id)
        db.commit()
        assert order.status == OrderStatus.READY
        assert (batch.available_quantity, batch.reserved_quantity) == (6, 4)

        service.mark_picked_up(order.id)
        db.commit()
        assert order.status == OrderStatus.PICKED_UP
        assert counters(batch) == (10, 6, 0)
        assert order.picked_up_at is not None
        assert order.lines[0].reserved_quantity == 0

    def test_cancel_scenario(self, db, batch, create_order):
        """Test: qty 8 -> processing (2/8) -> cancel (10/0)"""
        order = create_order([{"stock_batch_id": batch.id, "quantity": 8}])
        service = OrderService(db)

        service.process_order(order.id)
        db.commit()
        assert (batch.available_quantity, batch.reserved_quantity) == (2, 8)

        service.cancel_order(order.id, reason="Kunde verhindert")
        db.commit()
        assert order.status == OrderStatus.CANCELLED
        assert (batch.available_quantity, batch.reserved_quantity) == (10, 0)
        assert order.cancelled_at is not None

    def test_cancel_ready_order_restores_all_batches(self, db, make_batch, create_order):
        """Test: Stornierung aus ready gibt jede Charge wieder frei"""
        apples = make_batch(quantity=10)
        pears = make_batch(quantity=5, species_id="pyrus-communis", species_name="Pyrus communis")
        order = create_order([
            {"stock_batch_id": apples.id, "quantity": 3},
            {"stock_batch_id": pears.id, "quantity": 5},
        ])
        service = OrderService(db)
        service.process_order(order.id)
        service.mark_ready(order.id)
        db.commit()

        service.cancel_order(order.id)
        db.commit()

        assert counters(apples) == (10, 10, 0)
        assert counters(pears) == (5, 5, 0)

    def test_cancel_new_order_has_no_stock_effect(self, db, batch, create_order):
        order = create_order([{"stock_batch_id": batch.id, "quantity": 4}])
        OrderService(db).cancel_order(order.id)
        db.commit()

        assert order.status == OrderStatus.CANCELLED
        assert counters(batch) == (10, 10, 0)
        releases = db.query(StockMovement).filter(
            StockMovement.movement_type == MovementType.RELEASE
        ).count()
        assert releases == 0

    def test_process_immediately(self, db, batch, create_order):
        """Test: Checkout mit direkter Reservierung"""
        order = create_order(
            [{"stock_batch_id": batch.id, "quantity": 4}], process_immediately=True
        )
        assert order.status == OrderStatus.PROCESSING
        assert (batch.available_quantity, batch.reserved_quantity) == (6, 4)

    def test_transitions_write_audit_log(self, db, batch, create_order):
        order = create_order([{"stock_batch_id": batch.id, "quantity": 1}])
        service = OrderService(db)
        service.process_order(order.id)
        service.mark_ready(order.id)
        service.mark_picked_up(order.id)
        db.commit()

        actions = [log.action for log in order.audit_logs]
        assert set(actions) == {"CREATE", "PROCESS", "READY", "PICKED_UP"}


class TestAllOrNothing:
    """Reservierung aller Positionen oder keiner"""

    def test_failed_processing_reserves_nothing(self, db, make_batch, create_order):
        """Test: Zweite Position reicht nicht -> keine Reservierung, Status bleibt new"""
        plenty = make_batch(quantity=10)
        scarce = make_batch(quantity=2, species_id="pyrus-communis", species_name="Pyrus communis")
        order = create_order([
            {"stock_batch_id": plenty.id, "quantity": 5},
            {"stock_batch_id": scarce.id, "quantity": 3},
        ])

        with pytest.raises(InsufficientStock) as exc_info:
            OrderService(db).process_order(order.id)
        db.rollback()

        assert exc_info.value.batch_id == scarce.id
        assert order.status == OrderStatus.NEW
        assert counters(plenty) == (10, 10, 0)
        assert counters(scarce) == (2, 2, 0)
        assert all(line.reserved_quantity == 0 for line in order.lines)

    def test_failed_processing_unchanged_without_rollback(self, db, make_batch, create_order):
        """Test: Auch ohne Rollback der Session bleibt der Bestand unverändert"""
        plenty = make_batch(quantity=10)
        scarce = make_batch(quantity=2, species_id="pyrus-communis", species_name="Pyrus communis")
        order = create_order([
            {"stock_batch_id": plenty.id, "quantity": 5},
            {"stock_batch_id": scarce.id, "quantity": 3},
        ])

        with pytest.raises(InsufficientStock):
            OrderService(db).process_order(order.id)

        assert order.status == OrderStatus.NEW
        assert counters(plenty) == (10, 10, 0)
        assert counters(scarce) == (2, 2, 0)

    def test_two_lines_same_batch_are_summed(self, db, batch, create_order):
        """Test: Zwei Positionen derselben Charge zählen zusammen"""
        order = create_order([
            {"stock_batch_id": batch.id, "quantity": 6},
            {"stock_batch_id": batch.id, "quantity": 6},
        ])
        with pytest.raises(InsufficientStock) as exc_info:
            OrderService(db).process_order(order.id)

        assert exc_info.value.requested == 12
        assert counters(batch) == (10, 10, 0)

    def test_competing_orders_never_oversell(self, db, batch, create_order):
        """Test: Zwei Bestellungen über denselben Bestand - die zweite scheitert"""
        first = create_order([{"stock_batch_id": batch.id, "quantity": 7}])
        second = create_order([{"stock_batch_id": batch.id, "quantity": 7}])
        service = OrderService(db)

        service.process_order(first.id)
        db.commit()
        with pytest.raises(InsufficientStock):
            service.process_order(second.id)
        db.rollback()

        assert counters(batch) == (10, 3, 7)
        assert second.status == OrderStatus.NEW

    def test_reserve_failure_is_compensated(self, db, make_batch, create_order, monkeypatch):
        """Test: Scheitert eine Reservierung mitten im Ablauf, werden die vorherigen freigegeben"""
        first = make_batch(quantity=10)
        second = make_batch(quantity=10, species_id="pyrus-communis", species_name="Pyrus communis")
        second_id = second.id
        order = create_order([
            {"stock_batch_id": first.id, "quantity": 5},
            {"stock_batch_id": second_id, "quantity": 3},
        ])

        service = OrderService(db)
        real_reserve = service.ledger.reserve

        def reserve(batch, quantity, **kwargs):
            if batch.id == second_id:
                raise InsufficientStock(batch_id=batch.id, available=0, requested=quantity)
            return real_reserve(batch, quantity, **kwargs)

        monkeypatch.setattr(service.ledger, "reserve", reserve)

        with pytest.raises(InsufficientStock):
            service.process_order(order.id)

        assert order.status == OrderStatus.NEW
        assert counters(first) == (10, 10, 0)
        assert counters(second) == (10, 10, 0)
        assert all(line.reserved_quantity == 0 for line in order.lines)
        db.flush()
        release = db.query(StockMovement).filter(
            StockMovement.stock_batch_id == first.id,
            StockMovement.movement_type == MovementType.RELEASE,
        ).one()
        assert release.quantity == 5


class TestInvalidTransitions:
    """Unerlaubte Statuswechsel"""

    def test_ready_requires_processing(self, db, batch, create_order):
        order = create_order([{"stock_batch_id": batch.id, "quantity": 1}])
        with pytest.raises(InvalidTransition):
            OrderService(db).mark_ready(order.id)

    def test_pickup_requires_ready(self, db, batch, create_order):
        order = create_order([{"stock_batch_id": batch.id, "quantity": 1}])
        service = OrderService(db)
        service.process_order(order.id)
        with pytest.raises(InvalidTransition):
            service.mark_picked_up(order.id)

    def test_process_twice_rejected(self, db, batch, create_order):
        order = create_order([{"stock_batch_id": batch.id, "quantity": 2}])
        service = OrderService(db)
        service.process_order(order.id)

        with pytest.raises(InvalidTransition):
            service.process_order(order.id)
        assert (batch.available_quantity, batch.reserved_quantity) == (8, 2)

    @pytest.mark.parametrize("terminal", ["picked-up", "cancelled"])
    def test_terminal_states_reject_everything(self, db, batch, create_order, terminal):
        """Test: Endzustände lehnen jeden Wechsel ab"""
        order = create_order([{"stock_batch_id": batch.id, "quantity": 2}])
        service = OrderService(db)
        if terminal == "picked-up":
            service.process_order(order.id)
            service.mark_ready(order.id)
            service.mark_picked_up(order.id)
        else:
            service.cancel_order(order.id)
        db.commit()
        snapshot = counters(batch)

        for transition in (
            service.process_order, service.mark_ready,
            service.mark_picked_up, service.cancel_order,
        ):
            with pytest.raises(InvalidTransition):
                transition(order.id)
        assert counters(batch) == snapshot

    def test_unknown_order(self, db):
        import uuid
        with pytest.raises(NotFound):
            OrderService(db).process_order(uuid.uuid4())


class TestDoubleRelease:
    """Doppelte Freigabe wird erkannt"""

    def test_line_cannot_be_released_twice(self, db, batch, create_order):
        """Test: Position hält nach Freigabe keine Reservierung mehr"""
        order = create_order([{"stock_batch_id": batch.id, "quantity": 3}])
        OrderService(db).process_order(order.id)
        line = order.lines[0]
        ledger = StockLedger(db)

        ledger.release(batch, 3, line=line)
        with pytest.raises(InvariantViolation):
            ledger.release(batch, 3, line=line)

    def test_line_release_limited_to_own_reservation(self, db, batch, create_order):
        """Test: Fremde Reservierungen derselben Charge schützen nicht vor Doppelfreigabe"""
        first = create_order([{"stock_batch_id": batch.id, "quantity": 3}])
        second = create_order([{"stock_batch_id": batch.id, "quantity": 3}])
        service = OrderService(db)
        service.process_order(first.id)
        service.process_order(second.id)
        line = first.lines[0]
        ledger = StockLedger(db)

        ledger.release(batch, 3, line=line)
        with pytest.raises(InvariantViolation):
            ledger.release(batch, 3, line=line)
        assert batch.reserved_quantity == 3


class TestListOrders:

    def test_filter_by_status(self, db, batch, create_order):
        first = create_order([{"stock_batch_id": batch.id, "quantity": 1}])
        create_order([{"stock_batch_id": batch.id, "quantity": 1}])
        OrderService(db).process_order(first.id)
        db.commit()

        orders, total = OrderService(db).list_orders(status=OrderStatus.PROCESSING)
        assert total == 1
        assert orders[0].id == first.id

    def test_filter_by_email_case_insensitive(self, db, batch, create_order):
        create_order([{"stock_batch_id": batch.id, "quantity": 1}])
        orders, total = OrderService(db).list_orders(customer_email="JULIE@example.org")
        assert total == 1
