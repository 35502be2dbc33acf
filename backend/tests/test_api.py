"""
API Tests für die Semisto Pépinière
"""
import uuid

import pytest

from conftest import API


def order_payload(nursery, batch, quantity=2, **extra):
    payload = {
        "pickup_nursery_id": nursery["id"],
        "customer_name": "Lucie Martin",
        "customer_email": "Lucie@Example.org",
        "lines": [{"stock_batch_id": batch["id"], "quantity": quantity}],
    }
    payload.update(extra)
    return payload


def get_batch(client, batch):
    return client.get(f"{API}/stock-batches/{batch['id']}").json()


class TestHealth:
    """Health Check Tests"""

    def test_health_endpoint(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "Pépinière" in response.json()["message"]


class TestNurseries:
    """Pépinières und Container"""

    def test_create_and_list(self, client, api_nursery, api_manual_nursery):
        response = client.get(f"{API}/nurseries")
        assert response.status_code == 200
        assert {n["name"] for n in response.json()} == {"Pépinière de Liège", "Partenaire Namur"}

        response = client.get(f"{API}/nurseries", params={"integration": "manual"})
        assert [n["name"] for n in response.json()] == ["Partenaire Namur"]

    def test_update_nursery(self, client, api_nursery):
        response = client.patch(f"{API}/nurseries/{api_nursery['id']}", json={"city": "Liège"})
        assert response.status_code == 200
        assert response.json()["city"] == "Liège"

    def test_delete_nursery(self, client, api_nursery):
        response = client.delete(f"{API}/nurseries/{api_nursery['id']}")
        assert response.status_code == 204
        assert client.get(f"{API}/nurseries/{api_nursery['id']}").status_code == 404

    def test_unknown_nursery(self, client):
        response = client.get(f"{API}/nurseries/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_delete_container_in_use(self, client, api_batch, api_container):
        response = client.delete(f"{API}/containers/{api_container['id']}")
        assert response.status_code == 409
        assert response.json()["code"] == "RESOURCE_IN_USE"


class TestStockBatches:
    """Chargen API Tests"""

    def test_create_batch(self, client, api_batch, api_nursery):
        assert api_batch["quantity"] == 10
        assert api_batch["available_quantity"] == 10
        assert api_batch["reserved_quantity"] == 0
        assert api_batch["nursery_name"] == api_nursery["name"]
        assert api_batch["container_name"] == "G9"

    def test_create_batch_negative_quantity(self, client, api_nursery, api_container):
        response = client.post(f"{API}/stock-batches", json={
            "nursery_id": api_nursery["id"],
            "container_id": api_container["id"],
            "species_id": "x",
            "species_name": "X",
            "quantity": -1,
        })
        assert response.status_code == 422

    def test_semos_without_price(self, client, api_nursery, api_container):
        response = client.post(f"{API}/stock-batches", json={
            "nursery_id": api_nursery["id"],
            "container_id": api_container["id"],
            "species_id": "x",
            "species_name": "X",
            "accepts_semos": True,
        })
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    def test_quantity_delta(self, client, api_batch):
        response = client.patch(f"{API}/stock-batches/{api_batch['id']}", json={
            "quantity_delta": -4,
            "reason": "Frostschaden",
        })
        assert response.status_code == 200
        data = response.json()
        assert (data["quantity"], data["available_quantity"]) == (6, 6)

    def test_null_for_required_field_rejected(self, client, api_batch):
        """Test: Pflichtfelder lassen sich nicht per null leeren"""
        for field in ("species_name", "price_euros", "growth_stage", "notes"):
            response = client.patch(f"{API}/stock-batches/{api_batch['id']}", json={field: None})
            assert response.status_code == 422, field

        assert get_batch(client, api_batch)["species_name"] == "Ribes rubrum"

    def test_null_for_optional_field_allowed(self, client, api_batch):
        response = client.patch(f"{API}/stock-batches/{api_batch['id']}", json={
            "accepts_semos": False,
            "price_semos": None,
        })
        assert response.status_code == 200
        assert response.json()["price_semos"] is None

    def test_movements(self, client, api_batch):
        client.patch(f"{API}/stock-batches/{api_batch['id']}", json={"quantity_delta": 5})
        response = client.get(f"{API}/stock-batches/{api_batch['id']}/movements")
        assert response.status_code == 200
        assert [m["movement_type"] for m in response.json()] == ["receipt", "receipt"]

    def test_label(self, client, api_batch):
        response = client.get(f"{API}/stock-batches/{api_batch['id']}/label")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_delete_batch(self, client, api_batch):
        response = client.delete(f"{API}/stock-batches/{api_batch['id']}")
        assert response.status_code == 204
        assert client.get(f"{API}/stock-batches/{api_batch['id']}").status_code == 404


class TestOrders:
    """Bestellungen API Tests"""

    def test_create_order(self, client, api_nursery, api_batch):
        response = client.post(
            f"{API}/orders",
            json=order_payload(api_nursery, api_batch),
            headers={"X-User-Name": "Marie"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "new"
        assert data["order_number"].startswith("PEP-")
        assert data["customer_email"] == "Lucie@Example.org"
        assert data["lines"][0]["reserved_quantity"] == 0
        assert get_batch(client, api_batch)["available_quantity"] == 10

    def test_pickup_scenario(self, client, api_nursery, api_batch):
        """new -> processing -> ready -> picked-up"""
        order = client.post(f"{API}/orders", json=order_payload(api_nursery, api_batch, 4)).json()

        response = client.patch(f"{API}/orders/{order['id']}/process")
        assert response.status_code == 200
        assert response.json()["status"] == "processing"
        batch = get_batch(client, api_batch)
        assert (batch["available_quantity"], batch["reserved_quantity"]) == (6, 4)

        assert client.patch(f"{API}/orders/{order['id']}/ready").json()["status"] == "ready"

        response = client.patch(f"{API}/orders/{order['id']}/picked-up")
        assert response.json()["status"] == "picked-up"
        batch = get_batch(client, api_batch)
        assert (batch["quantity"], batch["available_quantity"], batch["reserved_quantity"]) == (10, 6, 0)

        log = client.get(f"{API}/orders/{order['id']}/audit-log").json()
        assert [entry["action"] for entry in log] == ["CREATE", "PROCESS", "READY", "PICKED_UP"]

    def test_cancel_releases_stock(self, client, api_nursery, api_batch):
        order = client.post(
            f"{API}/orders",
            json=order_payload(api_nursery, api_batch, 3, process_immediately=True),
        ).json()
        assert order["status"] == "processing"

        response = client.patch(f"{API}/orders/{order['id']}/cancel", json={"reason": "Kunde verhindert"})
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert get_batch(client, api_batch)["available_quantity"] == 10

    def test_insufficient_stock(self, client, api_nursery, api_batch):
        """Zu große Menge: 409, nichts wird angelegt"""
        response = client.post(
            f"{API}/orders",
            json=order_payload(api_nursery, api_batch, 11, process_immediately=True),
        )
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "INSUFFICIENT_STOCK"
        assert body["data"]["available"] == 10
        assert body["data"]["requested"] == 11
        assert body["data"]["batch_id"] == api_batch["id"]

        assert client.get(f"{API}/orders").json()["total"] == 0
        assert get_batch(client, api_batch)["available_quantity"] == 10

    def test_invalid_transition(self, client, api_nursery, api_batch):
        order = client.post(f"{API}/orders", json=order_payload(api_nursery, api_batch)).json()
        response = client.patch(f"{API}/orders/{order['id']}/picked-up")
        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_TRANSITION"

    def test_zero_quantity_rejected(self, client, api_nursery, api_batch):
        response = client.post(f"{API}/orders", json=order_payload(api_nursery, api_batch, 0))
        assert response.status_code == 422

    def test_empty_lines_rejected(self, client, api_nursery, api_batch):
        payload = order_payload(api_nursery, api_batch)
        payload["lines"] = []
        assert client.post(f"{API}/orders", json=payload).status_code == 422

    def test_unknown_order(self, client):
        assert client.get(f"{API}/orders/{uuid.uuid4()}").status_code == 404

    def test_filter_by_status(self, client, api_nursery, api_batch):
        client.post(f"{API}/orders", json=order_payload(api_nursery, api_batch))
        client.post(f"{API}/orders", json=order_payload(api_nursery, api_batch, process_immediately=True))

        response = client.get(f"{API}/orders", params={"status": "processing"})
        assert response.json()["total"] == 1


class TestTransfers:
    """Transfers API Tests"""

    @pytest.fixture
    def order(self, client, api_nursery, api_batch):
        return client.post(
            f"{API}/orders",
            json=order_payload(api_nursery, api_batch, process_immediately=True),
        ).json()

    def test_transfer_lifecycle(self, client, order, api_nursery, api_manual_nursery):
        response = client.post(f"{API}/transfers", json={
            "order_id": order["id"],
            "scheduled_date": "2026-11-03",
            "stops": [
                {"nursery_id": api_manual_nursery["id"], "role": "pickup"},
                {"nursery_id": api_nursery["id"], "role": "dropoff"},
            ],
            "total_distance_km": "42.5",
            "driver_name": "Jonas",
        })
        assert response.status_code == 201
        transfer = response.json()
        assert transfer["status"] == "planned"
        assert transfer["order_number"] == order["order_number"]
        assert transfer["stops"][0]["nursery_name"] == "Partenaire Namur"

        response = client.patch(f"{API}/transfers/{transfer['id']}/start")
        assert response.json()["status"] == "in-progress"
        response = client.patch(f"{API}/transfers/{transfer['id']}/complete")
        assert response.json()["status"] == "completed"
        assert response.json()["completed_at"] is not None

        response = client.patch(f"{API}/transfers/{transfer['id']}/cancel")
        assert response.status_code == 409

    def test_invalid_stop_role(self, client, order, api_nursery):
        response = client.post(f"{API}/transfers", json={
            "order_id": order["id"],
            "scheduled_date": "2026-11-03",
            "stops": [{"nursery_id": api_nursery["id"], "role": "detour"}],
        })
        assert response.status_code == 422


class TestMotherPlants:
    """Mutterpflanzen API Tests"""

    @pytest.fixture
    def proposal(self, client):
        return client.post(f"{API}/mother-plants", json={
            "species_id": "juglans-regia",
            "species_name": "Juglans regia",
            "planting_date": "2015-04-01",
            "quantity": 2,
            "member_name": "Paul",
        }).json()

    def test_submit_is_pending(self, client, proposal):
        assert proposal["status"] == "pending"
        assert proposal["source"] == "member-proposal"

    def test_validate(self, client, proposal):
        response = client.patch(
            f"{API}/mother-plants/{proposal['id']}/validate",
            json={"validated_by": "Claire"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "validated"
        assert response.json()["validated_by"] == "Claire"

        again = client.patch(f"{API}/mother-plants/{proposal['id']}/reject")
        assert again.status_code == 409

    def test_reject_with_reason(self, client, proposal):
        response = client.patch(
            f"{API}/mother-plants/{proposal['id']}/reject",
            json={"notes": "Standort nicht zugänglich"},
        )
        data = response.json()
        assert data["status"] == "rejected"
        assert data["notes"] == "Standort nicht zugänglich"

    def test_filter_pending(self, client, proposal):
        response = client.get(f"{API}/mother-plants", params={"status": "pending"})
        assert response.json()["total"] == 1


class TestCatalog:
    """Katalog und Dashboard"""

    def test_catalog_hides_manual_quantities(self, client, api_batch, api_manual_nursery, api_container):
        client.post(f"{API}/stock-batches", json={
            "nursery_id": api_manual_nursery["id"],
            "container_id": api_container["id"],
            "species_id": "ribes-nigrum",
            "species_name": "Ribes nigrum",
            "quantity": 7,
        })

        response = client.get(f"{API}/catalog")
        assert response.status_code == 200
        entries = {e["species_name"]: e for e in response.json()["items"]}
        assert entries["Ribes rubrum"]["available_quantity"] == 10
        assert entries["Ribes nigrum"]["available_quantity"] is None
        assert entries["Ribes nigrum"]["reserved_quantity"] is None
        assert entries["Ribes nigrum"]["available"] is True

    def test_dashboard(self, client, api_nursery, api_batch):
        client.post(f"{API}/orders", json=order_payload(api_nursery, api_batch))
        response = client.get(f"{API}/dashboard")
        assert response.status_code == 200
        data = response.json()
        assert data["pending_orders_count"] == 1
        assert data["low_stock_count"] == 1
        assert len(data["recent_orders"]) == 1
