"""
Pytest Konfiguration und gemeinsame Fixtures
"""
import os

# Vor dem Import der Anwendung: keine PostgreSQL-Verbindung in Tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from nursery.main import app
from nursery.database import Base, get_db
from nursery.models import Nursery, Container, MotherPlant
from nursery.models.enums import IntegrationMode, NurseryType
from nursery.services.stock_ledger import StockLedger


# Test-Datenbank (SQLite in-memory)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Test-DB Session"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Dependency Override
app.dependency_overrides[get_db] = override_get_db

API = "/api/v1/nursery"


@pytest.fixture(scope="function")
def db():
    """Datenbankverbindung für Tests"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client():
    """Test Client mit frischer Datenbank"""
    Base.metadata.create_all(bind=engine)
    yield TestClient(app)
    Base.metadata.drop_all(bind=engine)


# ==================== MODEL FIXTURES (Service-Tests) ====================

@pytest.fixture
def platform_nursery(db):
    """Eigene Pépinière mit exakten Mengen"""
    nursery = Nursery(
        name="Pépinière de Liège",
        nursery_type=NurseryType.SEMISTO,
        integration=IntegrationMode.PLATFORM,
        city="Liège",
    )
    db.add(nursery)
    db.commit()
    return nursery


@pytest.fixture
def manual_nursery(db):
    """Partner-Pépinière, die ihren Bestand selbst pflegt"""
    nursery = Nursery(
        name="Les Jardins du Partenaire",
        nursery_type=NurseryType.PARTNER,
        integration=IntegrationMode.MANUAL,
        city="Namur",
    )
    db.add(nursery)
    db.commit()
    return nursery


@pytest.fixture
def container(db):
    container = Container(name="Pot 3 litres", short_name="P3L", volume_liters=Decimal("3"))
    db.add(container)
    db.commit()
    return container


@pytest.fixture
def make_batch(db, platform_nursery, container):
    """Fabrik für Chargen; die Anfangsmenge wird über den Ledger gebucht"""
    def _make(quantity=10, nursery=None, **fields):
        values = {
            "species_id": "malus-domestica",
            "species_name": "Malus domestica",
            "variety_name": "Reinette",
            "price_euros": Decimal("12.50"),
        }
        values.update(fields)
        batch = StockLedger(db).receive_batch(
            quantity=quantity,
            nursery_id=(nursery or platform_nursery).id,
            container_id=container.id,
            **values,
        )
        db.commit()
        return batch
    return _make


@pytest.fixture
def batch(make_batch):
    """Charge: quantity=10, available=10, reserved=0"""
    return make_batch(quantity=10)


@pytest.fixture
def pending_mother_plant(db):
    mother_plant = MotherPlant(
        species_id="corylus-avellana",
        species_name="Corylus avellana",
        planting_date=date(2020, 3, 15),
        quantity=3,
        member_name="Anne Dupont",
        notes="Am Waldrand",
    )
    db.add(mother_plant)
    db.commit()
    return mother_plant


# ==================== API FIXTURES ====================

@pytest.fixture
def api_nursery(client):
    response = client.post(f"{API}/nurseries", json={
        "name": "Pépinière de Liège",
        "integration": "platform",
    })
    return response.json()


@pytest.fixture
def api_manual_nursery(client):
    response = client.post(f"{API}/nurseries", json={
        "name": "Partenaire Namur",
        "nursery_type": "partner",
        "integration": "manual",
    })
    return response.json()


@pytest.fixture
def api_container(client):
    response = client.post(f"{API}/containers", json={
        "name": "Godet 9cm",
        "short_name": "G9",
    })
    return response.json()


@pytest.fixture
def api_batch(client, api_nursery, api_container):
    """Charge über die API: quantity=10"""
    response = client.post(f"{API}/stock-batches", json={
        "nursery_id": api_nursery["id"],
        "container_id": api_container["id"],
        "species_id": "ribes-rubrum",
        "species_name": "Ribes rubrum",
        "quantity": 10,
        "price_euros": "6.00",
        "accepts_semos": True,
        "price_semos": "5.00",
    })
    return response.json()
