#!/usr/bin/env python3
"""
Seed Data Script für die Semisto Pépinière
Erstellt Beispieldaten: Pépinières, Container, Chargen, Mutterpflanzen.

Verwendung:
    python scripts/seed_data.py
"""
import sys
import os
from datetime import date
from decimal import Decimal

# Pfad für Imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "backend"))

from sqlalchemy.orm import Session
from nursery.database import SessionLocal, engine, Base
from nursery.models import Nursery, Container, MotherPlant
from nursery.models.enums import GrowthStage, IntegrationMode, MotherPlantSource, NurseryType
from nursery.services.stock_ledger import StockLedger


# ============== STAMMDATEN ==============

NURSERIES_DATA = [
    {
        "name": "Pépinière Semisto Liège",
        "nursery_type": NurseryType.SEMISTO,
        "integration": IntegrationMode.PLATFORM,
        "address": "Rue des Vergers 12",
        "city": "Liège",
        "postal_code": "4000",
        "country": "BE",
        "specialties": ["Fruitiers", "Haies"],
    },
    {
        "name": "Pépinière Semisto Bruxelles",
        "nursery_type": NurseryType.SEMISTO,
        "integration": IntegrationMode.PLATFORM,
        "city": "Bruxelles",
        "postal_code": "1000",
        "country": "BE",
        "specialties": ["Petits fruits"],
    },
    {
        "name": "Les Jardins de la Haie",
        "nursery_type": NurseryType.PARTNER,
        "integration": IntegrationMode.MANUAL,
        "city": "Namur",
        "postal_code": "5000",
        "country": "BE",
        "contact_name": "Sophie Lambert",
        "is_pickup_point": False,
    },
]

CONTAINERS_DATA = [
    {"name": "Godet 9cm", "short_name": "G9", "volume_liters": Decimal("0.5"), "sort_order": 1},
    {"name": "Pot 3 litres", "short_name": "P3L", "volume_liters": Decimal("3"), "sort_order": 2},
    {"name": "Racines nues", "short_name": "RN", "sort_order": 3},
]

# (Pépinière-Index, Container-Kürzel, Art, Sorte, Stadium, Menge, Preis, Semos-Preis)
BATCHES_DATA = [
    (0, "P3L", "malus-domestica", "Malus domestica", "Reinette de Blenheim", GrowthStage.YOUNG, 25, "18.00", "15.00"),
    (0, "RN", "corylus-avellana", "Corylus avellana", "", GrowthStage.ESTABLISHED, 120, "4.50", None),
    (0, "G9", "ribes-rubrum", "Ribes rubrum", "Jonkheer van Tets", GrowthStage.SEEDLING, 8, "6.00", "5.00"),
    (1, "P3L", "pyrus-communis", "Pyrus communis", "Conférence", GrowthStage.YOUNG, 14, "19.50", None),
    (1, "G9", "rubus-idaeus", "Rubus idaeus", "Malling Promise", GrowthStage.SEEDLING, 3, "5.00", "4.00"),
    (2, "RN", "sambucus-nigra", "Sambucus nigra", "", GrowthStage.ESTABLISHED, 40, "7.00", None),
]

MOTHER_PLANTS_DATA = [
    {
        "species_id": "juglans-regia",
        "species_name": "Juglans regia",
        "place_name": "Verger de Tilff",
        "planting_date": date(2012, 11, 20),
        "quantity": 2,
        "source": MotherPlantSource.MEMBER_PROPOSAL,
        "member_name": "Anne Dupont",
    },
    {
        "species_id": "castanea-sativa",
        "species_name": "Castanea sativa",
        "place_name": "Jardin-forêt de Gembloux",
        "planting_date": date(2018, 3, 5),
        "quantity": 5,
        "source": MotherPlantSource.DESIGN_STUDIO,
        "project_name": "Forêt comestible Gembloux",
    },
]


def create_nurseries(db: Session) -> list[Nursery]:
    """Pépinières erstellen"""
    print("Erstelle Pépinières...")
    nurseries = [Nursery(**data) for data in NURSERIES_DATA]
    db.add_all(nurseries)
    return nurseries


def create_containers(db: Session) -> dict[str, Container]:
    """Container erstellen"""
    print("Erstelle Container...")
    containers = {data["short_name"]: Container(**data) for data in CONTAINERS_DATA}
    db.add_all(containers.values())
    return containers


def create_batches(db: Session, nurseries: list[Nursery], containers: dict[str, Container]) -> int:
    """Chargen über den Ledger anlegen (Anfangsmenge als Zugang)"""
    print("Erstelle Chargen...")
    ledger = StockLedger(db, actor="Seed")
    for index, short_name, species_id, species_name, variety, stage, quantity, price, semos in BATCHES_DATA:
        ledger.receive_batch(
            quantity=quantity,
            nursery_id=nurseries[index].id,
            container_id=containers[short_name].id,
            species_id=species_id,
            species_name=species_name,
            variety_name=variety,
            growth_stage=stage,
            price_euros=Decimal(price),
            accepts_semos=semos is not None,
            price_semos=Decimal(semos) if semos else None,
        )
    return len(BATCHES_DATA)


def create_mother_plants(db: Session) -> int:
    """Vorgeschlagene Mutterpflanzen (Status: pending)"""
    print("Erstelle Mutterpflanzen...")
    db.add_all(MotherPlant(**data) for data in MOTHER_PLANTS_DATA)
    return len(MOTHER_PLANTS_DATA)


def main():
    print("=" * 50)
    print("Semisto Pépinière - Seed Data")
    print("=" * 50)

    # Tabellen erstellen falls nicht vorhanden
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        existing = db.query(Nursery).count()
        if existing > 0:
            print(f"\nWarnung: Datenbank enthält bereits {existing} Pépinières.")
            response = input("Fortfahren und Daten hinzufügen? (j/n): ")
            if response.lower() != "j":
                print("Abgebrochen.")
                return

        nurseries = create_nurseries(db)
        containers = create_containers(db)
        db.flush()

        batch_count = create_batches(db, nurseries, containers)
        plant_count = create_mother_plants(db)

        db.commit()

        print("\n" + "=" * 50)
        print("Seed-Daten erfolgreich erstellt!")
        print("=" * 50)
        print(f"  - {len(nurseries)} Pépinières")
        print(f"  - {len(containers)} Container")
        print(f"  - {batch_count} Chargen")
        print(f"  - {plant_count} Mutterpflanzen")

    except Exception as e:
        db.rollback()
        print(f"\nFehler: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
