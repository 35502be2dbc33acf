"""
Mutterpflanzen - vorgeschlagene Quellpflanzen für künftige Vermehrung
"""
import uuid
from datetime import datetime, date
from typing import Optional
from sqlalchemy import String, Integer, DateTime, Date, Text, Enum as SQLEnum
from sqlalchemy.types import Uuid
from sqlalchemy.orm import Mapped, mapped_column

from nursery.database import Base
from nursery.models.enums import MotherPlantStatus, MotherPlantSource


class MotherPlant(Base):
    """
    Mutterpflanze - von Mitgliedern vorgeschlagen oder vom Design-Studio erfasst.

    Geschäftsregeln:
    - pending -> validated | rejected, beide final
    - Ablehnungsgrund wird in notes gespeichert
    - Keine Verbindung zu Chargen oder Bestellungen
    """
    __tablename__ = "nursery_mother_plants"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    # Art / Sorte
    species_id: Mapped[str] = mapped_column(String(100), nullable=False)
    species_name: Mapped[str] = mapped_column(String(200), nullable=False)
    variety_id: Mapped[str] = mapped_column(String(100), default="")
    variety_name: Mapped[str] = mapped_column(String(200), default="")

    # Standort
    place_id: Mapped[str] = mapped_column(String(100), default="")
    place_name: Mapped[str] = mapped_column(String(200), default="")
    place_address: Mapped[str] = mapped_column(String(255), default="")

    planting_date: Mapped[date] = mapped_column(Date, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0)

    # Herkunft des Vorschlags
    source: Mapped[MotherPlantSource] = mapped_column(
        SQLEnum(MotherPlantSource), default=MotherPlantSource.MEMBER_PROPOSAL, nullable=False
    )
    project_id: Mapped[str] = mapped_column(String(100), default="")
    project_name: Mapped[str] = mapped_column(String(200), default="")
    member_id: Mapped[str] = mapped_column(String(100), default="")
    member_name: Mapped[str] = mapped_column(String(200), default="")

    # Prüfung
    status: Mapped[MotherPlantStatus] = mapped_column(
        SQLEnum(MotherPlantStatus), default=MotherPlantStatus.PENDING, nullable=False, index=True
    )
    validated_by: Mapped[str] = mapped_column(String(200), default="")
    validated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    notes: Mapped[str] = mapped_column(Text, default="")
    last_harvest_date: Mapped[Optional[date]] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<MotherPlant(species='{self.species_name}', status={self.status.value})>"
