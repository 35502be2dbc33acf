from enum import Enum


class NurseryType(str, Enum):
    """Art der Pépinière"""
    SEMISTO = "semisto"           # Eigene Pépinière
    PARTNER = "partner"           # Partner-Pépinière


class IntegrationMode(str, Enum):
    """Wie der Bestand einer Pépinière geführt wird"""
    PLATFORM = "platform"         # Exakte Mengen auf der Plattform
    MANUAL = "manual"             # Nur grobe Verfügbarkeit (Partner pflegt selbst)


class GrowthStage(str, Enum):
    """Entwicklungsstadium einer Charge"""
    SEED = "seed"
    SEEDLING = "seedling"
    YOUNG = "young"
    ESTABLISHED = "established"
    MATURE = "mature"


class MovementType(str, Enum):
    """Art der Bestandsbuchung"""
    RECEIPT = "receipt"           # Zugang / Korrektur nach oben
    RESERVE = "reserve"           # verfügbar -> reserviert
    RELEASE = "release"           # reserviert -> verfügbar
    CONSUME = "consume"           # reserviert -> abgeholt
    SHRINK = "shrink"             # Verlust / Abschreibung


class OrderStatus(str, Enum):
    """Status einer Bestellung"""
    NEW = "new"                   # Neu - Positionen änderbar
    PROCESSING = "processing"     # Bestand reserviert
    READY = "ready"               # Abholbereit
    PICKED_UP = "picked-up"       # Abgeholt (terminal)
    CANCELLED = "cancelled"       # Storniert (terminal)

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.PICKED_UP, OrderStatus.CANCELLED)


class PriceLevel(str, Enum):
    """Preisstufe der Bestellung"""
    SOLIDARITY = "solidarity"     # Mitglieder-/Solidaritätstarif
    STANDARD = "standard"
    SUPPORT = "support"           # Unterstützertarif


class TransferStatus(str, Enum):
    """Status eines Transfers"""
    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        return self in (TransferStatus.PLANNED, TransferStatus.IN_PROGRESS)


class StopRole(str, Enum):
    """Rolle eines Halts auf der Tour"""
    PICKUP = "pickup"
    DROPOFF = "dropoff"


class MotherPlantStatus(str, Enum):
    """Prüfstatus einer Mutterpflanze"""
    PENDING = "pending"
    VALIDATED = "validated"
    REJECTED = "rejected"


class MotherPlantSource(str, Enum):
    """Herkunft des Vorschlags"""
    DESIGN_STUDIO = "design-studio"
    MEMBER_PROPOSAL = "member-proposal"
