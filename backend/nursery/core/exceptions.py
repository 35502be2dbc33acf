"""
Fachliche Fehler der Pépinière.

Alle Fehler sind NurseryError mit einem strukturierten Code für die
programmatische Auswertung (API, Tests, Logs).

Verwendung:
    try:
        ledger.reserve(batch, 10)
    except InsufficientStock as e:
        print(f"Nur {e.available} verfügbar")
"""
from typing import Any
from uuid import UUID


class NurseryError(Exception):
    """
    Basis-Fehler mit Code, Nachricht und Kontextdaten.

    Attributes:
        code: Fehlercode für programmatische Auswertung
        message: Lesbare Nachricht
        data: Zusätzliche Kontextdaten
        status_code: HTTP-Status für die API
    """

    code = "NURSERY_ERROR"
    status_code = 400
    default_message = "Fehler in der Pépinière"

    def __init__(self, message: str | None = None, **data: Any):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    def as_dict(self) -> dict[str, Any]:
        """Serialisierung für API-Antworten"""
        return {
            "detail": self.message,
            "code": self.code,
            "data": {
                k: str(v) if isinstance(v, UUID) else v
                for k, v in self.data.items()
            },
        }


class InsufficientStock(NurseryError):
    """Reservierung kann nicht bedient werden - Charge bleibt unverändert"""
    code = "INSUFFICIENT_STOCK"
    status_code = 409
    default_message = "Nicht genug Bestand verfügbar"

    @property
    def available(self) -> int:
        return self.data.get("available", 0)

    @property
    def requested(self) -> int:
        return self.data.get("requested", 0)

    @property
    def batch_id(self):
        return self.data.get("batch_id")


class InvariantViolation(NurseryError):
    """Programmierfehler: Operation widerspricht den Zählern der Charge"""
    code = "INVARIANT_VIOLATION"
    status_code = 500
    default_message = "Bestandsinvariante verletzt"


class InvalidTransition(NurseryError):
    """Statuswechsel ist aus dem aktuellen Status nicht erlaubt"""
    code = "INVALID_TRANSITION"
    status_code = 409
    default_message = "Statuswechsel nicht erlaubt"


class NotFound(NurseryError):
    """Referenzierter Datensatz fehlt oder ist gelöscht"""
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Datensatz nicht gefunden"


class ResourceInUse(NurseryError):
    """Datensatz wird noch referenziert oder ist bereits belegt"""
    code = "RESOURCE_IN_USE"
    status_code = 409
    default_message = "Datensatz wird noch verwendet"


class OrderNumberConflict(NurseryError):
    """Bestellnummer wurde gleichzeitig von einem anderen Checkout vergeben"""
    code = "ORDER_NUMBER_CONFLICT"
    status_code = 409
    default_message = "Bestellnummer bereits vergeben, bitte erneut versuchen"
