"""
Querschnittsfunktionen (Fehler)
"""
from nursery.core.exceptions import (
    NurseryError,
    InsufficientStock,
    InvariantViolation,
    InvalidTransition,
    NotFound,
    OrderNumberConflict,
    ResourceInUse,
)

__all__ = [
    "NurseryError",
    "InsufficientStock",
    "InvariantViolation",
    "InvalidTransition",
    "NotFound",
    "OrderNumberConflict",
    "ResourceInUse",
]
