"""
API Dependencies - Gemeinsame Abhängigkeiten für Endpoints
"""
from typing import Annotated, Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from nursery.database import get_db

# Type Alias für DB Session Dependency
DBSession = Annotated[Session, Depends(get_db)]


async def get_actor(x_user_name: Annotated[Optional[str], Header()] = None) -> Optional[str]:
    """
    Name des Bearbeiters für Journal und Audit-Log.
    Die Anmeldung selbst liegt vor dieser API (Gateway).
    """
    return x_user_name or None


Actor = Annotated[Optional[str], Depends(get_actor)]


# Pagination Parameter
class PaginationParams:
    """Standard Pagination Parameter"""
    def __init__(
        self,
        page: int = 1,
        page_size: int = 20,
        max_page_size: int = 100
    ):
        self.page = max(1, page)
        self.page_size = min(max(1, page_size), max_page_size)
        self.offset = (self.page - 1) * self.page_size


Pagination = Annotated[PaginationParams, Depends()]
