"""
Datenbankverbindung und Session-Management
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from nursery.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    """SQLite kennt keinen Connection-Pool mit Größenangaben"""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}


# Engine erstellen
engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

# Session Factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Basis-Klasse für alle SQLAlchemy Models"""
    pass


def get_db():
    """
    Request-Session. Endpoints committen selbst; bei einem Fehler wird
    alles seit dem letzten Commit verworfen.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
