"""
Semisto Pépinière - FastAPI Backend
Hauptanwendung und Router-Konfiguration
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nursery.config import get_settings
from nursery.core.exceptions import NurseryError
from nursery.database import engine, Base
from nursery.api.v1 import nurseries, stock, orders, transfers, mother_plants, catalog

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup und Shutdown Events"""
    # Startup: Tabellen erstellen (für Entwicklung)
    # In Produktion: Alembic Migrations verwenden
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    ## Semisto Pépinière API

    Bestand und Bestellabwicklung für ein Netzwerk von Pépinières.

    ### Features
    - **Bestand**: Chargen, Reservierungen, Bestandsjournal
    - **Bestellungen**: Checkout, Vorbereitung, Abholung, Stornierung
    - **Transfers**: Touren zwischen Pépinières
    - **Mutterpflanzen**: Vorschläge prüfen
    - **Katalog**: Netzwerkweite Verfügbarkeit
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health Check
@app.get("/health", tags=["System"])
async def health_check():
    """
    Systemstatus prüfen.
    Wird von Docker für Health Checks verwendet.
    """
    return {"status": "healthy", "version": settings.app_version}


@app.get("/", tags=["System"])
async def root():
    """API Root - Zeigt Willkommensnachricht"""
    return {
        "message": "Willkommen bei der Semisto Pépinière",
        "version": settings.app_version,
        "docs": "/docs",
    }


# API Router einbinden
API_PREFIX = "/api/v1/nursery"

app.include_router(nurseries.router, prefix=API_PREFIX, tags=["Stammdaten"])
app.include_router(stock.router, prefix=API_PREFIX, tags=["Bestand"])
app.include_router(orders.router, prefix=API_PREFIX, tags=["Bestellungen"])
app.include_router(transfers.router, prefix=API_PREFIX, tags=["Transfers"])
app.include_router(mother_plants.router, prefix=API_PREFIX, tags=["Mutterpflanzen"])
app.include_router(catalog.router, prefix=API_PREFIX, tags=["Katalog"])


# Exception Handler
@app.exception_handler(NurseryError)
async def nursery_error_handler(request: Request, exc: NurseryError):
    """Fachliche Fehler mit Code und Kontextdaten"""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} bei {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.as_dict())


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Ungültige Eingaben aus der Service-Schicht"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "code": "INVALID_INPUT", "data": {}},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Globaler Exception Handler"""
    logger.exception(f"Unbehandelter Fehler bei {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Ein interner Fehler ist aufgetreten.",
            "error": str(exc) if settings.debug else None
        }
    )
