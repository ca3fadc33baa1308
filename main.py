from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
import uvicorn
import logging

from config import settings, configure_logging

from routes import (
    appointments_router,
    owners_router,
    vets_router,
    visits_router,
    stats_router,
    auth_router,
)
from database.db import create_tables, get_database_url
from models.common import HealthCheckResponse
from utils.datetime_utils import get_local_now

logger = logging.getLogger(__name__)

# Configurar logging una sola vez al inicio
configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Maneja el ciclo de vida de la aplicación."""
    try:
        create_tables()
        logger.info(f"Base de datos: {get_database_url()}")
    except SQLAlchemyError as e:
        logger.warning(f"No se pudieron crear tablas en la base de datos: {e}")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Gestión de una clínica veterinaria: propietarios, mascotas, veterinarios, visitas y citas.",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    debug=settings.debug_mode
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


def greeting_for(hour: int) -> str:
    """Saludo según la hora local: mañana antes de las 12, tarde antes de las 18."""
    if hour < 12:
        return "Buenos días"
    if hour < 18:
        return "Buenas tardes"
    return "Buenas noches"


@app.get("/")
async def root():
    """Endpoint raíz con información de la API."""
    return {
        "message": f"{greeting_for(get_local_now().hour)}, bienvenido a {settings.app_name}",
        "version": settings.app_version,
        "status": "active",
        "environment": "production" if settings.is_production else "development",
        "docs": "/docs",
        "redoc": "/redoc"
    }


app.include_router(auth_router)
app.include_router(owners_router)
app.include_router(vets_router)
app.include_router(visits_router)
app.include_router(appointments_router)
app.include_router(stats_router)


@app.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Health check endpoint con verificación de base de datos."""
    from database.db import engine
    from sqlalchemy import text

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        logger.error(f"Health check: Error de conexión a BD: {e}")
        db_status = "disconnected"

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "unhealthy",
        service=settings.app_name,
        version=settings.app_version,
        database=db_status,
        environment="production" if settings.is_production else "development",
    )


if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
