from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from pathlib import Path
from contextlib import asynccontextmanager
import logging

from core.config import settings
from core.database import Database
from core.storage import StorageService
from core.cache import ProductCache
from core.exceptions import CatalogError, describe_validation_errors

# Rutas de endpoints importadas
from routes.auth import router as auth_router
from routes.products import router as products_router

# Tareas automáticas
from core.tasks import start_scheduler, stop_scheduler

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


# ==================== LIFESPAN EVENTS ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestiona el startup y shutdown de la aplicación.
    Abre la base de datos, el storage y el cache; los cierra al apagar.
    """
    # Startup
    db = Database(
        settings.DATABASE_URL,
        retries=settings.DB_CONNECT_RETRIES,
        delay=settings.DB_CONNECT_DELAY,
        auto_create=settings.DB_AUTO_CREATE
    ).open()
    app.state.db = db
    app.state.storage = StorageService()
    app.state.cache = ProductCache.from_settings()

    scheduler = None
    if settings.ORPHAN_SWEEP_ENABLED:
        scheduler = start_scheduler(db, app.state.storage)

    yield

    # Shutdown
    if scheduler is not None:
        stop_scheduler(scheduler)
    app.state.cache.close()
    db.close()


# ==================== EXCEPTION HANDLERS ====================

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Maneja errores de validación de Pydantic (query params, formularios)
    y los convierte al formato estándar.
    """
    error_messages, validation_errors = describe_validation_errors(exc.errors(), loc_offset=1)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "status_code": 400,
            "message": "Error de validación: " + "; ".join(error_messages),
            "error": "VALIDATION_ERROR",
            "details": validation_errors
        }
    )


async def catalog_exception_handler(request: Request, exc: CatalogError):
    """Errores del dominio: validación (400), no encontrado (404), conflicto (409)"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Errores de base de datos: detalle solo en el log"""
    logger.error(f"Error de base de datos en {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "status_code": 500,
            "message": "Error interno del servidor",
            "error": "DATABASE_ERROR"
        }
    )


def create_app() -> FastAPI:
    development = settings.ENV == "development"

    app = FastAPI(
        title=settings.API_TITLE,
        version=settings.API_VERSION,
        description=settings.API_DESCRIPTION,
        docs_url="/docs" if development else None,
        redoc_url="/redoc" if development else None,
        openapi_url="/openapi.json" if development else None,
        redirect_slashes=False,  # Evita redirects 307
        lifespan=lifespan
    )

    allow_origins = [origin.strip() for origin in settings.CORS_ALLOW_ORIGINS.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(CatalogError, catalog_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)

    # Registrar routers
    app.include_router(auth_router)
    app.include_router(products_router)

    # Servir imágenes subidas como archivos estáticos
    # IMPORTANTE: Debe ir después de los routers para no capturar las rutas de API
    uploads_path = Path(settings.UPLOAD_DIR)
    uploads_path.mkdir(parents=True, exist_ok=True)
    app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=str(uploads_path)), name="uploads")

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to the Catalogo API",
            "version": settings.API_VERSION,
            "docs": "/docs"
        }

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
