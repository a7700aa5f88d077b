"""
Punto de entrada del servicio de sincronización Zoho CRM -> PostgreSQL.
Arma la aplicación FastAPI: middlewares, manejo de errores, rutas y eventos.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from zoho_sync.core.config import settings, get_cors_origins
from zoho_sync.core.events import startup_handler, shutdown_handler
from zoho_sync.api.v1.router import api_router
from zoho_sync.api.middlewares.error_handler import ErrorHandlerMiddleware
from zoho_sync.application.dto.sync_dto import HealthDTO, ServiceInfoDTO
from zoho_sync.application.use_cases.sync_use_cases import SyncOrchestrator
from zoho_sync.shared.exceptions.base import AppException


def _register_exception_handlers(application: FastAPI) -> None:
    @application.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        # Los 5xx se registran como error; los 4xx son respuestas esperadas del contrato.
        log = logger.error if exc.status_code >= 500 else logger.info
        log(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _register_service_routes(application: FastAPI) -> None:
    @application.get("/", response_model=ServiceInfoDTO, tags=["Health"])
    async def service_info() -> ServiceInfoDTO:
        """Nombre y version del servicio."""
        return ServiceInfoDTO(nombre=settings.APP_NAME, version=settings.APP_VERSION)

    @application.get("/health", response_model=HealthDTO, tags=["Health"])
    async def health_check() -> HealthDTO:
        return HealthDTO(
            app_name=settings.APP_NAME,
            version=settings.APP_VERSION,
            environment=settings.ENVIRONMENT,
            sync_en_curso=SyncOrchestrator.is_running(),
        )


def create_application() -> FastAPI:
    """
    Factory de la aplicación.

    Rutas:
        GET  /                       nombre y versión
        GET  /health                 estado y si hay una sincronización en curso
        POST /api/v1/sync            batch completo
        POST /api/v1/sync/{entity}   una entidad
    """
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Sincronización de Zoho CRM hacia PostgreSQL (MARK -> SYNC -> SWEEP)",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(settings.CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    application.add_middleware(ErrorHandlerMiddleware)

    application.add_event_handler("startup", startup_handler(application))
    application.add_event_handler("shutdown", shutdown_handler(application))

    _register_exception_handlers(application)
    _register_service_routes(application)
    application.include_router(api_router, prefix="/api")

    return application


app = create_application()


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
