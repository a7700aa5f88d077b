"""
Middleware para errores no manejados por los exception handlers.

Los errores de base de datos que escapan de un endpoint (p.ej. el pool no
puede conectar) responden 503; cualquier otro error responde 500. El cuerpo
tiene la misma forma que el de AppException.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from zoho_sync.shared.exceptions.base import AppException


def unhandled_error(request: Request, exc: Exception) -> AppException:
    """Traduce una excepción no manejada a la AppException que se responde."""
    details = {"path": request.url.path, "method": request.method}
    if isinstance(exc, SQLAlchemyError):
        return AppException(
            message="La base de datos no está disponible",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="DATABASE_UNAVAILABLE",
            details=details,
        )
    return AppException(
        message="Ha ocurrido un error interno del servidor",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code="INTERNAL_SERVER_ERROR",
        details=details,
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Última barrera: registra el traceback y responde JSON."""
    
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            error = unhandled_error(request, exc)
            # opt(exception=...) adjunta el traceback sin formatear el mensaje
            logger.opt(exception=exc).error(
                f"{error.error_code} en {request.method} {request.url.path}: {type(exc).__name__}"
            )
            return JSONResponse(status_code=error.status_code, content=error.to_dict())
