"""
Excepciones del proceso de sincronizacion Zoho -> PostgreSQL.

Taxonomia:
- SourceTransportError / AuthError: fallo de transporte, fatal para la corrida.
- RecordValidationError: error de un registro puntual, se aisla y se reporta.
- SweepError: fallo del borrado masivo, fatal (estado de borrado desconocido).
- PhaseTimeoutError: una fase excedio su tiempo limite.
- DependencyFailedError: una entidad dependiente no se ejecuta porque
  alguna de sus dependencias termino con error critico.
"""
from typing import Optional

from zoho_sync.shared.exceptions.base import AppException
from zoho_sync.shared.exceptions.domain import ValidationException


class SyncException(AppException):
    """Excepción base para errores de sincronización."""

    def __init__(self, message: str, error_code: str = "SYNC_ERROR", details=None, status_code: int = 500):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details
        )


class SourceTransportError(SyncException):
    """Error de red o HTTP al consultar la fuente (Zoho)."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: str = "SOURCE_TRANSPORT_ERROR"):
        super().__init__(
            message=message,
            error_code=error_code,
            details={"upstream_status": status_code} if status_code else None,
            status_code=502,
        )
        self.upstream_status = status_code


class AuthError(SourceTransportError):
    """No fue posible obtener un access token de Zoho."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, status_code=status_code, error_code="AUTH_ERROR")


class RecordValidationError(ValidationException):
    """Un registro de la fuente no cumple los requisitos para persistirse."""


class SweepError(SyncException):
    """Fallo el borrado de registros obsoletos."""

    def __init__(self, table: str, message: str):
        super().__init__(
            message=f"Error eliminando registros obsoletos de {table}: {message}",
            error_code="SWEEP_ERROR",
            details={"table": table},
        )


class PhaseTimeoutError(SyncException):
    """Una fase del reconciliador excedio su tiempo limite."""

    def __init__(self, phase: str, timeout_s: float):
        super().__init__(
            message=f"La fase '{phase}' excedio el tiempo limite de {timeout_s:g}s",
            error_code="PHASE_TIMEOUT",
            details={"phase": phase, "timeout_s": timeout_s},
        )


class DependencyFailedError(SyncException):
    """Una dependencia termino con error critico."""

    def __init__(self, entity: str, failed_dependencies: list[str]):
        super().__init__(
            message=(
                f"No se ejecuta '{entity}': dependencias con error critico "
                f"({', '.join(failed_dependencies)})"
            ),
            error_code="DEPENDENCY_FAILED",
            details={"entity": entity, "dependencies": failed_dependencies},
        )


class SyncAlreadyRunningError(SyncException):
    """Ya hay un batch de sincronizacion en curso en este proceso."""

    def __init__(self):
        super().__init__(
            message="Ya hay una sincronizacion en curso; intente mas tarde",
            error_code="SYNC_ALREADY_RUNNING",
            status_code=409,
        )
