"""
Excepciones de dominio: entidades inexistentes y datos inválidos.
"""
from typing import Any, Optional

from zoho_sync.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepción base para errores de dominio (4xx)."""
    
    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None, status_code: int = 400):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details
        )


class EntityNotFoundException(DomainException):
    """No existe la entidad pedida (p.ej. una entidad de sincronización desconocida)."""
    
    def __init__(self, entity_name: str, entity_id: Any):
        super().__init__(
            message=f"{entity_name} '{entity_id}' no encontrada",
            error_code="ENTITY_NOT_FOUND",
            details={"entity": entity_name, "id": str(entity_id)},
            status_code=404,
        )


class ValidationException(DomainException):
    """Un dato no cumple las reglas de validación."""
    
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field} if field else None,
        )
        self.field = field
