"""
Escritura de un registro de la fuente como fila del store.
"""
from dataclasses import dataclass
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from zoho_sync.application.reconciliation.strategy import EntityStrategy
from zoho_sync.domain.repositories.reconciliation_repository import IReconciliationRepository
from zoho_sync.infrastructure.external.zoho.types import SourceRecord
from zoho_sync.shared.exceptions.base import AppException
from zoho_sync.shared.exceptions.sync import AuthError, RecordValidationError, SourceTransportError

# Errores que afectan a un solo registro: se reportan y la corrida continúa.
RECORD_ERRORS = (
    RecordValidationError,
    SourceTransportError,
    SQLAlchemyError,
    ValueError,
    TypeError,
    KeyError,
)


def describe_error(error: BaseException) -> str:
    """Texto corto para `motivo` en el reporte."""
    if isinstance(error, SQLAlchemyError):
        detail = getattr(error, "orig", None) or error
        return f"Error en Base de Datos: {detail}"
    if isinstance(error, AppException):
        return f"{type(error).__name__}: {error.message}"
    return f"{type(error).__name__}: {error}"


@dataclass(frozen=True)
class UpsertResult:
    key: str
    ok: bool
    reason: Optional[str] = None


class RowUpserter:
    """
    Construye la fila con la estrategia y la escribe con un solo
    INSERT ... ON CONFLICT en su propia transacción.
    """

    def __init__(self, strategy: EntityStrategy, repository: IReconciliationRepository):
        self.strategy = strategy
        self.repository = repository

    async def upsert(self, key: str, record: SourceRecord) -> UpsertResult:
        """
        Args:
            key: Llave canónica del registro (se guarda en key_column)
            record: Registro de la fuente

        Returns:
            UpsertResult: ok=False con el motivo si el registro falló
        """
        try:
            row = await self.strategy.build_row(record)
            row[self.strategy.key_column] = key
            await self.repository.upsert(
                self.strategy.table,
                self.strategy.key_column,
                row,
                self.strategy.preserve,
            )
        except AuthError:
            raise
        except RECORD_ERRORS as e:
            reason = describe_error(e)
            logger.warning(f"{self.strategy.reference(key)} no sincronizado: {reason}")
            return UpsertResult(key=key, ok=False, reason=reason)

        return UpsertResult(key=key, ok=True)
