"""
Estrategias por entidad para el reconciliador genérico.

Una estrategia describe QUÉ sincronizar (consulta, llave, tabla, mapeo y
columnas propias del store); el Reconciler define CÓMO (MARK -> SYNC -> SWEEP).
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Mapping, Sequence

from sqlalchemy import Table

from zoho_sync.infrastructure.external.zoho.types import SourceRecord
from zoho_sync.shared.constants.sync_constants import PreserveRule, SyncEntity
from zoho_sync.shared.exceptions.sync import RecordValidationError


def require_fields(record: SourceRecord, *fields: str) -> None:
    """
    Verifica que el registro tenga valores no vacíos en los campos dados.

    Raises:
        RecordValidationError: Con la lista de campos faltantes
    """
    missing = [name for name in fields if record.get(name) in (None, "")]
    if missing:
        raise RecordValidationError(
            f"Registro inválido, faltan campos: {', '.join(missing)}",
            field=missing[0],
        )


class EntityStrategy(ABC):
    """
    Contrato de una entidad sincronizable.

    Atributos de clase:
        entity: Identificador de la entidad
        task_name: Nombre de la tarea en el reporte
        label: Prefijo de referencia en errores ("Ciudad ID")
        model: Modelo ORM destino
        key_column: Columna única donde se guarda la llave natural
        select_query: COQL sin LIMIT
        preserve: Columnas propias del store y su regla
    """

    entity: SyncEntity
    task_name: str
    label: str
    model: Any
    key_column: str
    select_query: str
    preserve: Mapping[str, PreserveRule] = {}

    @property
    def table(self) -> Table:
        return self.model.__table__

    @abstractmethod
    def natural_key(self, record: SourceRecord) -> Any:
        """Valor crudo de la llave natural del registro."""

    @abstractmethod
    async def build_row(self, record: SourceRecord) -> Dict[str, Any]:
        """
        Mapea un registro de la fuente a una fila del store.

        Raises:
            RecordValidationError: Si al registro le faltan datos obligatorios
        """

    async def prepare(self, records: Sequence[SourceRecord]) -> None:
        """Se ejecuta una vez antes de SYNC con los registros únicos."""
        return None

    def reference(self, key: str) -> str:
        return f"{self.label}: {key}"


class ChildStrategy(ABC):
    """
    Contrato de los registros hijos de una entidad (tipologías de proyectos).

    Los hijos se identifican en el store por key_column (id de Zoho) y, si la
    llave aún no existe, por match_columns (p.ej. proyecto y nombre). El
    barrido usa key_column.
    """

    model: Any
    key_column: str = "id"
    match_columns: Sequence[str]
    preserve: Mapping[str, PreserveRule] = {}
    parent_model: Any
    parent_key_column: str

    @property
    def table(self) -> Table:
        return self.model.__table__

    @property
    def parent_table(self) -> Table:
        return self.parent_model.__table__

    @abstractmethod
    async def fetch_children(self, parent_key: str) -> list:
        """Trae de la fuente todos los hijos del padre."""

    @abstractmethod
    def child_key(self, record: SourceRecord) -> Any:
        """Valor crudo de la llave del hijo."""

    @abstractmethod
    def is_eligible(self, record: SourceRecord) -> bool:
        """Si el hijo debe escribirse en el store."""

    @abstractmethod
    def build_row(self, parent_key: str, record: SourceRecord) -> Dict[str, Any]:
        """Mapea un hijo a una fila del store."""

    @abstractmethod
    def aggregate(self, eligible: Iterable[SourceRecord]) -> Dict[str, Any]:
        """Valores agregados que se escriben en el padre."""

    def reference(self, parent_key: str, record: SourceRecord) -> str:
        return f"{parent_key}/{record.get('id') or 'N/A'}"
