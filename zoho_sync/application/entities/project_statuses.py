"""
Estados de proyecto: nombres distintos del campo Estado de los proyectos.

La llave natural es el nombre. Los ids son numéricos y los asigna
IdAllocator; un estado existente conserva su id mientras siga activo.
"""
from typing import Any, Dict, Optional, Sequence

from loguru import logger

from zoho_sync.application.reconciliation.identity import canonical_key
from zoho_sync.application.reconciliation.strategy import EntityStrategy
from zoho_sync.domain.repositories.reconciliation_repository import IReconciliationRepository
from zoho_sync.infrastructure.database.models import ProjectStatusModel
from zoho_sync.infrastructure.external.zoho.types import SourceRecord
from zoho_sync.infrastructure.repositories.id_allocator import IdAllocator
from zoho_sync.shared.constants.sync_constants import PreserveRule, SyncEntity
from zoho_sync.shared.exceptions.sync import RecordValidationError


class ProjectStatusesStrategy(EntityStrategy):
    entity = SyncEntity.PROJECT_STATUSES
    task_name = "Sincronización de Estados de Proyecto"
    label = "Estado"
    model = ProjectStatusModel
    key_column = "name"
    select_query = "SELECT Estado FROM Proyectos_Comerciales WHERE Estado is not null"
    preserve = {"id": PreserveRule.NOT_NULL}

    def __init__(self, repository: IReconciliationRepository, allocator: IdAllocator):
        self.repository = repository
        self.allocator = allocator
        self._ids: Dict[str, str] = {}

    def natural_key(self, record: SourceRecord) -> Any:
        return record.get("Estado")

    async def prepare(self, records: Sequence[SourceRecord]) -> None:
        """Carga los ids existentes y reserva un rango para los nombres nuevos."""
        existing = await self.repository.fetch_column_map(self.table, "name", "id")
        new_names = []
        for record in records:
            name = canonical_key(self.natural_key(record))
            if name and name not in existing and name not in new_names:
                new_names.append(name)

        reserved = await self.allocator.reserve(len(new_names))
        self._ids = {name: str(status_id) for name, status_id in existing.items()}
        self._ids.update({name: str(status_id) for name, status_id in zip(new_names, reserved)})
        if new_names:
            logger.info(f"{len(new_names)} estados nuevos: {', '.join(new_names)}")

    async def build_row(self, record: SourceRecord) -> Dict[str, Any]:
        name = canonical_key(self.natural_key(record))
        status_id: Optional[str] = self._ids.get(name)
        if status_id is None:
            raise RecordValidationError(f"No hay id reservado para el estado '{name}'", field="Estado")
        return {"id": status_id}
