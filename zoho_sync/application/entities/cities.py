"""
Ciudades: se derivan de la ciudad de cada proyecto comercial.
"""
from typing import Any, Dict

from zoho_sync.application.reconciliation.strategy import EntityStrategy, require_fields
from zoho_sync.infrastructure.database.models import CityModel
from zoho_sync.infrastructure.external.zoho.types import SourceRecord
from zoho_sync.shared.constants.sync_constants import PreserveRule, SyncEntity
from zoho_sync.shared.exceptions.sync import RecordValidationError
from zoho_sync.shared.utils.parsing import clean_city_name


class CitiesStrategy(EntityStrategy):
    entity = SyncEntity.CITIES
    task_name = "Sincronización de Ciudades"
    label = "Ciudad ID"
    model = CityModel
    key_column = "id"
    select_query = "SELECT Ciudad.Name, Ciudad.id FROM Proyectos_Comerciales WHERE Ciudad is not null"
    preserve = {"is_public": PreserveRule.NOT_NULL}

    def natural_key(self, record: SourceRecord) -> Any:
        return record.get("Ciudad.id")

    async def build_row(self, record: SourceRecord) -> Dict[str, Any]:
        require_fields(record, "Ciudad.Name")
        full_name = record["Ciudad.Name"]
        name = clean_city_name(full_name)
        if not name:
            raise RecordValidationError(
                f'Nombre de ciudad vacío después de limpiar: "{full_name}"',
                field="Ciudad.Name",
            )
        return {"name": name, "is_public": False}
