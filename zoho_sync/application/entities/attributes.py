"""
Atributos de proyecto: registros de Parametros con Tipo = 'Atributo'.
"""
from typing import Any, Dict

from zoho_sync.application.reconciliation.strategy import EntityStrategy, require_fields
from zoho_sync.infrastructure.database.models import ProjectAttributeModel
from zoho_sync.infrastructure.external.zoho.types import SourceRecord
from zoho_sync.shared.constants.sync_constants import SyncEntity
from zoho_sync.shared.utils.parsing import clean_text


class AttributesStrategy(EntityStrategy):
    entity = SyncEntity.ATTRIBUTES
    task_name = "Sincronización de Atributos de Proyecto"
    label = "Atributo ID"
    model = ProjectAttributeModel
    key_column = "id"
    select_query = (
        "SELECT id, Nombre_atributo, Icon_cdn_google FROM Parametros "
        "WHERE (((Tipo = 'Atributo') and Nombre_atributo is not null) and Icon_cdn_google is not null)"
    )

    def natural_key(self, record: SourceRecord) -> Any:
        return record.get("id")

    async def build_row(self, record: SourceRecord) -> Dict[str, Any]:
        require_fields(record, "Nombre_atributo", "Icon_cdn_google")
        return {
            "name": clean_text(record["Nombre_atributo"]),
            # Los iconos de Google Fonts se referencian en minúscula.
            "icon": clean_text(record["Icon_cdn_google"]).lower(),
        }
