"""
Mega proyectos comerciales.
"""
from typing import Any, Dict, List

from zoho_sync.application.reconciliation.strategy import EntityStrategy, require_fields
from zoho_sync.infrastructure.database.models import MegaProjectModel
from zoho_sync.infrastructure.external.zoho.types import SourceClient, SourceRecord
from zoho_sync.shared.constants.sync_constants import PreserveRule, SyncEntity
from zoho_sync.shared.utils.parsing import clean_text, number_text, parse_float, slugify, title_case


def related_attribute_ids(records: List[SourceRecord]) -> List[str]:
    """Ids de Atributo de los registros de una lista relacionada de atributos."""
    ids = []
    for record in records:
        attribute = record.get("Atributo") or {}
        if attribute.get("id"):
            ids.append(str(attribute["id"]))
    return ids


class MegaProjectsStrategy(EntityStrategy):
    entity = SyncEntity.MEGA_PROJECTS
    task_name = "Sincronización de Mega Proyectos"
    label = "Mega Proyecto ID"
    model = MegaProjectModel
    key_column = "id"
    select_query = (
        "SELECT id, Name, Direccion_MP, Slogan_comercial, Descripcion, Record_Image, Latitud_MP, Longitud_MP "
        "FROM Mega_Proyectos "
        "WHERE (((((((Mega_proyecto_comercial = true) and Name is not null) and Direccion_MP is not null) "
        "and Slogan_comercial is not null) and Descripcion is not null) and Latitud_MP is not null) "
        "and Longitud_MP is not null)"
    )
    preserve = {
        "seo_title": PreserveRule.NOT_NULL,
        "seo_meta_description": PreserveRule.NOT_NULL,
        "gallery": PreserveRule.NON_EMPTY_ARRAY,
        "is_public": PreserveRule.NOT_NULL,
    }

    def __init__(self, source: SourceClient):
        self.source = source

    def natural_key(self, record: SourceRecord) -> Any:
        return record.get("id")

    async def build_row(self, record: SourceRecord) -> Dict[str, Any]:
        require_fields(record, "Name")
        attributes = await self.source.search(
            "Atributos_Mega_Proyecto", f"(Parent_Id.id:equals:{record['id']})"
        )
        image = clean_text(record.get("Record_Image"))
        return {
            "slug": slugify(record["Name"]),
            "name": title_case(record["Name"]),
            "address": clean_text(record.get("Direccion_MP")),
            "slogan": clean_text(record.get("Slogan_comercial")),
            "description": clean_text(record.get("Descripcion")),
            "seo_title": None,
            "seo_meta_description": None,
            "attributes": related_attribute_ids(attributes),
            "gallery": [{"id": image, "url": image}] if image else [],
            "latitude": number_text(parse_float(record.get("Latitud_MP"))),
            "longitude": number_text(parse_float(record.get("Longitud_MP"))),
            "is_public": False,
        }
