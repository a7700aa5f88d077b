"""
Proyectos comerciales y sus tipologías.

Cada proyecto consulta tres sub-recursos en Zoho en paralelo:
- la sala de ventas (dirección, horario, coordenadas)
- sus atributos (lista relacionada Atributos)
- sus proyectos relacionados

La sala de ventas y los relacionados son opcionales: si fallan se registran
en el log y se usan valores vacíos. Un fallo al traer atributos sí hace
fallar el registro.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

from loguru import logger

from zoho_sync.application.entities.mega_projects import related_attribute_ids
from zoho_sync.application.reconciliation.identity import canonical_key
from zoho_sync.application.reconciliation.strategy import ChildStrategy, EntityStrategy, require_fields
from zoho_sync.domain.repositories.reconciliation_repository import IReconciliationRepository
from zoho_sync.infrastructure.database.models import ProjectModel, ProjectStatusModel, TypologyModel
from zoho_sync.infrastructure.external.zoho.types import SourceClient, SourceRecord
from zoho_sync.shared.constants.sync_constants import PreserveRule, SyncEntity
from zoho_sync.shared.exceptions.sync import AuthError, SourceTransportError
from zoho_sync.shared.utils.concurrency import gather_bounded
from zoho_sync.shared.utils.parsing import (
    clean_city_name,
    clean_text,
    max_int,
    min_positive_int,
    number_text,
    optional_text,
    parse_float,
    parse_int,
    title_case,
)

RELATED_PROJECTS_FIELD = "Proyectos_comerciales_relacionados"


def parent_criteria(parent_id: str) -> str:
    return f"(Parent_Id.id:equals:{parent_id})"


def related_project_ids(details: Optional[SourceRecord]) -> List[str]:
    """
    Extrae los ids de la lista de proyectos relacionados.

    Cada elemento de la lista es un registro puente; el proyecto relacionado
    es el primer valor que sea un objeto con id y name.
    """
    if not details:
        return []
    relations = details.get(RELATED_PROJECTS_FIELD)
    if not isinstance(relations, list):
        return []
    ids = []
    for relation in relations:
        if not isinstance(relation, dict):
            continue
        for value in relation.values():
            if isinstance(value, dict) and value.get("id") and value.get("name"):
                ids.append(str(value["id"]))
                break
    return ids


class ProjectsStrategy(EntityStrategy):
    entity = SyncEntity.PROJECTS
    task_name = "Sincronización de Proyectos y Tipologías"
    label = "Proyecto HC"
    model = ProjectModel
    key_column = "hc"
    select_query = (
        "SELECT id, Name, Slogan, Direccion, Descripcion_corta, Descripcion_larga, SIG, Sala_de_ventas.Name, "
        "Cantidad_SMMLV, Descripcion_descuento, Precios_desde, Precios_hasta, Tipo_de_proyecto, Mega_Proyecto.id, "
        "Estado, Proyecto_destacado, Area_construida_desde, Area_construida_hasta, Habitaciones, Ba_os, Latitud, "
        "Longitud, Ciudad.Name, Sala_de_ventas.id, Slug, Precio_en_SMMLV, bonus_ref "
        "FROM Proyectos_Comerciales "
        "WHERE (((((((((((((((((((((id is not null) and Name is not null) and Slogan is not null) "
        "and Direccion is not null) and Descripcion_corta is not null) and Sala_de_ventas.Name is not null) "
        "and Cantidad_SMMLV is not null) and Precios_desde is not null) and Precios_hasta is not null) "
        "and Tipo_de_proyecto is not null) and Estado is not null) and Proyecto_destacado is not null) "
        "and Area_construida_desde is not null) and Area_construida_hasta is not null) "
        "and Habitaciones is not null) and Ba_os is not null) and Latitud is not null) "
        "and Longitud is not null) and Sala_de_ventas.id is not null) and Slug is not null) "
        "and Precio_en_SMMLV is not null)"
    )
    preserve = {
        "seo_title": PreserveRule.NOT_NULL,
        "seo_meta_description": PreserveRule.NOT_NULL,
        "tour_360": PreserveRule.NOT_NULL,
        "is_public": PreserveRule.NOT_NULL,
        "gallery": PreserveRule.NON_EMPTY_ARRAY,
        "urban_plans": PreserveRule.NON_EMPTY_ARRAY,
        "work_progress_images": PreserveRule.NON_EMPTY_ARRAY,
    }

    def __init__(
        self,
        source: SourceClient,
        repository: IReconciliationRepository,
        *,
        concurrency: int = 5,
    ):
        self.source = source
        self.repository = repository
        self.concurrency = concurrency
        self._status_ids: Dict[str, str] = {}

    def natural_key(self, record: SourceRecord) -> Any:
        return record.get("id")

    async def prepare(self, records: Sequence[SourceRecord]) -> None:
        """Carga los estados una vez; el lookup por nombre no distingue mayúsculas."""
        statuses = await self.repository.fetch_column_map(ProjectStatusModel.__table__, "name", "id")
        self._status_ids = {name.strip().lower(): str(status_id) for name, status_id in statuses.items()}

    def status_for(self, state_name: Any) -> List[str]:
        """Estado del proyecto como lista JSON de ids ([] si no existe en la base)."""
        if not isinstance(state_name, str) or not state_name.strip():
            return []
        status_id = self._status_ids.get(state_name.strip().lower())
        if status_id is None:
            logger.warning(f'Estado no encontrado en la DB: "{state_name}". Se guardará vacío.')
            return []
        return [status_id]

    async def build_row(self, record: SourceRecord) -> Dict[str, Any]:
        require_fields(record, "Name")
        hc = canonical_key(record["id"])
        sales_room, attributes, related = await gather_bounded(
            self.concurrency,
            [
                self._sales_room(record.get("Sala_de_ventas.id")),
                self.source.search("Atributos", parent_criteria(hc)),
                self._related_projects(hc),
            ],
        )
        sales_room = sales_room or {}

        salary_minimum_count = 0
        if record.get("Precio_en_SMMLV") is True:
            salary_minimum_count = parse_int(record.get("Cantidad_SMMLV"))

        return {
            "name": title_case(record["Name"]),
            "slug": clean_text(record.get("Slug")),
            "slogan": clean_text(record.get("Slogan")),
            "address": clean_text(record.get("Direccion")),
            "city": clean_city_name(record.get("Ciudad.Name")),
            "small_description": clean_text(record.get("Descripcion_corta")),
            "long_description": clean_text(record.get("Descripcion_larga")),
            "seo_title": None,
            "seo_meta_description": None,
            "sic": clean_text(record.get("SIG")),
            "sales_room_address": clean_text(sales_room.get("Direccion")),
            "sales_room_schedule_attention": clean_text(sales_room.get("Horario")),
            "sales_room_latitude": clean_text(sales_room.get("Latitud_SV"), "0"),
            "sales_room_longitude": clean_text(sales_room.get("Longitud_SV"), "0"),
            "salary_minimum_count": salary_minimum_count,
            # Se recalculan desde las tipologías.
            "delivery_time": 0,
            "deposit": 0,
            "discount_description": optional_text(record.get("Descripcion_descuento")),
            "bonus_ref": optional_text(record.get("bonus_ref")),
            "price_from_general": parse_int(record.get("Precios_desde")),
            "price_up_general": parse_int(record.get("Precios_hasta")),
            "attributes": related_attribute_ids(attributes),
            "gallery": [],
            "urban_plans": [],
            "work_progress_images": [],
            "tour_360": None,
            "type": clean_text(record.get("Tipo_de_proyecto")),
            "status": self.status_for(record.get("Estado")),
            "highlighted": bool(record.get("Proyecto_destacado")),
            "built_area": parse_float(record.get("Area_construida_desde")),
            "private_area": parse_float(record.get("Area_construida_hasta")),
            "rooms": max_int(record.get("Habitaciones")),
            "bathrooms": max_int(record.get("Ba_os")),
            "relation_projects": related,
            "latitude": number_text(parse_float(record.get("Latitud"))),
            "longitude": number_text(parse_float(record.get("Longitud"))),
            "is_public": False,
            "mega_project_id": canonical_key(record.get("Mega_Proyecto.id")),
        }

    async def _sales_room(self, sales_room_id: Any) -> Optional[SourceRecord]:
        sales_room_id = canonical_key(sales_room_id)
        if not sales_room_id:
            return None
        try:
            return await self.source.get_record("Salas_de_venta", sales_room_id)
        except AuthError:
            raise
        except SourceTransportError as e:
            logger.warning(f"No se pudo obtener la Sala de Ventas {sales_room_id}: {e.message}")
            return None

    async def _related_projects(self, hc: str) -> List[str]:
        try:
            details = await self.source.get_record("Proyectos_Comerciales", hc)
        except AuthError:
            raise
        except SourceTransportError as e:
            logger.warning(f"No se pudieron obtener proyectos relacionados de {hc}: {e.message}")
            return []
        return related_project_ids(details)


class TypologiesStrategy(ChildStrategy):
    """
    Tipologías de un proyecto.

    Solo se escriben las que tienen al menos una unidad disponible.
    delivery_time y deposit del proyecto son el mínimo positivo de
    Plazo_en_meses y Cuota_inicial1 entre las tipologías escritas.
    """

    model = TypologyModel
    key_column = "id"
    match_columns = ("project_id", "name")
    preserve = {
        "gallery": PreserveRule.NON_EMPTY_ARRAY,
        "plans": PreserveRule.NOT_NULL,
    }
    parent_model = ProjectModel
    parent_key_column = "hc"

    def __init__(self, source: SourceClient):
        self.source = source

    async def fetch_children(self, parent_key: str) -> list:
        return await self.source.search("Tipologias", parent_criteria(parent_key))

    def child_key(self, record: SourceRecord) -> Any:
        return record.get("id")

    def is_eligible(self, record: SourceRecord) -> bool:
        return parse_int(record.get("Und_Disponibles")) >= 1

    def build_row(self, parent_key: str, record: SourceRecord) -> Dict[str, Any]:
        require_fields(record, "id", "Nombre")
        return {
            "id": canonical_key(record["id"]),
            "project_id": parent_key,
            "name": clean_text(record["Nombre"]),
            "description": clean_text(record.get("Descripci_n")),
            "price_from": parse_int(record.get("Precio_desde")),
            "price_up": parse_int(record.get("Precio_hasta")),
            "rooms": parse_int(record.get("Habitaciones")),
            "bathrooms": parse_int(record.get("Ba_os")),
            "built_area": parse_float(record.get("Area_construida")),
            "private_area": parse_float(record.get("Area_privada")),
            "min_separation": parse_int(record.get("Separacion")),
            "min_deposit": parse_int(record.get("Cuota_inicial1")),
            "delivery_time": parse_int(record.get("Plazo_en_meses")),
            "available_count": parse_int(record.get("Und_Disponibles")),
            "gallery": [],
            "plans": "",
        }

    def aggregate(self, eligible: Iterable[SourceRecord]) -> Dict[str, Any]:
        eligible = list(eligible)
        return {
            "delivery_time": min_positive_int(t.get("Plazo_en_meses") for t in eligible),
            "deposit": min_positive_int(t.get("Cuota_inicial1") for t in eligible),
        }

    def reference(self, parent_key: str, record: SourceRecord) -> str:
        return f"{parent_key}/{clean_text(record.get('Nombre')) or record.get('id') or 'N/A'}"
