"""
Tests de la sincronización de proyectos con sus tipologías.

Verifica:
- Solo se escriben tipologías con unidades disponibles
- Agregados del proyecto (mínimo positivo de plazo y cuota inicial)
- Sub-recursos opcionales (sala de ventas) vs obligatorios (atributos)
- Barrido de tipologías y proyectos obsoletos
"""
import pytest

from zoho_sync.application.entities import ProjectsStrategy, TypologiesStrategy
from zoho_sync.application.reconciliation.reconciler import ParentChildReconciler
from zoho_sync.infrastructure.database.models import ProjectModel, ProjectStatusModel, TypologyModel
from zoho_sync.shared.constants.sync_constants import RunState
from zoho_sync.shared.exceptions.sync import AuthError, SourceTransportError
from tests.conftest import get_row


PROJECTS = ProjectModel.__table__
TYPOLOGIES = TypologyModel.__table__


def _project(hc: str, **overrides) -> dict:
    record = {
        "id": hc,
        "Name": "torre NORTE",
        "Slug": "torre-norte",
        "Slogan": "Vive mejor",
        "Direccion": "Calle 1 # 2-3",
        "Ciudad.Name": "bogota / cundinamarca",
        "Descripcion_corta": "Corta",
        "Descripcion_larga": "Larga",
        "SIG": "sig",
        "Sala_de_ventas.id": f"SV-{hc}",
        "Sala_de_ventas.Name": "Sala",
        "Cantidad_SMMLV": "135",
        "Precio_en_SMMLV": True,
        "Precios_desde": "250000000",
        "Precios_hasta": 380000000.0,
        "Tipo_de_proyecto": "VIS",
        "Estado": "SOBRE PLANOS",
        "Proyecto_destacado": True,
        "Area_construida_desde": "45.5",
        "Area_construida_hasta": 60,
        "Habitaciones": ["2", "3"],
        "Ba_os": ["1", "2"],
        "Latitud": "4.61",
        "Longitud": -74.0,
        "Mega_Proyecto.id": "MP1",
        "Descripcion_descuento": "",
        "bonus_ref": None,
    }
    record.update(overrides)
    return record


def _typology(zoho_id: str, name: str, available, term=None, deposit=None) -> dict:
    return {
        "id": zoho_id,
        "Nombre": name,
        "Und_Disponibles": available,
        "Plazo_en_meses": term,
        "Cuota_inicial1": deposit,
        "Precio_desde": "100",
        "Habitaciones": "2",
    }


def _criteria(hc: str) -> str:
    return f"(Parent_Id.id:equals:{hc})"


@pytest.fixture
def source(fake_source):
    fake_source.modules["Proyectos_Comerciales"] = [_project("P1")]
    fake_source.records[("Salas_de_venta", "SV-P1")] = {
        "Direccion": "Sala calle 9", "Horario": "L-V 9-5", "Latitud_SV": "4.6", "Longitud_SV": "-74.1",
    }
    fake_source.records[("Proyectos_Comerciales", "P1")] = {
        "Proyectos_comerciales_relacionados": [
            {"id": "bridge-1", "Relacionado": {"id": "P7", "name": "Otro"}},
            {"id": "bridge-2", "Relacionado": None},
        ]
    }
    fake_source.searches[("Atributos", _criteria("P1"))] = [
        {"Atributo": {"id": "AT1"}}, {"Atributo": None},
    ]
    fake_source.searches[("Tipologias", _criteria("P1"))] = [
        _typology("T1", "Tipo A", 2, term="24", deposit=5000000),
        _typology("T2", "Tipo B", 0, term="6", deposit=100),
        _typology("T3", "Tipo C", "1", term=12, deposit=0),
    ]
    return fake_source


async def _seed_status(repository) -> None:
    await repository.upsert(ProjectStatusModel.__table__, "name", {"id": "1000", "name": "Sobre planos"}, {})


def _reconciler(source, repository) -> ParentChildReconciler:
    return ParentChildReconciler(
        ProjectsStrategy(source, repository, concurrency=3),
        TypologiesStrategy(source),
        source,
        repository,
        page_size=50,
        child_concurrency=2,
    )


# =============================================================================
# Proyecto
# =============================================================================

class TestProjectRow:
    @pytest.mark.asyncio
    async def test_project_columns_are_mapped(self, source, repository) -> None:
        await _seed_status(repository)

        report = await _reconciler(source, repository).run()

        assert report.state is RunState.SUCCESS
        row = await get_row(repository.engine, PROJECTS, "hc", "P1")
        assert row["name"] == "Torre Norte"
        assert row["city"] == "Bogota"
        assert row["status"] == ["1000"]
        assert row["attributes"] == ["AT1"]
        assert row["relation_projects"] == ["P7"]
        assert row["sales_room_address"] == "Sala calle 9"
        assert row["salary_minimum_count"] == 135
        assert row["price_up_general"] == 380000000
        assert (row["rooms"], row["bathrooms"]) == (3, 2)
        assert (row["latitude"], row["longitude"]) == ("4.61", "-74")
        assert row["discount_description"] is None
        assert row["mega_project_id"] == "MP1"

    @pytest.mark.asyncio
    async def test_unknown_status_is_stored_empty(self, source, repository) -> None:
        report = await _reconciler(source, repository).run()

        assert report.state is RunState.SUCCESS
        assert (await get_row(repository.engine, PROJECTS, "hc", "P1"))["status"] == []

    @pytest.mark.asyncio
    async def test_sales_room_failure_is_tolerated(self, source, repository) -> None:
        source.errors[("get_record", "Salas_de_venta", "SV-P1")] = SourceTransportError("500", status_code=500)

        report = await _reconciler(source, repository).run()

        assert report.state is RunState.SUCCESS
        row = await get_row(repository.engine, PROJECTS, "hc", "P1")
        assert row["sales_room_address"] == ""
        assert row["sales_room_latitude"] == "0"

    @pytest.mark.asyncio
    async def test_attributes_failure_fails_the_record(self, source, repository) -> None:
        source.errors[("search", "Atributos", _criteria("P1"))] = SourceTransportError("500", status_code=500)

        report = await _reconciler(source, repository).run()

        assert report.state is RunState.PARTIAL_FAILURE
        assert report.errors[0].reference == "Proyecto HC: P1"
        assert await get_row(repository.engine, PROJECTS, "hc", "P1") is None

    @pytest.mark.asyncio
    async def test_auth_error_is_critical(self, source, repository) -> None:
        source.errors[("get_record", "Salas_de_venta", "SV-P1")] = AuthError("token invalido", status_code=401)

        report = await _reconciler(source, repository).run()

        assert report.state is RunState.CRITICAL_FAILURE


# =============================================================================
# Tipologías
# =============================================================================

class TestTypologies:
    @pytest.mark.asyncio
    async def test_only_available_typologies_are_written(self, source, repository) -> None:
        report = await _reconciler(source, repository).run()

        stored = await repository.fetch_column_map(TYPOLOGIES, "id", "name")
        assert stored == {"T1": "Tipo A", "T3": "Tipo C"}
        assert report.to_dict()["metricasTipologias"] == {
            "obtenidas": 3, "procesadas": 2, "fallidas": 0, "eliminadas": 0,
        }

    @pytest.mark.asyncio
    async def test_project_aggregates_use_min_positive(self, source, repository) -> None:
        await _reconciler(source, repository).run()

        row = await get_row(repository.engine, PROJECTS, "hc", "P1")
        assert row["delivery_time"] == 12
        assert row["deposit"] == 5000000

    @pytest.mark.asyncio
    async def test_aggregates_are_zero_without_available_typologies(self, source, repository) -> None:
        source.searches[("Tipologias", _criteria("P1"))] = [_typology("T2", "Tipo B", 0, term="6")]

        await _reconciler(source, repository).run()

        row = await get_row(repository.engine, PROJECTS, "hc", "P1")
        assert (row["delivery_time"], row["deposit"]) == (0, 0)

    @pytest.mark.asyncio
    async def test_invalid_typology_is_reported_with_parent_reference(self, source, repository) -> None:
        source.searches[("Tipologias", _criteria("P1"))] = [
            _typology("T1", "Tipo A", 2, term="24"),
            _typology("T4", "", 3),
        ]

        report = await _reconciler(source, repository).run()

        assert report.state is RunState.PARTIAL_FAILURE
        assert report.child_metrics.failed == 1
        assert report.errors[0].reference == "P1/T4"
        assert set(await repository.fetch_column_map(TYPOLOGIES, "id", "name")) == {"T1"}

    @pytest.mark.asyncio
    async def test_removed_typology_is_swept(self, source, repository) -> None:
        await _reconciler(source, repository).run()

        source.searches[("Tipologias", _criteria("P1"))] = [_typology("T1", "Tipo A", 2, term="24")]
        report = await _reconciler(source, repository).run()

        assert set(await repository.fetch_column_map(TYPOLOGIES, "id", "name")) == {"T1"}
        assert report.child_metrics.deleted == 1

    @pytest.mark.asyncio
    async def test_renamed_typology_keeps_its_row(self, source, repository) -> None:
        await _reconciler(source, repository).run()

        source.searches[("Tipologias", _criteria("P1"))] = [_typology("T1", "Tipo A renombrada", 2, term="24")]
        report = await _reconciler(source, repository).run()

        assert report.state is RunState.SUCCESS
        assert report.errors == []
        assert await repository.fetch_column_map(TYPOLOGIES, "id", "name") == {"T1": "Tipo A renombrada"}

    @pytest.mark.asyncio
    async def test_typology_moved_to_another_project(self, source, repository) -> None:
        await _reconciler(source, repository).run()

        source.modules["Proyectos_Comerciales"] = [_project("P1"), _project("P2")]
        source.searches[("Atributos", _criteria("P2"))] = []
        source.searches[("Tipologias", _criteria("P1"))] = [_typology("T3", "Tipo C", 1, term=12)]
        source.searches[("Tipologias", _criteria("P2"))] = [_typology("T1", "Tipo A", 2, term="24")]
        report = await _reconciler(source, repository).run()

        assert report.state is RunState.SUCCESS
        assert await repository.fetch_column_map(TYPOLOGIES, "id", "project_id") == {"T1": "P2", "T3": "P1"}
        assert (await get_row(repository.engine, PROJECTS, "hc", "P2"))["delivery_time"] == 24

    @pytest.mark.asyncio
    async def test_removed_project_takes_its_typologies(self, source, repository) -> None:
        await _reconciler(source, repository).run()

        source.modules["Proyectos_Comerciales"] = [_project("P2")]
        source.searches[("Atributos", _criteria("P2"))] = []
        report = await _reconciler(source, repository).run()

        assert report.state is RunState.SUCCESS
        assert set(await repository.fetch_column_map(PROJECTS, "hc", "name")) == {"P2"}
        assert await repository.fetch_column_map(TYPOLOGIES, "id", "name") == {}
        assert report.metrics.deleted == 1
        assert report.child_metrics.deleted == 2
