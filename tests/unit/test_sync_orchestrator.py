"""
Tests del orquestador del batch completo.

Verifica:
- Las dependencias se sincronizan antes que los proyectos
- Un error crítico en una dependencia omite proyectos
- Un solo batch a la vez por proceso
"""
import pytest

from zoho_sync.application.use_cases.sync_use_cases import SyncOrchestrator, build_orchestrator, parse_entity
from zoho_sync.core.config import Settings
from zoho_sync.infrastructure.database.models import ProjectModel, ProjectStatusModel
from zoho_sync.shared.constants.sync_constants import SyncEntity
from zoho_sync.shared.exceptions.domain import EntityNotFoundException
from zoho_sync.shared.exceptions.sync import SourceTransportError, SyncAlreadyRunningError
from tests.conftest import get_row


def _config() -> Settings:
    return Settings(
        SYNC_PAGE_SIZE=10,
        SYNC_SUBRESOURCE_CONCURRENCY=2,
        SYNC_PHASE_TIMEOUT_S=30,
        STATUS_INITIAL_ID=500,
    )


def _project(hc: str) -> dict:
    return {
        "id": hc,
        "Name": f"proyecto {hc}",
        "Ciudad.id": "C1",
        "Ciudad.Name": "cali / valle",
        "Estado": "Sobre planos",
        "Sala_de_ventas.id": None,
        "Precios_desde": 1,
        "Precios_hasta": 2,
    }


@pytest.fixture
def source(fake_source):
    fake_source.modules["Proyectos_Comerciales"] = [_project("P1"), _project("P2")]
    fake_source.modules["Parametros"] = [{"id": "AT1", "Nombre_atributo": "Piscina", "Icon_cdn_google": "pool"}]
    fake_source.modules["Mega_Proyectos"] = [{"id": "MP1", "Name": "mega"}]
    return fake_source


class TestRunAll:
    @pytest.mark.asyncio
    async def test_full_batch(self, source, db_engine, repository) -> None:
        orchestrator = build_orchestrator(source, db_engine, _config())

        summary = await orchestrator.run_all()

        assert summary.estadoGeneral == "Exitoso"
        assert [task.tarea for task in summary.resumenDeTareas] == [
            "Sincronización de Ciudades",
            "Sincronización de Estados de Proyecto",
            "Sincronización de Atributos de Proyecto",
            "Sincronización de Mega Proyectos",
            "Sincronización de Proyectos y Tipologías",
        ]
        assert all(task.estado == "exitoso" for task in summary.resumenDeTareas)
        statuses = await repository.fetch_column_map(ProjectStatusModel.__table__, "name", "id")
        assert statuses == {"Sobre planos": "500"}
        project = await get_row(repository.engine, ProjectModel.__table__, "hc", "P1")
        assert project["status"] == ["500"]

    @pytest.mark.asyncio
    async def test_dependency_failure_skips_projects(self, source, db_engine, repository) -> None:
        source.errors[("query", "Mega_Proyectos", 0)] = SourceTransportError("Zoho respondio 503", status_code=503)
        orchestrator = build_orchestrator(source, db_engine, _config())

        summary = await orchestrator.run_all()

        assert summary.estadoGeneral == "Finalizado con errores"
        by_task = {task.tarea: task for task in summary.resumenDeTareas}
        assert by_task["Sincronización de Mega Proyectos"].estado == "error_critico"
        projects = by_task["Sincronización de Proyectos y Tipologías"]
        assert projects.estado == "error_critico"
        assert "DependencyFailedError" in projects.erroresDetallados[0].motivo
        assert by_task["Sincronización de Ciudades"].estado == "exitoso"
        assert await repository.fetch_column_map(ProjectModel.__table__, "hc", "name") == {}


class TestRunOne:
    @pytest.mark.asyncio
    async def test_single_entity(self, source, db_engine) -> None:
        orchestrator = build_orchestrator(source, db_engine, _config())

        report = await orchestrator.run_one("attributes")

        assert report.tarea == "Sincronización de Atributos de Proyecto"
        assert report.metricas.exitosos == 1

    @pytest.mark.asyncio
    async def test_unknown_entity(self, source, db_engine) -> None:
        orchestrator = build_orchestrator(source, db_engine, _config())

        with pytest.raises(EntityNotFoundException):
            await orchestrator.run_one("unknown")

    @pytest.mark.asyncio
    async def test_rejects_concurrent_batch(self, source, db_engine) -> None:
        orchestrator = build_orchestrator(source, db_engine, _config())

        await SyncOrchestrator._run_lock.acquire()
        try:
            with pytest.raises(SyncAlreadyRunningError):
                await orchestrator.run_one("cities")
        finally:
            SyncOrchestrator._run_lock.release()


def test_parse_entity() -> None:
    assert parse_entity("mega_projects") is SyncEntity.MEGA_PROJECTS
    with pytest.raises(EntityNotFoundException):
        parse_entity("Typologies")
