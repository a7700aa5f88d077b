"""
Tests unitarios para los endpoints de sincronización.

Verifica el contrato HTTP:
- POST /api/v1/sync retorna el resumen (200) o el error fatal (500).
- POST /api/v1/sync/{entity} retorna el reporte o 404 si no existe.
- Un batch en curso responde 409 y se refleja en /health.
- Errores no manejados responden 503 (base de datos) o 500.
"""
from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from zoho_sync.api.v1.dependencies.use_case_deps import get_sync_orchestrator
from zoho_sync.application.dto.sync_dto import RunMetricsDTO, RunReportDTO, SyncSummaryDTO
from zoho_sync.application.use_cases.sync_use_cases import SyncOrchestrator
from zoho_sync.shared.exceptions.domain import EntityNotFoundException
from zoho_sync.shared.exceptions.sync import SyncAlreadyRunningError


def _report() -> RunReportDTO:
    return RunReportDTO(
        tarea="Sincronización de Ciudades",
        estado="exitoso",
        metricas=RunMetricsDTO(obtenidos=1, procesados=1, exitosos=1),
    )


@pytest.fixture
def mock_orchestrator() -> AsyncMock:
    orchestrator = AsyncMock()
    orchestrator.run_one = AsyncMock(return_value=_report())
    orchestrator.run_all = AsyncMock(
        return_value=SyncSummaryDTO(
            estadoGeneral="Exitoso",
            fechaInicio="2026-01-01T00:00:00.000Z",
            fechaFin="2026-01-01T00:00:05.000Z",
            duracionSegundos=5.0,
            resumenDeTareas=[_report()],
        )
    )
    return orchestrator


@pytest.fixture
def app_with_mock(mock_orchestrator: AsyncMock):
    """Crea la app FastAPI con el orquestador mockeado via dependency_overrides."""
    from main import create_application
    app = create_application()
    app.dependency_overrides[get_sync_orchestrator] = lambda: mock_orchestrator
    yield app
    app.dependency_overrides.clear()


async def _post(app, path: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post(path)


@pytest.mark.asyncio
async def test_sync_all_returns_summary(app_with_mock) -> None:
    response = await _post(app_with_mock, "/api/v1/sync")

    assert response.status_code == 200
    data = response.json()
    assert data["estadoGeneral"] == "Exitoso"
    assert data["resumenDeTareas"][0]["metricas"]["exitosos"] == 1
    assert "metricasTipologias" not in data["resumenDeTareas"][0]


@pytest.mark.asyncio
async def test_sync_all_unexpected_error_is_fatal(app_with_mock, mock_orchestrator: AsyncMock) -> None:
    mock_orchestrator.run_all.side_effect = RuntimeError("pool agotado")

    response = await _post(app_with_mock, "/api/v1/sync")

    assert response.status_code == 500
    data = response.json()
    assert data["estadoGeneral"] == "Fallo fatal"
    assert data["errorCritico"] == "pool agotado"
    assert {"fechaInicio", "fechaFin", "duracionSegundos"} <= set(data)


@pytest.mark.asyncio
async def test_sync_all_conflict_when_running(app_with_mock, mock_orchestrator: AsyncMock) -> None:
    mock_orchestrator.run_all.side_effect = SyncAlreadyRunningError()

    response = await _post(app_with_mock, "/api/v1/sync")

    assert response.status_code == 409
    assert response.json()["error"] == "SYNC_ALREADY_RUNNING"


@pytest.mark.asyncio
async def test_sync_entity(app_with_mock, mock_orchestrator: AsyncMock) -> None:
    response = await _post(app_with_mock, "/api/v1/sync/cities")

    assert response.status_code == 200
    assert response.json()["tarea"] == "Sincronización de Ciudades"
    mock_orchestrator.run_one.assert_awaited_once_with("cities")


@pytest.mark.asyncio
async def test_sync_unknown_entity_is_404(app_with_mock, mock_orchestrator: AsyncMock) -> None:
    mock_orchestrator.run_one.side_effect = EntityNotFoundException("Entidad de sincronizacion", "planets")

    response = await _post(app_with_mock, "/api/v1/sync/planets")

    assert response.status_code == 404
    assert response.json()["error"] == "ENTITY_NOT_FOUND"


@pytest.mark.asyncio
async def test_service_info(app_with_mock) -> None:
    transport = ASGITransport(app=app_with_mock)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/")

    assert response.status_code == 200
    assert set(response.json()) == {"nombre", "version"}


async def _get(app, path: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(path)


@pytest.mark.asyncio
async def test_database_error_is_503(app_with_mock, mock_orchestrator: AsyncMock) -> None:
    mock_orchestrator.run_one.side_effect = OperationalError("SELECT 1", {}, Exception("conexión rechazada"))

    response = await _post(app_with_mock, "/api/v1/sync/cities")

    assert response.status_code == 503
    data = response.json()
    assert data["error"] == "DATABASE_UNAVAILABLE"
    assert data["details"] == {"path": "/api/v1/sync/cities", "method": "POST"}


@pytest.mark.asyncio
async def test_unexpected_entity_error_is_500(app_with_mock, mock_orchestrator: AsyncMock) -> None:
    mock_orchestrator.run_one.side_effect = RuntimeError("boom")

    response = await _post(app_with_mock, "/api/v1/sync/cities")

    assert response.status_code == 500
    assert response.json()["error"] == "INTERNAL_SERVER_ERROR"


@pytest.mark.asyncio
async def test_health_reports_running_sync(app_with_mock) -> None:
    idle = await _get(app_with_mock, "/health")
    async with SyncOrchestrator._run_lock:
        busy = await _get(app_with_mock, "/health")

    assert idle.status_code == 200
    assert idle.json()["sync_en_curso"] is False
    assert busy.json()["sync_en_curso"] is True
