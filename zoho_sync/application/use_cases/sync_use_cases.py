"""
Casos de uso de sincronizacion Zoho -> PostgreSQL.

SyncOrchestrator arma un reconciliador por entidad y ejecuta el batch:
1. ciudades, estados, atributos y mega proyectos en paralelo
2. barrera
3. proyectos (+ tipologias), solo si ninguna dependencia termino en error critico
"""
import asyncio
from dataclasses import dataclass
from typing import List, Optional, Union

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from zoho_sync.application.dto.sync_dto import RunReportDTO, SyncSummaryDTO
from zoho_sync.application.entities import (
    AttributesStrategy,
    CitiesStrategy,
    MegaProjectsStrategy,
    ProjectStatusesStrategy,
    ProjectsStrategy,
    TypologiesStrategy,
)
from zoho_sync.application.reconciliation.reconciler import ParentChildReconciler, Reconciler
from zoho_sync.application.reconciliation.report import RunReport
from zoho_sync.application.reconciliation.upserter import describe_error
from zoho_sync.core.config import Settings, settings as default_settings
from zoho_sync.domain.repositories.reconciliation_repository import IReconciliationRepository
from zoho_sync.infrastructure.database.models import ProjectStatusModel
from zoho_sync.infrastructure.external.zoho.types import SourceClient
from zoho_sync.infrastructure.repositories.id_allocator import IdAllocator
from zoho_sync.infrastructure.repositories.reconciliation_repository_impl import ReconciliationRepositoryImpl
from zoho_sync.shared.constants.sync_constants import (
    DEPENDENT_ENTITIES,
    INDEPENDENT_ENTITIES,
    EmptySourcePolicy,
    RunState,
    SyncEntity,
)
from zoho_sync.shared.exceptions.domain import EntityNotFoundException
from zoho_sync.shared.exceptions.sync import DependencyFailedError, SyncAlreadyRunningError
from zoho_sync.shared.utils.datetime_utils import DateTimeUtils

# Nombre de la tarea por entidad, para reportes que no llegan a construir un reconciliador.
TASK_NAMES = {
    SyncEntity.CITIES: CitiesStrategy.task_name,
    SyncEntity.PROJECT_STATUSES: ProjectStatusesStrategy.task_name,
    SyncEntity.ATTRIBUTES: AttributesStrategy.task_name,
    SyncEntity.MEGA_PROJECTS: MegaProjectsStrategy.task_name,
    SyncEntity.PROJECTS: ProjectsStrategy.task_name,
}

STATUS_SEQUENCE = "project_status"


@dataclass(frozen=True)
class SyncOptions:
    """Parametros de ejecucion de los reconciliadores."""
    page_size: int = 200
    subresource_concurrency: int = 5
    phase_timeout_s: Optional[float] = 600.0
    empty_source_policy: EmptySourcePolicy = EmptySourcePolicy.DELETE_ALL

    @classmethod
    def from_settings(cls, config: Settings) -> "SyncOptions":
        return cls(
            page_size=config.SYNC_PAGE_SIZE,
            subresource_concurrency=config.SYNC_SUBRESOURCE_CONCURRENCY,
            phase_timeout_s=config.SYNC_PHASE_TIMEOUT_S,
            empty_source_policy=config.SYNC_EMPTY_SOURCE_POLICY,
        )


def parse_entity(name: Union[str, SyncEntity]) -> SyncEntity:
    """
    Convierte un nombre de entidad a SyncEntity.

    Raises:
        EntityNotFoundException: Si la entidad no existe
    """
    try:
        return SyncEntity(name)
    except ValueError:
        raise EntityNotFoundException("Entidad de sincronizacion", name)


class SyncOrchestrator:
    """
    Ejecuta la sincronizacion de una entidad o del batch completo.

    Un solo batch por proceso a la vez; una segunda solicitud concurrente
    recibe SyncAlreadyRunningError.
    """

    _run_lock = asyncio.Lock()

    def __init__(
        self,
        source: SourceClient,
        repository: IReconciliationRepository,
        allocator: IdAllocator,
        options: Optional[SyncOptions] = None,
    ):
        self.source = source
        self.repository = repository
        self.allocator = allocator
        self.options = options or SyncOptions()

    def build_reconciler(self, entity: SyncEntity) -> Reconciler:
        """Crea el reconciliador (con su estrategia) para una entidad."""
        common = dict(
            page_size=self.options.page_size,
            phase_timeout_s=self.options.phase_timeout_s,
            empty_source_policy=self.options.empty_source_policy,
        )
        if entity is SyncEntity.CITIES:
            return Reconciler(CitiesStrategy(), self.source, self.repository, **common)
        if entity is SyncEntity.PROJECT_STATUSES:
            strategy = ProjectStatusesStrategy(self.repository, self.allocator)
            return Reconciler(strategy, self.source, self.repository, **common)
        if entity is SyncEntity.ATTRIBUTES:
            return Reconciler(AttributesStrategy(), self.source, self.repository, **common)
        if entity is SyncEntity.MEGA_PROJECTS:
            return Reconciler(MegaProjectsStrategy(self.source), self.source, self.repository, **common)
        if entity is SyncEntity.PROJECTS:
            strategy = ProjectsStrategy(
                self.source, self.repository, concurrency=self.options.subresource_concurrency
            )
            return ParentChildReconciler(
                strategy,
                TypologiesStrategy(self.source),
                self.source,
                self.repository,
                child_concurrency=self.options.subresource_concurrency,
                **common,
            )
        raise EntityNotFoundException("Entidad de sincronizacion", entity)

    async def run_reconciliation(self, entity: SyncEntity) -> RunReport:
        """Sincroniza una entidad. Siempre retorna un reporte finalizado."""
        try:
            reconciler = self.build_reconciler(entity)
        except EntityNotFoundException:
            raise
        except Exception as e:
            logger.exception(f"No se pudo preparar la sincronizacion de '{entity.value}'")
            return self._critical_report(entity, describe_error(e))
        return await reconciler.run()

    async def run_one(self, entity_name: Union[str, SyncEntity]) -> RunReportDTO:
        """
        Sincroniza una entidad por nombre.

        Raises:
            EntityNotFoundException: Entidad desconocida (404)
            SyncAlreadyRunningError: Hay un batch en curso (409)
        """
        entity = parse_entity(entity_name)
        async with self._exclusive():
            report = await self.run_reconciliation(entity)
        return RunReportDTO.from_report(report)

    async def run_all(self) -> SyncSummaryDTO:
        """
        Ejecuta el batch completo y retorna el resumen.

        Returns:
            SyncSummaryDTO: estadoGeneral, fechas, duracion y reportes por entidad
        """
        async with self._exclusive():
            started_at = DateTimeUtils.now_utc()
            logger.info("INICIANDO PROCESO DE SINCRONIZACIÓN COMPLETO")

            logger.info("--- [PASO 1/2] Sincronizando dependencias en paralelo ---")
            reports: List[RunReport] = list(
                await asyncio.gather(*(self.run_reconciliation(entity) for entity in INDEPENDENT_ENTITIES))
            )
            failed = [report.entity for report in reports if report.state is RunState.CRITICAL_FAILURE]

            logger.info("--- [PASO 2/2] Sincronizando Proyectos y Tipologías ---")
            for entity in DEPENDENT_ENTITIES:
                if failed:
                    error = DependencyFailedError(entity.value, failed)
                    logger.error(error.message)
                    reports.append(self._critical_report(entity, describe_error(error)))
                else:
                    reports.append(await self.run_reconciliation(entity))

            finished_at = DateTimeUtils.now_utc()
            has_errors = any(report.state is not RunState.SUCCESS for report in reports)
            summary = SyncSummaryDTO(
                estadoGeneral="Finalizado con errores" if has_errors else "Exitoso",
                fechaInicio=DateTimeUtils.to_iso_string(started_at),
                fechaFin=DateTimeUtils.to_iso_string(finished_at),
                duracionSegundos=DateTimeUtils.elapsed_seconds(started_at, finished_at),
                resumenDeTareas=[RunReportDTO.from_report(report) for report in reports],
            )
            logger.info(f"PROCESO DE SINCRONIZACIÓN FINALIZADO. Estado: {summary.estadoGeneral}")
            return summary

    @classmethod
    def is_running(cls) -> bool:
        """Indica si hay un batch o una entidad sincronizándose en este proceso."""
        return cls._run_lock.locked()

    def _exclusive(self) -> asyncio.Lock:
        if self._run_lock.locked():
            raise SyncAlreadyRunningError()
        return self._run_lock

    @staticmethod
    def _critical_report(entity: SyncEntity, reason: str) -> RunReport:
        report = RunReport(task=TASK_NAMES[entity], entity=entity.value)
        report.mark_critical(reason)
        return report.finalize()


def build_orchestrator(
    source: SourceClient,
    engine: AsyncEngine,
    config: Settings = default_settings,
) -> SyncOrchestrator:
    """
    Arma el orquestador con el repositorio y el asignador de ids sobre el engine.

    Args:
        source: Cliente de Zoho (o cualquier SourceClient)
        engine: Engine async de la base destino
        config: Configuracion (por defecto la global)
    """
    repository = ReconciliationRepositoryImpl(engine)
    allocator = IdAllocator(
        engine,
        STATUS_SEQUENCE,
        initial_value=config.STATUS_INITIAL_ID,
        seed_table=ProjectStatusModel.__table__,
    )
    return SyncOrchestrator(source, repository, allocator, SyncOptions.from_settings(config))
