"""
Reconciliador genérico MARK -> SYNC -> SWEEP.

MARK:  pagina la fuente completa y deduplica por llave natural.
SYNC:  upsert de cada registro único; los fallos se aíslan por registro.
SWEEP: un único DELETE de las filas cuya llave no está en el conjunto activo.

Cualquier excepción que escape de una fase (transporte, timeout, barrido)
termina la corrida en error_critico y omite el SWEEP.
"""
import asyncio
from typing import Awaitable, Dict, FrozenSet, List, Optional, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from zoho_sync.application.reconciliation.children import ChildReconciler
from zoho_sync.application.reconciliation.identity import IdentityIndex, canonical_key
from zoho_sync.application.reconciliation.pager import fetch_all
from zoho_sync.application.reconciliation.report import RunReport
from zoho_sync.application.reconciliation.strategy import ChildStrategy, EntityStrategy
from zoho_sync.application.reconciliation.upserter import RowUpserter, describe_error
from zoho_sync.domain.repositories.reconciliation_repository import IReconciliationRepository
from zoho_sync.infrastructure.external.zoho.types import SourceClient, SourceRecord
from zoho_sync.shared.constants.sync_constants import EmptySourcePolicy, ReconcilerPhase
from zoho_sync.shared.exceptions.sync import PhaseTimeoutError, SweepError
from zoho_sync.shared.utils.concurrency import gather_bounded

T = TypeVar("T")


class Reconciler:
    """
    Sincroniza una entidad completa y retorna su RunReport finalizado.

    Uso:
        reconciler = Reconciler(CitiesStrategy(), client, repository)
        report = await reconciler.run()
    """

    def __init__(
        self,
        strategy: EntityStrategy,
        source: SourceClient,
        repository: IReconciliationRepository,
        *,
        page_size: int = 200,
        phase_timeout_s: Optional[float] = 600.0,
        empty_source_policy: EmptySourcePolicy = EmptySourcePolicy.DELETE_ALL,
    ):
        self.strategy = strategy
        self.source = source
        self.repository = repository
        self.upserter = RowUpserter(strategy, repository)
        self.page_size = page_size
        self.phase_timeout_s = phase_timeout_s
        self.empty_source_policy = empty_source_policy
        self.phase = ReconcilerPhase.INIT

    async def run(self) -> RunReport:
        """Ejecuta las tres fases. Nunca levanta: los errores quedan en el reporte."""
        if self.phase is not ReconcilerPhase.INIT:
            raise RuntimeError(f"El reconciliador de '{self.strategy.entity.value}' ya fue ejecutado")

        report = RunReport(task=self.strategy.task_name, entity=self.strategy.entity.value)
        logger.info(f"Iniciando tarea: {report.task}")

        try:
            index = await self._run_phase(ReconcilerPhase.MARKING, self._mark(report))
            await self._run_phase(ReconcilerPhase.SYNCING, self._sync(index, report))
            await self._run_phase(ReconcilerPhase.SWEEPING, self._sweep(index, report))
            self.phase = ReconcilerPhase.DONE
        except Exception as e:
            failed_phase = self.phase.value
            self.phase = ReconcilerPhase.FAILED
            logger.exception(f"ERROR CRÍTICO en '{report.task}' (fase {failed_phase}). La tarea se detuvo.")
            report.mark_critical(describe_error(e))

        report.finalize()
        metrics = report.metrics
        summary = (
            f"Tarea '{report.task}' finalizada con estado: {report.state.value} "
            f"(obtenidos={metrics.fetched}, procesados={metrics.processed}, exitosos={metrics.succeeded}, "
            f"fallidos={metrics.failed}, eliminados={metrics.deleted})"
        )
        if report.is_critical:
            logger.error(summary)
        elif metrics.failed:
            logger.warning(summary)
        else:
            logger.success(summary)
        return report

    async def _run_phase(self, phase: ReconcilerPhase, coro: Awaitable[T]) -> T:
        self.phase = phase
        try:
            return await asyncio.wait_for(coro, timeout=self.phase_timeout_s)
        except asyncio.TimeoutError as e:
            raise PhaseTimeoutError(phase.value, self.phase_timeout_s) from e

    async def _mark(self, report: RunReport) -> IdentityIndex:
        logger.info(f"[{self.strategy.entity.value}] Fase 1: recopilando registros activos desde Zoho...")
        index = IdentityIndex(self.strategy.natural_key)
        async for batch in fetch_all(self.source, self.strategy.select_query, self.page_size):
            index.extend(batch)

        report.set_fetched(index.seen)
        report.set_processed(len(index) + len(index.keyless))
        for record in index.keyless:
            report.record_failure(f"{self.strategy.label}: N/A", f"Registro sin llave: {record}")

        logger.info(
            f"[{self.strategy.entity.value}] {index.seen} registros obtenidos, "
            f"{len(index)} únicos, {len(index.keyless)} sin llave"
        )
        await self._after_mark(index, report)
        return index

    async def _sync(self, index: IdentityIndex, report: RunReport) -> None:
        logger.info(f"[{self.strategy.entity.value}] Fase 2: sincronizando {len(index)} registros...")
        await self.strategy.prepare(index.unique_records())

        for key, record in index.items():
            result = await self.upserter.upsert(key, record)
            if result.ok:
                report.record_success()
                await self._after_upsert(key, record, report)
            else:
                report.record_failure(self.strategy.reference(key), result.reason)

    async def _sweep(self, index: IdentityIndex, report: RunReport) -> None:
        logger.info(f"[{self.strategy.entity.value}] Fase 3: eliminando registros obsoletos...")
        deleted = await self._delete_missing(self.strategy.table, self.strategy.key_column, index.active_keys(), report)
        if deleted is not None:
            report.record_deleted(deleted)

    async def _delete_missing(
        self,
        table,
        key_column: str,
        active_keys: FrozenSet[str],
        report: RunReport,
    ) -> Optional[int]:
        """Aplica la política de fuente vacía y ejecuta el DELETE. None si se omitió."""
        if not active_keys:
            if self.empty_source_policy is EmptySourcePolicy.SKIP_SWEEP:
                note = f"Zoho no devolvió registros activos para {table.name}: se omitió la eliminación"
                logger.warning(note)
                report.add_note(note)
                return None
            logger.warning(
                f"No se encontraron registros activos en Zoho para {table.name}. "
                f"Se eliminarán todos los registros existentes."
            )

        try:
            deleted = await self.repository.delete_missing(table, key_column, active_keys)
        except SQLAlchemyError as e:
            raise SweepError(table.name, str(getattr(e, "orig", None) or e)) from e

        logger.info(f"{deleted} registros obsoletos eliminados de {table.name}")
        return deleted

    async def _after_mark(self, index: IdentityIndex, report: RunReport) -> None:
        return None

    async def _after_upsert(self, key: str, record: SourceRecord, report: RunReport) -> None:
        return None


class ParentChildReconciler(Reconciler):
    """
    Reconciliador de dos niveles (proyectos con tipologías).

    - MARK además trae los hijos de cada padre con concurrencia acotada, de
      modo que el conjunto activo de hijos esté completo antes del SWEEP.
    - Tras cada upsert exitoso de un padre se reconcilian sus hijos.
    - SWEEP elimina primero hijos obsoletos y luego padres obsoletos.
    """

    def __init__(
        self,
        strategy: EntityStrategy,
        child_strategy: ChildStrategy,
        source: SourceClient,
        repository: IReconciliationRepository,
        *,
        child_concurrency: int = 5,
        **kwargs,
    ):
        super().__init__(strategy, source, repository, **kwargs)
        self.child_strategy = child_strategy
        self.child_reconciler = ChildReconciler(child_strategy, repository)
        self.child_concurrency = child_concurrency
        self._children: Dict[str, List[SourceRecord]] = {}
        self._child_keys: FrozenSet[str] = frozenset()

    async def _after_mark(self, index: IdentityIndex, report: RunReport) -> None:
        report.enable_child_metrics()
        parent_keys = [key for key, _ in index.items()]
        children = await gather_bounded(
            self.child_concurrency,
            (self.child_strategy.fetch_children(key) for key in parent_keys),
        )
        self._children = dict(zip(parent_keys, children))

        child_keys = set()
        for records in children:
            report.record_child_fetched(len(records))
            for record in records:
                key = canonical_key(self.child_strategy.child_key(record))
                if key is not None:
                    child_keys.add(key)
        self._child_keys = frozenset(child_keys)
        logger.info(f"[{self.strategy.entity.value}] {len(self._child_keys)} hijos activos recopilados")

    async def _after_upsert(self, key: str, record: SourceRecord, report: RunReport) -> None:
        outcome = await self.child_reconciler.reconcile(key, self._children.get(key, []), report)
        logger.debug(
            f"[{self.strategy.entity.value}] {key}: hijos insertados={outcome.inserted} "
            f"actualizados={outcome.updated} omitidos={outcome.skipped} fallidos={outcome.failed}"
        )

    async def _sweep(self, index: IdentityIndex, report: RunReport) -> None:
        deleted_children = await self._delete_missing(
            self.child_strategy.table, self.child_strategy.key_column, self._child_keys, report
        )
        if deleted_children is not None:
            report.record_child_deleted(deleted_children)
        await super()._sweep(index, report)
