"""
Reconciliación de registros hijos de un padre (tipologías de un proyecto).
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from zoho_sync.application.reconciliation.report import RunReport
from zoho_sync.application.reconciliation.strategy import ChildStrategy
from zoho_sync.application.reconciliation.upserter import RECORD_ERRORS, describe_error
from zoho_sync.domain.repositories.reconciliation_repository import IReconciliationRepository
from zoho_sync.infrastructure.external.zoho.types import SourceRecord


@dataclass
class ChildOutcome:
    parent_key: str
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    aggregates: Dict[str, Any] = field(default_factory=dict)


class ChildReconciler:
    """
    Escribe los hijos elegibles de un padre y recalcula sus agregados.

    Cada hijo se escribe en su propia transacción; un fallo se reporta con
    referencia "<padre>/<hijo>" y no detiene a los demás.
    """

    def __init__(self, strategy: ChildStrategy, repository: IReconciliationRepository):
        self.strategy = strategy
        self.repository = repository

    async def reconcile(
        self,
        parent_key: str,
        children: List[SourceRecord],
        report: RunReport,
    ) -> ChildOutcome:
        """
        Args:
            parent_key: Llave canónica del padre ya sincronizado
            children: Todos los hijos del padre traídos en MARK
            report: Reporte compartido de la corrida

        Returns:
            ChildOutcome: Conteos y agregados escritos en el padre
        """
        outcome = ChildOutcome(parent_key=parent_key)
        eligible = [child for child in children if self.strategy.is_eligible(child)]
        outcome.skipped = len(children) - len(eligible)

        for child in eligible:
            reference = self.strategy.reference(parent_key, child)
            try:
                row = self.strategy.build_row(parent_key, child)
                inserted = await self.repository.write_child(
                    self.strategy.table,
                    self.strategy.key_column,
                    self.strategy.match_columns,
                    row,
                    self.strategy.preserve,
                )
            except RECORD_ERRORS as e:
                outcome.failed += 1
                reason = describe_error(e)
                logger.warning(f"Hijo {reference} no sincronizado: {reason}")
                report.record_child_failure(reference, reason)
                continue

            if inserted:
                outcome.inserted += 1
            else:
                outcome.updated += 1
            report.record_child_success()

        outcome.aggregates = self.strategy.aggregate(eligible)
        try:
            await self.repository.update_by_key(
                self.strategy.parent_table,
                self.strategy.parent_key_column,
                parent_key,
                outcome.aggregates,
            )
        except SQLAlchemyError as e:
            reason = describe_error(e)
            logger.warning(f"No se pudieron actualizar agregados de {parent_key}: {reason}")
            report.record_child_failure(parent_key, f"Agregados no actualizados: {reason}")

        return outcome
