"""
Reporte de una corrida de sincronización.

Acumula métricas y errores por registro durante la corrida. Se finaliza
una sola vez (estado calculado) y a partir de ahí no admite cambios.
La forma JSON usa las llaves en español que consume el panel de operación.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from zoho_sync.shared.constants.sync_constants import RunState


class ReportFinalizedError(RuntimeError):
    """Se intentó modificar un reporte ya finalizado."""


@dataclass
class RunMetrics:
    fetched: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    deleted: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "obtenidos": self.fetched,
            "procesados": self.processed,
            "exitosos": self.succeeded,
            "fallidos": self.failed,
            "eliminados": self.deleted,
        }


@dataclass
class ChildMetrics:
    """Métricas de registros hijos (tipologías)."""

    fetched: int = 0
    processed: int = 0
    failed: int = 0
    deleted: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "obtenidas": self.fetched,
            "procesadas": self.processed,
            "fallidas": self.failed,
            "eliminadas": self.deleted,
        }


@dataclass(frozen=True)
class RunError:
    reference: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"referencia": self.reference, "motivo": self.reason}


@dataclass
class RunReport:
    """
    Reporte de una entidad.

    Estados:
    - pendiente mientras corre
    - exitoso si no hubo fallos
    - finalizado_con_errores si hubo fallos de registros (padres o hijos)
    - error_critico si la corrida se detuvo
    """

    task: str
    entity: str
    state: RunState = RunState.PENDING
    metrics: RunMetrics = field(default_factory=RunMetrics)
    child_metrics: Optional[ChildMetrics] = None
    errors: List[RunError] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    _critical: bool = field(default=False, init=False, repr=False)
    _finalized: bool = field(default=False, init=False, repr=False)

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def is_critical(self) -> bool:
        return self._critical

    def _ensure_open(self) -> None:
        if self._finalized:
            raise ReportFinalizedError(f"El reporte de '{self.task}' ya fue finalizado")

    def set_fetched(self, count: int) -> None:
        self._ensure_open()
        self.metrics.fetched = count

    def set_processed(self, count: int) -> None:
        self._ensure_open()
        self.metrics.processed = count

    def record_success(self) -> None:
        self._ensure_open()
        self.metrics.succeeded += 1

    def record_failure(self, reference: str, reason: str) -> None:
        self._ensure_open()
        self.metrics.failed += 1
        self.errors.append(RunError(reference=reference, reason=reason))

    def record_deleted(self, count: int) -> None:
        self._ensure_open()
        self.metrics.deleted += count

    def enable_child_metrics(self) -> ChildMetrics:
        self._ensure_open()
        if self.child_metrics is None:
            self.child_metrics = ChildMetrics()
        return self.child_metrics

    def record_child_fetched(self, count: int) -> None:
        self.enable_child_metrics().fetched += count

    def record_child_success(self) -> None:
        self.enable_child_metrics().processed += 1

    def record_child_failure(self, reference: str, reason: str) -> None:
        self.enable_child_metrics().failed += 1
        self.errors.append(RunError(reference=reference, reason=reason))

    def record_child_deleted(self, count: int) -> None:
        self.enable_child_metrics().deleted += count

    def add_note(self, note: str) -> None:
        self._ensure_open()
        self.notes.append(note)

    def mark_critical(self, reason: str, reference: Optional[str] = None) -> None:
        """Registra el error que detuvo la corrida."""
        self._ensure_open()
        self._critical = True
        self.errors.append(RunError(reference=reference or self.entity, reason=reason))

    def finalize(self) -> "RunReport":
        """Calcula el estado final y congela el reporte. Idempotente."""
        if self._finalized:
            return self
        child_failed = self.child_metrics.failed if self.child_metrics else 0
        if self._critical:
            self.state = RunState.CRITICAL_FAILURE
        elif self.metrics.failed or child_failed:
            self.state = RunState.PARTIAL_FAILURE
        else:
            self.state = RunState.SUCCESS
        self._finalized = True
        return self

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "tarea": self.task,
            "estado": self.state.value,
            "metricas": self.metrics.to_dict(),
            "erroresDetallados": [error.to_dict() for error in self.errors],
        }
        if self.child_metrics is not None:
            data["metricasTipologias"] = self.child_metrics.to_dict()
        if self.notes:
            data["observaciones"] = list(self.notes)
        return data
