"""
DTOs para los reportes de sincronizacion.

Los nombres de campo estan en español porque son el contrato JSON que
consume el panel de operacion.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from zoho_sync.application.reconciliation.report import RunReport


class RunErrorDTO(BaseModel):
    """Error de un registro (o de la corrida)."""
    referencia: str = Field(..., description="Registro afectado, p.ej. 'Proyecto HC: 123'")
    motivo: str = Field(..., description="Causa del error")


class RunMetricsDTO(BaseModel):
    obtenidos: int = 0
    procesados: int = 0
    exitosos: int = 0
    fallidos: int = 0
    eliminados: int = 0


class ChildMetricsDTO(BaseModel):
    obtenidas: int = 0
    procesadas: int = 0
    fallidas: int = 0
    eliminadas: int = 0


class RunReportDTO(BaseModel):
    """
    Reporte de una entidad.

    Equivalencias con los nombres en inglés del contrato: tarea = task,
    estado = state, metricas = metrics, erroresDetallados = errors.
    """
    tarea: str = Field(..., description="Entidad sincronizada (task)")
    estado: str = Field(..., description="State: pendiente | exitoso | finalizado_con_errores | error_critico")
    metricas: RunMetricsDTO
    erroresDetallados: List[RunErrorDTO] = Field(default_factory=list)
    metricasTipologias: Optional[ChildMetricsDTO] = None
    observaciones: Optional[List[str]] = None

    @classmethod
    def from_report(cls, report: RunReport) -> "RunReportDTO":
        return cls(**report.to_dict())


class SyncSummaryDTO(BaseModel):
    """Resumen del batch completo."""
    estadoGeneral: str = Field(..., description="Exitoso | Finalizado con errores")
    fechaInicio: str
    fechaFin: str
    duracionSegundos: float
    resumenDeTareas: List[RunReportDTO]


class SyncFatalErrorDTO(BaseModel):
    """Respuesta cuando el batch no pudo ejecutarse."""
    estadoGeneral: str = "Fallo fatal"
    fechaInicio: str
    fechaFin: str
    duracionSegundos: float
    errorCritico: str


class ServiceInfoDTO(BaseModel):
    nombre: str
    version: str


class HealthDTO(BaseModel):
    """Estado del servicio; sync_en_curso indica si el proceso tiene un batch activo."""
    status: str = "healthy"
    app_name: str
    version: str
    environment: str
    sync_en_curso: bool
