"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .sync_dto import (
    RunErrorDTO,
    RunMetricsDTO,
    ChildMetricsDTO,
    RunReportDTO,
    SyncSummaryDTO,
    SyncFatalErrorDTO,
    ServiceInfoDTO,
)

__all__ = [
    "RunErrorDTO",
    "RunMetricsDTO",
    "ChildMetricsDTO",
    "RunReportDTO",
    "SyncSummaryDTO",
    "SyncFatalErrorDTO",
    "ServiceInfoDTO",
]
