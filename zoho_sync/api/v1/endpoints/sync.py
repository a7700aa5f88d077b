"""
Endpoints de sincronizacion Zoho CRM -> PostgreSQL.
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from loguru import logger

from zoho_sync.api.v1.dependencies.use_case_deps import get_sync_orchestrator
from zoho_sync.application.dto.sync_dto import RunReportDTO, SyncFatalErrorDTO, SyncSummaryDTO
from zoho_sync.application.use_cases.sync_use_cases import SyncOrchestrator
from zoho_sync.shared.exceptions.base import AppException
from zoho_sync.shared.utils.datetime_utils import DateTimeUtils


router = APIRouter(prefix="/sync", tags=["Sync"])


@router.post(
    "",
    response_model=SyncSummaryDTO,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Sincronizar todas las entidades",
    responses={500: {"model": SyncFatalErrorDTO}},
)
async def sync_all(
    orchestrator: SyncOrchestrator = Depends(get_sync_orchestrator),
):
    """
    Ejecuta el batch completo: ciudades, estados, atributos y mega proyectos
    en paralelo y luego proyectos con tipologias.
    
    Responde 200 aunque alguna entidad tenga errores (ver resumenDeTareas).
    Responde 500 solo si el batch no pudo ejecutarse.
    """
    started_at = DateTimeUtils.now_utc()
    try:
        return await orchestrator.run_all()
    except AppException:
        raise
    except Exception as e:
        logger.exception("ERROR FATAL INESPERADO durante la sincronizacion completa")
        finished_at = DateTimeUtils.now_utc()
        fatal = SyncFatalErrorDTO(
            fechaInicio=DateTimeUtils.to_iso_string(started_at),
            fechaFin=DateTimeUtils.to_iso_string(finished_at),
            duracionSegundos=DateTimeUtils.elapsed_seconds(started_at, finished_at),
            errorCritico=str(e),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=fatal.model_dump(),
        )


@router.post(
    "/{entity}",
    response_model=RunReportDTO,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Sincronizar una entidad",
)
async def sync_entity(
    entity: str,
    orchestrator: SyncOrchestrator = Depends(get_sync_orchestrator),
) -> RunReportDTO:
    """
    Sincroniza una sola entidad: cities, project_statuses, attributes,
    mega_projects o projects. Entidad desconocida -> 404.
    """
    return await orchestrator.run_one(entity)
