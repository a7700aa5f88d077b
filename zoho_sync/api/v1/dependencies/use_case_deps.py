"""
Dependencias para inyeccion de casos de uso.
"""
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine

from zoho_sync.application.use_cases.sync_use_cases import SyncOrchestrator, build_orchestrator
from zoho_sync.core.config import settings
from zoho_sync.infrastructure.database.session import get_engine
from zoho_sync.infrastructure.external.zoho import ZohoAuthProvider, ZohoClient, ZohoCredentials


def get_zoho_auth() -> ZohoAuthProvider:
    """
    Dependencia para obtener el proveedor de tokens de Zoho.
    
    Returns:
        ZohoAuthProvider: Proveedor configurado desde settings
    """
    credentials = ZohoCredentials(
        client_id=settings.ZOHO_CLIENT_ID,
        client_secret=settings.ZOHO_CLIENT_SECRET,
        refresh_token=settings.ZOHO_REFRESH_TOKEN,
    )
    return ZohoAuthProvider(
        credentials,
        accounts_url=settings.ZOHO_ACCOUNTS_URL,
        timeout_s=settings.ZOHO_TIMEOUT_S,
    )


async def get_sync_orchestrator(
    auth: ZohoAuthProvider = Depends(get_zoho_auth),
    engine: AsyncEngine = Depends(get_engine),
) -> AsyncGenerator[SyncOrchestrator, None]:
    """
    Dependencia para obtener el orquestador de sincronizacion.
    El cliente HTTP de Zoho vive lo que dura la peticion.
    
    Args:
        auth: Proveedor de tokens de Zoho
        engine: Engine de base de datos
        
    Yields:
        SyncOrchestrator: Orquestador listo para ejecutar
    """
    async with ZohoClient(
        auth,
        base_url=settings.ZOHO_API_BASE_URL,
        timeout_s=settings.ZOHO_TIMEOUT_S,
    ) as client:
        yield build_orchestrator(client, engine, settings)
