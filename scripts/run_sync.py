"""
CLI: Zoho CRM -> Postgres (MARK -> SYNC -> SWEEP).

Uso recomendado:
  - Ejecutar como job (cron/systemd timer) cuando no se quiere exponer el API.
  - Usa la misma configuracion (.env) que el servidor.

Ejecución:
  python scripts/run_sync.py
  python scripts/run_sync.py --entity cities
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

load_dotenv(_PROJECT_ROOT / ".env", override=False)

from zoho_sync.application.use_cases.sync_use_cases import build_orchestrator
from zoho_sync.core.config import settings
from zoho_sync.core.events import configure_file_logging
from zoho_sync.infrastructure.database.session import build_engine
from zoho_sync.infrastructure.external.zoho import ZohoAuthProvider, ZohoClient, ZohoCredentials
from zoho_sync.shared.constants.sync_constants import RunState, SyncEntity
from zoho_sync.shared.exceptions.base import AppException


async def _run(entity: str | None) -> dict:
    engine = build_engine(settings.effective_database_url)
    auth = ZohoAuthProvider(
        ZohoCredentials(
            client_id=settings.ZOHO_CLIENT_ID,
            client_secret=settings.ZOHO_CLIENT_SECRET,
            refresh_token=settings.ZOHO_REFRESH_TOKEN,
        ),
        accounts_url=settings.ZOHO_ACCOUNTS_URL,
        timeout_s=settings.ZOHO_TIMEOUT_S,
    )
    try:
        async with ZohoClient(auth, base_url=settings.ZOHO_API_BASE_URL, timeout_s=settings.ZOHO_TIMEOUT_S) as client:
            orchestrator = build_orchestrator(client, engine)
            if entity:
                result = await orchestrator.run_one(entity)
            else:
                result = await orchestrator.run_all()
            return result.model_dump(exclude_none=True)
    finally:
        await engine.dispose()


def _failed(payload: dict) -> bool:
    if payload.get("estadoGeneral") == "Fallo fatal":
        return True
    tasks = payload.get("resumenDeTareas") or [payload]
    return any(task.get("estado") == RunState.CRITICAL_FAILURE.value for task in tasks)


def main() -> int:
    parser = argparse.ArgumentParser(description="Sincroniza Zoho CRM hacia PostgreSQL")
    parser.add_argument(
        "--entity",
        choices=[entity.value for entity in SyncEntity],
        default=None,
        help="Sincroniza solo esta entidad (por defecto, el batch completo).",
    )
    args = parser.parse_args()

    configure_file_logging()
    logger.info("Iniciando Zoho -> Postgres sync...")
    try:
        payload = asyncio.run(_run(args.entity))
    except AppException as e:
        logger.error(f"Sync abortado: {e.message}")
        return 1

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 1 if _failed(payload) else 0


if __name__ == "__main__":
    raise SystemExit(main())
