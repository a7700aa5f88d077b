"""
Cliente HTTP async de Zoho CRM (API v7).

Requisitos cubiertos:
- COQL con paginacion por offset (LIMIT offset, limit)
- lectura de un registro por id
- busqueda en listas relacionadas (criteria), 204 = sin resultados

No reintenta: cualquier error de red o HTTP se traduce a
SourceTransportError y la decision queda en el llamador.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from loguru import logger

from zoho_sync.infrastructure.external.zoho.auth import ZohoAuthProvider
from zoho_sync.infrastructure.external.zoho.types import SourceRecord, ZohoPage
from zoho_sync.shared.exceptions.sync import AuthError, SourceTransportError


class ZohoClient:
    """
    Cliente de Zoho CRM. Reutiliza un httpx.AsyncClient para todo el batch.

    Uso:
        async with ZohoClient(auth, base_url=settings.ZOHO_API_BASE_URL) as client:
            page = await client.query("SELECT id FROM Mega_Proyectos", 0, 200)
    """

    def __init__(
        self,
        auth: ZohoAuthProvider,
        *,
        base_url: str = "https://www.zohoapis.com/crm/v7",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_s: float = 30.0,
    ) -> None:
        self._auth = auth
        self._base_url = base_url.rstrip("/")
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def __aenter__(self) -> "ZohoClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def query(self, select_query: str, offset: int, limit: int) -> ZohoPage:
        """
        Ejecuta una consulta COQL y retorna una pagina.

        Args:
            select_query: SELECT ... FROM ... WHERE ... (sin LIMIT)
            offset: Registros a saltar
            limit: Tamano de pagina

        Returns:
            ZohoPage: data + info.more_records
        """
        body = {"select_query": f"{select_query.strip()} LIMIT {int(offset)}, {int(limit)}"}
        resp = await self._request("POST", "/coql", json=body)
        if resp.status_code == 204:
            return ZohoPage()

        payload = resp.json()
        info = payload.get("info") or {}
        return ZohoPage(
            data=payload.get("data") or [],
            more_records=info.get("more_records") is True,
            count=int(info.get("count") or 0),
        )

    async def get_record(self, module: str, record_id: str) -> Optional[SourceRecord]:
        """Retorna el registro {module}/{record_id} o None si no existe."""
        resp = await self._request("GET", f"/{module}/{record_id}", allow_not_found=True)
        if resp.status_code in (204, 404):
            return None
        data = resp.json().get("data") or []
        return data[0] if data else None

    async def search(self, module: str, criteria: str) -> list[SourceRecord]:
        """
        Busca registros de un modulo por criterio, p.ej. (Parent_Id.id:equals:123).

        Returns:
            list: Registros encontrados ([] si Zoho responde 204)
        """
        resp = await self._request("GET", f"/{module}/search", params={"criteria": criteria})
        if resp.status_code == 204:
            return []
        return resp.json().get("data") or []

    async def _request(
        self,
        method: str,
        path: str,
        *,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        token = await self._auth.get_token()
        headers = {
            "Authorization": f"Zoho-oauthtoken {token}",
            "Content-Type": "application/json",
        }
        url = f"{self._base_url}{path}"

        try:
            resp = await self._http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Error de red en {method} {path}: {e}")
            raise SourceTransportError(f"Error de red consultando Zoho ({method} {path}): {e}") from e

        if resp.status_code == 401:
            self._auth.invalidate()
            raise AuthError(f"Zoho rechazo el token en {method} {path}", status_code=401)
        if resp.status_code == 404 and allow_not_found:
            return resp
        if resp.status_code >= 400:
            logger.error(f"Zoho respondio {resp.status_code} en {method} {path}: {resp.text}")
            raise SourceTransportError(
                f"Zoho respondio {resp.status_code} en {method} {path}: {resp.text}",
                status_code=resp.status_code,
            )
        return resp
