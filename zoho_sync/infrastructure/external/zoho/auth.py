"""
Proveedor de access tokens de Zoho (grant refresh_token).

El token se cachea hasta poco antes de expirar; un lock evita que varias
entidades sincronizandose en paralelo pidan tokens a la vez.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

import httpx
from loguru import logger

from zoho_sync.infrastructure.external.zoho.types import ZohoCredentials
from zoho_sync.shared.exceptions.sync import AuthError

# Margen para renovar antes de la expiracion real.
_EXPIRY_MARGIN_S = 60


class ZohoAuthProvider:
    """
    Obtiene access tokens desde {accounts_url}/oauth/v2/token.
    """

    def __init__(
        self,
        credentials: ZohoCredentials,
        *,
        accounts_url: str = "https://accounts.zoho.com",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_s: float = 30.0,
    ) -> None:
        self._creds = credentials
        self._token_url = f"{accounts_url.rstrip('/')}/oauth/v2/token"
        self._http = http_client
        self._timeout_s = timeout_s
        self._token: Optional[str] = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    async def get_token(self) -> str:
        """
        Retorna un access token vigente, pidiendo uno nuevo si hace falta.

        Raises:
            AuthError: Si Zoho responde con error o sin access_token
        """
        async with self._lock:
            if self._token and time.monotonic() < self._expires_at:
                return self._token
            self._token, ttl = await self._request_token()
            self._expires_at = time.monotonic() + max(0, ttl - _EXPIRY_MARGIN_S)
            return self._token

    def invalidate(self) -> None:
        """Descarta el token cacheado (p.ej. tras un 401)."""
        self._token = None
        self._expires_at = 0.0

    async def _request_token(self) -> tuple[str, int]:
        params = {
            "refresh_token": self._creds.refresh_token,
            "client_id": self._creds.client_id,
            "client_secret": self._creds.client_secret,
            "grant_type": "refresh_token",
        }
        try:
            if self._http is not None:
                resp = await self._http.post(self._token_url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                    resp = await client.post(self._token_url, params=params)
        except httpx.HTTPError as e:
            raise AuthError(f"No se pudo contactar el servidor de tokens de Zoho: {e}") from e

        if resp.status_code >= 400:
            raise AuthError(
                f"Zoho rechazo la solicitud de token ({resp.status_code}): {resp.text}",
                status_code=resp.status_code,
            )

        payload = resp.json()
        token = payload.get("access_token")
        if not token:
            # Zoho responde 200 con {"error": "invalid_code"} ante credenciales invalidas.
            raise AuthError(f"Access token no recibido de Zoho: {payload.get('error', payload)}")

        logger.info("Token de Zoho obtenido")
        return token, int(payload.get("expires_in", 3600))
