"""
Tipos del cliente Zoho CRM.

Se mantienen libres de I/O: los protocolos describen lo que el
reconciliador necesita de la fuente, sin atarlo a httpx.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol


SourceRecord = dict[str, Any]


@dataclass(frozen=True)
class ZohoCredentials:
    """Credenciales OAuth (refresh token flow) de una app de Zoho."""

    client_id: str
    client_secret: str
    refresh_token: str


@dataclass(frozen=True)
class ZohoPage:
    """
    Una pagina de resultados COQL.

    more_records refleja info.more_records; data vacia termina la paginacion
    aunque more_records sea True.
    """

    data: list[SourceRecord] = field(default_factory=list)
    more_records: bool = False
    count: int = 0


class AuthProvider(Protocol):
    async def get_token(self) -> str:
        """Retorna un access token vigente o levanta AuthError."""
        ...


class SourceClient(Protocol):
    async def query(self, select_query: str, offset: int, limit: int) -> ZohoPage:
        ...

    async def get_record(self, module: str, record_id: str) -> Optional[SourceRecord]:
        ...

    async def search(self, module: str, criteria: str) -> list[SourceRecord]:
        ...
