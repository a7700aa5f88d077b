"""
Configuración de fixtures para pytest.
"""
import re
from collections import defaultdict
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

import pytest
from sqlalchemy import Table, select
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from zoho_sync.infrastructure.database.session import Base
import zoho_sync.infrastructure.database  # noqa: F401  registra los modelos en Base
from zoho_sync.infrastructure.external.zoho.types import SourceRecord, ZohoPage
from zoho_sync.infrastructure.repositories.reconciliation_repository_impl import ReconciliationRepositoryImpl


_FROM_MODULE = re.compile(r"\bFROM\s+(\w+)", re.IGNORECASE)


class FakeSource:
    """
    Fuente en memoria con la misma interfaz que ZohoClient.

    - modules: registros por modulo COQL (se paginan con offset/limit)
    - records: (modulo, id) -> registro para get_record
    - searches: (modulo, criteria) -> lista para search
    - errors: (operacion, modulo, clave) -> excepcion a levantar
    """

    def __init__(
        self,
        modules: Optional[Dict[str, List[SourceRecord]]] = None,
        records: Optional[Dict[Tuple[str, str], SourceRecord]] = None,
        searches: Optional[Dict[Tuple[str, str], List[SourceRecord]]] = None,
    ):
        self.modules = modules or {}
        self.records = records or {}
        self.searches = searches or {}
        self.errors: Dict[tuple, Exception] = {}
        self.calls: Dict[str, list] = defaultdict(list)

    async def query(self, select_query: str, offset: int, limit: int) -> ZohoPage:
        module = _FROM_MODULE.search(select_query).group(1)
        self.calls["query"].append((module, offset, limit))
        error = self.errors.get(("query", module, offset))
        if error is not None:
            raise error
        data = self.modules.get(module, [])
        page = data[offset:offset + limit]
        return ZohoPage(data=list(page), more_records=offset + limit < len(data), count=len(page))

    async def get_record(self, module: str, record_id: str) -> Optional[SourceRecord]:
        self.calls["get_record"].append((module, record_id))
        error = self.errors.get(("get_record", module, record_id))
        if error is not None:
            raise error
        return self.records.get((module, record_id))

    async def search(self, module: str, criteria: str) -> List[SourceRecord]:
        self.calls["search"].append((module, criteria))
        error = self.errors.get(("search", module, criteria))
        if error is not None:
            raise error
        return list(self.searches.get((module, criteria), []))


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture(scope="function")
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Fixture que proporciona un engine SQLite con el esquema creado.
    Usa un archivo por test para que cada conexion del pool vea los mismos datos.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sync.db'}", echo=False)

    # Crear tablas
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def repository(db_engine: AsyncEngine) -> ReconciliationRepositoryImpl:
    return ReconciliationRepositoryImpl(db_engine)


async def get_row(engine: AsyncEngine, table: Table, column: str, key: str) -> Optional[Dict[str, Any]]:
    """Lee una fila por columna llave como diccionario, o None."""
    async with engine.connect() as conn:
        result = await conn.execute(select(table).where(table.c[column] == key))
        row = result.mappings().first()
        return dict(row) if row else None
