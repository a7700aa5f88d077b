"""
Paginación por offset contra la fuente.
"""
from typing import AsyncIterator, List

from loguru import logger

from zoho_sync.infrastructure.external.zoho.types import SourceClient, SourceRecord


class SourcePager:
    """
    Itera todas las páginas de una consulta COQL.

    - offset avanza de a page_size
    - termina cuando la página viene vacía o more_records es False
    - sin reintentos: un error de página se propaga al llamador
    - se puede iterar una sola vez
    """

    def __init__(self, source: SourceClient, select_query: str, page_size: int):
        if page_size < 1:
            raise ValueError(f"page_size debe ser >= 1 (recibido {page_size})")
        self._source = source
        self._select_query = select_query
        self._page_size = page_size
        self._consumed = False
        self.pages_fetched = 0

    def __aiter__(self) -> AsyncIterator[List[SourceRecord]]:
        if self._consumed:
            raise RuntimeError("SourcePager ya fue consumido; cree uno nuevo para volver a paginar")
        self._consumed = True
        return self._pages()

    async def _pages(self) -> AsyncIterator[List[SourceRecord]]:
        offset = 0
        while True:
            page = await self._source.query(self._select_query, offset, self._page_size)
            if not page.data:
                break
            self.pages_fetched += 1
            logger.debug(f"Página {self.pages_fetched} (offset {offset}): {len(page.data)} registros")
            yield page.data
            if not page.more_records:
                break
            offset += self._page_size


def fetch_all(source: SourceClient, select_query: str, page_size: int) -> SourcePager:
    """Atajo: retorna un SourcePager listo para `async for batch in ...`."""
    return SourcePager(source, select_query, page_size)
