"""
Utilidades de concurrencia acotada sobre asyncio.
"""
import asyncio
from typing import Awaitable, Iterable, List, TypeVar

T = TypeVar("T")


async def gather_bounded(limit: int, aws: Iterable[Awaitable[T]]) -> List[T]:
    """
    Ejecuta awaitables con a lo sumo `limit` en vuelo, preservando el orden.

    Si alguno falla, las tareas restantes se cancelan y la excepcion se propaga.

    Args:
        limit: Maximo de awaitables ejecutandose a la vez (>= 1)
        aws: Corrutinas a ejecutar

    Returns:
        List[T]: Resultados en el mismo orden que aws
    """
    pending = list(aws)
    if not pending:
        return []
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _run(aw: Awaitable[T]) -> T:
        async with semaphore:
            return await aw

    tasks = [asyncio.ensure_future(_run(aw)) for aw in pending]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        # Corrutinas que nunca llegaron a ejecutarse por la cancelacion.
        for aw in pending:
            if asyncio.iscoroutine(aw):
                aw.close()
        raise
