"""
Asignación de ids por rangos contiguos.

Algunas tablas (Project_Status) usan ids numéricos asignados por la
aplicación en lugar de los ids de Zoho. La reserva se hace con
UPDATE ... RETURNING dentro de una transacción, de modo que dos corridas
concurrentes nunca reciben el mismo rango.
"""
from typing import Optional

from loguru import logger
from sqlalchemy import BigInteger, Table, cast, func, select, update
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from zoho_sync.infrastructure.database.models import IdAllocationModel
from zoho_sync.infrastructure.repositories.reconciliation_repository_impl import dialect_insert


class IdAllocator:
    """
    Reserva rangos de ids de una secuencia con nombre (tabla id_allocations).

    La primera reserva inicializa la secuencia en max(id)+1 de la tabla
    semilla, o en initial_value si la tabla está vacía.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        sequence: str,
        *,
        initial_value: int,
        seed_table: Optional[Table] = None,
        seed_column: str = "id",
    ):
        self.engine = engine
        self.sequence = sequence
        self.initial_value = initial_value
        self.seed_table = seed_table
        self.seed_column = seed_column

    async def reserve(self, count: int) -> range:
        """
        Reserva `count` ids contiguos.

        Args:
            count: Cantidad de ids (0 retorna un rango vacío sin tocar la base)

        Returns:
            range: Ids reservados, en orden ascendente
        """
        if count <= 0:
            return range(0)

        async with self.engine.begin() as conn:
            end = await self._advance(conn, count)
            if end is None:
                seed = await self._seed_value(conn)
                insert = dialect_insert(self.engine.dialect.name)
                await conn.execute(
                    insert(IdAllocationModel.__table__)
                    .values(sequence=self.sequence, next_value=seed)
                    .on_conflict_do_nothing(index_elements=["sequence"])
                )
                logger.info(f"Secuencia '{self.sequence}' inicializada en {seed}")
                end = await self._advance(conn, count)

        start = end - count
        logger.debug(f"Ids reservados para '{self.sequence}': {start}..{end - 1}")
        return range(start, end)

    async def _advance(self, conn: AsyncConnection, count: int) -> Optional[int]:
        table = IdAllocationModel.__table__
        stmt = (
            update(table)
            .where(table.c.sequence == self.sequence)
            .values(next_value=table.c.next_value + count)
            .returning(table.c.next_value)
        )
        result = await conn.execute(stmt)
        return result.scalar_one_or_none()

    async def _seed_value(self, conn: AsyncConnection) -> int:
        if self.seed_table is None:
            return self.initial_value
        column = self.seed_table.c[self.seed_column]
        result = await conn.execute(select(func.max(cast(column, BigInteger))))
        current_max = result.scalar_one_or_none()
        if current_max is None:
            return self.initial_value
        return int(current_max) + 1
