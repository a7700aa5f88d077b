"""
Implementación del repositorio de reconciliación usando SQLAlchemy Core async.

Soporta PostgreSQL (producción, asyncpg) y SQLite (tests, aiosqlite).
Todas las sentencias son parametrizadas; las llaves activas del barrido
viajan como un único parámetro de tipo arreglo en PostgreSQL.
"""
from typing import Any, Dict, FrozenSet, Mapping, Sequence

from sqlalchemy import Table, Text, all_, and_, bindparam, case, delete, func, literal, select, update
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql.elements import ColumnElement

from zoho_sync.domain.repositories.reconciliation_repository import IReconciliationRepository
from zoho_sync.shared.constants.sync_constants import PreserveRule


def dialect_insert(dialect_name: str):
    """Retorna la construcción INSERT con soporte ON CONFLICT del dialecto."""
    if dialect_name == "postgresql":
        return pg_insert
    if dialect_name == "sqlite":
        return sqlite_insert
    raise NotImplementedError(f"Dialecto no soportado para upsert: {dialect_name}")


def _is_non_empty_array(dialect_name: str, column: ColumnElement) -> ColumnElement:
    # CASE evita evaluar la longitud sobre valores que no son arreglos.
    if dialect_name == "postgresql":
        json_type, array_length = func.jsonb_typeof, func.jsonb_array_length
    else:
        json_type, array_length = func.json_type, func.json_array_length
    return case((json_type(column) == "array", array_length(column)), else_=0) > 0


def keep_condition(dialect_name: str, column: ColumnElement, rule: PreserveRule) -> ColumnElement:
    """
    Condición bajo la cual se conserva el valor almacenado de una columna.

    Args:
        dialect_name: Nombre del dialecto (postgresql, sqlite)
        column: Columna de la tabla (valor almacenado)
        rule: Regla de preservación

    Returns:
        ColumnElement: Expresión booleana SQL
    """
    if rule is PreserveRule.NOT_NULL:
        return column.isnot(None)
    if rule is PreserveRule.NON_EMPTY_ARRAY:
        return _is_non_empty_array(dialect_name, column)
    raise ValueError(f"Regla de preservación desconocida: {rule}")


def preserved_value(
    dialect_name: str,
    column: ColumnElement,
    rule: PreserveRule,
    incoming: ColumnElement,
) -> ColumnElement:
    """CASE WHEN <valor almacenado no vacío> THEN almacenado ELSE entrante END."""
    return case((keep_condition(dialect_name, column, rule), column), else_=incoming)


class ReconciliationRepositoryImpl(IReconciliationRepository):
    """Repositorio de reconciliación sobre un AsyncEngine compartido."""
    
    def __init__(self, engine: AsyncEngine):
        """
        Inicializa el repositorio.
        
        Args:
            engine: Engine async; cada operación toma su propia conexión del pool
        """
        self.engine = engine
    
    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name
    
    async def upsert(
        self,
        table: Table,
        key_column: str,
        row: Dict[str, Any],
        preserve: Mapping[str, PreserveRule],
    ) -> None:
        """INSERT ... ON CONFLICT (key) DO UPDATE con reglas de preservación."""
        stmt = dialect_insert(self.dialect_name)(table).values(**row)
        
        set_ = {}
        for name in row:
            if name == key_column:
                continue
            incoming = stmt.excluded[name]
            rule = preserve.get(name)
            if rule is None:
                set_[name] = incoming
            else:
                set_[name] = preserved_value(self.dialect_name, table.c[name], rule, incoming)
        
        if set_:
            stmt = stmt.on_conflict_do_update(index_elements=[key_column], set_=set_)
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=[key_column])
        
        async with self.engine.begin() as conn:
            await conn.execute(stmt)
    
    async def write_child(
        self,
        table: Table,
        key_column: str,
        match_columns: Sequence[str],
        row: Dict[str, Any],
        preserve: Mapping[str, PreserveRule],
    ) -> bool:
        """
        Localiza la fila hija por key_column y, si no existe, por match_columns.
        Actualiza la fila encontrada (incluida la llave y las columnas de
        coincidencia) preservando columnas del store, o inserta una nueva.
        """
        key = table.c[key_column]
        match = and_(*(table.c[name] == row[name] for name in match_columns))
        
        async with self.engine.begin() as conn:
            found = (await conn.execute(select(key).where(key == row[key_column]))).scalar_one_or_none()
            if found is None:
                result = await conn.execute(select(key).where(match).limit(1))
                found = result.scalar_one_or_none()
            if found is None:
                await conn.execute(table.insert().values(**row))
                return True
            
            values = {}
            for name, value in row.items():
                rule = preserve.get(name)
                if rule is None:
                    values[name] = value
                else:
                    column = table.c[name]
                    values[name] = preserved_value(
                        self.dialect_name, column, rule, literal(value, type_=column.type)
                    )
            await conn.execute(update(table).where(key == found).values(**values))
            return False
    
    async def update_by_key(
        self,
        table: Table,
        key_column: str,
        key: str,
        values: Dict[str, Any],
    ) -> int:
        """Actualiza columnas de una fila por llave."""
        stmt = update(table).where(table.c[key_column] == key).values(**values)
        async with self.engine.begin() as conn:
            result = await conn.execute(stmt)
            return result.rowcount or 0
    
    async def delete_missing(
        self,
        table: Table,
        key_column: str,
        active_keys: FrozenSet[str],
    ) -> int:
        """DELETE de filas cuya llave no está en el conjunto activo."""
        column = table.c[key_column]
        stmt = delete(table)
        if active_keys:
            keys = sorted(active_keys)
            if self.dialect_name == "postgresql":
                stmt = stmt.where(column != all_(bindparam("active_keys", keys, type_=ARRAY(Text))))
            else:
                stmt = stmt.where(column.not_in(keys))
        
        async with self.engine.begin() as conn:
            result = await conn.execute(stmt)
            return result.rowcount or 0
    
    async def fetch_column_map(
        self,
        table: Table,
        key_column: str,
        value_column: str,
    ) -> Dict[str, Any]:
        """Mapa llave -> valor de toda la tabla."""
        stmt = select(table.c[key_column], table.c[value_column])
        async with self.engine.connect() as conn:
            result = await conn.execute(stmt)
            return {str(key): value for key, value in result.all()}
