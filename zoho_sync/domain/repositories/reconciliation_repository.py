"""
Interfaz del repositorio de reconciliación.
Define el contrato de escritura que usa el reconciliador sobre el store.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Mapping, Sequence

from sqlalchemy import Table

from zoho_sync.shared.constants.sync_constants import PreserveRule


class IReconciliationRepository(ABC):
    """
    Operaciones de persistencia del ciclo MARK -> SYNC -> SWEEP.

    Cada operación abre y confirma su propia transacción: un fallo en un
    registro no revierte los demás.
    """
    
    @abstractmethod
    async def upsert(
        self,
        table: Table,
        key_column: str,
        row: Dict[str, Any],
        preserve: Mapping[str, PreserveRule],
    ) -> None:
        """
        Inserta o actualiza una fila por su llave natural.
        
        Args:
            table: Tabla destino
            key_column: Columna con restricción única usada como llave
            row: Valores de la fila (columnas propias de la fuente y del store)
            preserve: Columnas propias del store y su regla de preservación
        """
        pass
    
    @abstractmethod
    async def write_child(
        self,
        table: Table,
        key_column: str,
        match_columns: Sequence[str],
        row: Dict[str, Any],
        preserve: Mapping[str, PreserveRule],
    ) -> bool:
        """
        Actualiza la fila hija con la misma llave (o, si no existe, la que
        coincide en match_columns) o la inserta.
        
        Returns:
            bool: True si insertó, False si actualizó
        """
        pass
    
    @abstractmethod
    async def update_by_key(
        self,
        table: Table,
        key_column: str,
        key: str,
        values: Dict[str, Any],
    ) -> int:
        """Actualiza columnas de una fila por llave. Retorna filas afectadas."""
        pass
    
    @abstractmethod
    async def delete_missing(
        self,
        table: Table,
        key_column: str,
        active_keys: FrozenSet[str],
    ) -> int:
        """
        Elimina en una sola sentencia las filas cuya llave no está en active_keys.
        Con active_keys vacío elimina todas las filas.
        
        Returns:
            int: Filas eliminadas
        """
        pass
    
    @abstractmethod
    async def fetch_column_map(
        self,
        table: Table,
        key_column: str,
        value_column: str,
    ) -> Dict[str, Any]:
        """Retorna {key_column: value_column} para todas las filas de la tabla."""
        pass
