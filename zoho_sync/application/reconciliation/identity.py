"""
Índice de identidad: deduplica registros de la fuente por llave natural.
"""
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from zoho_sync.infrastructure.external.zoho.types import SourceRecord


def canonical_key(value: Any) -> Optional[str]:
    """
    Forma canónica de una llave natural: string sin espacios laterales.

    Los floats enteros (p.ej. 123.0 desde JSON) se normalizan a "123".
    Retorna None para llaves ausentes o vacías.
    """
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    key = str(value).strip()
    return key or None


class IdentityIndex:
    """
    Mapa llave canónica -> último registro visto.

    Si una llave se repite gana la última aparición, pero conserva la
    posición de la primera para que el orden de SYNC sea estable.
    """

    def __init__(self, key_fn: Callable[[SourceRecord], Any]):
        self._key_fn = key_fn
        self._records: Dict[str, SourceRecord] = {}
        self.seen = 0
        self.keyless: List[SourceRecord] = []

    def add(self, record: SourceRecord) -> Optional[str]:
        """Agrega un registro. Retorna su llave, o None si no tiene."""
        self.seen += 1
        key = canonical_key(self._key_fn(record))
        if key is None:
            self.keyless.append(record)
            return None
        self._records[key] = record
        return key

    def extend(self, records: Iterable[SourceRecord]) -> None:
        for record in records:
            self.add(record)

    def items(self) -> List[Tuple[str, SourceRecord]]:
        return list(self._records.items())

    def unique_records(self) -> List[SourceRecord]:
        return list(self._records.values())

    def active_keys(self) -> FrozenSet[str]:
        return frozenset(self._records)

    def __len__(self) -> int:
        return len(self._records)
