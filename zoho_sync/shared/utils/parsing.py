"""
Coerciones de valores provenientes de Zoho.

Los campos numericos de Zoho llegan como numeros, strings o listas segun el
modulo. Estas funciones son puras y nunca retornan NaN: ante un valor no
interpretable retornan el default.
"""
import math
import re
from typing import Any, Iterable, Optional

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def parse_int(value: Any, default: int = 0) -> int:
    """
    Convierte un valor a entero tomando el prefijo numerico ("12 meses" -> 12).

    Args:
        value: Valor crudo (int, float, str o None)
        default: Valor a retornar si no hay prefijo numerico

    Returns:
        int: Entero parseado o default
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    match = _INT_PREFIX.match(str(value))
    if not match:
        return default
    return int(match.group(1))


def parse_float(value: Any, default: float = 0.0) -> float:
    """
    Convierte un valor a float tomando el prefijo numerico.

    Args:
        value: Valor crudo (int, float, str o None)
        default: Valor a retornar si no hay prefijo numerico

    Returns:
        float: Numero parseado o default
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else default
    match = _FLOAT_PREFIX.match(str(value))
    if not match:
        return default
    number = float(match.group(1))
    return number if math.isfinite(number) else default


def max_int(value: Any) -> int:
    """
    Maximo entero de un campo que puede ser lista o escalar (Habitaciones, Ba_os).

    Los elementos no numericos se ignoran; una lista vacia retorna 0.
    """
    if isinstance(value, (list, tuple)):
        parsed = [parse_int(v, default=None) for v in value]
        return max([0] + [p for p in parsed if p is not None])
    return parse_int(value)


def min_positive_int(values: Iterable[Any]) -> int:
    """Minimo de los enteros positivos de values; 0 si no hay ninguno."""
    parsed = [parse_int(v) for v in values]
    positives = [p for p in parsed if p > 0]
    return min(positives) if positives else 0


def clean_text(value: Any, default: str = "") -> str:
    """Retorna el valor como string sin espacios laterales, o default si es vacio."""
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def optional_text(value: Any) -> Optional[str]:
    """Igual que clean_text pero retorna None para valores vacios."""
    text = clean_text(value)
    return text or None


def title_case(value: Any) -> str:
    """
    Capitaliza cada palabra separada por espacio ("torre NORTE" -> "Torre Norte").

    No usa str.title() para no capitalizar despues de apostrofes o guiones.
    """
    text = clean_text(value).lower()
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


def capitalize_first(value: Any) -> str:
    """Primera letra en mayuscula y el resto en minuscula."""
    text = clean_text(value)
    return text[:1].upper() + text[1:].lower()


def clean_city_name(value: Any) -> str:
    """
    Normaliza el nombre de ciudad de Zoho ("bogota / cundinamarca" -> "Bogota").

    Toma el primer segmento antes de "/", sin espacios, capitalizado.
    """
    if not isinstance(value, str):
        return ""
    return capitalize_first(value.split("/")[0])


def slugify(value: Any, default: str = "sin-nombre") -> str:
    """Genera un slug a partir de un nombre ("Torre Norte 2" -> "torre-norte-2")."""
    text = clean_text(value) or default
    return _SLUG_INVALID.sub("-", text.lower()).strip("-")


def number_text(value: float) -> str:
    """Representa un número como texto sin ".0" sobrante (4.0 -> "4", 4.61 -> "4.61")."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
