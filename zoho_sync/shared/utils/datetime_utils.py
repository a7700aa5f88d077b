"""
Utilidades para manejo de fechas y horas.
"""
from datetime import datetime, timezone


class DateTimeUtils:
    """Clase de utilidades para operaciones con fechas y horas."""
    
    @staticmethod
    def now_utc() -> datetime:
        """
        Obtiene la fecha y hora actual en UTC.
        
        Returns:
            datetime: Fecha y hora actual en UTC
        """
        return datetime.now(timezone.utc)
    
    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """
        Convierte un datetime a string ISO 8601 con sufijo Z.
        
        Args:
            dt: Objeto datetime (aware)
            
        Returns:
            str: Fecha en formato ISO 8601, p.ej. 2025-08-19T10:15:00.123Z
        """
        dt_utc = dt.astimezone(timezone.utc)
        return dt_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    @staticmethod
    def elapsed_seconds(start: datetime, end: datetime) -> float:
        """Segundos transcurridos entre dos instantes, con precision de milisegundos."""
        return round((end - start).total_seconds(), 3)
