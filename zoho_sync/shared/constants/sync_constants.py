"""
Constantes relacionadas con la sincronizacion Zoho -> PostgreSQL.
Define estados de corrida, fases del reconciliador y politicas.
"""
from enum import Enum


class RunState(str, Enum):
    """Estado final (o pendiente) de una corrida de sincronizacion."""
    PENDING = "pendiente"
    SUCCESS = "exitoso"
    PARTIAL_FAILURE = "finalizado_con_errores"
    CRITICAL_FAILURE = "error_critico"


class ReconcilerPhase(str, Enum):
    """Fases del reconciliador MARK -> SYNC -> SWEEP."""
    INIT = "init"
    MARKING = "marking"
    SYNCING = "syncing"
    SWEEPING = "sweeping"
    DONE = "done"
    FAILED = "failed"


class EmptySourcePolicy(str, Enum):
    """
    Que hacer en el SWEEP cuando la fuente no devuelve ningun registro activo.

    - DELETE_ALL: la fuente es autoritativa, se eliminan todas las filas.
    - SKIP_SWEEP: no se elimina nada (protege ante una caida de la fuente).
    """
    DELETE_ALL = "delete_all"
    SKIP_SWEEP = "skip_sweep"


class PreserveRule(str, Enum):
    """
    Reglas de preservacion para columnas propias del store.

    La columna conserva su valor actual salvo que este "vacio" segun la regla.
    """
    NOT_NULL = "not_null"
    NON_EMPTY_ARRAY = "non_empty_array"


class SyncEntity(str, Enum):
    """Entidades sincronizables."""
    CITIES = "cities"
    PROJECT_STATUSES = "project_statuses"
    ATTRIBUTES = "attributes"
    MEGA_PROJECTS = "mega_projects"
    PROJECTS = "projects"


# Entidades sin dependencias entre si: se ejecutan en paralelo.
INDEPENDENT_ENTITIES = (
    SyncEntity.CITIES,
    SyncEntity.PROJECT_STATUSES,
    SyncEntity.ATTRIBUTES,
    SyncEntity.MEGA_PROJECTS,
)

# Entidades que referencian a las anteriores: se ejecutan despues de la barrera.
DEPENDENT_ENTITIES = (SyncEntity.PROJECTS,)
