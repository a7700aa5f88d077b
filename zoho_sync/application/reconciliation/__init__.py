"""
Núcleo de reconciliación Zoho -> PostgreSQL (MARK -> SYNC -> SWEEP).
"""
from .identity import IdentityIndex, canonical_key
from .pager import SourcePager, fetch_all
from .reconciler import ParentChildReconciler, Reconciler
from .report import RunReport
from .strategy import ChildStrategy, EntityStrategy

__all__ = [
    "ChildStrategy",
    "EntityStrategy",
    "IdentityIndex",
    "ParentChildReconciler",
    "Reconciler",
    "RunReport",
    "SourcePager",
    "canonical_key",
    "fetch_all",
]
