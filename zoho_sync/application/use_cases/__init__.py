"""
Casos de uso de la aplicacion.
"""
from .sync_use_cases import SyncOrchestrator, SyncOptions, build_orchestrator

__all__ = ["SyncOrchestrator", "SyncOptions", "build_orchestrator"]
