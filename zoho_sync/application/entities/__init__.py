"""
Estrategias de sincronizacion por entidad.
"""
from .attributes import AttributesStrategy
from .cities import CitiesStrategy
from .mega_projects import MegaProjectsStrategy
from .project_statuses import ProjectStatusesStrategy
from .projects import ProjectsStrategy, TypologiesStrategy

__all__ = [
    "AttributesStrategy",
    "CitiesStrategy",
    "MegaProjectsStrategy",
    "ProjectStatusesStrategy",
    "ProjectsStrategy",
    "TypologiesStrategy",
]
