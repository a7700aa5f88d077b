"""
Configuración de base de datos.

Importa todos los modelos para que se registren con Base
antes de crear las tablas.
"""
from zoho_sync.infrastructure.database.models import (
    CityModel,
    ProjectStatusModel,
    ProjectAttributeModel,
    MegaProjectModel,
    ProjectModel,
    TypologyModel,
    IdAllocationModel,
)
