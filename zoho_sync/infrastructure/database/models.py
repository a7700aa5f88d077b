"""
Modelos de base de datos (ORM).

Las tablas conservan los nombres usados por el sitio publico
("Cities", "Projects", ...). Las columnas JSON usan JSONB en PostgreSQL.
"""
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from zoho_sync.infrastructure.database.session import Base


JsonType = JSON().with_variant(JSONB(), "postgresql")


class CityModel(Base):
    """Ciudades referenciadas por proyectos comerciales."""
    
    __tablename__ = "Cities"
    
    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    is_public = Column(Boolean, nullable=True)
    
    def __repr__(self):
        return f"<City(id={self.id}, name={self.name})>"


class ProjectStatusModel(Base):
    """
    Estados de proyecto. La llave natural es el nombre; el id lo asigna
    IdAllocator y no cambia mientras el nombre siga activo en Zoho.
    """
    
    __tablename__ = "Project_Status"
    
    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    
    def __repr__(self):
        return f"<ProjectStatus(id={self.id}, name={self.name})>"


class ProjectAttributeModel(Base):
    """Atributos de proyecto (Parametros con Tipo = 'Atributo')."""
    
    __tablename__ = "Project_Attributes"
    
    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    icon = Column(String(255), nullable=False, default="")
    
    def __repr__(self):
        return f"<ProjectAttribute(id={self.id}, name={self.name})>"


class MegaProjectModel(Base):
    """Mega proyectos comerciales."""
    
    __tablename__ = "Mega_Projects"
    
    id = Column(String(64), primary_key=True)
    slug = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=False, default="")
    slogan = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    seo_title = Column(Text, nullable=True)
    seo_meta_description = Column(Text, nullable=True)
    attributes = Column(JsonType, nullable=False, default=list)
    gallery = Column(JsonType, nullable=False, default=list)
    latitude = Column(String(64), nullable=False, default="0")
    longitude = Column(String(64), nullable=False, default="0")
    is_public = Column(Boolean, nullable=True)
    
    def __repr__(self):
        return f"<MegaProject(id={self.id}, name={self.name})>"


class ProjectModel(Base):
    """
    Proyectos comerciales. La llave es `hc` (id del registro en Zoho).
    delivery_time y deposit se recalculan desde las tipologias.
    """
    
    __tablename__ = "Projects"
    
    hc = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, default="")
    slogan = Column(Text, nullable=False, default="")
    address = Column(Text, nullable=False, default="")
    city = Column(String(255), nullable=False, default="")
    small_description = Column(Text, nullable=False, default="")
    long_description = Column(Text, nullable=False, default="")
    seo_title = Column(Text, nullable=True)
    seo_meta_description = Column(Text, nullable=True)
    sic = Column(Text, nullable=False, default="")
    sales_room_address = Column(Text, nullable=False, default="")
    sales_room_schedule_attention = Column(Text, nullable=False, default="")
    sales_room_latitude = Column(String(64), nullable=False, default="0")
    sales_room_longitude = Column(String(64), nullable=False, default="0")
    salary_minimum_count = Column(Integer, nullable=False, default=0)
    delivery_time = Column(Integer, nullable=False, default=0)
    deposit = Column(BigInteger, nullable=False, default=0)
    discount_description = Column(Text, nullable=True)
    bonus_ref = Column(Text, nullable=True)
    price_from_general = Column(BigInteger, nullable=False, default=0)
    price_up_general = Column(BigInteger, nullable=False, default=0)
    attributes = Column(JsonType, nullable=False, default=list)
    gallery = Column(JsonType, nullable=False, default=list)
    urban_plans = Column(JsonType, nullable=False, default=list)
    work_progress_images = Column(JsonType, nullable=False, default=list)
    tour_360 = Column(Text, nullable=True)
    type = Column(String(255), nullable=False, default="")
    status = Column(JsonType, nullable=False, default=list)
    highlighted = Column(Boolean, nullable=False, default=False)
    built_area = Column(Float, nullable=False, default=0)
    private_area = Column(Float, nullable=False, default=0)
    rooms = Column(Integer, nullable=False, default=0)
    bathrooms = Column(Integer, nullable=False, default=0)
    relation_projects = Column(JsonType, nullable=False, default=list)
    latitude = Column(String(64), nullable=False, default="0")
    longitude = Column(String(64), nullable=False, default="0")
    is_public = Column(Boolean, nullable=True)
    mega_project_id = Column(String(64), nullable=True, index=True)
    
    def __repr__(self):
        return f"<Project(hc={self.hc}, name={self.name})>"


class TypologyModel(Base):
    """
    Tipologias (unidades tipo) de un proyecto.
    Se identifican por (project_id, name); el id de Zoho se actualiza en cada sync.
    """
    
    __tablename__ = "Typologies"
    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_typologies_project_name"),
    )
    
    id = Column(String(64), primary_key=True)
    project_id = Column(
        String(64),
        ForeignKey("Projects.hc", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    price_from = Column(BigInteger, nullable=False, default=0)
    price_up = Column(BigInteger, nullable=False, default=0)
    rooms = Column(Integer, nullable=False, default=0)
    bathrooms = Column(Integer, nullable=False, default=0)
    built_area = Column(Float, nullable=False, default=0)
    private_area = Column(Float, nullable=False, default=0)
    min_separation = Column(BigInteger, nullable=False, default=0)
    min_deposit = Column(BigInteger, nullable=False, default=0)
    delivery_time = Column(Integer, nullable=False, default=0)
    available_count = Column(Integer, nullable=False, default=0)
    gallery = Column(JsonType, nullable=False, default=list)
    plans = Column(Text, nullable=True)
    
    def __repr__(self):
        return f"<Typology(id={self.id}, project_id={self.project_id}, name={self.name})>"


class IdAllocationModel(Base):
    """
    Secuencias con nombre para ids asignados por la aplicacion.
    next_value es el primer id aun no reservado.
    """
    
    __tablename__ = "id_allocations"
    
    sequence = Column(String(64), primary_key=True)
    next_value = Column(BigInteger, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    def __repr__(self):
        return f"<IdAllocation(sequence={self.sequence}, next_value={self.next_value})>"
