"""SQLAlchemy models for Assembly Inventory."""

# Import all models here for Alembic auto-generation
from app.models.part import Part, PartType
from app.models.part_component import PartComponent

__all__: list[str] = [
    "Part",
    "PartComponent",
    "PartType",
]
