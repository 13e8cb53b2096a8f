"""SQLAlchemy models."""

from src.models.brand import Brand
from src.models.guitar import Guitar
from src.models.user import User

__all__ = [
    "User",
    "Brand",
    "Guitar",
]
