"""Brand model."""

from sqlalchemy import Column, Index, Integer, String, func
from sqlalchemy.orm import relationship

from src.database import Base


class Brand(Base):
    """Guitar manufacturer, shared by all users."""

    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)

    # Relationships
    guitars = relationship("Guitar", back_populates="brand")


# "Fender" and "fender" are the same brand
Index("uq_brands_name_lower", func.lower(Brand.name), unique=True)
