"""User model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import deferred, relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and guitar ownership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # Loaded only when accessed, so listing users never pulls hashes
    password_hash = deferred(Column(String(255), nullable=False))
    name = Column(String(255), nullable=True)
    image = Column(String(255), nullable=True)

    # Relationships
    guitars = relationship("Guitar", back_populates="user", cascade="all, delete-orphan")
