"""Guitar model."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class Guitar(Base, TimestampMixin):
    """A guitar in a user's inventory."""

    __tablename__ = "guitars"
    __table_args__ = (CheckConstraint("price > 0", name="ck_guitars_price_positive"),)

    id = Column(Integer, primary_key=True, index=True)
    model = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False)  # "Electric", "Acoustic", "Classical", ...
    strings = Column(Integer, nullable=False)
    condition = Column(String(20), nullable=False)  # see GuitarCondition
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    image_url = Column(Text, nullable=True)  # URL or data URI
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    brand = relationship("Brand", back_populates="guitars")
    user = relationship("User", back_populates="guitars")


# One guitar per owner, model and brand; model names compare case-insensitively
Index(
    "uq_guitar_user_model_brand",
    Guitar.user_id,
    func.lower(Guitar.model),
    Guitar.brand_id,
    unique=True,
)
