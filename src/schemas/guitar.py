"""Guitar schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.enums import GuitarCondition
from src.schemas.brand import BrandResponse


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GuitarCreate(CamelModel):
    """Create a new guitar."""

    model: str = Field(..., min_length=1, max_length=255)
    brand_name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=50)
    strings: int = Field(..., gt=0)
    condition: GuitarCondition
    price: float = Field(..., gt=0)
    image_url: str | None = None


class GuitarUpdate(CamelModel):
    """Partial update of a guitar. Only fields present in the body are applied."""

    model: str | None = Field(None, min_length=1, max_length=255)
    brand_name: str | None = Field(None, min_length=1, max_length=255)
    type: str | None = Field(None, min_length=1, max_length=50)
    strings: int | None = Field(None, gt=0)
    condition: GuitarCondition | None = None
    price: float | None = Field(None, gt=0)
    image_url: str | None = None


class GuitarResponse(CamelModel):
    """Guitar response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    model: str
    type: str
    strings: int
    condition: str
    price: float
    image_url: str | None
    brand: BrandResponse
    user_id: int
    created_at: datetime
    updated_at: datetime


class PageMeta(CamelModel):
    """Pagination metadata."""

    page: int
    limit: int
    total_guitars: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class GuitarPage(CamelModel):
    """One page of guitars."""

    data: list[GuitarResponse]
    meta: PageMeta


class PriceSummaryResponse(CamelModel):
    """Price statistics over a set of guitars."""

    count: int
    min_price: float | None = None
    max_price: float | None = None
    average_price: float | None = None
    closest_to_average_id: int | None = None
