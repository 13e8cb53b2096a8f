"""Brand schemas."""

from pydantic import BaseModel, ConfigDict


class BrandResponse(BaseModel):
    """Brand response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
