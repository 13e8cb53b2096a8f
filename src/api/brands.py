"""Brand API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import get_brand_service, get_current_user
from src.models.enums import SortDirection
from src.models.user import User
from src.schemas.brand import BrandResponse
from src.services.brand_service import BrandService

router = APIRouter(prefix="/api/v1/brands", tags=["brands"])


@router.get("", response_model=list[BrandResponse])
def list_brands(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[BrandService, Depends(get_brand_service)],
    name: str | None = None,
    sort_direction: Annotated[str, Query(alias="sortDirection")] = "asc",
):
    """List known brands, optionally filtered by name."""
    try:
        direction = SortDirection(sort_direction.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Sort direction must be 'asc' or 'desc'",
        ) from None

    return service.list_brands(name=name, direction=direction)
