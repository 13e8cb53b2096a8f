"""Guitar API endpoints."""

import base64
import logging
import math
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from src.api.dependencies import get_current_user, get_guitar_service
from src.config import get_settings
from src.models.enums import SortDirection, SortField
from src.models.user import User
from src.schemas.guitar import (
    GuitarCreate,
    GuitarPage,
    GuitarResponse,
    GuitarUpdate,
    PageMeta,
    PriceSummaryResponse,
)
from src.services.guitar_service import (
    DuplicateGuitarError,
    GuitarFilter,
    GuitarService,
    GuitarSort,
)
from src.services.pagination import PaginationError, paginate, parse_pagination
from src.services.price_stats import summarize_prices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/guitars", tags=["guitars"])

# JSON key -> schema field name
REQUIRED_FIELDS = {
    "model": "model",
    "brandName": "brand_name",
    "type": "type",
    "strings": "strings",
    "condition": "condition",
    "price": "price",
}

# Text fields a PATCH may change but not blank out
TEXT_FIELDS = ("model", "brandName", "type", "condition")

DUPLICATE_MESSAGE = "A guitar with this model and brand already exists"

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _server_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_number(value: Any) -> float | None:
    """Parse an int, float or numeric string. Returns None for anything else."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _check_numeric_fields(payload: dict[str, Any]) -> None:
    """Reject non-positive price and string counts with field-specific messages."""
    if "price" in payload:
        price = _to_number(payload["price"])
        if price is None or price <= 0:
            raise _bad_request("Price must be a positive number")
        # Column is NUMERIC(10, 2)
        if round(price, 2) != price:
            raise _bad_request("Price must have at most 2 decimal places")

    if "strings" in payload:
        strings = _to_number(payload["strings"])
        if strings is None or strings <= 0 or not strings.is_integer():
            raise _bad_request("Strings must be a positive number")


def _blank_text_fields(payload: dict[str, Any]) -> list[str]:
    """JSON keys of text fields present in ``payload`` with a null or blank value."""
    blank = []
    for key in TEXT_FIELDS:
        names = (key, REQUIRED_FIELDS[key])
        if any(name in payload and _is_blank(payload[name]) for name in names):
            blank.append(key)
    return blank


def _validate_body(schema: type[BaseModel], payload: dict[str, Any]) -> Any:
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "body"
        raise _bad_request(f"Invalid {field}: {error['msg']}") from None


def _parse_price_bound(name: str, value: str | None) -> float | None:
    if _is_blank(value):
        return None
    number = _to_number(value)
    if number is None:
        raise _bad_request(f"{name} must be a number")
    return number


def _parse_strings(values: list[str] | None) -> list[int] | None:
    if not values:
        return None
    counts = []
    for value in values:
        number = _to_number(value)
        if number is None or number <= 0 or not number.is_integer():
            raise _bad_request("Strings must be a positive number")
        counts.append(int(number))
    return counts


def get_guitar_filter(
    current_user: Annotated[User, Depends(get_current_user)],
    model: str | None = None,
    type_: Annotated[list[str] | None, Query(alias="type")] = None,
    manufacturer: Annotated[list[str] | None, Query()] = None,
    condition: Annotated[list[str] | None, Query()] = None,
    strings: Annotated[list[str] | None, Query()] = None,
    min_price: Annotated[str | None, Query(alias="minPrice")] = None,
    max_price: Annotated[str | None, Query(alias="maxPrice")] = None,
    search: str | None = None,
) -> GuitarFilter:
    """Build the listing filter from query parameters, scoped to the caller."""
    return GuitarFilter(
        model=model or None,
        brand_name=manufacturer or None,
        type=type_ or None,
        strings=_parse_strings(strings),
        condition=condition or None,
        min_price=_parse_price_bound("minPrice", min_price),
        max_price=_parse_price_bound("maxPrice", max_price),
        search=search or None,
        user_id=current_user.id,
    )


def get_guitar_sort(
    sort_field: Annotated[str, Query(alias="sortField")] = "model",
    sort_direction: Annotated[str, Query(alias="sortDirection")] = "asc",
) -> GuitarSort:
    """Build the listing order from query parameters."""
    try:
        field = SortField.parse(sort_field)
    except ValueError:
        raise _bad_request("Sort field must be one of: model, brand, price") from None

    try:
        direction = SortDirection(sort_direction.strip().lower())
    except ValueError:
        raise _bad_request("Sort direction must be 'asc' or 'desc'") from None

    return GuitarSort(field=field, direction=direction)


def get_user_guitar(service: GuitarService, guitar_id: int, user: User):
    """Get a guitar owned by the user, or raise 404."""
    try:
        guitar = service.get_guitar(guitar_id, user.id)
    except SQLAlchemyError:
        logger.exception(f"Failed to load guitar {guitar_id} for user {user.id}")
        raise _server_error("Failed to retrieve guitar") from None

    if guitar is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guitar not found")
    return guitar


@router.get("", response_model=GuitarPage)
def list_guitars(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GuitarService, Depends(get_guitar_service)],
    filters: Annotated[GuitarFilter, Depends(get_guitar_filter)],
    sort: Annotated[GuitarSort, Depends(get_guitar_sort)],
    page: str | None = None,
    limit: str | None = None,
):
    """List the caller's guitars with filtering, sorting and pagination."""
    try:
        page_number, page_size = parse_pagination(page, limit)
    except PaginationError as e:
        raise _bad_request(str(e)) from None

    try:
        guitars = service.list_guitars(filters, sort)
    except SQLAlchemyError:
        logger.exception(f"Failed to list guitars for user {current_user.id} with {filters}")
        raise _server_error("Failed to retrieve guitars") from None

    result = paginate(guitars, page_number, page_size)
    return GuitarPage(
        data=[GuitarResponse.model_validate(guitar) for guitar in result.items],
        meta=PageMeta(
            page=result.page,
            limit=result.limit,
            total_guitars=result.total,
            total_pages=result.total_pages,
            has_next_page=result.has_next_page,
            has_prev_page=result.has_prev_page,
        ),
    )


@router.post("", response_model=GuitarResponse, status_code=status.HTTP_201_CREATED)
def create_guitar(
    payload: Annotated[dict[str, Any], Body()],
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GuitarService, Depends(get_guitar_service)],
):
    """Create a guitar. The brand is looked up by name and created if missing."""
    missing = [
        key
        for key, field_name in REQUIRED_FIELDS.items()
        if _is_blank(payload.get(key)) and _is_blank(payload.get(field_name))
    ]
    if missing:
        raise _bad_request(f"Missing required fields: {', '.join(missing)}")

    _check_numeric_fields(payload)
    guitar_data = _validate_body(GuitarCreate, payload)

    try:
        return service.create_guitar(guitar_data, current_user.id)
    except DuplicateGuitarError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_MESSAGE) from None
    except SQLAlchemyError:
        logger.exception(f"Failed to create guitar for user {current_user.id}")
        raise _server_error("Failed to create guitar") from None


@router.get("/stats", response_model=PriceSummaryResponse)
def get_price_stats(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GuitarService, Depends(get_guitar_service)],
    filters: Annotated[GuitarFilter, Depends(get_guitar_filter)],
):
    """Price statistics over the caller's guitars matching the listing filters."""
    try:
        guitars = service.list_guitars(filters)
    except SQLAlchemyError:
        logger.exception(f"Failed to compute price stats for user {current_user.id}")
        raise _server_error("Failed to retrieve guitars") from None

    summary = summarize_prices((guitar.id, guitar.price) for guitar in guitars)
    if summary is None:
        return PriceSummaryResponse(count=0)

    return PriceSummaryResponse(
        count=summary.count,
        min_price=summary.min_price,
        max_price=summary.max_price,
        average_price=summary.average_price,
        closest_to_average_id=summary.closest_to_average_id,
    )


@router.get("/{guitar_id}", response_model=GuitarResponse)
def get_guitar(
    guitar_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GuitarService, Depends(get_guitar_service)],
):
    """Get a specific guitar."""
    return get_user_guitar(service, guitar_id, current_user)


@router.patch("/{guitar_id}", response_model=GuitarResponse)
def update_guitar(
    guitar_id: int,
    payload: Annotated[dict[str, Any], Body()],
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GuitarService, Depends(get_guitar_service)],
):
    """Partially update a guitar."""
    get_user_guitar(service, guitar_id, current_user)

    if not payload:
        raise _bad_request("No updates provided")

    blank = _blank_text_fields(payload)
    if blank:
        raise _bad_request(f"Required fields cannot be blank: {', '.join(blank)}")

    _check_numeric_fields(payload)
    changes = _validate_body(GuitarUpdate, payload).model_dump(exclude_unset=True)
    if not changes:
        raise _bad_request("No updates provided")

    try:
        updated = service.update_guitar(guitar_id, changes, current_user.id)
    except DuplicateGuitarError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_MESSAGE) from None
    except SQLAlchemyError:
        logger.exception(f"Failed to update guitar {guitar_id} with {changes}")
        raise _server_error("Failed to update guitar") from None

    if updated is None:
        raise _server_error("Failed to update guitar")
    return updated


@router.delete("/{guitar_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_guitar(
    guitar_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GuitarService, Depends(get_guitar_service)],
):
    """Delete a guitar."""
    get_user_guitar(service, guitar_id, current_user)

    try:
        deleted = service.delete_guitar(guitar_id, current_user.id)
    except SQLAlchemyError:
        logger.exception(f"Failed to delete guitar {guitar_id}")
        raise _server_error("Failed to delete guitar") from None

    if not deleted:
        raise _server_error("Failed to delete guitar")


@router.post("/{guitar_id}/image", response_model=GuitarResponse)
async def upload_guitar_image(
    guitar_id: int,
    file: Annotated[UploadFile, File(description="Guitar photo (JPEG, PNG, GIF, or WebP)")],
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GuitarService, Depends(get_guitar_service)],
):
    """Attach an uploaded photo to a guitar as a data URI.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    get_user_guitar(service, guitar_id, current_user)

    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise _bad_request(
            f"Invalid file type. Allowed types: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}"
        )

    image_data = await file.read()
    max_size = get_settings().max_image_size
    if len(image_data) > max_size:
        raise _bad_request(f"File too large. Maximum size is {max_size // (1024 * 1024)}MB.")

    image_b64 = base64.b64encode(image_data).decode("utf-8")
    data_uri = f"data:{file.content_type};base64,{image_b64}"

    try:
        return service.update_guitar(guitar_id, {"image_url": data_uri}, current_user.id)
    except SQLAlchemyError:
        logger.exception(f"Failed to store image for guitar {guitar_id}")
        raise _server_error("Failed to update guitar") from None
