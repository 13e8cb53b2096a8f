"""In-memory pagination of ordered result sets."""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class PaginationError(ValueError):
    """Page or limit is out of range."""


def _parse_int(value: str | int | None, default: int) -> int | None:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_pagination(page: str | int | None, limit: str | int | None) -> tuple[int, int]:
    """Validate raw page/limit values, falling back to defaults when absent.

    Raises:
        PaginationError: page is not a positive integer, or limit is not an
            integer between 1 and ``MAX_LIMIT``.
    """
    page_number = _parse_int(page, DEFAULT_PAGE)
    if page_number is None or page_number < 1:
        raise PaginationError("Page must be a positive number")

    page_size = _parse_int(limit, DEFAULT_LIMIT)
    if page_size is None or page_size < 1 or page_size > MAX_LIMIT:
        raise PaginationError(f"Limit must be between 1 and {MAX_LIMIT}")

    return page_number, page_size


@dataclass
class Page:
    """A slice of a result set plus the metadata needed to navigate it."""

    items: list[Any]
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


def paginate(items: Sequence[Any], page: int, limit: int) -> Page:
    """Slice ``items[(page - 1) * limit : page * limit]``."""
    total = len(items)
    total_pages = math.ceil(total / limit)
    start = (page - 1) * limit
    return Page(
        items=list(items[start : start + limit]),
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
