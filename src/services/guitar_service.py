"""Guitar query engine and persistence operations."""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, contains_eager

from src.models.brand import Brand
from src.models.enums import SortDirection, SortField
from src.models.guitar import Guitar
from src.schemas.guitar import GuitarCreate
from src.services.brand_service import BrandService

logger = logging.getLogger(__name__)

# Columns a partial update may touch directly (brand goes through find-or-create)
UPDATABLE_FIELDS = ("model", "type", "strings", "condition", "price", "image_url")

# image_url is the only optional column, so it is the only one a null can clear
NULLABLE_FIELDS = {"image_url"}


class DuplicateGuitarError(Exception):
    """The owner already has a guitar with this model and brand."""


@dataclass
class GuitarFilter:
    """Restrictions applied to a guitar listing.

    Unset (``None``) or empty values mean "no restriction". Single string values
    for ``brand_name`` match as a case-insensitive substring; lists match
    exactly. ``search`` matches model or brand name and is combined with every
    other restriction.
    """

    model: str | None = None
    brand_name: str | list[str] | None = None
    type: str | list[str] | None = None
    strings: int | list[int] | None = None
    condition: str | list[str] | None = None
    min_price: float | None = None
    max_price: float | None = None
    search: str | None = None
    user_id: int | None = None


@dataclass
class GuitarSort:
    """Single-key ordering for a guitar listing."""

    field: SortField = SortField.MODEL
    direction: SortDirection = SortDirection.ASC


def _is_set(value: Any) -> bool:
    return value is not None and value != "" and value != []


def _contains(column, term: str):
    """Case-insensitive substring match with LIKE wildcards escaped."""
    return func.lower(column).contains(term.lower(), autoescape=True)


def _matches(column, value):
    """Exact match against one value or any of a list of values."""
    if isinstance(value, list | tuple | set):
        return column.in_(list(value))
    return column == value


SORT_COLUMNS = {
    SortField.MODEL: Guitar.model,
    SortField.BRAND: Brand.name,
    SortField.PRICE: Guitar.price,
}


class GuitarService:
    """Service for guitar queries and mutations."""

    def __init__(self, db: Session, brand_service: BrandService | None = None):
        self.db = db
        self.brands = brand_service or BrandService(db)

    def _base_query(self) -> Query:
        return self.db.query(Guitar).join(Guitar.brand).options(contains_eager(Guitar.brand))

    def apply_filters(self, query: Query, filters: GuitarFilter) -> Query:
        """Add one WHERE clause per supplied restriction."""
        if filters.user_id is not None:
            query = query.filter(Guitar.user_id == filters.user_id)

        if _is_set(filters.model):
            query = query.filter(_contains(Guitar.model, filters.model))

        if _is_set(filters.brand_name):
            if isinstance(filters.brand_name, str):
                query = query.filter(_contains(Brand.name, filters.brand_name))
            else:
                query = query.filter(Brand.name.in_(list(filters.brand_name)))

        if _is_set(filters.type):
            query = query.filter(_matches(Guitar.type, filters.type))

        if _is_set(filters.strings):
            query = query.filter(_matches(Guitar.strings, filters.strings))

        if _is_set(filters.condition):
            query = query.filter(_matches(Guitar.condition, filters.condition))

        if filters.min_price is not None:
            query = query.filter(Guitar.price >= filters.min_price)

        if filters.max_price is not None:
            query = query.filter(Guitar.price <= filters.max_price)

        if _is_set(filters.search):
            query = query.filter(
                or_(_contains(Guitar.model, filters.search), _contains(Brand.name, filters.search))
            )

        return query

    def list_guitars(
        self,
        filters: GuitarFilter | None = None,
        sort: GuitarSort | None = None,
    ) -> list[Guitar]:
        """Return every guitar matching ``filters``, ordered by ``sort``.

        Defaults to ordering by model name ascending. Ties are broken by id so
        that slicing the result into pages is stable.
        """
        sort = sort or GuitarSort()
        query = self.apply_filters(self._base_query(), filters or GuitarFilter())

        column = SORT_COLUMNS[sort.field]
        order = column.desc() if sort.direction == SortDirection.DESC else column.asc()
        return query.order_by(order, Guitar.id.asc()).all()

    def get_guitar(self, guitar_id: int, user_id: int | None = None) -> Guitar | None:
        """Get a guitar by id, optionally restricted to one owner."""
        query = self._base_query().filter(Guitar.id == guitar_id)
        if user_id is not None:
            query = query.filter(Guitar.user_id == user_id)
        return query.first()

    def create_guitar(self, data: GuitarCreate, user_id: int) -> Guitar:
        """Persist a new guitar, resolving its brand by name (find-or-create)."""
        if not data.brand_name or not data.brand_name.strip():
            raise ValueError("Brand name is required to create a guitar")

        brand = self.brands.find_or_create(data.brand_name)
        guitar = Guitar(
            model=data.model,
            type=data.type,
            strings=data.strings,
            condition=str(data.condition),
            price=data.price,
            image_url=data.image_url,
            brand=brand,
            user_id=user_id,
        )
        self.db.add(guitar)
        self._commit(f"{brand.name} {data.model}")
        self.db.refresh(guitar)

        logger.info(f"Created guitar {guitar.id} ({brand.name} {guitar.model}) for user {user_id}")
        return guitar

    def update_guitar(
        self,
        guitar_id: int,
        changes: dict[str, Any],
        user_id: int | None = None,
    ) -> Guitar | None:
        """Apply a partial update. Returns ``None`` if the guitar does not exist.

        Raises:
            ValueError: a required text field is set to a blank string.
            DuplicateGuitarError: the owner already has this model and brand.
        """
        guitar = self.get_guitar(guitar_id, user_id)
        if guitar is None:
            return None

        for field_name in ("brand_name", "model", "type", "condition"):
            value = changes.get(field_name)
            if isinstance(value, str) and not value.strip():
                raise ValueError(f"{field_name} must not be blank")

        # Resolve the brand before touching other columns so the savepoint used by
        # find-or-create only flushes the brand row
        brand_name = changes.get("brand_name")
        if brand_name:
            guitar.brand = self.brands.find_or_create(brand_name)

        for field_name in UPDATABLE_FIELDS:
            if field_name not in changes:
                continue
            value = changes[field_name]
            if value is None and field_name not in NULLABLE_FIELDS:
                continue
            if field_name == "condition":
                value = str(value)
            setattr(guitar, field_name, value)

        self._commit(f"{guitar.brand.name} {guitar.model}")
        self.db.refresh(guitar)
        return guitar

    def delete_guitar(self, guitar_id: int, user_id: int | None = None) -> bool:
        """Delete a guitar. Returns whether a row was removed."""
        query = self.db.query(Guitar).filter(Guitar.id == guitar_id)
        if user_id is not None:
            query = query.filter(Guitar.user_id == user_id)

        deleted = query.delete(synchronize_session="fetch")
        self.db.commit()
        return deleted > 0

    def _commit(self, label: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateGuitarError(
                f"A guitar '{label}' already exists for this owner"
            ) from None
