"""Brand lookup and find-or-create."""

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.models.brand import Brand
from src.models.enums import SortDirection

logger = logging.getLogger(__name__)


class BrandService:
    """Service for brand operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_name(self, name: str) -> Brand | None:
        """Get a brand by name, ignoring case."""
        return self.db.query(Brand).filter(func.lower(Brand.name) == name.lower()).first()

    def find_or_create(self, name: str) -> Brand:
        """Return the brand called ``name``, creating it if it does not exist.

        Names compare case-insensitively, so the first spelling saved is kept.

        The insert runs inside a SAVEPOINT. If a concurrent request created the
        same brand first, the unique index on ``lower(brands.name)`` rejects our
        row, the savepoint is rolled back and the existing row is returned.

        Raises:
            ValueError: ``name`` is blank.
        """
        name = name.strip()
        if not name:
            raise ValueError("Brand name must not be blank")

        brand = self.get_by_name(name)
        if brand:
            return brand

        try:
            with self.db.begin_nested():
                brand = Brand(name=name)
                self.db.add(brand)
        except IntegrityError:
            logger.info(f"Brand '{name}' was created concurrently, re-reading it")
            brand = self.get_by_name(name)
            if brand is None:
                raise
            return brand

        logger.info(f"Created brand '{name}' (id={brand.id})")
        return brand

    def list_brands(
        self,
        name: str | None = None,
        direction: SortDirection = SortDirection.ASC,
    ) -> list[Brand]:
        """List brands, optionally filtered by a case-insensitive name substring."""
        query = self.db.query(Brand)
        if name:
            query = query.filter(func.lower(Brand.name).contains(name.lower(), autoescape=True))

        order = Brand.name.desc() if direction == SortDirection.DESC else Brand.name.asc()
        return query.order_by(order).all()
