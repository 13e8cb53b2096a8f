"""Enums for model fields."""

from enum import StrEnum


class GuitarCondition(StrEnum):
    """Condition of a guitar."""

    NEW = "New"
    USED = "Used"
    VINTAGE = "Vintage"


class SortField(StrEnum):
    """Columns the guitar listing can be ordered by."""

    MODEL = "model"
    BRAND = "brand"
    PRICE = "price"

    @classmethod
    def parse(cls, value: str) -> "SortField":
        """Resolve a sort field name, accepting the aliases used by clients."""
        aliases = {
            "name": cls.MODEL,
            "brandname": cls.BRAND,
            "manufacturer": cls.BRAND,
        }
        normalized = value.strip().lower()
        if normalized in aliases:
            return aliases[normalized]
        return cls(normalized)


class SortDirection(StrEnum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"
