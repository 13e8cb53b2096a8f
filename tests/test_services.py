"""Service layer tests: pagination, price stats, brands and the guitar query engine."""

import pytest
from sqlalchemy.exc import IntegrityError

from src.models.brand import Brand
from src.models.enums import GuitarCondition, SortDirection, SortField
from src.models.guitar import Guitar
from src.models.user import User
from src.schemas.guitar import GuitarCreate
from src.services.brand_service import BrandService
from src.services.guitar_service import (
    DuplicateGuitarError,
    GuitarFilter,
    GuitarService,
    GuitarSort,
)
from src.services.pagination import PaginationError, paginate, parse_pagination
from src.services.price_stats import price_category, summarize_prices


def make_guitar(**overrides) -> GuitarCreate:
    data = {
        "model": "Stratocaster",
        "brand_name": "Fender",
        "type": "Electric",
        "strings": 6,
        "condition": GuitarCondition.NEW,
        "price": 733,
    }
    data.update(overrides)
    return GuitarCreate(**data)


@pytest.fixture
def service(db):
    return GuitarService(db)


# --- Pagination ---


def test_parse_pagination_defaults():
    assert parse_pagination(None, None) == (1, 10)
    assert parse_pagination("", "") == (1, 10)


def test_parse_pagination_accepts_strings():
    assert parse_pagination("3", "25") == (3, 25)


@pytest.mark.parametrize(
    ("page", "limit", "message"),
    [
        ("0", None, "Page must be a positive number"),
        ("1.5", None, "Page must be a positive number"),
        ("abc", None, "Page must be a positive number"),
        (None, "101", "Limit must be between 1 and 100"),
        (None, "0", "Limit must be between 1 and 100"),
    ],
)
def test_parse_pagination_rejects(page, limit, message):
    with pytest.raises(PaginationError, match=message):
        parse_pagination(page, limit)


def test_paginate_middle_page():
    page = paginate(list(range(25)), 2, 5)
    assert page.items == [5, 6, 7, 8, 9]
    assert page.total == 25
    assert page.total_pages == 5
    assert page.has_next_page
    assert page.has_prev_page


def test_paginate_last_partial_page():
    page = paginate(list(range(12)), 2, 10)
    assert page.items == [10, 11]
    assert page.total_pages == 2
    assert not page.has_next_page


def test_paginate_empty():
    page = paginate([], 1, 10)
    assert page.items == []
    assert page.total_pages == 0
    assert not page.has_next_page
    assert not page.has_prev_page


# --- Price stats ---


def test_summarize_prices():
    summary = summarize_prices([(1, 100), (2, 200), (3, 600)])
    assert summary.count == 3
    assert summary.min_price == 100
    assert summary.max_price == 600
    assert summary.average_price == 300
    assert summary.closest_to_average_id == 2


def test_summarize_prices_tie_goes_to_first():
    summary = summarize_prices([(7, 100), (8, 300)])
    assert summary.average_price == 200
    assert summary.closest_to_average_id == 7


def test_summarize_prices_rounds_average():
    summary = summarize_prices([(1, 10), (2, 10), (3, 11)])
    assert summary.average_price == 10.33


def test_summarize_prices_empty():
    assert summarize_prices([]) is None


def test_price_category():
    summary = summarize_prices([(1, 100), (2, 200), (3, 600)])
    assert price_category(100, summary) == "lowest"
    assert price_category(600, summary) == "highest"
    assert price_category(200, summary) == "average"
    assert price_category(150, summary) is None
    assert price_category(100, None) is None


# --- Sort field parsing ---


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("model", SortField.MODEL),
        ("name", SortField.MODEL),
        ("brandName", SortField.BRAND),
        ("manufacturer", SortField.BRAND),
        (" PRICE ", SortField.PRICE),
    ],
)
def test_sort_field_parse(raw, expected):
    assert SortField.parse(raw) == expected


def test_sort_field_parse_unknown():
    with pytest.raises(ValueError):
        SortField.parse("color")


# --- Brands ---


def test_find_or_create_brand(db):
    brands = BrandService(db)
    fender = brands.find_or_create("Fender")
    again = brands.find_or_create("  Fender ")
    db.commit()

    assert fender.id is not None
    assert again.id == fender.id
    assert db.query(Brand).count() == 1


def test_find_or_create_brand_ignores_case(db):
    brands = BrandService(db)
    fender = brands.find_or_create("Fender")

    assert brands.find_or_create("FENDER").id == fender.id
    assert brands.get_by_name("fender").name == "Fender"
    assert db.query(Brand).count() == 1


@pytest.mark.parametrize("name", ["", "   "])
def test_find_or_create_brand_rejects_blank(db, name):
    with pytest.raises(ValueError, match="Brand name must not be blank"):
        BrandService(db).find_or_create(name)
    assert db.query(Brand).count() == 0


def test_list_brands(db):
    brands = BrandService(db)
    for name in ("Martin", "Fender", "Gibson"):
        brands.find_or_create(name)
    db.commit()

    assert [b.name for b in brands.list_brands()] == ["Fender", "Gibson", "Martin"]
    assert [b.name for b in brands.list_brands(direction=SortDirection.DESC)] == [
        "Martin",
        "Gibson",
        "Fender",
    ]
    assert [b.name for b in brands.list_brands(name="TIN")] == ["Martin"]


# --- Guitars ---


def test_create_guitar(service, owner):
    guitar = service.create_guitar(make_guitar(), owner.id)

    assert guitar.id is not None
    assert guitar.brand.name == "Fender"
    assert guitar.condition == "New"
    assert guitar.price == 733
    assert guitar.created_at is not None


def test_create_guitar_requires_brand(service, owner):
    data = GuitarCreate.model_construct(
        model="Stratocaster",
        brand_name="   ",
        type="Electric",
        strings=6,
        condition=GuitarCondition.NEW,
        price=733,
        image_url=None,
    )
    with pytest.raises(ValueError, match="Brand name is required"):
        service.create_guitar(data, owner.id)


def test_create_duplicate_guitar(service, owner):
    service.create_guitar(make_guitar(), owner.id)
    with pytest.raises(DuplicateGuitarError):
        service.create_guitar(make_guitar(price=999), owner.id)

    assert len(service.list_guitars(GuitarFilter(user_id=owner.id))) == 1


def test_create_duplicate_ignores_case(service, owner):
    service.create_guitar(make_guitar(), owner.id)
    with pytest.raises(DuplicateGuitarError):
        service.create_guitar(make_guitar(model="STRATOCASTER", brand_name="fender"), owner.id)


def test_price_must_be_positive_in_store(db, owner):
    brand = BrandService(db).find_or_create("Fender")
    db.add(
        Guitar(
            model="Stratocaster",
            type="Electric",
            strings=6,
            condition="New",
            price=0,
            brand=brand,
            user_id=owner.id,
        )
    )
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_create_guitars_share_brand(service, owner, db):
    strat = service.create_guitar(make_guitar(), owner.id)
    tele = service.create_guitar(make_guitar(model="Telecaster"), owner.id)
    assert strat.brand_id == tele.brand_id
    assert db.query(Brand).count() == 1


@pytest.fixture
def stocked(service, owner):
    """A small inventory owned by ``owner``."""
    for data in (
        make_guitar(),
        make_guitar(model="Telecaster", condition=GuitarCondition.USED, price=1200),
        make_guitar(model="Les Paul", brand_name="Gibson", condition=GuitarCondition.VINTAGE,
                    price=2500),
        make_guitar(model="D-28", brand_name="Martin", type="Acoustic", price=3000),
        make_guitar(model="Jazz Bass", type="Bass", strings=4, condition=GuitarCondition.USED,
                    price=900),
    ):
        service.create_guitar(data, owner.id)
    return owner


def models(guitars):
    return [guitar.model for guitar in guitars]


def test_list_guitars_unfiltered(service, stocked):
    assert models(service.list_guitars()) == [
        "D-28",
        "Jazz Bass",
        "Les Paul",
        "Stratocaster",
        "Telecaster",
    ]


@pytest.mark.parametrize(
    ("filters", "expected"),
    [
        (GuitarFilter(brand_name="fend"), ["Jazz Bass", "Stratocaster", "Telecaster"]),
        (GuitarFilter(brand_name=["Gibson"]), ["Les Paul"]),
        (GuitarFilter(brand_name=["gibson"]), []),
        (GuitarFilter(type="Acoustic"), ["D-28"]),
        (GuitarFilter(strings=[4, 12]), ["Jazz Bass"]),
        (GuitarFilter(condition=["Used", "Vintage"]), ["Jazz Bass", "Les Paul", "Telecaster"]),
        (GuitarFilter(min_price=1000, max_price=2500), ["Les Paul", "Telecaster"]),
        (GuitarFilter(model="PAUL"), ["Les Paul"]),
        (GuitarFilter(search="martin"), ["D-28"]),
        (GuitarFilter(search="bass", condition="New"), []),
        (GuitarFilter(type=[], condition=""), ["D-28", "Jazz Bass", "Les Paul", "Stratocaster",
                                               "Telecaster"]),
    ],
)
def test_list_guitars_filters(service, stocked, filters, expected):
    assert models(service.list_guitars(filters)) == expected


def test_search_escapes_wildcards(service, owner):
    service.create_guitar(make_guitar(model="Custom 24"), owner.id)
    service.create_guitar(make_guitar(model="Player 50% Off"), owner.id)

    assert models(service.list_guitars(GuitarFilter(search="%"))) == ["Player 50% Off"]
    assert models(service.list_guitars(GuitarFilter(search="_"))) == []


def test_list_guitars_sorted(service, stocked):
    by_price = service.list_guitars(sort=GuitarSort(SortField.PRICE, SortDirection.DESC))
    assert [guitar.price for guitar in by_price] == [3000, 2500, 1200, 900, 733]

    by_brand = service.list_guitars(sort=GuitarSort(SortField.BRAND))
    assert [guitar.brand.name for guitar in by_brand] == [
        "Fender",
        "Fender",
        "Fender",
        "Gibson",
        "Martin",
    ]


def test_list_guitars_scoped_to_owner(service, stocked, db):
    stranger = User(email="stranger@example.com", password_hash="x")
    db.add(stranger)
    db.commit()

    assert service.list_guitars(GuitarFilter(user_id=stranger.id)) == []
    assert len(service.list_guitars(GuitarFilter(user_id=stocked.id))) == 5


def test_get_guitar(service, owner):
    guitar = service.create_guitar(make_guitar(), owner.id)

    assert service.get_guitar(guitar.id).id == guitar.id
    assert service.get_guitar(guitar.id, owner.id).id == guitar.id
    assert service.get_guitar(guitar.id, owner.id + 1) is None
    assert service.get_guitar(99999) is None


def test_update_guitar(service, owner):
    guitar = service.create_guitar(make_guitar(), owner.id)

    updated = service.update_guitar(
        guitar.id, {"price": 650, "condition": GuitarCondition.USED, "type": None}, owner.id
    )
    assert updated.price == 650
    assert updated.condition == "Used"
    # A null for a required column leaves it alone
    assert updated.type == "Electric"


def test_update_guitar_brand(service, owner, db):
    guitar = service.create_guitar(make_guitar(), owner.id)

    updated = service.update_guitar(guitar.id, {"brand_name": "Squier"}, owner.id)
    assert updated.brand.name == "Squier"
    # The old brand is kept even though nothing references it now
    assert {b.name for b in db.query(Brand).all()} == {"Fender", "Squier"}


def test_update_guitar_clears_image(service, owner):
    guitar = service.create_guitar(make_guitar(image_url="https://example.com/strat.jpg"), owner.id)
    updated = service.update_guitar(guitar.id, {"image_url": None}, owner.id)
    assert updated.image_url is None


def test_update_guitar_duplicate(service, owner):
    service.create_guitar(make_guitar(), owner.id)
    tele = service.create_guitar(make_guitar(model="Telecaster"), owner.id)

    with pytest.raises(DuplicateGuitarError):
        service.update_guitar(tele.id, {"model": "Stratocaster"}, owner.id)

    assert service.get_guitar(tele.id).model == "Telecaster"


@pytest.mark.parametrize("field_name", ["brand_name", "model", "type", "condition"])
def test_update_guitar_rejects_blank_text(service, owner, db, field_name):
    guitar = service.create_guitar(make_guitar(), owner.id)

    with pytest.raises(ValueError, match=f"{field_name} must not be blank"):
        service.update_guitar(guitar.id, {field_name: "  "}, owner.id)

    db.rollback()
    assert service.get_guitar(guitar.id).model == "Stratocaster"
    assert db.query(Brand).count() == 1


def test_update_missing_guitar(service, owner):
    assert service.update_guitar(99999, {"price": 1}, owner.id) is None


def test_delete_guitar(service, owner):
    guitar = service.create_guitar(make_guitar(), owner.id)

    assert service.delete_guitar(guitar.id, owner.id + 1) is False
    assert service.delete_guitar(guitar.id, owner.id) is True
    assert service.get_guitar(guitar.id) is None
    assert service.delete_guitar(guitar.id, owner.id) is False
