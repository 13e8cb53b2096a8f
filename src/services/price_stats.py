"""Price statistics shown alongside a guitar listing."""

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass
class PriceSummary:
    """Min/max/average over a set of prices."""

    count: int
    min_price: float
    max_price: float
    average_price: float
    closest_to_average_id: int
    closest_to_average_price: float


def summarize_prices(priced: Iterable[tuple[int, float]]) -> PriceSummary | None:
    """Summarize ``(guitar_id, price)`` pairs.

    Returns ``None`` for an empty input. The guitar closest to the average is
    the first one in input order when several are equally close.
    """
    pairs = [(guitar_id, float(price)) for guitar_id, price in priced]
    if not pairs:
        return None

    prices = [price for _, price in pairs]
    average = sum(prices) / len(prices)
    closest_id, closest_price = min(pairs, key=lambda pair: abs(pair[1] - average))

    return PriceSummary(
        count=len(pairs),
        min_price=min(prices),
        max_price=max(prices),
        average_price=round(average, 2),
        closest_to_average_id=closest_id,
        closest_to_average_price=closest_price,
    )


def price_category(price: float, summary: PriceSummary | None) -> str | None:
    """Label a price relative to a summary: "lowest", "highest", "average" or None."""
    if summary is None:
        return None
    price = float(price)
    if price == summary.min_price:
        return "lowest"
    if price == summary.max_price:
        return "highest"
    if price == summary.closest_to_average_price:
        return "average"
    return None
