"""Sportsbook odds extraction for matchup markets.

The stored odds columns come from one consistent book (the primary book)
or are null; there is no fallback to other books for them.
``best_available`` walks a priority list instead, for callers that want
any price at all.
"""

from __future__ import annotations

from typing import Sequence

from golfmx.models.feeds import BookPrices

DEFAULT_BOOK_PRIORITY: tuple[str, ...] = (
    "fanduel",
    "draftkings",
    "betmgm",
    "caesars",
    "bet365",
    "pointsbet",
    "unibet",
    "betcris",
    "betonline",
    "bovada",
)


def book_price(odds: dict[str, BookPrices] | None, book: str, slot: str) -> float | None:
    """Return ``odds[book][slot]`` or None."""
    if not odds:
        return None
    prices = odds.get(book)
    if not prices:
        return None
    return prices.get(slot)


def primary_odds(odds: dict[str, BookPrices] | None, slot: str, primary_book: str = "fanduel") -> float | None:
    return book_price(odds, primary_book, slot)


def best_available(
    odds: dict[str, BookPrices] | None,
    slot: str,
    priority: Sequence[str] = DEFAULT_BOOK_PRIORITY,
) -> tuple[float | None, str | None]:
    """Return ``(price, book)`` from the first book in ``priority`` that prices the slot."""
    for book in priority:
        price = book_price(odds, book, slot)
        if price is not None:
            return price, book
    return None, None


def secondary_odds(odds: dict[str, BookPrices] | None, slot: str, secondary_book: str = "datagolf") -> float | None:
    """The provider's model-derived price, stored alongside and never used as a fallback."""
    return book_price(odds, secondary_book, slot)


def has_primary_odds(
    odds: dict[str, BookPrices] | None,
    slots: Sequence[str],
    primary_book: str = "fanduel",
) -> bool:
    """True only when the primary book prices every player in the market."""
    return all(primary_odds(odds, slot, primary_book) is not None for slot in slots)
