"""Models for the DataGolf feed payloads."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

# Per-book prices keyed by player slot ("p1", "p2", "p3")
BookPrices = dict[str, float | None]


def parse_last_updated(value: str | None) -> datetime | None:
    """Parse DataGolf's ``"YYYY-MM-DD HH:MM:SS UTC"`` timestamps."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace(" UTC", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _as_price(value) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class RawMatchup(BaseModel):
    """One record from a 3-ball or round-matchup ``match_list``."""

    model_config = ConfigDict(extra="ignore")

    p1_dg_id: int
    p1_player_name: str
    p2_dg_id: int
    p2_player_name: str
    p3_dg_id: int | None = None
    p3_player_name: str | None = None
    odds: dict[str, BookPrices] = Field(default_factory=dict)

    @field_validator("odds", mode="before")
    @classmethod
    def _drop_non_book_entries(cls, value):
        if not isinstance(value, dict):
            return {}
        cleaned: dict[str, BookPrices] = {}
        for book, prices in value.items():
            if not isinstance(prices, dict):
                continue
            cleaned[book] = {slot: _as_price(price) for slot, price in prices.items()}
        return cleaned

    def player_slots(self, market_type: str) -> list[tuple[str, int, str]]:
        """Return ``(slot, dg_id, name)`` for each player the market type uses."""
        slots = [
            ("p1", self.p1_dg_id, self.p1_player_name),
            ("p2", self.p2_dg_id, self.p2_player_name),
        ]
        if market_type == "3ball" and self.p3_dg_id is not None:
            slots.append(("p3", self.p3_dg_id, self.p3_player_name or ""))
        return slots


class PairingPlayer(BaseModel):
    model_config = ConfigDict(extra="ignore")

    dg_id: int | None = None
    player_name: str | None = None


class Pairing(BaseModel):
    """Model-computed tee-time group from the all-pairings feed."""

    model_config = ConfigDict(extra="ignore")

    p1: PairingPlayer | None = None
    p2: PairingPlayer | None = None
    p3: PairingPlayer | None = None
    teetime: str | None = None
    start_hole: int | None = None

    def player_ids(self) -> list[int]:
        return sorted(p.dg_id for p in (self.p1, self.p2, self.p3) if p and p.dg_id)


class FieldEntry(BaseModel):
    """Per-player entry of the field-updates feed."""

    model_config = ConfigDict(extra="ignore")

    dg_id: StrictInt
    player_name: str | None = None
    start_hole: int | None = None
    r1_teetime: str | None = None
    r2_teetime: str | None = None
    r3_teetime: str | None = None
    r4_teetime: str | None = None

    def teetime_for(self, round_num: int) -> str | None:
        return getattr(self, f"r{round_num}_teetime", None)


class MatchupFeed(BaseModel):
    """Envelope of the 3-ball / round-matchups feeds (``match_list`` validated separately)."""

    model_config = ConfigDict(extra="ignore")

    event_name: str | None = None
    round_num: int | None = None
    last_updated: str | None = None

    @property
    def updated_at(self) -> datetime | None:
        return parse_last_updated(self.last_updated)


class PairingsFeed(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event_name: str | None = None
    round: int | None = None
    last_updated: str | None = None

    @property
    def updated_at(self) -> datetime | None:
        return parse_last_updated(self.last_updated)


class FieldUpdatesFeed(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event_name: str | None = None
    current_round: int | None = None
    last_updated: str | None = None

    @property
    def updated_at(self) -> datetime | None:
        return parse_last_updated(self.last_updated)
