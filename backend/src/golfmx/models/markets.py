"""Models for tournaments, players, betting markets and their snapshots."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class Tournament(BaseModel):
    id: int
    name: str
    tour: str
    start_date: date | None = None
    end_date: date | None = None
    course_name: str | None = None


class TournamentAlias(BaseModel):
    tournament_id: int
    alias_name: str
    source: str = "datagolf"
    is_primary: bool = False


class Player(BaseModel):
    dg_id: int
    name: str


class BettingMarket(BaseModel):
    matchup_key: str
    tournament_id: int
    round_num: int
    type: str  # 2ball, 3ball
    market_name: str
    player1_dg_id: int
    player1_name: str
    player2_dg_id: int
    player2_name: str
    player3_dg_id: int | None = None
    player3_name: str | None = None
    odds1: float | None = None
    odds2: float | None = None
    odds3: float | None = None
    dg_odds1: float | None = None
    dg_odds2: float | None = None
    dg_odds3: float | None = None
    start_hole: int = 1
    tee_time: datetime | None = None
    player1_tee_time: datetime | None = None
    player2_tee_time: datetime | None = None
    created_at: datetime

    def to_row(self) -> dict:
        return self.model_dump(mode="json")


# Fields copied from a market into its snapshot
SNAPSHOT_FIELDS: tuple[str, ...] = (
    "matchup_key",
    "tournament_id",
    "round_num",
    "type",
    "player1_dg_id",
    "player1_name",
    "player2_dg_id",
    "player2_name",
    "player3_dg_id",
    "player3_name",
    "odds1",
    "odds2",
    "odds3",
    "dg_odds1",
    "dg_odds2",
    "dg_odds3",
    "tee_time",
)


class BettingMarketSnapshot(BaseModel):
    matchup_key: str
    tournament_id: int
    round_num: int
    type: str
    player1_dg_id: int
    player1_name: str | None = None
    player2_dg_id: int
    player2_name: str | None = None
    player3_dg_id: int | None = None
    player3_name: str | None = None
    odds1: float | None = None
    odds2: float | None = None
    odds3: float | None = None
    dg_odds1: float | None = None
    dg_odds2: float | None = None
    dg_odds3: float | None = None
    tee_time: datetime | None = None
    source: str = "datagolf"
    last_updated: datetime | None = None

    @classmethod
    def from_market_row(cls, row: dict) -> "BettingMarketSnapshot":
        """Copy the pre-update state of a stored market row."""
        values = {k: row.get(k) for k in SNAPSHOT_FIELDS}
        values["last_updated"] = row.get("updated_at") or row.get("created_at")
        return cls(**values)
