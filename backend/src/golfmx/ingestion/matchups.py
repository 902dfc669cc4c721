"""Matchup keys and market record assembly."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from golfmx.ingestion import odds as odds_mod
from golfmx.ingestion.teetimes import TeeTimeMap, resolve_tee_time
from golfmx.models.feeds import Pairing, RawMatchup
from golfmx.models.markets import BettingMarket
from golfmx.timezones import local_teetime_to_utc

logger = logging.getLogger(__name__)

MARKET_TYPES = ("2ball", "3ball")


def matchup_key(
    tournament_id: int,
    round_num: int,
    market_type: str,
    player_ids: Sequence[int],
) -> str:
    """Stable key for one logical market: ``{tid}_R{round}_{type}_{id1}_{id2}[_{id3}]``.

    Player ids are sorted so feed slot order does not matter.
    """
    if market_type not in MARKET_TYPES:
        raise ValueError(f"Unknown market type: {market_type!r}")
    ids = sorted(int(pid) for pid in player_ids if pid is not None)
    expected = 3 if market_type == "3ball" else 2
    if len(ids) != expected:
        raise ValueError(f"{market_type} market needs {expected} players, got {len(ids)}")
    return f"{tournament_id}_R{round_num}_{market_type}_" + "_".join(str(i) for i in ids)


@dataclass
class OddsCoverage:
    """Odds availability tallies for one market type."""

    total: int = 0
    with_primary: int = 0
    without_primary: int = 0
    with_any: int = 0
    cut: int = 0
    samples: list[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "with_primary": self.with_primary,
            "without_primary": self.without_primary,
            "with_any": self.with_any,
            "cut": self.cut,
        }


@dataclass
class MarketContext:
    """Everything needed to turn raw matchups of one type into market records."""

    tournament_id: int
    tournament_name: str
    market_type: str
    round_num: int
    created_at: datetime
    tee_times: TeeTimeMap
    pairings: Sequence[Pairing]
    course_name: str | None = None
    primary_book: str = "fanduel"
    secondary_book: str = "datagolf"
    book_priority: Sequence[str] = odds_mod.DEFAULT_BOOK_PRIORITY


def _to_utc(teetime: str | None, ctx: MarketContext) -> datetime | None:
    return local_teetime_to_utc(teetime, ctx.tournament_name, ctx.course_name)


def build_market(m: RawMatchup, ctx: MarketContext, coverage: OddsCoverage | None = None) -> BettingMarket:
    """Assemble one market record from a raw matchup."""
    slots = m.player_slots(ctx.market_type)
    player_ids = [dg_id for _, dg_id, _ in slots]
    slot_names = [slot for slot, _, _ in slots]
    key = matchup_key(ctx.tournament_id, ctx.round_num, ctx.market_type, player_ids)

    resolved = resolve_tee_time(player_ids, ctx.round_num, ctx.tee_times, ctx.pairings)

    primary = {s: odds_mod.primary_odds(m.odds, s, ctx.primary_book) for s in slot_names}
    secondary = {s: odds_mod.secondary_odds(m.odds, s, ctx.secondary_book) for s in slot_names}

    if coverage is not None:
        coverage.total += 1
        if odds_mod.has_primary_odds(m.odds, slot_names, ctx.primary_book):
            coverage.with_primary += 1
        else:
            coverage.without_primary += 1
        best = [odds_mod.best_available(m.odds, s, ctx.book_priority) for s in slot_names]
        if any(price is not None for price, _ in best):
            coverage.with_any += 1
        if resolved.status == "cut":
            coverage.cut += 1

    is_three = ctx.market_type == "3ball"
    names = [name for _, _, name in slots]
    market = BettingMarket(
        matchup_key=key,
        tournament_id=ctx.tournament_id,
        round_num=ctx.round_num,
        type=ctx.market_type,
        market_name=" vs ".join(names),
        player1_dg_id=m.p1_dg_id,
        player1_name=m.p1_player_name,
        player2_dg_id=m.p2_dg_id,
        player2_name=m.p2_player_name,
        player3_dg_id=m.p3_dg_id if is_three else None,
        player3_name=m.p3_player_name if is_three else None,
        odds1=primary.get("p1"),
        odds2=primary.get("p2"),
        odds3=primary.get("p3"),
        dg_odds1=secondary.get("p1"),
        dg_odds2=secondary.get("p2"),
        dg_odds3=secondary.get("p3"),
        start_hole=resolved.start_hole,
        tee_time=_to_utc(resolved.teetime, ctx),
        created_at=ctx.created_at,
    )

    if not is_three:
        p1 = ctx.tee_times.get(m.p1_dg_id)
        p2 = ctx.tee_times.get(m.p2_dg_id)
        market.player1_tee_time = _to_utc(p1.teetime if p1 else None, ctx)
        market.player2_tee_time = _to_utc(p2.teetime if p2 else None, ctx)
    return market


def build_markets(matchups: Sequence[RawMatchup], ctx: MarketContext) -> tuple[list[BettingMarket], OddsCoverage]:
    """Build records for every matchup, skipping any with an invalid player set.

    Duplicate keys within the batch keep the last observation.
    """
    coverage = OddsCoverage()
    by_key: dict[str, BettingMarket] = {}
    for m in matchups:
        try:
            market = build_market(m, ctx, coverage)
        except ValueError as e:
            logger.warning("Skipping %s matchup %s vs %s: %s", ctx.market_type, m.p1_dg_id, m.p2_dg_id, e)
            continue
        by_key[market.matchup_key] = market
        if len(coverage.samples) < 5:
            coverage.samples.append({
                "type": market.type,
                "market": market.market_name,
                "odds": [market.odds1, market.odds2, market.odds3],
                "dg_odds": [market.dg_odds1, market.dg_odds2, market.dg_odds3],
                "tee_time": market.tee_time.isoformat() if market.tee_time else None,
            })

    logger.info(
        "%s markets: %d/%d have %s odds for every player, %d have any odds",
        ctx.market_type, coverage.with_primary, coverage.total, ctx.primary_book, coverage.with_any,
    )
    return list(by_key.values()), coverage
