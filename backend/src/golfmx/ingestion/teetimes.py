"""Tee time lookup from the field-updates feed, with pairing fallback.

From round 3 on, a player listed in the field with no tee time for the
round has missed the cut. That null is kept as-is and reported as "cut";
it is never replaced by a pairing-derived time. This only holds once the
field feed has reached that round: a null for a round the feed has not
started yet means the tee time is not published, and the player is left
out of the map.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from golfmx.ingestion.validation import parse_field
from golfmx.models.feeds import Pairing

logger = logging.getLogger(__name__)

CUT_ROUND = 3


@dataclass(frozen=True)
class FieldTeeTime:
    teetime: str | None
    start_hole: int = 1


TeeTimeMap = dict[int, FieldTeeTime]


@dataclass(frozen=True)
class ResolvedTeeTime:
    teetime: str | None
    start_hole: int = 1
    source: str = "none"  # field, pairing, cut, none

    @property
    def status(self) -> str:
        if self.source == "cut":
            return "cut"
        return "scheduled" if self.teetime else "unknown"


def build_tee_time_map(field_body: Any, round_num: int | None) -> TeeTimeMap:
    """Map dg_id → (round tee time, start hole) from a field-updates body.

    Rebuilt from scratch on every call.
    """
    tee_times: TeeTimeMap = {}
    if round_num is None:
        logger.info("No round number; tee time map left empty")
        return tee_times

    current_round = field_body.get("current_round") if isinstance(field_body, dict) else None
    published = not isinstance(current_round, int) or current_round >= round_num

    missed_cut = 0
    unpublished = 0
    for entry in parse_field(field_body):
        teetime = entry.teetime_for(round_num)
        if teetime is None and not published:
            unpublished += 1
            continue
        if round_num >= CUT_ROUND and teetime is None:
            missed_cut += 1
            logger.debug(
                "Player %s (%d) has no R%d tee time: missed cut",
                entry.player_name, entry.dg_id, round_num,
            )
        tee_times[entry.dg_id] = FieldTeeTime(teetime=teetime, start_hole=entry.start_hole or 1)

    logger.info(
        "Tee time map for round %d: %d players (%d missed cut, %d not yet published)",
        round_num, len(tee_times), missed_cut, unpublished,
    )
    return tee_times


def find_pairing(pairings: Sequence[Pairing], player_ids: Sequence[int]) -> Pairing | None:
    """Find the model pairing that contains a market's players.

    A 2-player market matches any pairing holding both players, since round
    matchups are often drawn from a 3-ball group. A 3-player market needs
    the exact same set of players.
    """
    wanted = sorted(int(pid) for pid in player_ids if pid)
    if not wanted:
        return None

    for pairing in pairings:
        ids = pairing.player_ids()
        if len(wanted) == 2:
            if all(pid in ids for pid in wanted):
                return pairing
        elif ids == wanted:
            return pairing
    return None


def resolve_tee_time(
    player_ids: Sequence[int],
    round_num: int | None,
    tee_times: TeeTimeMap,
    pairings: Sequence[Pairing],
) -> ResolvedTeeTime:
    """Resolve one market's tee time: field entries first, then pairings."""
    known = [tee_times[pid] for pid in player_ids if pid in tee_times]
    for entry in known:
        if entry.teetime:
            return ResolvedTeeTime(entry.teetime, entry.start_hole, "field")

    if known and round_num is not None and round_num >= CUT_ROUND:
        return ResolvedTeeTime(None, known[0].start_hole, "cut")

    pairing = find_pairing(pairings, player_ids)
    if pairing is not None and pairing.teetime:
        return ResolvedTeeTime(pairing.teetime, pairing.start_hole or 1, "pairing")

    start_hole = known[0].start_hole if known else 1
    return ResolvedTeeTime(None, start_hole, "none")
