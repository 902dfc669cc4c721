"""Map a feed event name onto a stored tournament.

``match_tournament`` is a pure decision over candidate rows;
``TournamentResolver`` loads those rows from Supabase and, separately,
records learned aliases.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Sequence

from pydantic import BaseModel, ValidationError
from rapidfuzz.distance import Levenshtein

from golfmx.db import Database
from golfmx.models.markets import Tournament, TournamentAlias
from golfmx.models.results import MatchType, TournamentMatch

logger = logging.getLogger(__name__)

ALIAS_CONFIDENCE = 0.95
CROSS_TOUR_CONFIDENCE = 0.9
CONTAINMENT_CONFIDENCE = 0.9
FUZZY_THRESHOLD = 0.7
SUGGESTION_THRESHOLD = 0.3

_TOURNAMENT_COLUMNS = "id, name, tour, start_date, end_date, course_name"


def _normalize(name: str) -> str:
    name = re.sub(r"[^\w\s]", "", name.lower())
    return re.sub(r"\s+", " ", name).strip()


def similarity(a: str, b: str) -> float:
    """Name similarity in [0, 1]; containment after normalization scores 0.9."""
    n1, n2 = _normalize(a), _normalize(b)
    if not n1 and not n2:
        return 1.0
    if n1 and n2 and (n1 in n2 or n2 in n1):
        return 1.0 if n1 == n2 else CONTAINMENT_CONFIDENCE
    return Levenshtein.normalized_similarity(n1, n2)


def _match(t: Tournament, match_type: MatchType, confidence: float) -> TournamentMatch:
    return TournamentMatch(
        tournament_id=t.id,
        name=t.name,
        tour=t.tour,
        course_name=t.course_name,
        match_type=match_type,
        confidence=confidence,
    )


def match_tournament(
    event_name: str,
    tour: str,
    tournaments: Sequence[Tournament],
    aliases: Sequence[TournamentAlias] = (),
) -> TournamentMatch:
    """Resolve ``event_name`` on ``tour``: exact, then alias, then fuzzy, then exact on any tour."""
    on_tour = [t for t in tournaments if t.tour == tour]

    for t in on_tour:
        if t.name == event_name:
            return _match(t, MatchType.EXACT, 1.0)

    by_id = {t.id: t for t in on_tour}
    for alias in aliases:
        if alias.alias_name == event_name and alias.tournament_id in by_id:
            return _match(by_id[alias.tournament_id], MatchType.ALIAS, ALIAS_CONFIDENCE)

    scored = sorted(
        ((similarity(event_name, t.name), t) for t in on_tour),
        key=lambda pair: pair[0],
        reverse=True,
    )
    if scored and scored[0][0] > FUZZY_THRESHOLD:
        score, best = scored[0]
        return _match(best, MatchType.FUZZY, round(score, 4))

    # Events the provider files under a different tour (e.g. opposite-field)
    for t in tournaments:
        if t.name == event_name:
            logger.warning("Cross-tour match for %r: stored on %s, requested %s", event_name, t.tour, tour)
            return _match(t, MatchType.EXACT, CROSS_TOUR_CONFIDENCE)

    return TournamentMatch(match_type=MatchType.NONE)


def _parse_rows(rows: list[dict], model: type[BaseModel], label: str) -> list:
    parsed = []
    for row in rows:
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning("Skipping malformed %s row %s: %s", label, row.get("id"), e)
    return parsed


def is_unsupported_event(event_name: str | None, keywords: Sequence[str]) -> bool:
    if not event_name:
        return False
    lowered = event_name.lower()
    return any(k.lower() in lowered for k in keywords)


class TournamentResolver:
    """Supabase-backed tournament lookup with alias learning."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def _candidates(self, event_name: str, tour: str) -> list[Tournament]:
        rows = self.db.select_rows("tournaments", _TOURNAMENT_COLUMNS, {"tour": tour})
        rows += self.db.select_rows("tournaments", _TOURNAMENT_COLUMNS, {"name": event_name})
        seen: dict[int, Tournament] = {}
        for t in _parse_rows(rows, Tournament, "tournament"):
            seen.setdefault(t.id, t)
        return list(seen.values())

    def resolve(self, event_name: str, tour: str) -> TournamentMatch:
        logger.info("Resolving tournament name %r for tour %s", event_name, tour)
        alias_rows = self.db.select_rows(
            "tournament_aliases",
            "tournament_id, alias_name, source, is_primary",
            {"alias_name": event_name},
        )
        aliases = _parse_rows(alias_rows, TournamentAlias, "tournament alias")
        match = match_tournament(event_name, tour, self._candidates(event_name, tour), aliases)
        if match.found:
            logger.info(
                "Matched %r → %s (id=%s, %s, confidence %.2f)",
                event_name, match.name, match.tournament_id, match.match_type.value, match.confidence,
            )
        else:
            logger.warning("No tournament match found for %r", event_name)
        return match

    def record_alias(self, tournament_id: int, observed_name: str, source: str = "datagolf") -> None:
        """Store ``observed_name`` as an alias so the next lookup matches without fuzzing."""
        self.db.upsert_rows(
            "tournament_aliases",
            [{
                "tournament_id": tournament_id,
                "alias_name": observed_name,
                "source": source,
                "is_primary": False,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }],
            on_conflict="tournament_id,alias_name",
        )
        logger.info("Added tournament alias %r for tournament %d", observed_name, tournament_id)

    def suggest(self, event_name: str, tour: str, limit: int = 5) -> list[dict]:
        """Closest recent tournament names on the tour, for not-found diagnostics."""
        rows = (
            self.db.table("tournaments")
            .select("name")
            .eq("tour", tour)
            .order("start_date", desc=True)
            .limit(20)
            .execute()
            .data
        )
        scored = [
            {"name": r["name"], "confidence": round(similarity(event_name, r["name"]), 4)}
            for r in rows
        ]
        scored = [s for s in scored if s["confidence"] > SUGGESTION_THRESHOLD]
        scored.sort(key=lambda s: s["confidence"], reverse=True)
        return scored[:limit]
