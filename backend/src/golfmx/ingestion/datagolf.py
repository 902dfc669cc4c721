"""DataGolf matchup ingestion worker.

Flow:
  1. Fetch the 3-ball, round-matchup, all-pairings and field-updates feeds
  2. Validate both match lists; if both are empty only refresh tee times
     of markets already stored for the current round
  3. Resolve the tournament from the feed's event name
  4. Upsert every player seen in the match lists
  5. Build market records (tee time, odds, matchup key)
  6. Snapshot the stored markets, then upsert the new state on matchup_key
  7. Track pipeline run and errors

At most one cycle per tour should run at a time; callers serialize.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from postgrest.exceptions import APIError
from pydantic import ValidationError

from golfmx import storage
from golfmx.config import Settings, Tour, parse_tour
from golfmx.db import Database
from golfmx.errors import FeedFetchError, PersistenceError
from golfmx.ingestion.datagolf_client import DataGolfClient, FeedBundle
from golfmx.ingestion.matchups import MarketContext, build_markets
from golfmx.ingestion.store import MatchupStore
from golfmx.ingestion.teetimes import build_tee_time_map, resolve_tee_time
from golfmx.ingestion.validation import parse_matchups, parse_pairings, validate_match_list
from golfmx.models.feeds import FieldUpdatesFeed, MatchupFeed, PairingsFeed, RawMatchup
from golfmx.models.markets import BettingMarketSnapshot, Player
from golfmx.models.results import CycleStage, IngestResult, IngestStatus, MatchType, TournamentMatch
from golfmx.timezones import local_teetime_to_utc
from golfmx.tournaments import TournamentResolver, is_unsupported_event

logger = logging.getLogger(__name__)


def _envelope(model, body: dict[str, Any], label: str):
    try:
        return model.model_validate(body)
    except ValidationError as e:
        logger.warning("Unexpected %s envelope, ignoring its metadata: %s", label, e)
        return model()


def _parse_ts(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _iso(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts else None


def _collect_players(*match_lists: tuple[str, list[RawMatchup]]) -> list[Player]:
    """Distinct (dg_id, name) pairs across the match lists; first name seen wins."""
    players: dict[int, Player] = {}
    for market_type, matchups in match_lists:
        for m in matchups:
            for _, dg_id, name in m.player_slots(market_type):
                if dg_id and name and dg_id not in players:
                    players[dg_id] = Player(dg_id=dg_id, name=name)
    return list(players.values())


def _archive_feeds(db: Database, settings: Settings, tour: Tour, feeds: FeedBundle, ts: datetime) -> None:
    for kind, body in feeds.as_dict().items():
        try:
            storage.archive_raw_feed(db.client, settings.supabase_bucket_raw_api, kind.value, tour.value, body, ts)
        except Exception as e:
            logger.warning("Could not archive %s feed: %s", kind.value, e)


def _resolve_tournament(
    resolver: TournamentResolver,
    event_name: str,
    tour: Tour,
) -> TournamentMatch:
    match = resolver.resolve(event_name, tour.value)
    if match.found and match.match_type is MatchType.FUZZY and match.confidence < 1.0:
        try:
            resolver.record_alias(match.tournament_id, event_name, "datagolf")
        except APIError as e:
            logger.error("Could not record alias %r: %s", event_name, e)
    return match


# ── Degenerate path: no markets on offer, refresh stored tee times ───────────


def refresh_tee_times(
    store: MatchupStore,
    match: TournamentMatch,
    event_name: str,
    round_num: int,
    field_body: dict[str, Any],
) -> tuple[dict[str, int], int]:
    """Update tee times of stored markets for one round. Creates and deletes nothing.

    Returns (updated count per market type, failed updates).
    """
    tee_times = build_tee_time_map(field_body, round_num)
    existing = store.fetch_markets(match.tournament_id, [round_num])
    logger.info("Checking %d stored markets for tee time changes", len(existing))

    updated = {"2ball": 0, "3ball": 0}
    failed = 0
    for row in existing:
        ids = [row.get(k) for k in ("player1_dg_id", "player2_dg_id", "player3_dg_id") if row.get(k)]
        resolved = resolve_tee_time(ids, round_num, tee_times, ())
        new_tee_time = local_teetime_to_utc(resolved.teetime, event_name, match.course_name)
        if new_tee_time == _parse_ts(row.get("tee_time")):
            continue

        values: dict[str, Any] = {"tee_time": _iso(new_tee_time), "start_hole": resolved.start_hole}
        if row.get("type") == "2ball":
            for slot in ("player1", "player2"):
                entry = tee_times.get(row.get(f"{slot}_dg_id"))
                values[f"{slot}_tee_time"] = _iso(
                    local_teetime_to_utc(entry.teetime if entry else None, event_name, match.course_name)
                )
        try:
            store.update_market(row["id"], values)
        except PersistenceError as e:
            logger.error("Failed to update tee time for market %s: %s", row.get("id"), e)
            failed += 1
            continue

        market_type = row.get("type", "2ball")
        updated[market_type] = updated.get(market_type, 0) + 1
        if new_tee_time:
            logger.debug("Market %s tee time → %s", row.get("matchup_key"), new_tee_time)
        else:
            logger.debug("Cleared tee time for market %s (%s)", row.get("matchup_key"), resolved.status)

    return updated, failed


def _degenerate(
    result: IngestResult,
    store: MatchupStore,
    resolver: TournamentResolver,
    tour: Tour,
    feeds: FeedBundle,
    env3: MatchupFeed,
    env2: MatchupFeed,
    field: FieldUpdatesFeed,
) -> IngestResult:
    result.stage = CycleStage.DEGENERATE_REFRESH
    event_name = env3.event_name or env2.event_name or field.event_name
    round_num = field.current_round
    result.event_name = event_name
    result.round_num = round_num
    result.diagnostics["match_list_types"] = {
        "3ball": type(feeds.three_ball.get("match_list")).__name__,
        "2ball": type(feeds.round_matchups.get("match_list")).__name__,
    }

    match = _resolve_tournament(resolver, event_name, tour) if event_name else TournamentMatch()
    if not match.found or round_num is None:
        result.status = IngestStatus.NO_MATCHUPS
        result.stage = CycleStage.DONE
        result.message = (
            f"No matchups available for {tour.value.upper()} tour "
            "and could not update existing tee times"
        )
        return result

    result.tournament_id = match.tournament_id
    updated, failed = refresh_tee_times(store, match, event_name, round_num, feeds.field_updates)
    result.updated_by_type = updated
    result.updated = sum(updated.values())
    result.diagnostics["tee_time_update_failures"] = failed
    result.status = IngestStatus.TEE_TIMES_REFRESHED
    result.stage = CycleStage.DONE
    result.message = f"No new matchups available. Updated tee times for {result.updated} existing matchups."
    return result


# ── Main cycle ───────────────────────────────────────────────────────────────


def _ingest(
    result: IngestResult,
    settings: Settings,
    tour: Tour,
    client: DataGolfClient,
    store: MatchupStore,
    resolver: TournamentResolver,
    db: Database | None,
) -> IngestResult:
    now = datetime.now(timezone.utc)

    # 1. Fetch
    result.stage = CycleStage.FETCHING
    feeds = client.fetch_all(tour)
    if settings.archive_raw_feeds and db is not None:
        _archive_feeds(db, settings, tour, feeds, now)

    # 2. Validate
    result.stage = CycleStage.VALIDATING
    env3 = _envelope(MatchupFeed, feeds.three_ball, "3-ball")
    env2 = _envelope(MatchupFeed, feeds.round_matchups, "2-ball")
    field = _envelope(FieldUpdatesFeed, feeds.field_updates, "field-updates")
    pairings_env = _envelope(PairingsFeed, feeds.pairings, "all-pairings")
    result.feeds_updated_at = {
        "3ball": env3.updated_at,
        "2ball": env2.updated_at,
        "field": field.updated_at,
        "pairings": pairings_env.updated_at,
    }
    list3 = parse_matchups(validate_match_list(feeds.three_ball, "3-ball"), "3-ball")
    list2 = parse_matchups(validate_match_list(feeds.round_matchups, "2-ball"), "2-ball")

    if not list3 and not list2:
        logger.info("No new matchups available, refreshing existing tee times")
        return _degenerate(result, store, resolver, tour, feeds, env3, env2, field)

    # 3. Resolve tournament
    result.stage = CycleStage.RESOLVING_TOURNAMENT
    event_name = env3.event_name or env2.event_name
    result.event_name = event_name
    if is_unsupported_event(event_name, settings.unsupported_events):
        result.status = IngestStatus.TOURNAMENT_UNSUPPORTED
        result.stage = CycleStage.DONE
        result.message = f"Event {event_name!r} is a format this store does not track"
        return result

    match = _resolve_tournament(resolver, event_name, tour) if event_name else TournamentMatch()
    if not match.found:
        result.status = IngestStatus.TOURNAMENT_NOT_FOUND
        result.stage = CycleStage.DONE
        result.message = f"Could not find tournament for event_name: {event_name}"
        result.diagnostics["suggestions"] = resolver.suggest(event_name, tour.value) if event_name else []
        return result
    tournament_id = match.tournament_id
    result.tournament_id = tournament_id
    result.diagnostics["tournament_match"] = {
        "name": match.name,
        "match_type": match.match_type.value,
        "confidence": match.confidence,
    }

    # 4. Players must exist before markets reference them
    players = _collect_players(("3ball", list3), ("2ball", list2))
    result.players_upserted = store.upsert_players(players)
    logger.info("Upserted %d players", result.players_upserted)

    # 5-6. Build records
    result.stage = CycleStage.BUILDING_RECORDS
    pairings = parse_pairings(feeds.pairings)
    round3 = env3.round_num or field.current_round
    round2 = env2.round_num or field.current_round
    result.round_num = round3 if list3 else round2

    markets = []
    for market_type, matchups, round_num, env in (
        ("3ball", list3, round3, env3),
        ("2ball", list2, round2, env2),
    ):
        if not matchups:
            continue
        if round_num is None:
            logger.warning("No round number for %s feed; skipping %d matchups", market_type, len(matchups))
            continue
        ctx = MarketContext(
            tournament_id=tournament_id,
            tournament_name=event_name,
            course_name=match.course_name,
            market_type=market_type,
            round_num=round_num,
            created_at=env.updated_at or now,
            tee_times=build_tee_time_map(feeds.field_updates, round_num),
            pairings=pairings,
            primary_book=settings.primary_book,
            secondary_book=settings.secondary_book,
            book_priority=settings.book_priority,
        )
        built, coverage = build_markets(matchups, ctx)
        markets.extend(built)
        result.diagnostics[f"odds_{market_type}"] = coverage.as_dict()
        result.diagnostics.setdefault("samples", []).extend(coverage.samples)

    if not markets:
        result.stage = CycleStage.DONE
        result.message = "No matchups to insert"
        return result

    # 7. Existing keys (required), then snapshot pre-update state (best effort)
    result.stage = CycleStage.SNAPSHOTTING
    rounds = sorted({m.round_num for m in markets})
    existing_created = store.fetch_market_keys(tournament_id, rounds)
    try:
        existing = store.fetch_markets(tournament_id, rounds)
        if existing:
            snapshots = [BettingMarketSnapshot.from_market_row(row) for row in existing]
            result.snapshots_written = store.insert_snapshots(snapshots)
            logger.info("Created %d odds snapshots", result.snapshots_written)
    except (PersistenceError, ValidationError) as e:
        logger.error("Failed to create odds snapshots: %s", e, exc_info=True)
        result.diagnostics["snapshot_error"] = str(e)

    # 8. Upsert on matchup_key
    result.stage = CycleStage.UPSERTING
    logger.info("Upserting %d markets for tournament %d", len(markets), tournament_id)
    store.upsert_markets(markets, existing_created)
    for m in markets:
        bucket = result.updated_by_type if m.matchup_key in existing_created else result.inserted_by_type
        bucket[m.type] += 1
    result.inserted = sum(result.inserted_by_type.values())
    result.updated = sum(result.updated_by_type.values())

    result.stage = CycleStage.DONE
    result.message = (
        f"Ingested {len(markets)} markets for {match.name}: "
        f"{result.inserted} new, {result.updated} updated"
    )
    return result


def run_cycle(
    tour: Tour | str,
    settings: Settings,
    *,
    client: DataGolfClient | None = None,
    store: MatchupStore | None = None,
    resolver: TournamentResolver | None = None,
    db: Database | None = None,
) -> IngestResult:
    """Run one ingestion cycle for a tour and return its report.

    Feed, persistence and lookup failures end the cycle with status
    ``failed``; nothing here raises for them.
    """
    tour = parse_tour(tour)
    if db is None and (store is None or resolver is None):
        db = Database.from_settings(settings)
    client = client or DataGolfClient(settings)
    store = store or MatchupStore(db)
    resolver = resolver or TournamentResolver(db)

    result = IngestResult(tour=tour.value, status=IngestStatus.SUCCESS, stage=CycleStage.FETCHING)
    run_id = store.start_run({"tour": tour.value})

    try:
        _ingest(result, settings, tour, client, store, resolver, db)
    except (FeedFetchError, PersistenceError, APIError, ValidationError) as e:
        logger.error("Ingestion cycle failed for %s at %s: %s", tour.value, result.stage.value, e, exc_info=True)
        store.log_error(run_id, f"cycle_{result.stage.value}", str(e))
        result.diagnostics["failed_stage"] = result.stage.value
        result.status = IngestStatus.FAILED
        result.stage = CycleStage.FAILED
        result.error = str(e)
        result.message = f"Ingestion failed: {e}"

    store.finish_run(
        run_id,
        "failed" if result.status is IngestStatus.FAILED else "success",
        result.inserted + result.updated,
        result.model_dump(mode="json", exclude={"diagnostics"}),
    )
    return result
