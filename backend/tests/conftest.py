"""Shared fixtures: fixture settings, canned DataGolf feeds and in-memory collaborators."""

import copy
from datetime import datetime

import pytest

from golfmx.config import Settings
from golfmx.ingestion.datagolf_client import FeedBundle
from golfmx.models.results import MatchType, TournamentMatch

EVENT_NAME = "Wyndham Championship"
TOURNAMENT_ID = 100


@pytest.fixture
def settings():
    return Settings(
        supabase_url="http://localhost:54321",
        supabase_service_role_key="service-key",
        datagolf_api_key="dg-key",
        _env_file=None,
    )


def three_ball_feed(round_num=2, match_list=None):
    if match_list is None:
        match_list = [
            {
                "p1_dg_id": 10, "p1_player_name": "Alpha, Al",
                "p2_dg_id": 11, "p2_player_name": "Bravo, Ben",
                "p3_dg_id": 12, "p3_player_name": "Charlie, Cal",
                "odds": {
                    "fanduel": {"p1": 2.5, "p2": 2.8, "p3": 3.1},
                    "draftkings": {"p1": 2.4, "p2": 2.9, "p3": 3.0},
                    "datagolf": {"p1": 2.6, "p2": 2.7, "p3": 3.2},
                },
            },
        ]
    return {
        "event_name": EVENT_NAME,
        "round_num": round_num,
        "last_updated": "2025-08-08 11:00:00 UTC",
        "market": "3_balls",
        "match_list": match_list,
    }


def round_matchup_feed(round_num=2, match_list=None):
    if match_list is None:
        match_list = [
            {
                "p1_dg_id": 11, "p1_player_name": "Bravo, Ben",
                "p2_dg_id": 10, "p2_player_name": "Alpha, Al",
                "odds": {
                    "fanduel": {"p1": 1.9, "p2": 1.95},
                    "datagolf": {"p1": 1.88, "p2": 2.01},
                },
            },
            {
                "p1_dg_id": 20, "p1_player_name": "Delta, Dan",
                "p2_dg_id": 21, "p2_player_name": "Echo, Eli",
                "odds": {
                    "draftkings": {"p1": 1.8, "p2": 2.0},
                    "datagolf": {"p1": 1.85, "p2": 1.97},
                },
            },
        ]
    return {
        "event_name": EVENT_NAME,
        "round_num": round_num,
        "last_updated": "2025-08-08 11:05:00 UTC",
        "market": "round_matchups",
        "match_list": match_list,
    }


def pairings_feed():
    return {
        "event_name": EVENT_NAME,
        "round": 2,
        "pairings": [
            {
                "p1": {"dg_id": 10, "player_name": "Alpha, Al"},
                "p2": {"dg_id": 11, "player_name": "Bravo, Ben"},
                "p3": {"dg_id": 12, "player_name": "Charlie, Cal"},
                "teetime": "2025-08-08 08:10",
                "start_hole": 1,
            },
            {
                "p1": {"dg_id": 20, "player_name": "Delta, Dan"},
                "p2": {"dg_id": 21, "player_name": "Echo, Eli"},
                "p3": {"dg_id": 22, "player_name": "Foxtrot, Fin"},
                "teetime": "2025-08-08 09:00",
                "start_hole": 10,
            },
        ],
    }


def field_feed(current_round=2, entries=None):
    if entries is None:
        entries = [
            {"dg_id": pid, "player_name": f"Player {pid}", "start_hole": 1,
             "r1_teetime": "2025-08-07 13:20", "r2_teetime": "2025-08-08 08:10"}
            for pid in (10, 11, 12)
        ]
    return {
        "event_name": EVENT_NAME,
        "current_round": current_round,
        "last_updated": "2025-08-08 10:55:00 UTC",
        "field": entries,
    }


def make_bundle(three_ball=None, round_matchups=None, pairings=None, field=None):
    return FeedBundle(
        three_ball=three_ball if three_ball is not None else three_ball_feed(),
        round_matchups=round_matchups if round_matchups is not None else round_matchup_feed(),
        pairings=pairings if pairings is not None else pairings_feed(),
        field_updates=field if field is not None else field_feed(),
    )


class FakeClient:
    def __init__(self, bundle=None, error=None):
        self.bundle = bundle or make_bundle()
        self.error = error
        self.calls = 0

    def fetch_all(self, tour):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.bundle)


class FakeResolver:
    def __init__(self, match=None):
        self.match = match or TournamentMatch(
            tournament_id=TOURNAMENT_ID,
            name=EVENT_NAME,
            tour="pga",
            match_type=MatchType.EXACT,
            confidence=1.0,
        )
        self.resolved = []
        self.aliases = []

    def resolve(self, event_name, tour):
        self.resolved.append((event_name, tour))
        return self.match

    def record_alias(self, tournament_id, observed_name, source="datagolf"):
        self.aliases.append((tournament_id, observed_name, source))

    def suggest(self, event_name, tour, limit=5):
        return [{"name": "Wyndham Champ.", "confidence": 0.8}]


class FakeStore:
    """In-memory stand-in for MatchupStore that records call order."""

    def __init__(self):
        self.players = {}
        self.markets = {}
        self.snapshots = []
        self.events = []
        self.errors = []
        self.runs = {}
        self.fail_on = set()
        self._next_id = 1

    def _check(self, step):
        from golfmx.errors import PersistenceError

        if step in self.fail_on:
            raise PersistenceError(step, "boom")

    def upsert_players(self, players):
        self._check("upsert_players")
        self.events.append("upsert_players")
        for p in players:
            self.players[p.dg_id] = p.name
        return len(players)

    def fetch_markets(self, tournament_id, rounds):
        self._check("fetch_markets")
        return [
            copy.deepcopy(row) for row in self.markets.values()
            if row["tournament_id"] == tournament_id and row["round_num"] in rounds
        ]

    def fetch_market_keys(self, tournament_id, rounds):
        self._check("fetch_market_keys")
        return {
            row["matchup_key"]: row.get("created_at") for row in self.markets.values()
            if row["tournament_id"] == tournament_id and row["round_num"] in rounds
        }

    def insert_snapshots(self, snapshots):
        self._check("insert_snapshots")
        self.events.append("insert_snapshots")
        self.snapshots.extend(s.model_dump(mode="json") for s in snapshots)
        return len(snapshots)

    def upsert_markets(self, markets, existing=None):
        # Upsert overwrites every column sent, created_at included
        self._check("upsert_markets")
        self.events.append("upsert_markets")
        existing = existing or {}
        for m in markets:
            row = m.to_row()
            if existing.get(m.matchup_key):
                row["created_at"] = existing[m.matchup_key]
            if m.matchup_key in self.markets:
                self.markets[m.matchup_key].update(row)
            else:
                row["id"] = self._next_id
                self._next_id += 1
                self.markets[m.matchup_key] = row
        return len(markets)

    def update_market(self, market_id, values):
        self._check("update_market")
        for row in self.markets.values():
            if row["id"] == market_id:
                row.update(values)

    def add_market(self, row):
        row = dict(row, id=self._next_id)
        self._next_id += 1
        self.markets[row["matchup_key"]] = row
        return row

    def start_run(self, details):
        run_id = len(self.runs) + 1
        self.runs[run_id] = {"status": "running", "details": details}
        return run_id

    def finish_run(self, run_id, status, rows_written, details):
        self.runs[run_id].update(status=status, rows_written=rows_written)

    def log_error(self, run_id, error_type, message, ref=None):
        self.errors.append((run_id, error_type, message))


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def resolver():
    return FakeResolver()


def utc(*args):
    from datetime import timezone

    return datetime(*args, tzinfo=timezone.utc)
