"""Persistence for players, betting markets, snapshots and pipeline runs."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from postgrest.exceptions import APIError

from golfmx.db import Database
from golfmx.errors import PersistenceError
from golfmx.models.markets import BettingMarket, BettingMarketSnapshot, Player
from golfmx.models.pipeline import IngestionError, PipelineRun

logger = logging.getLogger(__name__)

PIPELINE_NAME = "datagolf_matchups"


class MatchupStore:
    """Supabase tables: players, betting_markets, betting_markets_snapshots."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def _call(self, step: str, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except APIError as e:
            raise PersistenceError(step, e.message or str(e)) from e

    def upsert_players(self, players: Sequence[Player]) -> int:
        rows = [p.model_dump() for p in players]
        self._call("upsert_players", self.db.upsert_rows, "players", rows, on_conflict="dg_id")
        return len(rows)

    def fetch_markets(self, tournament_id: int, rounds: Sequence[int]) -> list[dict]:
        return self._call(
            "fetch_markets",
            self.db.select_rows,
            "betting_markets",
            "*",
            {"tournament_id": tournament_id},
            {"round_num": sorted(set(rounds))},
        )

    def fetch_market_keys(self, tournament_id: int, rounds: Sequence[int]) -> dict[str, str | None]:
        """Map matchup_key → stored created_at for the tournament and rounds."""
        rows = self._call(
            "fetch_market_keys",
            self.db.select_rows,
            "betting_markets",
            "matchup_key, created_at",
            {"tournament_id": tournament_id},
            {"round_num": sorted(set(rounds))},
        )
        return {row["matchup_key"]: row.get("created_at") for row in rows}

    def insert_snapshots(self, snapshots: Sequence[BettingMarketSnapshot]) -> int:
        rows = [s.model_dump(mode="json") for s in snapshots]
        self._call("insert_snapshots", self.db.insert_rows, "betting_markets_snapshots", rows)
        return len(rows)

    def upsert_markets(self, markets: Sequence[BettingMarket], existing: dict[str, str | None] | None = None) -> int:
        """Upsert every market in one call on ``matchup_key``.

        Rows already stored carry their stored ``created_at`` so the write
        never moves it.
        """
        existing = existing or {}
        now = datetime.now(timezone.utc).isoformat()
        rows = []
        for m in markets:
            row = m.to_row()
            row["updated_at"] = now
            if existing.get(m.matchup_key):
                row["created_at"] = existing[m.matchup_key]
            rows.append(row)
        self._call("upsert_markets", self.db.upsert_rows, "betting_markets", rows, on_conflict="matchup_key")
        return len(rows)

    def update_market(self, market_id: int, values: dict) -> None:
        self._call("update_market", self.db.update_rows, "betting_markets", values, {"id": market_id})

    # ── Pipeline run tracking ────────────────────────────────────────────────

    def start_run(self, details: dict) -> int | None:
        try:
            run = PipelineRun(
                pipeline_name=PIPELINE_NAME,
                started_at=datetime.now(timezone.utc),
                details_json=details,
            )
            rows = self.db.insert_rows("pipeline_runs", [run.model_dump(mode="json", exclude={"id"})])
            return rows[0]["id"] if rows else None
        except APIError as e:
            logger.error("Could not open pipeline run: %s", e)
            return None

    def finish_run(self, run_id: int | None, status: str, rows_written: int, details: dict) -> None:
        if run_id is None:
            return
        try:
            self.db.update_rows(
                "pipeline_runs",
                {
                    "status": status,
                    "ended_at": datetime.now(timezone.utc).isoformat(),
                    "rows_written": rows_written,
                    "details_json": details,
                },
                {"id": run_id},
            )
        except APIError as e:
            logger.error("Could not close pipeline run %s: %s", run_id, e)

    def log_error(self, run_id: int | None, error_type: str, message: str, ref: str | None = None) -> None:
        try:
            err = IngestionError(run_id=run_id, error_type=error_type, error_message=message[:2000], payload_ref=ref)
            self.db.insert_rows("ingestion_errors", [err.model_dump(exclude={"id"})])
        except APIError as e:
            logger.error("Could not record ingestion error: %s", e)
