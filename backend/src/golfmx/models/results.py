"""Models for tournament matches and ingestion cycle results."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class MatchType(str, Enum):
    EXACT = "exact"
    ALIAS = "alias"
    FUZZY = "fuzzy"
    NONE = "none"


class TournamentMatch(BaseModel):
    tournament_id: int | None = None
    name: str | None = None
    tour: str | None = None
    course_name: str | None = None
    match_type: MatchType = MatchType.NONE
    confidence: float = 0.0

    @property
    def found(self) -> bool:
        return self.match_type is not MatchType.NONE and self.tournament_id is not None


class CycleStage(str, Enum):
    FETCHING = "fetching"
    VALIDATING = "validating"
    DEGENERATE_REFRESH = "degenerate_refresh"
    RESOLVING_TOURNAMENT = "resolving_tournament"
    BUILDING_RECORDS = "building_records"
    SNAPSHOTTING = "snapshotting"
    UPSERTING = "upserting"
    DONE = "done"
    FAILED = "failed"


class IngestStatus(str, Enum):
    SUCCESS = "success"
    TEE_TIMES_REFRESHED = "tee_times_refreshed"
    NO_MATCHUPS = "no_matchups"
    TOURNAMENT_NOT_FOUND = "tournament_not_found"
    TOURNAMENT_UNSUPPORTED = "tournament_unsupported"
    FAILED = "failed"


class IngestResult(BaseModel):
    tour: str
    status: IngestStatus
    stage: CycleStage = CycleStage.DONE
    message: str = ""
    error: str | None = None
    event_name: str | None = None
    tournament_id: int | None = None
    round_num: int | None = None
    inserted: int = 0
    updated: int = 0
    inserted_by_type: dict[str, int] = Field(default_factory=lambda: {"2ball": 0, "3ball": 0})
    updated_by_type: dict[str, int] = Field(default_factory=lambda: {"2ball": 0, "3ball": 0})
    snapshots_written: int = 0
    players_upserted: int = 0
    feeds_updated_at: dict[str, datetime | None] = Field(default_factory=dict)
    diagnostics: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is not IngestStatus.FAILED
