"""Normalize the feed payload arrays before record assembly.

The matchup feeds report "no markets" in three different shapes: the
``match_list`` field missing, a human-readable message string in its place,
or some other non-list value. All three collapse to an empty list here;
none of them is an error.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from golfmx.models.feeds import FieldEntry, Pairing, RawMatchup

logger = logging.getLogger(__name__)


def validate_match_list(body: Any, label: str, field: str = "match_list") -> list[Any]:
    """Return the feed's payload array, or ``[]`` for any unexpected shape. Never raises."""
    if not isinstance(body, dict) or body.get(field) is None:
        logger.info("No %s found for %s", field, label)
        return []

    value = body[field]
    if isinstance(value, str):
        logger.info("%s %s is a message, not a list: %s", label, field, value)
        return []
    if not isinstance(value, list):
        logger.info("%s %s is not a list: %s", label, field, type(value).__name__)
        return []
    return value


def _parse_records(records: list[Any], model, label: str) -> list:
    parsed = []
    skipped = 0
    for raw in records:
        try:
            parsed.append(model.model_validate(raw))
        except ValidationError as e:
            skipped += 1
            logger.debug("Skipping malformed %s record: %s", label, e)
    if skipped:
        logger.warning("Skipped %d malformed %s record(s)", skipped, label)
    return parsed


def parse_matchups(records: list[Any], label: str) -> list[RawMatchup]:
    return _parse_records(records, RawMatchup, label)


def parse_pairings(body: Any) -> list[Pairing]:
    return _parse_records(validate_match_list(body, "pairings", field="pairings"), Pairing, "pairing")


def parse_field(body: Any) -> list[FieldEntry]:
    return _parse_records(validate_match_list(body, "field-updates", field="field"), FieldEntry, "field")
