"""Tournament timezone lookup and local tee time → UTC conversion.

DataGolf publishes tee times as tournament-local wall clock strings such as
``"2025-07-17 14:59"``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/New_York"

TOURNAMENT_TIMEZONES: dict[str, str] = {
    # Majors
    "The Open Championship": "Europe/London",
    "U.S. Open": "America/New_York",
    "Masters Tournament": "America/New_York",
    "PGA Championship": "America/New_York",
    # PGA Tour
    "Genesis Invitational": "America/Los_Angeles",
    "WM Phoenix Open": "America/Phoenix",
    "Waste Management Phoenix Open": "America/Phoenix",
    "AT&T Pebble Beach Pro-Am": "America/Los_Angeles",
    "The American Express": "America/Los_Angeles",
    "Sony Open in Hawaii": "Pacific/Honolulu",
    "Sentry": "Pacific/Honolulu",
    "Tournament of Champions": "Pacific/Honolulu",
    "The Players Championship": "America/New_York",
    "THE PLAYERS Championship": "America/New_York",
    "Arnold Palmer Invitational": "America/New_York",
    "Valspar Championship": "America/New_York",
    "Cognizant Classic": "America/New_York",
    "Honda Classic": "America/New_York",
    "Texas Open": "America/Chicago",
    "Valero Texas Open": "America/Chicago",
    "Houston Open": "America/Chicago",
    "RBC Heritage": "America/New_York",
    "Zurich Classic of New Orleans": "America/Chicago",
    "Wells Fargo Championship": "America/New_York",
    "Byron Nelson": "America/Chicago",
    "AT&T Byron Nelson": "America/Chicago",
    "The CJ CUP Byron Nelson": "America/Chicago",
    "Charles Schwab Challenge": "America/Chicago",
    "the Memorial Tournament": "America/New_York",
    "Memorial Tournament": "America/New_York",
    "RBC Canadian Open": "America/Toronto",
    "Travelers Championship": "America/New_York",
    "Rocket Mortgage Classic": "America/Detroit",
    "John Deere Classic": "America/Chicago",
    "3M Open": "America/Chicago",
    "Wyndham Championship": "America/New_York",
    "BMW Championship": "America/Chicago",
    "TOUR Championship": "America/New_York",
    "Fortinet Championship": "America/Los_Angeles",
    "Sanderson Farms Championship": "America/Chicago",
    "Shriners Children's Open": "America/Los_Angeles",
    "ZOZO CHAMPIONSHIP": "Asia/Tokyo",
    "World Wide Technology Championship": "America/Phoenix",
    "Butterfield Bermuda Championship": "Atlantic/Bermuda",
    "RSM Classic": "America/New_York",
    "Hero World Challenge": "America/Nassau",
    "Farmers Insurance Open": "America/Los_Angeles",
    "Mexico Open": "America/Mexico_City",
    # Opposite field
    "Puerto Rico Open": "America/Puerto_Rico",
    "Corales Puntacana Championship": "America/Santo_Domingo",
    "Barracuda Championship": "America/Los_Angeles",
    # DP World Tour
    "BMW International Open": "Europe/Berlin",
    "DP World Tour Championship": "Asia/Dubai",
    "Alfred Dunhill Links Championship": "Europe/London",
    "BMW PGA Championship": "Europe/London",
    "Italian Open": "Europe/Rome",
    "Spanish Open": "Europe/Madrid",
    "French Open": "Europe/Paris",
    "Irish Open": "Europe/Dublin",
    "Scottish Open": "Europe/London",
    "Omega European Masters": "Europe/Zurich",
    "Investec South African Open Championship": "Africa/Johannesburg",
}

# Venue overrides for events that rotate courses
COURSE_TIMEZONES: dict[str, str] = {
    "Whistling Straits": "America/Chicago",
    "TPC Harding Park": "America/Los_Angeles",
    "Bethpage Black": "America/New_York",
    "Quail Hollow Club": "America/New_York",
    "Pebble Beach Golf Links": "America/Los_Angeles",
    "Winged Foot Golf Club": "America/New_York",
    "Torrey Pines Golf Course": "America/Los_Angeles",
    "Oakmont Country Club": "America/New_York",
    "Royal Portrush Golf Club": "Europe/London",
    "Royal Liverpool": "Europe/London",
    "Augusta National Golf Club": "America/New_York",
    "TPC Sawgrass": "America/New_York",
    "Riviera Country Club": "America/Los_Angeles",
    "TPC Scottsdale": "America/Phoenix",
}

# Checked in order against the lowercased tournament name
_KEYWORD_TIMEZONES: list[tuple[tuple[str, ...], str]] = [
    (("european", "dp world"), "Europe/London"),
    (("asian", "japan", "zozo"), "Asia/Tokyo"),
    (("hawaii",), "Pacific/Honolulu"),
    (("mexico",), "America/Mexico_City"),
    (("canada",), "America/Toronto"),
]


def tournament_timezone(tournament_name: str, course_name: str | None = None) -> str:
    if course_name and course_name in COURSE_TIMEZONES:
        return COURSE_TIMEZONES[course_name]
    if tournament_name in TOURNAMENT_TIMEZONES:
        return TOURNAMENT_TIMEZONES[tournament_name]

    lowered = tournament_name.lower()
    for keywords, tz in _KEYWORD_TIMEZONES:
        if any(k in lowered for k in keywords):
            return tz
    return DEFAULT_TIMEZONE


def local_teetime_to_utc(
    teetime: str | None,
    tournament_name: str,
    course_name: str | None = None,
) -> datetime | None:
    """Convert a tournament-local tee time string to an aware UTC datetime.

    Returns None for empty or unparsable input.
    """
    if not teetime:
        return None
    try:
        local = datetime.strptime(teetime.strip(), "%Y-%m-%d %H:%M")
    except ValueError:
        try:
            local = datetime.fromisoformat(teetime.strip())
        except ValueError:
            logger.warning("Unparsable tee time %r for %s", teetime, tournament_name)
            return None

    if local.tzinfo is None:
        local = local.replace(tzinfo=ZoneInfo(tournament_timezone(tournament_name, course_name)))
    return local.astimezone(timezone.utc)
