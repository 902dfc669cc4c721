"""Tests for tee time maps, pairing matching and cut-line handling."""

from golfmx.ingestion.teetimes import (
    FieldTeeTime,
    build_tee_time_map,
    find_pairing,
    resolve_tee_time,
)
from golfmx.models.feeds import Pairing


def _pairing(ids, teetime="2025-08-08 08:10", start_hole=1):
    slots = {f"p{i + 1}": {"dg_id": pid} for i, pid in enumerate(ids)}
    return Pairing.model_validate({**slots, "teetime": teetime, "start_hole": start_hole})


class TestBuildTeeTimeMap:
    def test_reads_round_specific_key(self):
        body = {"field": [
            {"dg_id": 1, "r1_teetime": "2025-08-07 07:00", "r2_teetime": "2025-08-08 12:00", "start_hole": 10},
        ]}
        assert build_tee_time_map(body, 1)[1] == FieldTeeTime("2025-08-07 07:00", 10)
        assert build_tee_time_map(body, 2)[1] == FieldTeeTime("2025-08-08 12:00", 10)

    def test_start_hole_defaults_to_one(self):
        body = {"field": [{"dg_id": 1, "r1_teetime": "2025-08-07 07:00"}]}
        assert build_tee_time_map(body, 1)[1].start_hole == 1

    def test_null_round_three_teetime_is_preserved(self):
        body = {"field": [{"dg_id": 1, "r2_teetime": "2025-08-08 12:00", "r3_teetime": None}]}
        tee_times = build_tee_time_map(body, 3)
        assert 1 in tee_times
        assert tee_times[1].teetime is None

    def test_null_for_round_not_yet_reached_is_left_out(self):
        entries = [{"dg_id": 1, "r2_teetime": "2025-08-08 12:00", "r3_teetime": None}]
        assert build_tee_time_map({"current_round": 2, "field": entries}, 3) == {}
        assert build_tee_time_map({"current_round": 3, "field": entries}, 3)[1].teetime is None

    def test_non_numeric_ids_skipped(self):
        body = {"field": [{"dg_id": "7", "r1_teetime": "x"}, {"dg_id": None}]}
        assert build_tee_time_map(body, 1) == {}

    def test_missing_field_or_round(self):
        assert build_tee_time_map({}, 1) == {}
        assert build_tee_time_map({"field": [{"dg_id": 1}]}, None) == {}


class TestFindPairing:
    def test_two_ball_matches_subset_of_three_ball_group(self):
        group = _pairing([1, 2, 3])
        assert find_pairing([group], [1, 2]) is group

    def test_two_ball_order_independent(self):
        group = _pairing([1, 2, 3])
        assert find_pairing([group], [3, 1]) is group

    def test_three_ball_requires_exact_set(self):
        pairings = [_pairing([1, 2, 3]), _pairing([4, 5, 6])]
        assert find_pairing(pairings, [1, 2, 4]) is None
        assert find_pairing(pairings, [6, 4, 5]) is pairings[1]

    def test_three_ball_does_not_match_two_ball_pairing(self):
        assert find_pairing([_pairing([1, 2])], [1, 2, 3]) is None

    def test_first_match_wins(self):
        first, second = _pairing([1, 2, 3], "a"), _pairing([1, 2, 9], "b")
        assert find_pairing([first, second], [1, 2]) is first

    def test_no_pairings(self):
        assert find_pairing([], [1, 2]) is None


class TestResolveTeeTime:
    def test_field_entry_wins(self):
        tee_times = {1: FieldTeeTime("2025-08-08 08:10", 1)}
        resolved = resolve_tee_time([1, 2], 2, tee_times, [_pairing([1, 2], "2025-08-08 09:00")])
        assert resolved.teetime == "2025-08-08 08:10"
        assert resolved.source == "field"

    def test_second_player_used_when_first_missing(self):
        tee_times = {2: FieldTeeTime("2025-08-08 08:20", 10)}
        resolved = resolve_tee_time([1, 2], 2, tee_times, [])
        assert (resolved.teetime, resolved.start_hole) == ("2025-08-08 08:20", 10)

    def test_pairing_fallback_when_field_lacks_players(self):
        resolved = resolve_tee_time([1, 2], 1, {}, [_pairing([1, 2, 3], "2025-08-07 07:40", 10)])
        assert resolved.teetime == "2025-08-07 07:40"
        assert resolved.start_hole == 10
        assert resolved.source == "pairing"

    def test_missed_cut_never_falls_back_to_pairing(self):
        tee_times = {1: FieldTeeTime(None, 1), 2: FieldTeeTime(None, 1)}
        resolved = resolve_tee_time([1, 2], 3, tee_times, [_pairing([1, 2], "2025-08-09 10:00")])
        assert resolved.teetime is None
        assert resolved.status == "cut"

    def test_early_round_null_falls_back_to_pairing(self):
        tee_times = {1: FieldTeeTime(None, 1)}
        resolved = resolve_tee_time([1, 2], 2, tee_times, [_pairing([1, 2], "2025-08-08 10:00")])
        assert resolved.teetime == "2025-08-08 10:00"

    def test_unknown_when_nothing_matches(self):
        resolved = resolve_tee_time([1, 2], 1, {}, [])
        assert resolved.teetime is None
        assert resolved.status == "unknown"
