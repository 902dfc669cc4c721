"""Tests for the DataGolf feed client. No real HTTP calls are made."""

from unittest.mock import MagicMock

import pytest
from requests.exceptions import ConnectionError

from golfmx.config import Tour
from golfmx.errors import FeedFetchError
from golfmx.ingestion.datagolf_client import DataGolfClient, FeedKind, redact


def _response(status=200, body=None, bad_json=False):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    if bad_json:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = body if body is not None else {}
    return resp


class TestFeedUrl:
    def test_three_ball_url(self, settings):
        url = DataGolfClient(settings, session=MagicMock()).feed_url(Tour.PGA, FeedKind.THREE_BALL)
        assert url.startswith("https://feeds.datagolf.com/betting-tools/matchups?")
        assert "tour=pga" in url
        assert "market=3_balls" in url
        assert "odds_format=decimal" in url
        assert "key=dg-key" in url

    def test_field_updates_url(self, settings):
        url = DataGolfClient(settings, session=MagicMock()).feed_url(Tour.EURO, FeedKind.FIELD_UPDATES)
        assert url.startswith("https://feeds.datagolf.com/field-updates?tour=euro")

    def test_redact_hides_key(self):
        assert redact("https://x/y?tour=pga&key=secret&file_format=json") == (
            "https://x/y?tour=pga&key=***&file_format=json"
        )


class TestFetch:
    def test_returns_json(self, settings):
        session = MagicMock()
        session.get.return_value = _response(body={"match_list": []})
        body = DataGolfClient(settings, session=session).fetch(Tour.PGA, FeedKind.ROUND_MATCHUPS)
        assert body == {"match_list": []}
        assert session.get.call_args.kwargs["timeout"] == settings.request_timeout_s

    def test_non_2xx_raises_with_url(self, settings):
        session = MagicMock()
        session.get.return_value = _response(status=503)
        with pytest.raises(FeedFetchError) as exc:
            DataGolfClient(settings, session=session).fetch(Tour.PGA, FeedKind.THREE_BALL)
        assert exc.value.status_code == 503
        assert "betting-tools/matchups" in exc.value.url
        assert "dg-key" not in str(exc.value)

    def test_bad_json_raises(self, settings):
        session = MagicMock()
        session.get.return_value = _response(bad_json=True)
        with pytest.raises(FeedFetchError):
            DataGolfClient(settings, session=session).fetch(Tour.PGA, FeedKind.ALL_PAIRINGS)

    def test_connection_error_raises_without_retry(self, settings):
        session = MagicMock()
        session.get.side_effect = ConnectionError("refused")
        with pytest.raises(FeedFetchError):
            DataGolfClient(settings, session=session).fetch(Tour.PGA, FeedKind.THREE_BALL)
        assert session.get.call_count == 1


class TestFetchAll:
    def test_fetches_every_feed(self, settings):
        session = MagicMock()

        def fake_get(url, **kwargs):
            if "field-updates" in url:
                return _response(body={"field": []})
            if "all-pairings" in url:
                return _response(body={"pairings": []})
            if "3_balls" in url:
                return _response(body={"match_list": "none"})
            return _response(body={"match_list": []})

        session.get.side_effect = fake_get
        bundle = DataGolfClient(settings, session=session).fetch_all(Tour.PGA)

        assert session.get.call_count == 4
        assert bundle.three_ball == {"match_list": "none"}
        assert bundle.round_matchups == {"match_list": []}
        assert bundle.pairings == {"pairings": []}
        assert bundle.field_updates == {"field": []}

    def test_one_failure_aborts(self, settings):
        session = MagicMock()

        def fake_get(url, **kwargs):
            if "field-updates" in url:
                return _response(status=500)
            return _response(body={})

        session.get.side_effect = fake_get
        with pytest.raises(FeedFetchError):
            DataGolfClient(settings, session=session).fetch_all(Tour.PGA)

    def test_non_object_body_becomes_empty(self, settings):
        session = MagicMock()
        session.get.return_value = _response(body=["unexpected"])
        bundle = DataGolfClient(settings, session=session).fetch_all(Tour.OPP)
        assert bundle.three_ball == {}
