import importlib.util
import pathlib
import pytest
from datetime import datetime, timedelta, timezone

from flask import Flask


BASE_DIR = pathlib.Path(__file__).resolve().parents[2]
UTILS_PATH = BASE_DIR / "stats_app" / "utils.py"
spec = importlib.util.spec_from_file_location("stats_app_utils", UTILS_PATH)
utils = importlib.util.module_from_spec(spec)
assert spec.loader is not None
spec.loader.exec_module(utils)
err = utils.err
now_utc = utils.now_utc
ok = utils.ok
parse_datetime = utils.parse_datetime
parse_date_range = utils.parse_date_range


def test_ok_and_err_responses():
    app = Flask(__name__)
    with app.app_context():
        ok_response, ok_status = ok({"value": 1}, status=201)
        err_response, err_status = err("bad", status=400, field="x")

    assert ok_status == 201
    assert ok_response.get_json() == {"ok": True, "value": 1}
    assert err_status == 400
    assert err_response.get_json() == {"ok": False, "error": "bad", "field": "x"}


def test_now_utc_is_recent_and_naive():
    before = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(seconds=1)
    value = now_utc()
    after = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(seconds=1)
    assert value.tzinfo is None
    assert before <= value <= after


def test_parse_datetime_normalizes_to_utc():
    assert parse_datetime(None) is None
    assert parse_datetime("") is None
    assert parse_datetime("2024-03-01T10:00:00Z") == datetime(2024, 3, 1, 10, 0)
    assert parse_datetime("2024-03-01T12:00:00+02:00") == datetime(2024, 3, 1, 10, 0)
    assert parse_datetime("2024-03-01") == datetime(2024, 3, 1)
    with pytest.raises(ValueError, match="invalid_datetime"):
        parse_datetime("yesterday")


def test_bare_upper_date_covers_whole_day():
    assert parse_datetime("2024-03-05", end_of_day=True) == datetime(2024, 3, 5, 23, 59, 59, 999999)
    assert parse_datetime("2024-03-05T12:00:00", end_of_day=True) == datetime(2024, 3, 5, 12, 0)

    window = parse_date_range({"date_from": "2024-03-01", "date_to": "2024-03-05"})
    assert window.contains(datetime(2024, 3, 5, 21, 30))
    assert not window.contains(datetime(2024, 3, 6))
    assert window.contains(datetime(2024, 3, 1))
    assert parse_date_range({}) is None
