from __future__ import annotations

import io
import json
from http.client import IncompleteRead, InvalidURL
from pathlib import Path
from urllib.error import HTTPError

import pytest

import timeline_core
from timeline_core import (
    EventLoadError,
    TimelineEvent,
    category_icon,
    collect_filter_options,
    normalize_event,
    normalize_events,
    period_color,
    read_events_from_json,
)


def _write_json(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "record",
    [
        {},
        {"year": 1913},
        {"title": "Only a title"},
        {"category": "crisis"},
        {"year": None, "link": None, "period": None},
        {"description": "d", "category": ["law", "institution"], "link": "https://example.org"},
    ],
)
def test_normalize_event_always_has_every_field(record: dict) -> None:
    event = normalize_event(record)
    assert isinstance(event.title, str)
    assert isinstance(event.description, str)
    assert isinstance(event.period, str)
    assert isinstance(event.link, str)
    assert isinstance(event.category, tuple)


def test_normalize_event_category_shapes() -> None:
    assert normalize_event({"category": "crisis"}).category == ("crisis",)
    assert normalize_event({}).category == ()
    assert normalize_event({"category": ""}).category == ()
    assert normalize_event({"category": ["law", "institution"]}).category == ("law", "institution")


def test_normalize_event_year_passes_through() -> None:
    assert normalize_event({"year": 1913}).year == 1913
    assert normalize_event({"year": -44}).year == -44
    assert normalize_event({}).year is None


def test_normalize_events_keeps_sparse_records_and_integer_years() -> None:
    records = [
        {"year": 1913, "title": "Federal Reserve Act", "category": ["law", "institution"]},
        {"title": "Undated"},
        {"year": 1929, "category": "crisis"},
    ]
    events = normalize_events(records)

    assert len(events) == 3
    assert [e.year for e in events] == [1913, None, 1929]
    assert isinstance(events[0].year, int)
    assert events[1].category == ()
    assert events[2].category == ("crisis",)
    assert events[2].title == ""


def test_normalize_events_does_not_mutate_input() -> None:
    records = [{"year": 1913, "category": "law"}]
    normalize_events(records)
    assert records == [{"year": 1913, "category": "law"}]


def test_normalize_events_empty() -> None:
    assert normalize_events([]) == []


@pytest.mark.parametrize("records", [[{}], [{}, {}], [{}, {"year": 1}]])
def test_normalize_events_keeps_empty_records(records: list[dict]) -> None:
    events = normalize_events(records)
    assert len(events) == len(records)
    assert events[0] == TimelineEvent(year=None, title="", description="", period="", category=(), link="")


def test_normalize_event_scalar_category_becomes_text() -> None:
    events = normalize_events([{"category": 7}, {"category": ["law"]}])
    assert events[0].category == ("7",)
    assert collect_filter_options(events) == ([], ["7", "law"])


def test_read_events_from_json_file(tmp_path: Path) -> None:
    path = _write_json(
        tmp_path / "events.json",
        [{"year": 1929, "title": "Stock Market Crash", "period": "Great Depression", "category": ["crisis"]}],
    )
    events = read_events_from_json(path)
    assert events == [
        TimelineEvent(
            year=1929,
            title="Stock Market Crash",
            description="",
            period="Great Depression",
            category=("crisis",),
            link="",
        )
    ]


@pytest.mark.parametrize("body", ["{not json", json.dumps({"year": 1913}), json.dumps([1, 2])])
def test_read_events_from_json_rejects_bad_bodies(tmp_path: Path, body: str) -> None:
    path = tmp_path / "events.json"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(EventLoadError):
        read_events_from_json(path)


def test_read_events_from_json_missing_file(tmp_path: Path) -> None:
    with pytest.raises(EventLoadError):
        read_events_from_json(tmp_path / "missing.json")


def test_read_events_from_json_url(monkeypatch: pytest.MonkeyPatch) -> None:
    class FakeResponse(io.BytesIO):
        status = 200

        def __enter__(self) -> "FakeResponse":
            return self

        def __exit__(self, *exc: object) -> None:
            self.close()

    payload = json.dumps([{"year": 1913, "title": "Federal Reserve Act"}]).encode("utf-8")
    monkeypatch.setattr(timeline_core, "urlopen", lambda url: FakeResponse(payload))

    events = read_events_from_json("https://example.org/events.json")
    assert [e.title for e in events] == ["Federal Reserve Act"]


def test_read_events_from_json_http_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(url: str) -> None:
        raise HTTPError(url, 404, "Not Found", None, None)

    monkeypatch.setattr(timeline_core, "urlopen", fail)
    with pytest.raises(EventLoadError, match="404"):
        read_events_from_json("https://example.org/events.json")


class _BrokenResponse:
    status = 200

    def __init__(self, error: Exception) -> None:
        self.error = error

    def __enter__(self) -> "_BrokenResponse":
        return self

    def __exit__(self, *exc: object) -> None:
        pass

    def read(self) -> bytes:
        raise self.error


@pytest.mark.parametrize(
    "error",
    [
        TimeoutError("timed out"),
        ConnectionResetError("reset by peer"),
        IncompleteRead(b"[{"),
    ],
)
def test_read_events_from_json_network_failures(monkeypatch: pytest.MonkeyPatch, error: Exception) -> None:
    monkeypatch.setattr(timeline_core, "urlopen", lambda url: _BrokenResponse(error))
    with pytest.raises(EventLoadError) as excinfo:
        read_events_from_json("https://example.org/events.json")
    assert excinfo.value.__cause__ is error


def test_read_events_from_json_invalid_url(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(url: str) -> None:
        raise InvalidURL("nonnumeric port")

    monkeypatch.setattr(timeline_core, "urlopen", fail)
    with pytest.raises(EventLoadError, match="nonnumeric port"):
        read_events_from_json("https://example.org:x/events.json")


def test_collect_filter_options_sorted_distinct_non_empty() -> None:
    events = normalize_events(
        [
            {"period": "New Deal", "category": ["policy", "law"]},
            {"period": "Gilded Age", "category": "financial"},
            {"period": "", "category": ["law", ""]},
            {},
        ]
    )
    periods, categories = collect_filter_options(events)
    assert periods == ["Gilded Age", "New Deal"]
    assert categories == ["financial", "law", "policy"]


def test_lookup_tables_fall_back() -> None:
    assert category_icon("crisis") == "📉"
    assert category_icon("unknown") == "🔖"
    assert period_color("no such era") == timeline_core.DEFAULT_MARKER_COLOR
    assert period_color("Great Depression") == timeline_core.PERIOD_COLORS["Great Depression"]
