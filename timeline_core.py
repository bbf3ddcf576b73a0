from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from http.client import HTTPException
from pathlib import Path
from typing import Iterable, Mapping, Sequence
from urllib.request import urlopen

import pandas as pd

logger = logging.getLogger(__name__)


JSON_PATH = "us_financial_events.json"
DEBOUNCE_SECONDS = 0.15
TOGGLE_KEY = "t"

VERTICAL = "vertical"
HORIZONTAL = "horizontal"
ORIENTATIONS = (VERTICAL, HORIZONTAL)
DEFAULT_ORIENTATION = VERTICAL

ALL = "all"
UNTITLED = "Untitled event"

CATEGORY_ICONS = {
    "financial": "💰",
    "crisis": "📉",
    "institution": "🏦",
    "law": "⚖️",
    "international": "🌐",
    "policy": "📜",
    "economic": "📊",
}
DEFAULT_ICON = "🔖"

PERIOD_COLORS = {
    "Early Republic": "#8d6e63",
    "Antebellum": "#a1887f",
    "Civil War": "#b23a48",
    "Gilded Age": "#c9a227",
    "Progressive Era": "#52796f",
    "Great Depression": "#6d597a",
    "New Deal": "#355070",
    "Postwar Boom": "#2a9d8f",
    "Stagflation": "#e76f51",
    "Deregulation": "#f4a261",
    "Great Recession": "#9d0208",
    "Modern Era": "#457b9d",
}
DEFAULT_MARKER_COLOR = "#2f3e46"


class EventLoadError(ValueError):
    """The event data source could not be fetched or did not hold an array of objects."""


@dataclass(frozen=True)
class TimelineConfig:
    data_source: str = JSON_PATH
    debounce_seconds: float = DEBOUNCE_SECONDS
    toggle_key: str = TOGGLE_KEY
    default_orientation: str = DEFAULT_ORIENTATION


@dataclass(frozen=True)
class TimelineEvent:
    year: int | float | str | None
    title: str
    description: str
    period: str
    category: tuple[str, ...]
    link: str


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _normalize_year(value: object) -> int | float | str | None:
    if _is_missing(value):
        return None
    if hasattr(value, "item"):
        return value.item()
    return value


def _normalize_text(value: object) -> str:
    if _is_missing(value):
        return ""
    return str(value)


def _normalize_category(value: object) -> tuple[str, ...]:
    if _is_missing(value):
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    if not value:
        return ()
    return (str(value),)


def normalize_event(record: Mapping[str, object]) -> TimelineEvent:
    return TimelineEvent(
        year=_normalize_year(record.get("year")),
        title=_normalize_text(record.get("title")),
        description=_normalize_text(record.get("description")),
        period=_normalize_text(record.get("period")),
        category=_normalize_category(record.get("category")),
        link=_normalize_text(record.get("link")),
    )


def normalize_events(records: Iterable[Mapping[str, object]]) -> list[TimelineEvent]:
    return [normalize_event(record) for record in records]


def is_numeric_year(year: object) -> bool:
    if isinstance(year, bool) or not isinstance(year, (int, float)):
        return False
    return not math.isnan(year)


def _fetch_text(source: str | Path) -> str:
    text_source = str(source)
    if text_source.lower().startswith(("http://", "https://")):
        try:
            with urlopen(text_source) as response:
                status = getattr(response, "status", 200)
                if status < 200 or status >= 300:
                    raise EventLoadError(f"HTTP {status}")
                return response.read().decode("utf-8")
        except EventLoadError:
            raise
        except (OSError, HTTPException, ValueError) as exc:
            raise EventLoadError(f"Could not fetch {text_source}: {exc}") from exc
    try:
        return Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise EventLoadError(f"Could not read {text_source}: {exc}") from exc


def read_records_from_json(source: str | Path) -> list[dict]:
    text = _fetch_text(source)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise EventLoadError(f"Invalid JSON in {source}: {exc}") from exc

    if not isinstance(data, list):
        raise EventLoadError(f"Expected a JSON array in {source}, got {type(data).__name__}")
    bad = [i for i, item in enumerate(data) if not isinstance(item, dict)]
    if bad:
        raise EventLoadError(f"Expected objects in {source}; entry {bad[0]} is not an object")
    return data


def read_events_from_json(source: str | Path) -> list[TimelineEvent]:
    records = read_records_from_json(source)
    events = normalize_events(records)
    logger.info("Loaded %d events from %s", len(events), source)
    return events


def collect_filter_options(events: Sequence[TimelineEvent]) -> tuple[list[str], list[str]]:
    periods = sorted({e.period for e in events if e.period})
    categories = sorted({c for e in events for c in e.category if c})
    return periods, categories


def category_icon(category: str) -> str:
    return CATEGORY_ICONS.get(category, DEFAULT_ICON)


def period_color(period: str) -> str:
    return PERIOD_COLORS.get(period, DEFAULT_MARKER_COLOR)
