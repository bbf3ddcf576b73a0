from __future__ import annotations

from typing import Iterable

from timeline_core import ALL, TimelineEvent


def _fold(value: object) -> str:
    return str(value or "").casefold()


def _year_text(event: TimelineEvent) -> str:
    return "" if event.year is None else str(event.year)


def matches_search(event: TimelineEvent, query: str | None) -> bool:
    needle = _fold(query).strip()
    if not needle:
        return True
    return (
        needle in _fold(event.title)
        or needle in _fold(event.description)
        or needle in _fold(event.period)
        or any(needle in _fold(c) for c in event.category)
        or needle in _year_text(event).casefold()
    )


def matches_period(event: TimelineEvent, selector: str | None) -> bool:
    if not selector or selector == ALL:
        return True
    return event.period == selector


def matches_category(event: TimelineEvent, selector: str | None) -> bool:
    if not selector or selector == ALL:
        return True
    if not event.category:
        return False
    return selector in event.category


def matches_all(event: TimelineEvent, query: str | None, period: str | None, category: str | None) -> bool:
    return matches_search(event, query) and matches_period(event, period) and matches_category(event, category)


def filter_events(
    events: Iterable[TimelineEvent],
    query: str | None,
    period: str | None,
    category: str | None,
) -> tuple[TimelineEvent, ...]:
    return tuple(e for e in events if matches_all(e, query, period, category))
