from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from timeline_core import (
    HORIZONTAL,
    UNTITLED,
    TimelineEvent,
    category_icon,
    is_numeric_year,
    period_color,
)

ABOVE = "above"
BELOW = "below"
LANES = (ABOVE, BELOW)


@dataclass(frozen=True)
class CategoryBadge:
    label: str
    icon: str


@dataclass(frozen=True)
class CardDescriptor:
    event: TimelineEvent
    year: int | float | str | None
    title: str
    description: str
    period: str
    badges: tuple[CategoryBadge, ...]
    link: str | None
    position: float | None = None
    lane: str | None = None


@dataclass(frozen=True)
class TickDescriptor:
    position: float
    color: str
    year: int | float
    period: str


@dataclass(frozen=True)
class RailDescriptor:
    min_year: int | float
    max_year: int | float
    span: int | float


@dataclass(frozen=True)
class RenderPlan:
    orientation: str
    cards: tuple[CardDescriptor, ...] = ()
    rail: RailDescriptor | None = None
    ticks: tuple[TickDescriptor, ...] = ()
    empty: bool = False

    @property
    def count(self) -> int:
        return len(self.cards)


def sort_key(event: TimelineEvent) -> int | float:
    # Undated (and non-numeric) years sort as year 0.
    return event.year if is_numeric_year(event.year) else 0


def sorted_events(events: Sequence[TimelineEvent]) -> list[TimelineEvent]:
    return sorted(events, key=sort_key)


def compute_rail(events: Sequence[TimelineEvent]) -> RailDescriptor | None:
    years = [e.year for e in events if is_numeric_year(e.year)]
    if not years:
        return None
    min_year, max_year = min(years), max(years)
    return RailDescriptor(min_year=min_year, max_year=max_year, span=max(1, max_year - min_year))


def rail_position(year: int | float, rail: RailDescriptor) -> float:
    return ((year - rail.min_year) / rail.span) * 100


def lane_for_index(index: int) -> str:
    return LANES[index % 2]


def _card(event: TimelineEvent, position: float | None = None, lane: str | None = None) -> CardDescriptor:
    return CardDescriptor(
        event=event,
        year=event.year,
        title=event.title or UNTITLED,
        description=event.description,
        period=event.period,
        badges=tuple(CategoryBadge(label=c, icon=category_icon(c)) for c in event.category),
        link=event.link or None,
        position=position,
        lane=lane,
    )


def compute_layout(visible_events: Sequence[TimelineEvent], orientation: str) -> RenderPlan:
    """Turn the visible events into an ordered render plan.

    Vertical plans are a plain sequence of cards. Horizontal plans also carry a
    rail spanning the numeric years, a tick per dated event and an alternating
    above/below lane per card by sorted index. Undated cards get no position
    and no tick.
    """
    ordered = sorted_events(visible_events)
    if not ordered:
        return RenderPlan(orientation=orientation, empty=True)

    if orientation != HORIZONTAL:
        return RenderPlan(orientation=orientation, cards=tuple(_card(e) for e in ordered))

    rail = compute_rail(ordered)
    cards: list[CardDescriptor] = []
    ticks: list[TickDescriptor] = []
    for index, event in enumerate(ordered):
        position = None
        if rail is not None and is_numeric_year(event.year):
            position = rail_position(event.year, rail)
            ticks.append(
                TickDescriptor(
                    position=position,
                    color=period_color(event.period),
                    year=event.year,
                    period=event.period,
                )
            )
        cards.append(_card(event, position=position, lane=lane_for_index(index)))

    return RenderPlan(orientation=orientation, cards=tuple(cards), rail=rail, ticks=tuple(ticks))
