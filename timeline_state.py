from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Sequence

from timeline_core import ALL, DEFAULT_ORIENTATION, HORIZONTAL, ORIENTATIONS, VERTICAL, TimelineEvent
from timeline_filters import filter_events

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewState:
    query: str = ""
    period: str = ALL
    category: str = ALL
    orientation: str = DEFAULT_ORIENTATION


ChangeListener = Callable[["ViewStateStore"], None]


class ViewStateStore:
    """Owns the full event collection, the current ViewState and the visible subset.

    Every setter replaces the state, recomputes ``visible_events`` from the
    full collection and then notifies listeners in registration order (the
    app registers a render request and a URL sync).
    """

    def __init__(self, events: Sequence[TimelineEvent], state: ViewState | None = None) -> None:
        self._events = tuple(events)
        self._state = state or ViewState()
        self._visible = self._compute_visible()
        self._listeners: list[ChangeListener] = []

    @property
    def events(self) -> tuple[TimelineEvent, ...]:
        return self._events

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def visible_events(self) -> tuple[TimelineEvent, ...]:
        return self._visible

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _compute_visible(self) -> tuple[TimelineEvent, ...]:
        s = self._state
        return filter_events(self._events, s.query, s.period, s.category)

    def _update(self, **changes: str) -> None:
        self._state = replace(self._state, **changes)
        self._visible = self._compute_visible()
        logger.debug("View state %s -> %d visible events", self._state, len(self._visible))
        self.refresh()

    def refresh(self) -> None:
        for listener in self._listeners:
            listener(self)

    def set_query(self, query: str | None) -> None:
        self._update(query=(query or "").strip())

    def set_period(self, period: str | None) -> None:
        self._update(period=period or ALL)

    def set_category(self, category: str | None) -> None:
        self._update(category=category or ALL)

    def set_orientation(self, orientation: str) -> None:
        if orientation not in ORIENTATIONS:
            raise ValueError(f"orientation must be one of: {', '.join(ORIENTATIONS)}")
        self._update(orientation=orientation)

    def toggle_orientation(self) -> None:
        self.set_orientation(HORIZONTAL if self._state.orientation == VERTICAL else VERTICAL)
