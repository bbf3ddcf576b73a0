from __future__ import annotations

import asyncio
import logging
from typing import Callable, Sequence

from timeline_controls import ControlBindings, Debouncer, Scheduler
from timeline_core import (
    EventLoadError,
    TimelineConfig,
    TimelineEvent,
    collect_filter_options,
    read_events_from_json,
)
from timeline_layout import compute_layout
from timeline_render import DisplayBackend, RenderEmitter
from timeline_state import ViewStateStore
from timeline_url import AddressBar, decode_view_state, sync_address_bar

logger = logging.getLogger(__name__)

Loader = Callable[[str], Sequence[TimelineEvent]]


class TimelineApp:
    """Wires loader, store, layout, emitter and address bar together.

    Nothing is interactive until ``start`` has loaded the data successfully;
    after a failed load ``controls`` stays ``None``.
    """

    def __init__(
        self,
        backend: DisplayBackend,
        address_bar: AddressBar,
        config: TimelineConfig | None = None,
        loader: Loader = read_events_from_json,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.config = config or TimelineConfig()
        self.emitter = RenderEmitter(backend)
        self.address_bar = address_bar
        self.loader = loader
        self.scheduler = scheduler
        self.store: ViewStateStore | None = None
        self.controls: ControlBindings | None = None
        self.error: EventLoadError | None = None

    async def start(self) -> bool:
        try:
            events = await asyncio.to_thread(self.loader, self.config.data_source)
        except EventLoadError as exc:
            logger.error("Failed to load events JSON: %s", exc)
            self.error = exc
            self.emitter.emit_error(self.config.data_source, exc)
            return False

        self.start_with_events(events)
        return True

    def start_with_events(self, events: Sequence[TimelineEvent]) -> ControlBindings:
        periods, categories = collect_filter_options(events)
        self.emitter.emit_options(periods, categories)

        state = decode_view_state(self.address_bar.get_search(), self.config.default_orientation)
        self.store = ViewStateStore(events, state)
        self.store.subscribe(self._render)
        self.store.subscribe(self._sync_url)
        self.store.refresh()

        self.controls = ControlBindings(
            self.store,
            debouncer=Debouncer(self.config.debounce_seconds, self.scheduler),
            toggle_key=self.config.toggle_key,
        )
        return self.controls

    def _render(self, store: ViewStateStore) -> None:
        s = store.state
        self.emitter.backend.set_control_values(s.query, s.period, s.category)
        self.emitter.emit(compute_layout(store.visible_events, s.orientation))

    def _sync_url(self, store: ViewStateStore) -> None:
        sync_address_bar(self.address_bar, store.state, self.config.default_orientation)
