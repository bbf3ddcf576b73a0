from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

from timeline_core import DEBOUNCE_SECONDS, TOGGLE_KEY
from timeline_state import ViewStateStore

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


def event_loop_scheduler(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Default scheduler; must be called while an asyncio loop is running."""
    return asyncio.get_running_loop().call_later(delay, callback)


class Debouncer:
    """Runs only the most recently scheduled callback once ``delay`` seconds pass quietly."""

    def __init__(self, delay: float = DEBOUNCE_SECONDS, scheduler: Scheduler | None = None) -> None:
        self.delay = delay
        self._scheduler = scheduler or event_loop_scheduler
        self._pending: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def schedule(self, callback: Callable[[], None]) -> None:
        self.cancel()

        def fire() -> None:
            self._pending = None
            callback()

        self._pending = self._scheduler(self.delay, fire)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None


class ControlBindings:
    """Maps user input onto store mutations.

    Text input goes through the debouncer; selector changes, the toggle
    control and the toggle key act immediately. The key shortcut fires
    regardless of which control has focus.
    """

    def __init__(
        self,
        store: ViewStateStore,
        debouncer: Debouncer | None = None,
        toggle_key: str = TOGGLE_KEY,
    ) -> None:
        self.store = store
        self.debouncer = debouncer or Debouncer()
        self.toggle_key = toggle_key.lower()

    def on_search_input(self, value: str) -> None:
        self.debouncer.schedule(lambda: self.store.set_query(value))

    def on_period_change(self, value: str) -> None:
        self.store.set_period(value)

    def on_category_change(self, value: str) -> None:
        self.store.set_category(value)

    def on_toggle_click(self) -> None:
        self.store.toggle_orientation()

    def on_key_down(self, key: str) -> bool:
        if key.lower() != self.toggle_key:
            return False
        logger.debug("Toggle key pressed")
        self.store.toggle_orientation()
        return True
