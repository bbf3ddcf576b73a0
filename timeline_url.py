from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from timeline_core import ALL, DEFAULT_ORIENTATION, HORIZONTAL, VERTICAL
from timeline_state import ViewState

logger = logging.getLogger(__name__)

PARAM_QUERY = "q"
PARAM_PERIOD = "p"
PARAM_CATEGORY = "c"
PARAM_ORIENTATION = "o"


class AddressBar(Protocol):
    def get_search(self) -> str: ...

    def replace_state(self, search: str) -> None: ...


class MemoryAddressBar:
    """Address bar kept in memory. ``replace_state`` rewrites the current entry, never adds one."""

    def __init__(self, url: str = "/") -> None:
        parts = urlsplit(url)
        self.path = parts.path or "/"
        self.search = parts.query
        self.history = [self.url]

    @property
    def url(self) -> str:
        return urlunsplit(("", "", self.path, self.search, ""))

    def get_search(self) -> str:
        return self.search

    def replace_state(self, search: str) -> None:
        self.search = search.lstrip("?")
        self.history[-1] = self.url


def _parse(search: str) -> list[tuple[str, str]]:
    return parse_qsl(search.lstrip("?"), keep_blank_values=True)


def _first(pairs: list[tuple[str, str]], name: str) -> str:
    for key, value in pairs:
        if key == name:
            return value
    return ""


def _decode_orientation(value: str, default: str) -> str:
    if value == HORIZONTAL:
        return HORIZONTAL
    if value == VERTICAL:
        return VERTICAL
    return default


def decode_view_state(search: str, default_orientation: str = DEFAULT_ORIENTATION) -> ViewState:
    pairs = _parse(search)
    return ViewState(
        query=_first(pairs, PARAM_QUERY).strip(),
        period=_first(pairs, PARAM_PERIOD) or ALL,
        category=_first(pairs, PARAM_CATEGORY) or ALL,
        orientation=_decode_orientation(_first(pairs, PARAM_ORIENTATION), default_orientation),
    )


def encode_view_state(state: ViewState, existing: str = "", default_orientation: str = DEFAULT_ORIENTATION) -> str:
    """Return the address-bar query string for ``state``.

    Parameters unrelated to the view found in ``existing`` are kept in their
    original order; view parameters are written only when they differ from
    their defaults.
    """
    ours = {PARAM_QUERY, PARAM_PERIOD, PARAM_CATEGORY, PARAM_ORIENTATION}
    pairs = [(k, v) for k, v in _parse(existing) if k not in ours]

    if state.query:
        pairs.append((PARAM_QUERY, state.query))
    if state.period and state.period != ALL:
        pairs.append((PARAM_PERIOD, state.period))
    if state.category and state.category != ALL:
        pairs.append((PARAM_CATEGORY, state.category))
    if state.orientation and state.orientation != default_orientation:
        pairs.append((PARAM_ORIENTATION, state.orientation))
    return urlencode(pairs)


def sync_address_bar(address_bar: AddressBar, state: ViewState, default_orientation: str = DEFAULT_ORIENTATION) -> str:
    search = encode_view_state(state, address_bar.get_search(), default_orientation)
    address_bar.replace_state(search)
    logger.debug("Address bar replaced with ?%s", search)
    return search
