from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from timeline_app import TimelineApp
from timeline_core import (
    ALL,
    DEFAULT_ORIENTATION,
    JSON_PATH,
    ORIENTATIONS,
    TimelineConfig,
    collect_filter_options,
    read_events_from_json,
)
from timeline_render import HtmlDocumentBackend
from timeline_state import ViewState
from timeline_url import MemoryAddressBar, encode_view_state


def _add_input(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i",
        "--input",
        default=JSON_PATH,
        help="Path or http(s) URL of the events JSON array.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timeline",
        description="Render filterable timeline views from an events JSON file.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Write an HTML snapshot of one timeline view.")
    _add_input(render)
    render.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("timeline.html"),
        help="Path to output HTML file.",
    )
    render.add_argument(
        "--url",
        default="",
        help="Address-bar query holding the view, e.g. 'q=crash&o=horizontal'.",
    )
    render.add_argument(
        "--default-orientation",
        choices=ORIENTATIONS,
        default=DEFAULT_ORIENTATION,
        help="Orientation used when the URL does not name one.",
    )

    options = subparsers.add_parser("options", help="List the period and category filter choices.")
    _add_input(options)

    url = subparsers.add_parser("url", help="Print the address-bar query for a view.")
    url.add_argument("-q", "--query", default="")
    url.add_argument("-p", "--period", default=ALL)
    url.add_argument("-c", "--category", default=ALL)
    url.add_argument("--orientation", choices=ORIENTATIONS, default=DEFAULT_ORIENTATION)
    return parser


def render_snapshot(source: str, output_path: str | Path, url: str = "", default_orientation: str = DEFAULT_ORIENTATION) -> bool:
    backend = HtmlDocumentBackend()
    address_bar = MemoryAddressBar(f"/?{url.lstrip('?')}" if url else "/")
    app = TimelineApp(
        backend,
        address_bar,
        TimelineConfig(data_source=source, default_orientation=default_orientation),
    )
    ok = asyncio.run(app.start())
    saved = backend.write(output_path)
    print(f"Timeline saved to {saved.resolve()}")
    if ok:
        print(f"View URL: {address_bar.url}")
    return ok


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "render":
        ok = render_snapshot(args.input, args.output, args.url, args.default_orientation)
        return 0 if ok else 1
    if args.command == "options":
        periods, categories = collect_filter_options(read_events_from_json(args.input))
        print("Periods:")
        for period in periods:
            print(f"  {period}")
        print("Categories:")
        for category in categories:
            print(f"  {category}")
        return 0
    if args.command == "url":
        state = ViewState(
            query=args.query.strip(),
            period=args.period,
            category=args.category,
            orientation=args.orientation,
        )
        print(f"?{encode_view_state(state)}")
        return 0

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
