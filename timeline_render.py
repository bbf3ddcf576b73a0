from __future__ import annotations

import html
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence

from timeline_core import ALL, HORIZONTAL, VERTICAL
from timeline_layout import CardDescriptor, RenderPlan, TickDescriptor

EMPTY_MESSAGE = "No events match the current filters."


@dataclass
class DisplayNode:
    tag: str
    classes: tuple[str, ...] = ()
    text: str = ""
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[DisplayNode] = field(default_factory=list)

    def find_all(self, cls: str) -> list[DisplayNode]:
        found = [self] if cls in self.classes else []
        for child in self.children:
            found.extend(child.find_all(cls))
        return found


class DisplayBackend(Protocol):
    """Materializes display nodes. Performs no filtering or layout of its own."""

    def replace_tree(self, nodes: Sequence[DisplayNode], orientation: str | None) -> None: ...

    def set_count(self, text: str) -> None: ...

    def set_toggle_pressed(self, pressed: bool) -> None: ...

    def set_options(self, selector: str, options: Sequence[tuple[str, str]]) -> None: ...

    def set_control_values(self, query: str, period: str, category: str) -> None: ...


def _format_position(position: float) -> str:
    return f"{round(position, 4):g}%"


def _year_label(year: object) -> str:
    return "" if year is None else str(year)


def _card_node(card: CardDescriptor) -> DisplayNode:
    classes = ["event-card"]
    attrs: dict[str, str] = {}
    if card.lane:
        classes.append(card.lane)
    if card.position is not None:
        attrs["style"] = f"left: {_format_position(card.position)};"

    header = DisplayNode(
        "header",
        ("event-header",),
        children=[
            DisplayNode("div", ("event-year",), text=_year_label(card.year)),
            DisplayNode("h3", ("event-title",), text=card.title),
        ],
    )

    badges = DisplayNode("div", ("event-badges",))
    if card.period:
        badges.children.append(DisplayNode("span", ("badge", "period"), text=card.period))
    for badge in card.badges:
        badges.children.append(DisplayNode("span", ("badge", "category"), text=f"{badge.icon} {badge.label}"))

    content = DisplayNode(
        "div",
        ("event-content",),
        children=[header, badges, DisplayNode("p", ("event-desc",), text=card.description)],
    )
    if card.link:
        link = DisplayNode(
            "a",
            ("event-link",),
            text="View source",
            attrs={"href": card.link, "target": "_blank", "rel": "noopener noreferrer"},
        )
        content.children.append(DisplayNode("div", ("event-actions",), children=[link]))

    node = DisplayNode("div", ("event-node",), attrs={"title": _year_label(card.year)})
    return DisplayNode("article", tuple(classes), attrs=attrs, children=[node, content])


def _tick_node(tick: TickDescriptor) -> DisplayNode:
    label = f"{tick.year} {tick.period}".strip()
    return DisplayNode(
        "span",
        ("timeline-tick",),
        attrs={
            "style": f"left: {_format_position(tick.position)}; background: {tick.color};",
            "title": label,
        },
    )


def build_nodes(plan: RenderPlan) -> list[DisplayNode]:
    if plan.empty:
        return [DisplayNode("div", ("empty-state",), text=EMPTY_MESSAGE)]

    nodes: list[DisplayNode] = []
    if plan.rail is not None:
        nodes.append(
            DisplayNode(
                "div",
                ("timeline-rail",),
                attrs={"data-min-year": str(plan.rail.min_year), "data-max-year": str(plan.rail.max_year)},
                children=[_tick_node(t) for t in plan.ticks],
            )
        )
    nodes.extend(_card_node(c) for c in plan.cards)
    return nodes


def build_error_node(source: str, error: BaseException | str) -> DisplayNode:
    return DisplayNode(
        "div",
        ("error",),
        children=[
            DisplayNode(
                "p",
                text=f"Couldn't load the timeline data. Make sure {source} exists and is valid JSON.",
            ),
            DisplayNode(
                "details",
                children=[DisplayNode("summary", text="Details"), DisplayNode("pre", text=str(error))],
            ),
        ],
    )


class RenderEmitter:
    """Sends render plans to a display backend, replacing whatever it showed before."""

    def __init__(self, backend: DisplayBackend) -> None:
        self.backend = backend

    def emit(self, plan: RenderPlan) -> None:
        self.backend.replace_tree(build_nodes(plan), plan.orientation)
        self.backend.set_count(f"{plan.count} events")
        self.backend.set_toggle_pressed(plan.orientation == HORIZONTAL)

    def emit_error(self, source: str, error: BaseException | str) -> None:
        self.backend.replace_tree([build_error_node(source, error)], None)

    def emit_options(self, periods: Sequence[str], categories: Sequence[str]) -> None:
        self.backend.set_options("period", [(ALL, "All periods")] + [(p, p) for p in periods])
        self.backend.set_options("category", [(ALL, "All categories")] + [(c, c) for c in categories])


# -------------------------
# Static HTML backend
# -------------------------
def render_node_html(node: DisplayNode) -> str:
    attrs = dict(node.attrs)
    if node.classes:
        attrs = {"class": " ".join(node.classes), **attrs}
    attr_text = "".join(f" {k}='{html.escape(v, quote=True)}'" for k, v in attrs.items())
    inner = html.escape(node.text) + "".join(render_node_html(c) for c in node.children)
    return f"<{node.tag}{attr_text}>{inner}</{node.tag}>"


STYLE_LINES = [
    "body { font-family: 'Segoe UI', sans-serif; margin: 20px; color: #2f3e46; }",
    ".controls { display: flex; flex-wrap: wrap; gap: 10px; align-items: center; margin-bottom: 16px; }",
    ".count { font-size: 12px; color: rgba(47,62,70,0.75); }",
    "#timeline { position: relative; }",
    "#timeline.vertical { display: flex; flex-direction: column; gap: 12px; border-left: 4px solid #2f3e46; padding-left: 16px; }",
    "#timeline.horizontal { min-height: 520px; overflow-x: auto; }",
    ".timeline-rail { position: absolute; left: 0; right: 0; top: 50%; height: 4px; background: #2f3e46; }",
    ".timeline-tick { position: absolute; top: -6px; width: 12px; height: 16px; margin-left: -6px; border-radius: 4px; }",
    ".event-card { border: 2px solid #2f3e46; border-radius: 10px; background: #f9fbfb; padding: 8px 10px; box-sizing: border-box; }",
    "#timeline.horizontal .event-card { position: absolute; width: 220px; margin-left: -110px; }",
    "#timeline.horizontal .event-card.above { bottom: calc(50% + 16px); }",
    "#timeline.horizontal .event-card.below { top: calc(50% + 16px); }",
    ".event-header { display: flex; gap: 8px; align-items: baseline; }",
    ".event-year { font-weight: 700; }",
    ".event-title { margin: 0; font-size: 15px; }",
    ".event-badges { display: flex; flex-wrap: wrap; gap: 6px; margin: 6px 0; }",
    ".badge { font-size: 11px; padding: 2px 8px; border-radius: 999px; border: 1px solid rgba(47,62,70,0.35); }",
    ".badge.period { background: #dfeff2; }",
    ".event-desc { margin: 0; line-height: 1.3; }",
    ".event-link { font-size: 12px; }",
    ".empty-state, .error { padding: 16px; border: 2px dashed #9aa0a6; border-radius: 10px; }",
]


class HtmlDocumentBackend:
    """Keeps the last materialized tree and control state and writes them as one HTML page."""

    def __init__(self, title: str = "Timeline") -> None:
        self.title = title
        self.nodes: list[DisplayNode] = []
        self.orientation: str | None = None
        self.count_text = ""
        self.toggle_pressed = False
        self.options: dict[str, list[tuple[str, str]]] = {"period": [], "category": []}
        self.values = {"query": "", "period": ALL, "category": ALL}

    def replace_tree(self, nodes: Sequence[DisplayNode], orientation: str | None) -> None:
        self.nodes = list(nodes)
        self.orientation = orientation

    def set_count(self, text: str) -> None:
        self.count_text = text

    def set_toggle_pressed(self, pressed: bool) -> None:
        self.toggle_pressed = pressed

    def set_options(self, selector: str, options: Sequence[tuple[str, str]]) -> None:
        self.options[selector] = list(options)

    def set_control_values(self, query: str, period: str, category: str) -> None:
        self.values = {"query": query, "period": period, "category": category}

    def _select_html(self, selector: str, element_id: str) -> str:
        current = self.values[selector]
        parts = [f"<select id='{element_id}'>"]
        for value, label in self.options[selector]:
            selected = " selected" if value == current else ""
            parts.append(f"<option value='{html.escape(value, quote=True)}'{selected}>{html.escape(label)}</option>")
        parts.append("</select>")
        return "".join(parts)

    def to_html(self) -> str:
        timeline_classes = {HORIZONTAL: "horizontal", VERTICAL: "vertical"}.get(self.orientation or "", "")
        html_parts = [
            "<!DOCTYPE html>",
            "<html lang='en'>",
            "<head>",
            "<meta charset='utf-8' />",
            f"<title>{html.escape(self.title)}</title>",
            "<style>",
            *STYLE_LINES,
            "</style>",
            "</head>",
            "<body>",
            "<div class='controls'>",
            f"  <input id='search' type='search' value='{html.escape(self.values['query'], quote=True)}' />",
            "  " + self._select_html("period", "periodFilter"),
            "  " + self._select_html("category", "categoryFilter"),
            "  <button id='orientationToggle' type='button' "
            f"aria-pressed='{'true' if self.toggle_pressed else 'false'}'>Toggle orientation</button>",
            f"  <span id='count' class='count'>{html.escape(self.count_text)}</span>",
            "</div>",
            f"<div id='timeline' class='{timeline_classes}'>",
            *(render_node_html(n) for n in self.nodes),
            "</div>",
            "</body>",
            "</html>",
        ]
        return "\n".join(html_parts)

    def write(self, output_path: str | Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.to_html(), encoding="utf-8")
        return output_path
