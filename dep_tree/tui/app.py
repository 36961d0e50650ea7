import logging
import threading
from collections.abc import Callable
from typing import Any

import click
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from rich.console import Console
from rich.live import Live
from rich.style import Style
from rich.text import Text

from models.base import ModuleID
from models.config import TuiConfig
from models.graph import ModuleGraph
from services.metrics import find_cycles
from tui.events import Event, EventType, event_for_key
from tui.layout import clamp_viewport, compute_layout
from tui.render import render_error, render_graph
from tui.screen import Canvas, CellStyle, Screen, Vector
from tui.state import Mode, RenderState, SpatialState, View

logger = logging.getLogger(__name__)

STATUS_STYLE = CellStyle(fg="black", bg="white")
SEPARATOR_STYLE = CellStyle(fg="bright_black")


def to_rich_text(screen: Canvas) -> Text:
    """Convert the whole grid into rich text, one line per row."""

    text = Text(no_wrap=True, overflow="crop")
    columns, rows = screen.size
    for y in range(rows):
        run: list[str] = []
        run_style: CellStyle | None = None
        for x in range(columns):
            cell = screen.get_content(x, y)
            if cell.style != run_style and run:
                text.append("".join(run), _rich_style(run_style))
                run = []
            run_style = cell.style
            run.append(cell.char)
        if run:
            text.append("".join(run), _rich_style(run_style))
        if y < rows - 1:
            text.append("\n")
    return text


def _rich_style(style: CellStyle | None) -> Style:
    if style is None:
        return Style()
    return Style(
        color=None if style.fg == "default" else style.fg,
        bgcolor=None if style.bg == "default" else style.bg,
        bold=style.bold or None,
    )


class TuiApp(BaseModel):
    """Interactive module graph browser.

    All state changes go through ``handle``; ``paint`` redraws the full grid
    from the current state. ``run`` wires both to a terminal.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    graph: ModuleGraph
    selected_id: ModuleID | None = None
    config: TuiConfig = Field(default_factory=TuiConfig)
    screen_size: Vector = Vector(80, 24)
    stop_event: threading.Event = Field(default_factory=threading.Event)

    _screen: Screen = PrivateAttr()
    _state: RenderState = PrivateAttr()
    _spatial: SpatialState = PrivateAttr()
    _cycle_members: frozenset[ModuleID] = PrivateAttr(default=frozenset())

    def model_post_init(self, context: Any) -> None:
        if not self.graph.nodes:
            raise ValueError("cannot browse an empty module graph")

        root = self.selected_id
        if root is None:
            root = self.graph.entry_ids[0] if self.graph.entry_ids else min(self.graph.nodes)
        if root not in self.graph.nodes:
            raise ValueError(f"{root} is not a module of the graph")

        errors = {
            module_id: [error.message for error in node.errors]
            for module_id, node in self.graph.nodes.items()
            if node.errors
        }
        self._cycle_members = frozenset(
            member for cycle in find_cycles(self.graph) for member in cycle.members
        )
        self._screen = Screen(self.screen_size)
        self._state = RenderState(selected_id=root, cursor_id=root, errors=errors)
        self._relayout()
        return super().model_post_init(context)

    @property
    def screen(self) -> Screen:
        return self._screen

    @property
    def render_state(self) -> RenderState:
        return self._state

    @property
    def spatial_state(self) -> SpatialState:
        return self._spatial

    def _areas(self) -> tuple[int, int]:
        """Rows of the graph area and of the error panel."""

        rows = self._screen.size.y
        available = rows - 1 if rows > 1 else rows
        panel = 0
        if (
            self._state.mode == Mode.NODE_SELECTED
            and self._state.errors.get(self._state.selected_id)
            and available >= 4
        ):
            panel = max(1, available // 3)
        graph_rows = available - panel - (1 if panel else 0)
        return graph_rows, panel

    def _relayout(self) -> None:
        graph_rows, _panel = self._areas()
        self._spatial = compute_layout(
            self.graph,
            self._state,
            Vector(self._screen.size.x, graph_rows),
            indent=self.config.indent,
        )
        if self._state.cursor not in self._spatial.positions:
            self._state.cursor_id = self._state.selected_id
        self._state.viewport_offset = clamp_viewport(self._state, self._spatial)

    def _move_cursor(self, step: int) -> None:
        order = self._spatial.order
        row = order.index(self._state.cursor) + step
        self._state.cursor_id = order[max(0, min(row, len(order) - 1))]

    def _scroll(self, direction: int) -> None:
        rows = max(self._spatial.screen_size.y, 1)
        top = self._state.viewport_offset.y + direction * max(rows - 1, 1)
        top = max(0, min(top, self._spatial.height - rows))
        self._state.viewport_offset = Vector(0, top)
        cursor_row = self._spatial.positions[self._state.cursor].y
        if cursor_row < top:
            self._state.cursor_id = self._spatial.order[top]
        elif cursor_row >= top + rows:
            self._state.cursor_id = self._spatial.order[min(top + rows, self._spatial.height) - 1]

    def handle(self, event: Event) -> bool:
        """Apply one input event.

        Returns:
            False when the session should end.
        """

        state = self._state
        match event.type:
            case EventType.QUIT:
                return False
            case EventType.MOVE_UP:
                self._move_cursor(-1)
            case EventType.MOVE_DOWN:
                self._move_cursor(1)
            case EventType.SCROLL_UP:
                self._scroll(-1)
            case EventType.SCROLL_DOWN:
                self._scroll(1)
            case EventType.SELECT:
                if state.cursor != state.selected_id:
                    state.history.append(state.selected_id)
                    state.selected_id = state.cursor
                    state.viewport_offset = Vector(0, 0)
                state.mode = Mode.NODE_SELECTED
            case EventType.DESELECT:
                if state.mode == Mode.NODE_SELECTED:
                    if state.history:
                        state.selected_id = state.history.pop()
                    state.mode = Mode.BROWSING
            case EventType.TOGGLE_EXPAND:
                state.view = View.OVERVIEW if state.view == View.FOCUS else View.FOCUS
            case EventType.RESIZE:
                if event.size is not None:
                    self._screen.resize(event.size)

        logger.debug("Handled %s: mode=%s selected=%s", event.type, state.mode, state.selected_id)
        self._relayout()
        return True

    def paint(self) -> Screen:
        """Redraw every cell of the screen from the current state."""

        screen = self._screen
        columns, rows = screen.size
        screen.clear()
        graph_rows, panel = self._areas()

        render_graph(
            screen.region(0, 0, columns, graph_rows),
            self.graph,
            self._state,
            self._spatial,
            self._cycle_members,
        )

        if panel:
            screen.fill_row(graph_rows, "─", SEPARATOR_STYLE)
            render_error(
                screen.region(0, graph_rows + 1, columns, panel),
                self._state,
                SpatialState(screen_size=Vector(columns, panel)),
            )

        if rows > 1:
            status = (
                f" {self._state.mode} | {self._state.view} | "
                f"{self.graph.relative(self._state.cursor)}"
                "  (q quit, enter select, esc back, tab view)"
            )
            screen.fill_row(rows - 1, " ", STATUS_STYLE)
            screen.write(0, rows - 1, status, STATUS_STYLE)
        return screen

    def run(
        self,
        console: Console | None = None,
        read_key: Callable[[], str] = click.getchar,
    ) -> None:
        """Run the terminal session until quit or ``stop_event`` is set.

        The terminal size is polled after every key; a change is handled as
        a RESIZE event before the key itself.
        """

        console = console or Console()
        self.handle(Event(type=EventType.RESIZE, size=Vector(*console.size)))

        with Live(console=console, screen=True, auto_refresh=False, transient=True) as live:
            live.update(to_rich_text(self.paint()), refresh=True)
            while not self.stop_event.is_set():
                try:
                    key = read_key()
                except (KeyboardInterrupt, EOFError):
                    break
                if self.stop_event.is_set():
                    break

                size = Vector(*console.size)
                if size != self._screen.size:
                    self.handle(Event(type=EventType.RESIZE, size=size))

                event = event_for_key(key)
                if event is not None and not self.handle(event):
                    break
                live.update(to_rich_text(self.paint()), refresh=True)

        logger.debug("TUI session ended")
