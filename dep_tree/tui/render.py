import textwrap

from models.graph import ModuleGraph
from tui.screen import Canvas, CellStyle
from tui.state import RenderState, SpatialState

ERROR_STYLE = CellStyle(fg="red")
NODE_STYLE = CellStyle()
ROOT_STYLE = CellStyle(fg="green", bold=True)
CYCLE_STYLE = CellStyle(fg="red")
CURSOR_STYLE = CellStyle(fg="black", bg="cyan")
ELLIPSIS = "..."


def wrap_messages(messages: list[str], width: int) -> list[str]:
    """Word-wrap each message as its own paragraph, hard-splitting long words."""

    lines: list[str] = []
    for message in messages:
        lines.extend(
            textwrap.wrap(
                message, width=max(width, 1), break_long_words=True, break_on_hyphens=False
            )
            or [""]
        )
    return lines


def render_error(screen: Canvas, render_state: RenderState, spatial_state: SpatialState) -> None:
    """Paint the selected node's errors over the ``screen_size`` area.

    Lines start at row 0 and every cell of the area is written, so nothing
    from a previous paint survives. When the messages need more rows than
    available the last visible row ends with ``...``.
    """

    columns, rows = spatial_state.screen_size
    messages = render_state.errors.get(render_state.selected_id, [])
    lines = wrap_messages(messages, columns)

    if len(lines) > rows > 0:
        lines = lines[:rows]
        last = lines[-1]
        if len(last) > columns - len(ELLIPSIS):
            last = last[: max(columns - len(ELLIPSIS), 0)]
        lines[-1] = (last + ELLIPSIS)[:columns]

    for y in range(rows):
        text = lines[y] if y < len(lines) else ""
        for x in range(columns):
            screen.set_content(x, y, text[x] if x < len(text) else " ", ERROR_STYLE)


def render_graph(
    screen: Canvas,
    graph: ModuleGraph,
    render_state: RenderState,
    spatial_state: SpatialState,
    cycle_members: set[str] | frozenset[str] = frozenset(),
) -> None:
    """Clear ``screen`` and paint the rows of the layout inside the viewport."""

    screen.clear()
    columns, rows = screen.size
    offset = render_state.viewport_offset

    for module_id in spatial_state.order[offset.y : offset.y + rows]:
        position = spatial_state.positions[module_id]
        y = position.y - offset.y

        marker = "!" if render_state.errors.get(module_id) else " "
        arrow = "<- " if module_id in spatial_state.dependents else ""
        label = f"{marker}{arrow}{graph.relative(module_id)}"

        if module_id == render_state.cursor:
            style = CURSOR_STYLE
            screen.fill_row(y, " ", style)
        elif module_id in cycle_members:
            style = CYCLE_STYLE
        elif module_id == render_state.selected_id:
            style = ROOT_STYLE
        else:
            style = NODE_STYLE
        screen.write(position.x - offset.x, y, label, style)

    if columns and spatial_state.height > offset.y + rows:
        screen.write(columns - 1, rows - 1, "v", NODE_STYLE)
