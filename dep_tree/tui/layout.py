from collections import deque

from models.base import ModuleID
from models.graph import ModuleGraph
from tui.screen import Vector
from tui.state import RenderState, SpatialState, View


def _bfs(
    graph: ModuleGraph, start: ModuleID, depths: dict[ModuleID, int], order: list[ModuleID]
) -> None:
    queue: deque[ModuleID] = deque([start])
    depths[start] = 0
    order.append(start)
    while queue:
        current = queue.popleft()
        for dependency in graph.dependencies(current):
            if dependency in depths:
                continue
            depths[dependency] = depths[current] + 1
            order.append(dependency)
            queue.append(dependency)


def visible_nodes(
    graph: ModuleGraph, root_id: ModuleID, view: View
) -> tuple[list[ModuleID], dict[ModuleID, int], set[ModuleID]]:
    """Nodes to draw, in row order.

    Returns:
        Row order, BFS depth per node and the nodes shown as dependents of
        the root (focus view only).
    """

    if view == View.FOCUS:
        dependencies = [d for d in graph.dependencies(root_id) if d != root_id]
        dependents = [
            d for d in graph.dependents(root_id) if d != root_id and d not in dependencies
        ]
        focused = [root_id, *dependencies, *dependents]
        return focused, {m: int(m != root_id) for m in focused}, set(dependents)

    depths: dict[ModuleID, int] = {}
    order: list[ModuleID] = []
    _bfs(graph, root_id, depths, order)
    for module_id in sorted(graph.nodes):
        if module_id not in depths:
            _bfs(graph, module_id, depths, order)
    return order, depths, set()


def compute_layout(
    graph: ModuleGraph, render_state: RenderState, screen_size: Vector, indent: int = 2
) -> SpatialState:
    """One node per row, indented by BFS depth from the selected node."""

    order, depths, dependents = visible_nodes(graph, render_state.selected_id, render_state.view)
    positions = {
        module_id: Vector(depths[module_id] * indent, row) for row, module_id in enumerate(order)
    }
    return SpatialState(
        screen_size=screen_size,
        positions=positions,
        depths=depths,
        order=order,
        dependents=dependents,
    )


def clamp_viewport(render_state: RenderState, spatial_state: SpatialState) -> Vector:
    """Viewport offset keeping the cursor row visible and the layout filling the screen."""

    rows = max(spatial_state.screen_size.y, 1)
    top = render_state.viewport_offset.y
    position = spatial_state.positions.get(render_state.cursor)
    if position is not None:
        if position.y < top:
            top = position.y
        elif position.y >= top + rows:
            top = position.y - rows + 1
    top = max(0, min(top, spatial_state.height - rows))
    return Vector(0, top)
