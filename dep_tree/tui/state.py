from enum import StrEnum

from pydantic import BaseModel, Field

from models.base import ModuleID
from tui.screen import Vector


class Mode(StrEnum):
    BROWSING = "browsing"
    NODE_SELECTED = "node_selected"


class View(StrEnum):
    """FOCUS shows the selected node and its direct neighbors, OVERVIEW everything."""

    FOCUS = "focus"
    OVERVIEW = "overview"


class RenderState(BaseModel):
    """Session state, changed only by input event handlers.

    Attributes:
        selected_id: Node the layout is rooted on and whose errors are shown.
        cursor_id: Highlighted node, defaults to the selected one.
        viewport_offset: Top-left corner of the visible part of the layout.
        errors: Display errors per node id.
        mode: Whether a node was explicitly selected.
        view: Which part of the graph is visible.
        history: Previously selected nodes, restored on deselect.
    """

    selected_id: ModuleID
    cursor_id: ModuleID | None = None
    viewport_offset: Vector = Vector(0, 0)
    errors: dict[str, list[str]] = Field(default_factory=dict)
    mode: Mode = Mode.BROWSING
    view: View = View.FOCUS
    history: list[ModuleID] = Field(default_factory=list)

    @property
    def cursor(self) -> ModuleID:
        return self.cursor_id or self.selected_id


class SpatialState(BaseModel):
    """Layout of the visible nodes for the current screen size."""

    screen_size: Vector
    positions: dict[ModuleID, Vector] = Field(default_factory=dict)
    depths: dict[ModuleID, int] = Field(default_factory=dict)
    order: list[ModuleID] = Field(default_factory=list)
    dependents: set[ModuleID] = Field(default_factory=set)

    @property
    def height(self) -> int:
        return len(self.order)
