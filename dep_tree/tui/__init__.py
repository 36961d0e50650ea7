from tui.app import TuiApp
from tui.events import Event, EventType
from tui.screen import Cell, CellStyle, Screen, Vector
from tui.state import Mode, RenderState, SpatialState, View

__all__ = [
    "Cell",
    "CellStyle",
    "Event",
    "EventType",
    "Mode",
    "RenderState",
    "Screen",
    "SpatialState",
    "TuiApp",
    "Vector",
    "View",
]
