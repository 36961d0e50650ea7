from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NamedTuple


class Vector(NamedTuple):
    """2-D integer vector. For sizes ``x`` is columns and ``y`` is rows."""

    x: int
    y: int


@dataclass(frozen=True)
class CellStyle:
    fg: str = "default"
    bg: str = "default"
    bold: bool = False


@dataclass(frozen=True)
class Cell:
    char: str = " "
    style: CellStyle = CellStyle()

    @property
    def fg(self) -> str:
        return self.style.fg

    @property
    def bg(self) -> str:
        return self.style.bg


DEFAULT_STYLE = CellStyle()
BLANK = Cell()


class Canvas(ABC):
    """Something cells can be painted on: a screen or a region of it."""

    @property
    @abstractmethod
    def size(self) -> Vector: ...

    @abstractmethod
    def set_content(self, x: int, y: int, char: str, style: CellStyle = DEFAULT_STYLE) -> None:
        """Write one cell. Writes outside the canvas are ignored."""

    @abstractmethod
    def get_content(self, x: int, y: int) -> Cell: ...

    def clear(self, style: CellStyle = DEFAULT_STYLE) -> None:
        columns, rows = self.size
        for y in range(rows):
            for x in range(columns):
                self.set_content(x, y, " ", style)

    def write(self, x: int, y: int, text: str, style: CellStyle = DEFAULT_STYLE) -> int:
        """Write ``text`` from ``(x, y)`` clipped to the canvas width.

        Returns:
            Number of cells written.
        """

        written = 0
        for offset, char in enumerate(text):
            if x + offset >= self.size.x:
                break
            if x + offset < 0:
                continue
            self.set_content(x + offset, y, char, style)
            written += 1
        return written

    def fill_row(self, y: int, char: str = " ", style: CellStyle = DEFAULT_STYLE) -> None:
        for x in range(self.size.x):
            self.set_content(x, y, char, style)

    def row_text(self, y: int) -> str:
        return "".join(self.get_content(x, y).char for x in range(self.size.x))

    def lines(self) -> list[str]:
        return [self.row_text(y) for y in range(self.size.y)]

    def region(self, x: int, y: int, columns: int, rows: int) -> "ScreenRegion":
        return ScreenRegion(self, Vector(x, y), Vector(columns, rows))


class Screen(Canvas):
    """Dense ``rows x columns`` grid of cells, always fully allocated."""

    def __init__(self, size: Vector) -> None:
        self._size = Vector(max(size.x, 0), max(size.y, 0))
        self._cells: list[list[Cell]] = self._blank_grid(self._size)

    @staticmethod
    def _blank_grid(size: Vector) -> list[list[Cell]]:
        return [[BLANK] * size.x for _ in range(size.y)]

    @property
    def size(self) -> Vector:
        return self._size

    def resize(self, size: Vector) -> None:
        """Reallocate the grid. Nothing of the previous content survives."""

        self._size = Vector(max(size.x, 0), max(size.y, 0))
        self._cells = self._blank_grid(self._size)

    def set_content(self, x: int, y: int, char: str, style: CellStyle = DEFAULT_STYLE) -> None:
        if 0 <= x < self._size.x and 0 <= y < self._size.y:
            self._cells[y][x] = Cell(char[:1] or " ", style)

    def get_content(self, x: int, y: int) -> Cell:
        if 0 <= x < self._size.x and 0 <= y < self._size.y:
            return self._cells[y][x]
        return BLANK

    def rows(self) -> list[list[Cell]]:
        return [list(row) for row in self._cells]


class ScreenRegion(Canvas):
    """Rectangular view of another canvas with its own coordinates."""

    def __init__(self, parent: Canvas, origin: Vector, size: Vector) -> None:
        self._parent = parent
        self._origin = origin
        columns = max(0, min(size.x, parent.size.x - origin.x))
        rows = max(0, min(size.y, parent.size.y - origin.y))
        self._size = Vector(columns, rows)

    @property
    def size(self) -> Vector:
        return self._size

    def set_content(self, x: int, y: int, char: str, style: CellStyle = DEFAULT_STYLE) -> None:
        if 0 <= x < self._size.x and 0 <= y < self._size.y:
            self._parent.set_content(self._origin.x + x, self._origin.y + y, char, style)

    def get_content(self, x: int, y: int) -> Cell:
        if 0 <= x < self._size.x and 0 <= y < self._size.y:
            return self._parent.get_content(self._origin.x + x, self._origin.y + y)
        return BLANK
