from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Optional

from shapely.geometry import MultiPoint, Point, Polygon as ShapelyPolygon, box

from .errors import GeometryError


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle; (x, y) is the top-left corner."""

    x: float
    y: float
    w: float
    h: float

    @classmethod
    def centered(cls, cx: float, cy: float, w: float, h: float) -> "Rect":
        if w < 0 or h < 0:
            raise GeometryError(f"negative rect size: w={w}, h={h}")
        return cls(cx - w / 2.0, cy - h / 2.0, w, h)

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.w / 2.0, self.y + self.h / 2.0)

    def inset(self, d: float) -> "Rect":
        w = max(0.0, self.w - 2 * d)
        h = max(0.0, self.h - 2 * d)
        return Rect(self.x + d, self.y + d, w, h)

    def contains(self, x: float, y: float) -> bool:
        if self.w <= 0 or self.h <= 0:
            return False
        # Points on the edge count as inside.
        return box(self.x, self.y, self.x + self.w, self.y + self.h).covers(Point(x, y))


@dataclass(frozen=True)
class CellIndex:
    row_index: int
    column_index: int


def grid_cell_at(
    outer: Rect,
    rows: int,
    cols: int,
    x: float,
    y: float,
    *,
    border: float = 0.0,
    padding: float = 0.0,
) -> Optional[CellIndex]:
    """
    Locate the concrete cell of a rows x cols grid that contains (x, y).

    The border is stripped from the outer rect before the grid is split; each
    cell then loses `padding` on every side. Points falling on the border or in
    a cell's padding belong to no cell and return None.
    """
    if rows <= 0 or cols <= 0:
        return None
    inner = outer.inset(border)
    if not inner.contains(x, y):
        return None
    cw = inner.w / cols
    ch = inner.h / rows
    col = min(int((x - inner.x) // cw), cols - 1)
    row = min(int((y - inner.y) // ch), rows - 1)
    cell = Rect(inner.x + col * cw, inner.y + row * ch, cw, ch).inset(padding)
    if not cell.contains(x, y):
        return None
    return CellIndex(row_index=row, column_index=col)


def grid_cell_rect(outer: Rect, rows: int, cols: int, cell: CellIndex, *, border: float = 0.0) -> Rect:
    if not (0 <= cell.row_index < rows and 0 <= cell.column_index < cols):
        raise GeometryError(f"cell out of bounds: {cell}")
    inner = outer.inset(border)
    cw = inner.w / cols
    ch = inner.h / rows
    return Rect(inner.x + cell.column_index * cw, inner.y + cell.row_index * ch, cw, ch)


def points_bounds(points: Iterable[tuple[float, float]]) -> Rect:
    pts = list(points)
    if not pts:
        raise GeometryError("no points")
    minx, miny, maxx, maxy = MultiPoint(pts).bounds
    return Rect(minx, miny, maxx - minx, maxy - miny)


def validate_polygon(points: list[tuple[float, float]], *, name: str = "polygon") -> None:
    if len(points) < 3:
        raise GeometryError(f"{name} must have at least 3 points")
    if not ShapelyPolygon(points).is_valid:
        raise GeometryError(f"{name} is self-intersecting or otherwise invalid")


def mirror_points(
    points: Iterable[tuple[float, float]],
    axis: Literal["x", "y"],
) -> list[tuple[float, float]]:
    # mirror about the bounds center: axis "x" flips horizontally, "y" vertically
    pts = list(points)
    cx, cy = points_bounds(pts).center
    if axis == "x":
        return [(x + 2 * (cx - x), y) for (x, y) in pts]
    if axis == "y":
        return [(x, y + 2 * (cy - y)) for (x, y) in pts]
    raise GeometryError(f"unknown mirror axis: {axis}")
