from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union

from .errors import UnknownElementError
from .geometry import CellIndex, Rect, grid_cell_at, grid_cell_rect, points_bounds

# Drawing order, bottom first.
LAYERS = ("bottom", "center", "top")


class SeatStatus(str, Enum):
    unassigned = "未分配"
    available = "未售"
    held = "锁座"
    sold = "已售"


@dataclass(kw_only=True)
class _Node:
    id: int = 0
    layer: str = "top"
    visible: bool = True
    # Non-owning references into the VenueModel; may point at removed elements.
    parent: Optional[int] = None
    host: Optional[int] = None


@dataclass(kw_only=True)
class GridBlock(_Node):
    """One bench of seats: a single-row grid with `column_count` slots."""

    center_x: float
    center_y: float
    column_count: int
    row_count: int = 1
    cell_width: float = 20
    cell_height: float = 20
    padding: float = 2
    border: float = 1
    layer: str = "center"

    def bounding_rect(self) -> Rect:
        w = self.cell_width * max(0, self.column_count)
        h = self.cell_height * self.row_count
        return Rect.centered(self.center_x, self.center_y, w, h)

    def cell_at(self, x: float, y: float) -> Optional[CellIndex]:
        return grid_cell_at(
            self.bounding_rect(),
            self.row_count,
            self.column_count,
            x,
            y,
            border=self.border,
            padding=self.padding,
        )

    def cell_center(self, cell: CellIndex) -> tuple[float, float]:
        rect = grid_cell_rect(self.bounding_rect(), self.row_count, self.column_count, cell, border=self.border)
        return rect.center


@dataclass(kw_only=True)
class RowGroup(_Node):
    row_name: str
    row_number: int
    block_ids: list[int] = field(default_factory=list)
    layer: str = "center"


@dataclass(kw_only=True)
class Follower(_Node):
    """A movable marker that can sit on (and host) other elements."""

    x: float = 0.0
    y: float = 0.0
    width: float = 20
    height: float = 20
    movable: bool = True
    row_index: Optional[int] = None
    column_index: Optional[int] = None

    def bounding_rect(self) -> Rect:
        return Rect.centered(self.x, self.y, self.width, self.height)


@dataclass(kw_only=True)
class Seat(Follower):
    label: str = ""
    column_number: int = 0
    column_name: str = ""
    row_column_name: str = ""
    status: SeatStatus = SeatStatus.unassigned
    price: float = 0
    region: str = ""
    tier: str = ""
    row: str = ""
    seat: str = ""


@dataclass(kw_only=True)
class ShapeNode(_Node):
    points: list[tuple[float, float]]
    closed: bool = True
    layer: str = "bottom"

    def bounding_rect(self) -> Rect:
        return points_bounds(self.points)


Element = Union[GridBlock, RowGroup, Follower, Seat, ShapeNode]


def element_kind(element: Element) -> str:
    match element:
        case GridBlock():
            return "grid_block"
        case RowGroup():
            return "row_group"
        case Seat():
            return "seat"
        case Follower():
            return "follower"
        case ShapeNode():
            return "shape"
    raise TypeError(f"not a venue element: {element!r}")


def element_to_dict(element: Element) -> dict:
    data = asdict(element)
    if isinstance(element, Seat):
        data["status"] = element.status.value
    if isinstance(element, ShapeNode):
        data["points"] = [[x, y] for (x, y) in element.points]
    data["kind"] = element_kind(element)
    return data


class VenueModel:
    """
    Arena store for every spatial element of a venue.

    Elements are addressed by integer ids; parent/host links are ids into this
    store, so removing an element never leaves a dangling object reference.
    """

    def __init__(self) -> None:
        self._elements: dict[int, Element] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._elements

    def add(self, element: Element) -> Element:
        if element.layer not in LAYERS:
            raise ValueError(f"unknown layer: {element.layer}")
        if not element.id:
            element.id = self._next_id
        elif self._elements.get(element.id, element) is not element:
            raise ValueError(f"element id {element.id} is already taken")
        self._next_id = max(self._next_id, element.id + 1)
        self._elements[element.id] = element
        return element

    def remove(self, element: Element | int) -> Optional[Element]:
        element_id = element if isinstance(element, int) else element.id
        return self._elements.pop(element_id, None)

    def get(self, element_id: Optional[int]) -> Optional[Element]:
        if element_id is None:
            return None
        return self._elements.get(element_id)

    def require(self, element_id: int) -> Element:
        element = self._elements.get(element_id)
        if element is None:
            raise UnknownElementError(element_id)
        return element

    def elements(self) -> list[Element]:
        return list(self._elements.values())

    def children_of(self, element_id: int) -> list[Element]:
        return [e for e in self._elements.values() if e.parent == element_id]

    def hosted_by(self, element_id: int) -> list[Element]:
        return [e for e in self._elements.values() if e.host == element_id]

    def blocks_of(self, row: RowGroup) -> list[GridBlock]:
        out: list[GridBlock] = []
        for block_id in row.block_ids:
            block = self.get(block_id)
            if isinstance(block, GridBlock):
                out.append(block)
        return out

    def visible_top_to_bottom(self) -> Iterator[Element]:
        # top layer first; within a layer the most recently added element first
        ordered = list(self._elements.values())
        for layer in reversed(LAYERS):
            for element in reversed(ordered):
                if element.layer == layer and element.visible:
                    yield element
