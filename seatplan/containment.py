from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from loguru import logger

from .geometry import CellIndex
from .model import Element, Follower, GridBlock, RowGroup, Seat, ShapeNode, VenueModel


@dataclass(frozen=True)
class HostMatch:
    host: Element
    cell: Optional[CellIndex] = None


def cell_taken(model: VenueModel, block: GridBlock, cell: CellIndex, element: Optional[Element] = None) -> bool:
    """True when another seat already sits in `cell` of `block`."""
    for other in model.hosted_by(block.id):
        if other is element or not isinstance(other, Seat):
            continue
        if (other.row_index, other.column_index) == (cell.row_index, cell.column_index):
            return True
    return False


def resolve_host(
    point: tuple[float, float],
    element: Optional[Element],
    candidates: Iterable[Element],
    *,
    model: Optional[VenueModel] = None,
) -> Optional[HostMatch]:
    """
    Find the container an element dropped at `point` should attach to.

    `candidates` must already be ordered topmost layer first and, within a
    layer, most recently added first; the first qualifying candidate wins.
    Grid blocks only qualify when the point hits one of their concrete cells.
    Given the `model`, cells already holding a seat are passed over.
    """
    x, y = point
    for candidate in candidates:
        if candidate is element or not candidate.visible:
            continue
        if element is not None and candidate.id == element.id:
            continue
        match candidate:
            case GridBlock():
                cell = candidate.cell_at(x, y)
                if cell is None:
                    continue
                if model is not None and cell_taken(model, candidate, cell, element):
                    logger.debug("cell {} of block {} is taken", cell, candidate.id)
                    continue
                return HostMatch(candidate, cell)
            case Follower():
                if not candidate.bounding_rect().contains(x, y):
                    continue
                if element is None or candidate.host != element.id:
                    return HostMatch(candidate)
            case RowGroup() | ShapeNode():
                continue
    logger.debug("no container at ({}, {})", x, y)
    return None


def bind_host(
    element: Optional[Element],
    host: Optional[Element],
    cell: Optional[CellIndex] = None,
    *,
    top_level: Optional[int] = None,
) -> None:
    if element is None:
        return
    element.host = None
    element.parent = top_level
    if isinstance(element, Follower):
        element.row_index = None
        element.column_index = None
    if host is None:
        return

    element.host = host.id
    element.parent = host.id
    if cell is not None and isinstance(element, Follower):
        element.row_index = cell.row_index
        element.column_index = cell.column_index
        if isinstance(host, GridBlock):
            element.x, element.y = host.cell_center(cell)
