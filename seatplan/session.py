from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal, Optional, get_args

from loguru import logger

from .config import SeatPlanSettings, get_settings
from .containment import HostMatch, bind_host, resolve_host
from .geometry import CellIndex, mirror_points
from .model import Element, Follower, GridBlock, RowGroup, Seat, SeatStatus, ShapeNode, VenueModel
from .numbering import NumberingPolicy, assign_numbers, clear_numbers

AlignMode = Literal["top", "bottom", "left", "right", "horizontalcenter", "verticalcenter"]


@dataclass(frozen=True)
class Notice:
    """A transient message shown to the user after an aborted action."""

    action: str
    message: str


class EditorSession:
    """
    Editing state for one open seat plan.

    Holds what the editor UI would otherwise keep in globals: the selection,
    the lock flag, the shift-key state and the container new elements go to.
    User actions that cannot run record a Notice instead of raising.
    """

    def __init__(self, model: Optional[VenueModel] = None, settings: Optional[SeatPlanSettings] = None):
        self.model = model if model is not None else VenueModel()
        self.settings = settings or get_settings()
        self.selection: list[int] = []
        self.locked = False
        self.shift_down = False
        self.current_container: Optional[int] = None
        self.notices: list[Notice] = []
        self._row_count = 0

    # -- notices & selection ------------------------------------------------

    def notify(self, action: str, message: str) -> None:
        logger.warning("{}: {}", action, message)
        self.notices.append(Notice(action, message))

    def pop_notices(self) -> list[Notice]:
        out, self.notices = self.notices, []
        return out

    @property
    def target(self) -> Optional[Element]:
        """The most recently selected element that still exists."""
        for element_id in reversed(self.selection):
            element = self.model.get(element_id)
            if element is not None:
                return element
        return None

    def selected(self) -> list[Element]:
        return [e for e in (self.model.get(i) for i in self.selection) if e is not None]

    def select(self, *elements: Element, append: bool = False) -> None:
        ids = list(self.selection) if append else []
        for element in elements:
            if element.id not in ids:
                ids.append(element.id)
            if self.shift_down and isinstance(element, GridBlock):
                row = self.model.get(element.parent)
                if isinstance(row, RowGroup):
                    ids.extend(i for i in row.block_ids if i not in ids)
        self.selection = ids

    def clear_selection(self) -> None:
        self.selection = []

    def can_move(self, element: Element) -> bool:
        if self.locked:
            return False
        return getattr(element, "movable", True)

    def _target_of(self, kind: type, action: str):
        target = self.target
        if target is None:
            self.notify(action, "no selection")
            return None
        if not isinstance(target, kind):
            self.notify(action, f"selection is not a {kind.__name__}")
            return None
        return target

    # -- drawing ------------------------------------------------------------

    def draw_block(self, x: float, y: float, column_count: Optional[int] = None) -> GridBlock:
        s = self.settings
        block = GridBlock(
            center_x=x,
            center_y=y,
            column_count=s.default_column_count if column_count is None else column_count,
            cell_width=s.cell_width,
            cell_height=s.cell_height,
            padding=s.cell_padding,
            border=s.cell_border,
            parent=self.current_container,
        )
        self.model.add(block)
        self.select(block)
        return block

    def resize_block(self, column_count: int) -> Optional[GridBlock]:
        block = self._target_of(GridBlock, "resize")
        if block is None:
            return None
        if column_count < 0:
            self.notify("resize", "column count must be >= 0")
            return None
        block.column_count = column_count
        self._refit_hosted(block)
        return block

    def _refit_hosted(self, block: GridBlock) -> None:
        # cells are recentered on resize; hosted elements snap back onto theirs
        removed = 0
        for element in self.model.hosted_by(block.id):
            if not isinstance(element, Follower) or element.column_index is None:
                continue
            row_index = element.row_index or 0
            if element.column_index >= block.column_count or row_index >= block.row_count:
                if isinstance(element, Seat) and element.column_number:
                    self.model.remove(element)
                    removed += 1
                else:
                    bind_host(element, None, top_level=self.current_container)
                continue
            cx, cy = block.cell_center(CellIndex(row_index, element.column_index))
            self._move_by(element, cx - element.x, cy - element.y)
        if removed:
            logger.info("resize of block {} removed {} seats", block.id, removed)

    def add_marker(self, x: float, y: float, kind: Literal["seat", "follower"] = "seat") -> Follower:
        cls = Seat if kind == "seat" else Follower
        marker = cls(
            x=x,
            y=y,
            width=self.settings.cell_width,
            height=self.settings.cell_height,
            parent=self.current_container,
        )
        self.model.add(marker)
        self.select(marker)
        return marker

    def add_shape(self, points: list[tuple[float, float]], *, closed: bool = True) -> ShapeNode:
        shape = ShapeNode(points=list(points), closed=closed, parent=self.current_container)
        self.model.add(shape)
        self.select(shape)
        return shape

    # -- operations ---------------------------------------------------------

    def group(self) -> Optional[RowGroup]:
        if not self.selection:
            self.notify("group", "no selection")
            return None
        blocks = [e for e in self.selected() if isinstance(e, GridBlock)]
        if not blocks:
            self.notify("group", "selection holds no grid blocks")
            return None

        self._row_count += 1
        n = self._row_count
        row = RowGroup(
            row_number=n,
            row_name=f"{n}{self.settings.row_suffix}",
            parent=self.current_container,
        )
        self.model.add(row)
        for block in blocks:
            old = self.model.get(block.parent)
            if isinstance(old, RowGroup) and block.id in old.block_ids:
                old.block_ids.remove(block.id)
            block.parent = row.id
            row.block_ids.append(block.id)
        self.select(row)
        return row

    def ungroup(self) -> list[GridBlock]:
        row = self._target_of(RowGroup, "ungroup")
        if row is None:
            return []
        blocks = self.model.blocks_of(row)
        for block in blocks:
            block.parent = row.parent
        row.block_ids.clear()
        self.model.remove(row)
        self.select(*blocks)
        return blocks

    def _mirror(self, axis: Literal["x", "y"]) -> Optional[ShapeNode]:
        shape = self._target_of(ShapeNode, f"mirror {axis}")
        if shape is None:
            return None
        copy = replace(shape, id=0, points=mirror_points(shape.points, axis))
        self.model.add(copy)
        self.select(copy)
        return copy

    def mirror_x(self) -> Optional[ShapeNode]:
        return self._mirror("x")

    def mirror_y(self) -> Optional[ShapeNode]:
        return self._mirror("y")

    def number_row(self, policy: NumberingPolicy | str, default_price: Optional[float] = None) -> list[Seat]:
        row = self._target_of(RowGroup, "number")
        if row is None:
            return []
        return assign_numbers(self.model, row, policy, default_price, settings=self.settings)

    def clear_row(self) -> int:
        row = self._target_of(RowGroup, "clear")
        if row is None:
            return 0
        return clear_numbers(self.model, row)

    def _selected_seats(self, action: str) -> list[Seat]:
        seats = [e for e in self.selected() if isinstance(e, Seat)]
        if not seats:
            self.notify(action, "no seats selected")
        return seats

    def set_status(self, status: SeatStatus | str) -> list[Seat]:
        status = SeatStatus(status)
        seats = self._selected_seats("status")
        for seat in seats:
            seat.status = status
            if status in (SeatStatus.held, SeatStatus.sold):
                seat.label = ""
            else:
                seat.label = str(seat.column_number)
        return seats

    def set_price(self, price: float) -> list[Seat]:
        if price not in self.settings.price_tiers:
            self.notify("price", f"{price} is not a configured price tier")
            return []
        seats = self._selected_seats("price")
        for seat in seats:
            seat.price = price
        return seats

    def align(self, mode: AlignMode) -> list[Element]:
        """
        Line up the selected blocks and markers against the bounds of the
        whole selection. Returns the elements that moved.

        Elements hosted by another selected element travel with their host.
        Markers are re-hosted at their new position, as after a drag.
        """
        if mode not in get_args(AlignMode):
            raise ValueError(f"unknown alignment: {mode}")
        chosen = [e for e in self.selected() if isinstance(e, (GridBlock, Follower))]
        ids = {e.id for e in chosen}
        chosen = [e for e in chosen if e.host not in ids]
        if len(chosen) < 2:
            self.notify("align", "select at least two blocks or markers")
            return []
        if self.locked:
            self.notify("align", "session is locked")
            return []

        rects = [e.bounding_rect() for e in chosen]
        left = min(r.x for r in rects)
        top = min(r.y for r in rects)
        right = max(r.x + r.w for r in rects)
        bottom = max(r.y + r.h for r in rects)

        moved: list[Element] = []
        for element, r in zip(chosen, rects):
            if not self.can_move(element):
                continue
            cx, cy = r.center
            match mode:
                case "top":
                    dx, dy = 0.0, top - r.y
                case "bottom":
                    dx, dy = 0.0, bottom - (r.y + r.h)
                case "left":
                    dx, dy = left - r.x, 0.0
                case "right":
                    dx, dy = right - (r.x + r.w), 0.0
                case "horizontalcenter":
                    dx, dy = (left + right) / 2.0 - cx, 0.0
                case _:
                    dx, dy = 0.0, (top + bottom) / 2.0 - cy
            if not (dx or dy):
                continue
            self._move_by(element, dx, dy)
            if isinstance(element, Follower):
                self._rehost(element)
            moved.append(element)
        return moved

    def _move_by(self, element: Element, dx: float, dy: float, _seen: Optional[set[int]] = None) -> None:
        # hosted elements follow their host
        seen = set() if _seen is None else _seen
        if element.id in seen:
            return
        seen.add(element.id)
        match element:
            case GridBlock():
                element.center_x += dx
                element.center_y += dy
            case Follower():
                element.x += dx
                element.y += dy
            case _:
                return
        for hosted in self.model.hosted_by(element.id):
            self._move_by(hosted, dx, dy, seen)

    def _rehost(self, element: Follower) -> Optional[HostMatch]:
        found = resolve_host(
            (element.x, element.y),
            element,
            self.model.visible_top_to_bottom(),
            model=self.model,
        )
        if found is None:
            bind_host(element, None, top_level=self.current_container)
        else:
            bind_host(element, found.host, found.cell, top_level=self.current_container)
        return found

    def drop(self, element: Optional[Element], x: float, y: float) -> Optional[HostMatch]:
        """Finish a drag: move the element to (x, y) and attach it to its new host.

        Seats and followers are re-hosted; grid blocks are only moved, carrying
        the seats they host.
        """
        if element is None:
            return None
        if not self.can_move(element):
            self.notify("move", "element cannot be moved")
            return None
        match element:
            case Follower():
                self._move_by(element, x - element.x, y - element.y)
                return self._rehost(element)
            case GridBlock():
                # blocks stay siblings inside their row; only their position changes
                self._move_by(element, x - element.center_x, y - element.center_y)
        return None
