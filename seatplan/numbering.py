"""
Seat numbering for a venue row.

A row is a RowGroup of grid blocks (benches). Numbering walks the blocks in
display order and produces one seat per column slot under one of the
box-office conventions:

* ``ascending``    seat 1 on the left, numbers grow to the right
* ``descending``   numbers follow blocks from right to left; within a block
                   the column index is mirrored
* ``center_split`` seat 1 at the middle of the row, even numbers grow to the
                   left and odd numbers to the right (theater aisle style)
* ``reserved``     accepted but produces nothing

Planning (`plan_numbers`) is pure; `assign_numbers` turns a plan into Seat
elements bound to their blocks.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from loguru import logger

from .config import SeatPlanSettings, get_settings
from .containment import bind_host
from .geometry import CellIndex
from .model import GridBlock, RowGroup, Seat, SeatStatus, VenueModel


class NumberingPolicy(str, Enum):
    ascending = "ascending"
    descending = "descending"
    center_split = "center_split"
    reserved = "reserved"


@dataclass(frozen=True)
class SeatSlot:
    block_id: int
    column_index: int
    column_number: int


@dataclass(frozen=True)
class _Span:
    block: GridBlock
    start: int
    end: int

    @property
    def count(self) -> int:
        return self.end - self.start


def _by_center_x(blocks: Sequence[GridBlock], *, descending: bool = False) -> list[GridBlock]:
    # sorted() is stable, so blocks sharing a center keep their stored order
    return sorted(blocks, key=lambda b: b.center_x, reverse=descending)


def _column_count(block: GridBlock) -> int:
    count = int(block.column_count or 0)
    if count <= 0:
        logger.debug("skipping block {} with no columns", block.id)
        return 0
    return count


def _plan_sequential(blocks: Sequence[GridBlock], *, descending: bool) -> list[SeatSlot]:
    slots: list[SeatSlot] = []
    counter = 0
    for block in _by_center_x(blocks, descending=descending):
        count = _column_count(block)
        for i in range(count):
            column_index = count - 1 - i if descending else i
            slots.append(SeatSlot(block.id, column_index, counter + i + 1))
        counter += count
    return slots


def _center_half(total: int) -> int:
    if total % 2 == 0:
        return total // 2
    return (total + 1) // 2


def _find_center(spans: list[_Span], half: int) -> Optional[int]:
    """
    Index of the span that receives seat 1.

    Spans are matched with an inclusive test on both ends, so when `half`
    falls exactly on a boundary two neighbours match. The scan keeps the last
    match that can actually hold seat 1 at `half - start - 1`.
    """
    matches = [i for i, s in enumerate(spans) if s.count > 0 and s.start <= half <= s.end]
    if len(matches) > 1:
        logger.warning(
            "center seat {} sits on a block boundary; candidate blocks {}",
            half,
            [spans[i].block.id for i in matches],
        )
    center = None
    for i in matches:
        offset = half - spans[i].start - 1
        if 0 <= offset < spans[i].count:
            center = i
    return center


def _plan_center_split(blocks: Sequence[GridBlock]) -> list[SeatSlot]:
    spans: list[_Span] = []
    running = 0
    for block in _by_center_x(blocks):
        count = _column_count(block)
        spans.append(_Span(block, running, running + count))
        running += count

    total = running
    if total == 0:
        return []
    half = _center_half(total)
    center = _find_center(spans, half)
    if center is None:
        return []

    slots: list[SeatSlot] = []
    left, right = 2, 3
    span = spans[center]
    block_id = span.block.id
    offset = half - span.start - 1

    slots.append(SeatSlot(block_id, offset, 1))
    for i in range(offset - 1, -1, -1):
        slots.append(SeatSlot(block_id, i, left))
        left += 2
    for i in range(offset + 1, span.count):
        slots.append(SeatSlot(block_id, i, right))
        right += 2

    for span in reversed(spans[:center]):
        for j in range(span.count - 1, -1, -1):
            slots.append(SeatSlot(span.block.id, j, left))
            left += 2
    for span in spans[center + 1 :]:
        for j in range(span.count):
            slots.append(SeatSlot(span.block.id, j, right))
            right += 2
    return slots


def plan_numbers(blocks: Sequence[GridBlock], policy: NumberingPolicy | str) -> list[SeatSlot]:
    policy = NumberingPolicy(policy)
    match policy:
        case NumberingPolicy.ascending:
            return _plan_sequential(blocks, descending=False)
        case NumberingPolicy.descending:
            return _plan_sequential(blocks, descending=True)
        case NumberingPolicy.center_split:
            return _plan_center_split(blocks)
        case NumberingPolicy.reserved:
            logger.info("numbering policy {} is not implemented yet", policy.value)
            return []


def make_seat(
    slot: SeatSlot,
    row: RowGroup,
    *,
    price: float,
    settings: SeatPlanSettings,
) -> Seat:
    n = slot.column_number
    suffix = settings.seat_suffix
    return Seat(
        label=str(n),
        column_number=n,
        column_name=f"{n}{suffix}",
        row_column_name=f"{row.row_name}{n}{suffix}",
        status=SeatStatus.unassigned,
        price=price,
        width=settings.cell_width,
        height=settings.cell_height,
        movable=False,
        layer="top",
    )


def assign_numbers(
    model: VenueModel,
    row: object,
    policy: NumberingPolicy | str,
    default_price: Optional[float] = None,
    *,
    settings: Optional[SeatPlanSettings] = None,
) -> list[Seat]:
    """
    Create and bind one Seat per column slot of every block in `row`.

    Existing seats are left alone; call `clear_numbers` first for a clean
    renumber. Anything other than a RowGroup is ignored with a warning.
    """
    if not isinstance(row, RowGroup):
        logger.warning("assign_numbers needs a row group, got {}", type(row).__name__)
        return []
    settings = settings or get_settings()
    price = settings.default_price if default_price is None else default_price

    blocks = model.blocks_of(row)
    slots = plan_numbers(blocks, policy)
    by_id = {b.id: b for b in blocks}

    seats: list[Seat] = []
    for slot in slots:
        block = by_id[slot.block_id]
        seat = make_seat(slot, row, price=price, settings=settings)
        model.add(seat)
        bind_host(seat, block, CellIndex(0, slot.column_index))
        seats.append(seat)

    logger.info(
        "numbered row {} ({}) with policy {}: {} seats over {} blocks",
        row.row_number,
        row.row_name,
        NumberingPolicy(policy).value,
        len(seats),
        len(blocks),
    )
    return seats


def clear_numbers(model: VenueModel, row: object) -> int:
    """Remove every seat attached to the blocks of `row`; returns the count."""
    if not isinstance(row, RowGroup):
        logger.warning("clear_numbers needs a row group, got {}", type(row).__name__)
        return 0
    removed = 0
    for block in model.blocks_of(row):
        attached = {e.id: e for e in model.children_of(block.id) + model.hosted_by(block.id)}
        for child in attached.values():
            if isinstance(child, Seat):
                model.remove(child)
                removed += 1
    logger.info("cleared {} seats from row {}", removed, row.row_name)
    return removed
