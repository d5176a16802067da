from __future__ import annotations

from typing import Optional

from .model import RowGroup, Seat, VenueModel

CSV_HEADER = ["block", "column_index", "column_number", "column_name", "row_column_name", "status", "price"]


def _cell(text: Optional[str], width: int) -> str:
    if not text:
        return ".".center(width)
    t = str(text)
    if len(t) > width:
        t = t[: max(0, width - 1)] + "…"
    return t.center(width)


def _seats_by_column(model: VenueModel, block_id: int) -> dict[int, Seat]:
    out: dict[int, Seat] = {}
    for e in model.hosted_by(block_id):
        if isinstance(e, Seat) and e.column_index is not None:
            out[e.column_index] = e
    return out


def render_row(model: VenueModel, row: RowGroup, *, cell_width: int = 4) -> str:
    """One line per row: blocks left to right, each as [ seat | seat | ... ]."""
    cell_width = max(3, int(cell_width))
    parts = []
    for block in sorted(model.blocks_of(row), key=lambda b: b.center_x):
        seats = _seats_by_column(model, block.id)
        cells = "|".join(
            _cell(seats[c].label if c in seats else None, cell_width) for c in range(block.column_count)
        )
        parts.append(f"[{cells}]")
    return f"{row.row_name}".ljust(cell_width + 2) + "  ".join(parts)


def seat_rows(model: VenueModel, row: RowGroup) -> list[list]:
    """CSV-ready records for every numbered seat in the row, in label order."""
    records = []
    for index, block in enumerate(sorted(model.blocks_of(row), key=lambda b: b.center_x)):
        for column_index, seat in sorted(_seats_by_column(model, block.id).items()):
            records.append(
                [
                    index,
                    column_index,
                    seat.column_number,
                    seat.column_name,
                    seat.row_column_name,
                    seat.status.value,
                    seat.price,
                ]
            )
    records.sort(key=lambda r: r[2])
    return records
