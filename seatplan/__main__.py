from __future__ import annotations

import argparse
import csv
import io
from pathlib import Path

from .config import get_settings
from .containment import resolve_host
from .errors import SeatPlanError
from .logger_config import configure_logging
from .model import GridBlock, RowGroup
from .numbering import NumberingPolicy
from .render import CSV_HEADER, render_row, seat_rows
from .session import EditorSession


def _add_row_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--blocks",
        type=int,
        nargs="+",
        required=True,
        metavar="COLUMNS",
        help="Column count of each block, left to right",
    )
    p.add_argument("--gap", type=float, default=40.0, help="Aisle width between blocks (default: 40)")


def build_row(session: EditorSession, counts: list[int], *, gap: float = 40.0) -> RowGroup:
    """Lay blocks out left to right on y=0 and group them into one row."""
    if any(c < 0 for c in counts):
        raise SeatPlanError("column counts must be >= 0")
    cell_width = session.settings.cell_width
    cursor = 0.0
    blocks: list[GridBlock] = []
    for count in counts:
        width = cell_width * count
        blocks.append(session.draw_block(cursor + width / 2.0, 0.0, column_count=count))
        cursor += width + gap
    session.select(*blocks)
    row = session.group()
    if row is None:
        raise SeatPlanError("could not group blocks into a row")
    return row


def cmd_number(args: argparse.Namespace) -> int:
    session = EditorSession()
    row = build_row(session, args.blocks, gap=args.gap)
    if args.row_name:
        row.row_name = args.row_name
    seats = session.number_row(args.policy, args.price)

    if args.format == "csv":
        buf = io.StringIO()
        w = csv.writer(buf)
        w.writerow(CSV_HEADER)
        w.writerows(seat_rows(session.model, row))
        text = buf.getvalue()
    else:
        text = render_row(session.model, row, cell_width=args.width) + "\n"

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", newline="", encoding="utf-8") as f:
            f.write(text)
        print(f"Numbered {len(seats)} seats into {out}")
    else:
        print(text, end="")
    return 0


def cmd_locate(args: argparse.Namespace) -> int:
    session = EditorSession()
    row = build_row(session, args.blocks, gap=args.gap)
    found = resolve_host((args.x, args.y), None, session.model.visible_top_to_bottom())
    if found is None:
        print("No container")
        return 1
    order = [b.id for b in sorted(session.model.blocks_of(row), key=lambda b: b.center_x)]
    where = f"block {order.index(found.host.id) + 1}" if found.host.id in order else f"element {found.host.id}"
    if found.cell is not None:
        where += f" R{found.cell.row_index}C{found.cell.column_index}"
    print(f"Found at {where}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="seatplan", description="Venue seat layout and numbering (CLI).")
    p.add_argument("--log-level", default=None, help="Log level (default: SEATPLAN_LOG_LEVEL or INFO)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_number = sub.add_parser("number", help="Number the seats of a row of blocks")
    _add_row_args(p_number)
    p_number.add_argument(
        "--policy",
        choices=[policy.value for policy in NumberingPolicy],
        default=NumberingPolicy.ascending.value,
    )
    p_number.add_argument("--row-name", help="Row name used in seat names (default: 1排)")
    p_number.add_argument("--price", type=float, help="Price of every created seat")
    p_number.add_argument("--format", choices=["ascii", "csv"], default="ascii")
    p_number.add_argument("--width", type=int, default=4, help="Cell width for ascii output")
    p_number.add_argument("--output", help="Write to this file instead of stdout")
    p_number.set_defaults(func=cmd_number)

    p_locate = sub.add_parser("locate", help="Show which block cell a point falls into")
    _add_row_args(p_locate)
    p_locate.add_argument("--x", type=float, required=True)
    p_locate.add_argument("--y", type=float, required=True)
    p_locate.set_defaults(func=cmd_locate)

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    configure_logging(args.log_level or get_settings().log_level)
    try:
        return int(args.func(args))
    except SeatPlanError as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
