from __future__ import annotations

from dataclasses import asdict
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from seatplan.config import get_settings
from seatplan.errors import GeometryError
from seatplan.geometry import validate_polygon
from seatplan.logger_config import configure_logging
from seatplan.model import Element, GridBlock, RowGroup, Seat, ShapeNode, element_to_dict
from seatplan.numbering import clear_numbers
from seatplan.session import EditorSession

from .schemas import (
    AlignRequest,
    BlockCreate,
    BlockUpdate,
    DropRequest,
    MarkerCreate,
    NumberRequest,
    RowCreate,
    SeatPriceUpdate,
    SeatStatusUpdate,
    ShapeCreate,
    Snapshot,
)
from .store import create_session, drop_session, get_session


app = FastAPI(title="Seat Plan Editor API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup() -> None:
    configure_logging(get_settings().log_level)


def _editor(sid: str) -> EditorSession:
    session = get_session(sid)
    if session is None:
        raise HTTPException(status_code=404, detail="session not found")
    return session


def _element(session: EditorSession, element_id: int, kind: type | None = None) -> Element:
    element = session.model.get(element_id)
    if element is None or (kind is not None and not isinstance(element, kind)):
        name = kind.__name__ if kind is not None else "element"
        raise HTTPException(status_code=404, detail=f"{name} not found")
    return element


def _notices(session: EditorSession) -> list[dict]:
    return [asdict(n) for n in session.pop_notices()]


def _seats(session: EditorSession, seat_ids: list[int]) -> list[Seat]:
    return [_element(session, seat_id, Seat) for seat_id in seat_ids]


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.post("/sessions")
def open_session() -> dict:
    sid, _ = create_session()
    logger.info("opened editor session {}", sid)
    return {"id": sid}


@app.delete("/sessions/{sid}")
def close_session(sid: str) -> dict:
    if not drop_session(sid):
        raise HTTPException(status_code=404, detail="session not found")
    return {"deleted": True}


@app.put("/sessions/{sid}/lock")
def set_lock(locked: bool, session: EditorSession = Depends(_editor)) -> dict:
    session.locked = locked
    return {"locked": session.locked}


@app.post("/sessions/{sid}/blocks")
def create_block(payload: BlockCreate, session: EditorSession = Depends(_editor)) -> dict:
    block = session.draw_block(payload.x, payload.y, payload.column_count)
    return element_to_dict(block)


@app.put("/sessions/{sid}/blocks/{block_id}")
def resize_block(block_id: int, payload: BlockUpdate, session: EditorSession = Depends(_editor)) -> dict:
    block = _element(session, block_id, GridBlock)
    session.select(block)
    session.resize_block(payload.column_count)
    return {**element_to_dict(block), "notices": _notices(session)}


@app.post("/sessions/{sid}/markers")
def create_marker(payload: MarkerCreate, session: EditorSession = Depends(_editor)) -> dict:
    marker = session.add_marker(payload.x, payload.y, payload.kind)
    return element_to_dict(marker)


@app.post("/sessions/{sid}/shapes")
def create_shape(payload: ShapeCreate, session: EditorSession = Depends(_editor)) -> dict:
    pts = [(float(x), float(y)) for (x, y) in payload.points]
    try:
        validate_polygon(pts, name="shape polygon")
    except GeometryError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    shape = session.add_shape(pts, closed=payload.closed)
    return element_to_dict(shape)


@app.post("/sessions/{sid}/shapes/{shape_id}/mirror")
def mirror_shape(shape_id: int, axis: Literal["x", "y"] = "x", session: EditorSession = Depends(_editor)) -> dict:
    shape = _element(session, shape_id, ShapeNode)
    session.select(shape)
    copy = session.mirror_x() if axis == "x" else session.mirror_y()
    if copy is None:
        raise HTTPException(status_code=400, detail="mirror failed")
    return element_to_dict(copy)


@app.post("/sessions/{sid}/rows")
def create_row(payload: RowCreate, session: EditorSession = Depends(_editor)) -> dict:
    blocks = [_element(session, bid, GridBlock) for bid in payload.block_ids]
    session.select(*blocks)
    row = session.group()
    if row is None:
        return {"id": None, "notices": _notices(session)}
    return element_to_dict(row)


@app.delete("/sessions/{sid}/rows/{row_id}")
def ungroup_row(row_id: int, session: EditorSession = Depends(_editor)) -> dict:
    row = _element(session, row_id, RowGroup)
    session.select(row)
    blocks = session.ungroup()
    return {"deleted": True, "block_ids": [b.id for b in blocks]}


@app.post("/sessions/{sid}/rows/{row_id}/numbers")
def number_row(row_id: int, payload: NumberRequest, session: EditorSession = Depends(_editor)) -> dict:
    row = _element(session, row_id, RowGroup)
    cleared = clear_numbers(session.model, row) if payload.clear_first else 0
    session.select(row)
    seats = session.number_row(payload.policy, payload.default_price)
    return {
        "cleared": cleared,
        "created": len(seats),
        "seats": [element_to_dict(s) for s in seats],
        "notices": _notices(session),
    }


@app.delete("/sessions/{sid}/rows/{row_id}/numbers")
def clear_row(row_id: int, session: EditorSession = Depends(_editor)) -> dict:
    row = _element(session, row_id, RowGroup)
    session.select(row)
    return {"deleted": session.clear_row()}


@app.post("/sessions/{sid}/elements/{element_id}/drop")
def drop_element(element_id: int, payload: DropRequest, session: EditorSession = Depends(_editor)) -> dict:
    element = _element(session, element_id)
    found = session.drop(element, payload.x, payload.y)
    out = {
        "host_id": found.host.id if found else None,
        "row_index": found.cell.row_index if found and found.cell else None,
        "column_index": found.cell.column_index if found and found.cell else None,
        "notices": _notices(session),
    }
    return out


@app.post("/sessions/{sid}/align")
def align_elements(payload: AlignRequest, session: EditorSession = Depends(_editor)) -> dict:
    elements = [_element(session, element_id) for element_id in payload.element_ids]
    session.select(*elements)
    moved = session.align(payload.mode)
    return {"moved": [e.id for e in moved], "notices": _notices(session)}


@app.put("/sessions/{sid}/seats/status")
def update_seat_status(payload: SeatStatusUpdate, session: EditorSession = Depends(_editor)) -> dict:
    seats = _seats(session, payload.seat_ids)
    session.select(*seats)
    updated = session.set_status(payload.status)
    return {"updated": len(updated), "notices": _notices(session)}


@app.put("/sessions/{sid}/seats/price")
def update_seat_price(payload: SeatPriceUpdate, session: EditorSession = Depends(_editor)) -> dict:
    seats = _seats(session, payload.seat_ids)
    session.select(*seats)
    updated = session.set_price(payload.price)
    return {"updated": len(updated), "notices": _notices(session)}


@app.get("/sessions/{sid}/snapshot")
def snapshot(sid: str, session: EditorSession = Depends(_editor)) -> Snapshot:
    return Snapshot(
        session_id=sid,
        locked=session.locked,
        selection=list(session.selection),
        elements=[element_to_dict(e) for e in session.model.elements()],
        notices=_notices(session),
    )
