from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from seatplan.model import SeatStatus
from seatplan.numbering import NumberingPolicy
from seatplan.session import AlignMode


class Point2D(BaseModel):
    x: float
    y: float


class BlockCreate(Point2D):
    column_count: Optional[int] = Field(default=None, ge=0)


class BlockUpdate(BaseModel):
    column_count: int = Field(ge=0)


class MarkerCreate(Point2D):
    kind: Literal["seat", "follower"] = "seat"


class ShapeCreate(BaseModel):
    # List of [x,y] pairs
    points: list[tuple[float, float]] = Field(min_length=3)
    closed: bool = True


class RowCreate(BaseModel):
    block_ids: list[int] = Field(min_length=1)


class NumberRequest(BaseModel):
    policy: NumberingPolicy = NumberingPolicy.ascending
    default_price: Optional[float] = Field(default=None, ge=0)
    # Numbering never clears on its own; set this for a clean renumber.
    clear_first: bool = False


class DropRequest(Point2D):
    pass


class AlignRequest(BaseModel):
    element_ids: list[int] = Field(min_length=2)
    mode: AlignMode


class SeatStatusUpdate(BaseModel):
    seat_ids: list[int] = Field(min_length=1)
    status: SeatStatus


class SeatPriceUpdate(BaseModel):
    seat_ids: list[int] = Field(min_length=1)
    price: float = Field(ge=0)


class Notice(BaseModel):
    action: str
    message: str


class Snapshot(BaseModel):
    session_id: str
    locked: bool
    selection: list[int]
    elements: list[dict]
    notices: list[Notice]
