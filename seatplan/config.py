from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SeatPlanSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SEATPLAN_",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Seats created by the numbering engine
    default_price: float = 100
    seat_suffix: str = "号"
    row_suffix: str = "排"

    # Grid block geometry (editor units)
    default_column_count: int = 6
    cell_width: float = 20
    cell_height: float = 20
    cell_padding: float = 2
    cell_border: float = 1

    # Price tiers offered by the box office
    price_tiers: List[float] = [180, 280, 380, 480, 580, 680, 780, 880, 980, 1080]

    log_level: str = "INFO"

    @field_validator("price_tiers", mode="before")
    @classmethod
    def assemble_price_tiers(cls, v: str | List[float]) -> List[float]:
        if isinstance(v, str) and not v.startswith("["):
            return [float(i.strip()) for i in v.split(",") if i.strip()]
        return v

    @field_validator("default_column_count")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("default_column_count must be >= 0")
        return v


@lru_cache
def get_settings() -> SeatPlanSettings:
    return SeatPlanSettings()
