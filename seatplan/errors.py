from __future__ import annotations


class SeatPlanError(Exception):
    pass


class GeometryError(SeatPlanError):
    pass


class UnknownElementError(SeatPlanError):
    def __init__(self, element_id: int):
        super().__init__(f"element not found: {element_id}")
        self.element_id = element_id
