from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

INVALID_AIRCRAFT_ID: int = -1


class PositionReport(BaseModel):
    """Body of ``POST /api/position``.

    Field names follow the ingestion service's camelCase JSON; Python code
    uses the snake_case attributes.
    """

    model_config = ConfigDict(populate_by_name=True)

    aircraft_id: int = Field(alias="aircraftId")
    altitude: int
    latitude: float
    longitude: float
    heading: float
    timestamp: int
    """Milliseconds since the Unix epoch."""

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)
