from __future__ import annotations

from pydantic import BaseModel, Field


class ExportReading(BaseModel):
    curr_export: float = Field(..., description="Net export in MW, positive when exporting")
    last_update: int | None = Field(
        None, ge=0, description="Seconds since the last successful fetch"
    )
