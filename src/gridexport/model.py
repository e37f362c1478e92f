from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

# Statnett reports SE4 -> DK2 with the opposite sign of every other
# interconnector and nobody has documented why. Negate it exactly as observed.
REVERSED_PAIRS: Final[frozenset[tuple[str, str]]] = frozenset({("SE4", "DK2")})


class FlowRecord(BaseModel):
    """One directed physical flow between two price areas, as reported by the feed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, strict=True)

    area_out: str = Field(..., alias="OutAreaElspotId")
    area_in: str = Field(..., alias="InAreaElspotId")
    value: float = Field(
        ..., alias="Value", allow_inf_nan=False, description="MW, origin -> destination"
    )

    @field_validator("value", mode="before")
    @classmethod
    def _not_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("Value must be a number, not a boolean.")
        return v

    def crosses_boundary(self, country: str) -> bool:
        return self.area_out.startswith(country) != self.area_in.startswith(country)

    def signed_export(self, country: str) -> float:
        """Contribution to net export from ``country``; filter on crosses_boundary first."""
        if (self.area_out, self.area_in) in REVERSED_PAIRS:
            return -self.value
        if self.area_in.startswith(country):
            return -self.value
        return self.value


_FLOW_LIST: Final[TypeAdapter[list[FlowRecord]]] = TypeAdapter(list[FlowRecord])


def parse_records(payload: Any) -> list[FlowRecord]:
    return _FLOW_LIST.validate_python(payload)


def net_export(records: Iterable[FlowRecord], country: str) -> float:
    # fsum is exactly rounded, so the result does not depend on feed order.
    return math.fsum(r.signed_export(country) for r in records if r.crosses_boundary(country))
