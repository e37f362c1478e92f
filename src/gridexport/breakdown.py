from __future__ import annotations

from collections.abc import Iterable
from typing import Final

import pandas as pd

from .model import FlowRecord

BREAKDOWN_COLUMNS: Final[list[str]] = ["area_out", "area_in", "value", "export_mw"]


def border_breakdown(records: Iterable[FlowRecord], country: str) -> pd.DataFrame:
    rows = [
        {
            "area_out": r.area_out,
            "area_in": r.area_in,
            "value": r.value,
            "export_mw": r.signed_export(country),
        }
        for r in records
        if r.crosses_boundary(country)
    ]
    if not rows:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS)

    df = pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)
    out = (
        df.groupby(["area_out", "area_in"], sort=True)[["value", "export_mw"]]
        .sum()
        .reset_index()
    )
    return out[BREAKDOWN_COLUMNS]
