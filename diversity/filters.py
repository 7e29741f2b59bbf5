from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

import pandas as pd

PLACEHOLDER = "Please select"

# Bottom-to-top stacking order of the bar segments.
STACK_ORDER = ("herb", "fruit", "vegetable")

COUNT_COLUMNS = {
    "vegetable": "n_veggie",
    "fruit": "n_fruit",
    "herb": "n_herb",
}
DEDUP_COLUMNS = ["grower", "n_veggie", "n_fruit", "n_herb", "n_product"]


@dataclass(frozen=True)
class Selection:
    county: Optional[str] = None
    market: Optional[str] = None


def normalize_choice(value: object) -> Optional[str]:
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return None
    s = str(value).strip()
    if not s or s == PLACEHOLDER:
        return None
    return s


def normalize_selection(raw: dict | Selection | None) -> Selection:
    if isinstance(raw, Selection):
        raw = {"county": raw.county, "market": raw.market}
    raw = raw or {}
    county = normalize_choice(raw.get("county"))
    market = normalize_choice(raw.get("market"))
    # A market only means something inside a county.
    if county is None:
        market = None
    return Selection(county=county, market=market)


def with_placeholder(values: Iterable[object]) -> List[str]:
    cleaned = sorted({s for s in (normalize_choice(v) for v in values) if s is not None})
    return [PLACEHOLDER] + cleaned
