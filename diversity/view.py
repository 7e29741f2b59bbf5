from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from diversity.charts import product_chart, to_vega_spec
from diversity.filters import (
    COUNT_COLUMNS,
    DEDUP_COLUMNS,
    PLACEHOLDER,
    STACK_ORDER,
    Selection,
    normalize_choice,
    normalize_selection,
    with_placeholder,
)

logger = logging.getLogger(__name__)

VIEW_COLUMNS = ["grower", "category", "value", "n_product"]

Listener = Callable[["SelectionState"], None]


def market_choices(grower_table: pd.DataFrame, county: Optional[str]) -> List[str]:
    county = normalize_choice(county)
    if county is None or grower_table.empty:
        return [PLACEHOLDER]
    in_county = grower_table[grower_table["county"] == county]
    return with_placeholder(in_county["market"].dropna().unique())


def _empty_view() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "grower": pd.Categorical([], categories=[], ordered=True),
            "category": pd.Categorical([], categories=list(STACK_ORDER), ordered=True),
            "value": pd.Series(dtype="int64"),
            "n_product": pd.Series(dtype="int64"),
        }
    )


def select_growers(selection: Selection, grower_table: pd.DataFrame) -> pd.DataFrame:
    """One row per grower for the current selection, counts only."""
    if grower_table.empty:
        return pd.DataFrame(columns=DEDUP_COLUMNS)
    if selection.county is None:
        rows = grower_table[grower_table["n_product"] > 0]
    elif selection.market is None:
        rows = grower_table[grower_table["county"] == selection.county]
    else:
        rows = grower_table[
            (grower_table["county"] == selection.county) & (grower_table["market"] == selection.market)
        ]
    # Rows are repeated per market upstream.
    return rows[DEDUP_COLUMNS].drop_duplicates().reset_index(drop=True)


def compute_view(selection: Selection | dict | None, grower_table: pd.DataFrame) -> pd.DataFrame:
    """Tidy (grower, category, value) rows, growers ascending by total products."""
    selection = normalize_selection(selection)
    growers = select_growers(selection, grower_table)
    if growers.empty:
        return _empty_view()

    growers = growers.sort_values(["n_product", "grower"], kind="mergesort")
    order = growers["grower"].astype(str).drop_duplicates().tolist()
    long = growers.melt(
        id_vars=["grower", "n_product"],
        value_vars=[COUNT_COLUMNS[c] for c in STACK_ORDER],
        var_name="category",
        value_name="value",
    )
    long["category"] = long["category"].map({v: k for k, v in COUNT_COLUMNS.items()})
    long["grower"] = pd.Categorical(long["grower"].astype(str), categories=order, ordered=True)
    long["category"] = pd.Categorical(long["category"], categories=list(STACK_ORDER), ordered=True)
    long["value"] = long["value"].astype("int64")
    long["n_product"] = long["n_product"].astype("int64")
    long = long.sort_values(["grower", "category"]).reset_index(drop=True)
    return long[VIEW_COLUMNS]


def compute_diversity(selection: Selection | dict | None, ctx: Dict[str, Any]) -> Dict[str, Any]:
    grower_table: pd.DataFrame = ctx.get("grower_table", pd.DataFrame(columns=DEDUP_COLUMNS))
    selection = normalize_selection(selection)
    view = compute_view(selection, grower_table)
    rows = view.assign(grower=view["grower"].astype(str), category=view["category"].astype(str))
    return {
        "selection": asdict(selection),
        "county_options": with_placeholder(ctx.get("county_choices", [])),
        "market_options": market_choices(grower_table, selection.county),
        "growers": [str(g) for g in view["grower"].cat.categories] if not view.empty else [],
        "rows": rows.to_dict(orient="records"),
        "charts": {"products": to_vega_spec(product_chart(view, interactive=True))},
    }


class SelectionState:
    """Current county/market selection and the views derived from it.

    Listeners are called synchronously after every transition, in
    subscription order, and read the derived values off the state.
    """

    def __init__(self, grower_table: pd.DataFrame, county_options: Optional[List[str]] = None) -> None:
        self.grower_table = grower_table
        self.county_options = with_placeholder(county_options or [])
        self.selection = Selection()
        self.market_options: List[str] = [PLACEHOLDER]
        self.view: pd.DataFrame = compute_view(self.selection, grower_table)
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def select_county(self, county: object) -> None:
        county = normalize_choice(county)
        self.selection = Selection(county=county, market=None)
        self.market_options = market_choices(self.grower_table, county)
        self._refresh()

    def select_market(self, market: object) -> None:
        self.selection = normalize_selection({"county": self.selection.county, "market": market})
        self._refresh()

    def _refresh(self) -> None:
        self.view = compute_view(self.selection, self.grower_table)
        logger.debug("selection %s -> %d view rows", self.selection, len(self.view))
        for listener in list(self._listeners):
            listener(self)
