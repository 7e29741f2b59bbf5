from __future__ import annotations

from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd

from diversity.filters import STACK_ORDER

alt.data_transformers.disable_max_rows()

CATEGORY_COLORS = {
    "vegetable": "#2e7d32",
    "fruit": "#ef6c00",
    "herb": "#8e24aa",
}


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def grower_order(view: pd.DataFrame) -> List[str]:
    if "grower" not in view.columns:
        return []
    if isinstance(view["grower"].dtype, pd.CategoricalDtype):
        return [str(g) for g in view["grower"].cat.categories]
    return [str(g) for g in view["grower"].drop_duplicates()]


def product_chart(view: pd.DataFrame, *, interactive: bool = False, title: Optional[str] = None) -> alt.Chart:
    """Horizontal stacked bars of product counts per grower.

    ``view`` is the tidy frame from ``compute_view``; growers arrive ascending
    by total so the largest grower is drawn at the top.
    """
    data = pd.DataFrame(
        {
            "grower": view.get("grower", pd.Series(dtype=str)).astype(str),
            "category": view.get("category", pd.Series(dtype=str)).astype(str),
            "value": pd.to_numeric(view.get("value", pd.Series(dtype="int64")), errors="coerce"),
        }
    )
    data["stack_order"] = data["category"].map({c: i for i, c in enumerate(STACK_ORDER)})

    encoding = dict(
        x=alt.X("value:Q", title="Number of Products", stack="zero", axis=alt.Axis(tickMinStep=1, format="d")),
        y=alt.Y("grower:N", title="Grower", sort=list(reversed(grower_order(view)))),
        color=alt.Color(
            "category:N",
            title="Product Type",
            scale=alt.Scale(domain=list(CATEGORY_COLORS), range=list(CATEGORY_COLORS.values())),
        ),
        order=alt.Order("stack_order:Q", sort="ascending"),
    )
    chart = alt.Chart(data).mark_bar()
    if interactive:
        hover = alt.selection_point(fields=["category"], on="mouseover", empty="all")
        chart = chart.encode(
            **encoding,
            opacity=alt.condition(hover, alt.value(1), alt.value(0.5)),
            tooltip=[
                alt.Tooltip("grower:N", title="Grower"),
                alt.Tooltip("category:N", title="Product Type"),
                alt.Tooltip("value:Q", title="Count", format="d"),
            ],
        ).add_params(hover)
    else:
        chart = chart.encode(**encoding)
    if title:
        chart = chart.properties(title=title)
    return chart
