from __future__ import annotations

from typing import Any, Dict

import pandas as pd

from diversity.filters import DEDUP_COLUMNS


def compute_debug(ctx: Dict[str, Any]) -> Dict[str, Any]:
    grower_table: pd.DataFrame = ctx.get("grower_table", pd.DataFrame()).copy()
    payload = {
        "source": ctx.get("source"),
        "files": list(ctx.get("files", [])),
        "row_counts": {
            "grower_table_rows": int(len(grower_table)),
            "growers": 0,
            "markets": 0,
            "counties": int(len(ctx.get("county_choices", []))),
        },
        "unmatched_markets": [],
        "growers_without_market": [],
        "zero_product_growers": [],
        "inconsistent_counts": [],
    }
    if grower_table.empty:
        return payload

    payload["row_counts"]["growers"] = int(grower_table["grower"].nunique())
    payload["row_counts"]["markets"] = int(grower_table["market"].nunique())

    unmatched = grower_table[grower_table["market"].notna() & grower_table["county"].isna()]
    if not unmatched.empty:
        top = unmatched.groupby("market")["grower"].nunique().reset_index(name="growers")
        payload["unmatched_markets"] = top.sort_values(["growers", "market"], ascending=[False, True]).to_dict(orient="records")

    no_market = grower_table[grower_table["market"].isna()]["grower"]
    payload["growers_without_market"] = sorted(str(g) for g in no_market.unique())

    zero = grower_table[grower_table["n_product"] == 0]["grower"]
    payload["zero_product_growers"] = sorted(str(g) for g in zero.unique())

    # Reported only; views still deduplicate on the full count tuple.
    variants = grower_table[DEDUP_COLUMNS].drop_duplicates().groupby("grower").size()
    payload["inconsistent_counts"] = sorted(str(g) for g in variants[variants > 1].index)
    return payload
