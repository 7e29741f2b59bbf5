from __future__ import annotations

from functools import reduce
from typing import List, Optional

import pandas as pd

from diversity.filters import COUNT_COLUMNS
from diversity.normalize import expand_items

CATEGORY_SOURCE = {
    "vegetable": "vegetables",
    "fruit": "fruits",
    "herb": "herbs",
}
GROWER_TABLE_COLUMNS = ["grower", "market", "county", "n_veggie", "n_fruit", "n_herb", "n_product"]


def count_by_category(normalized_rows: pd.DataFrame, category: str) -> pd.DataFrame:
    """Distinct non-null items per grower; growers with only a null item count 0."""
    count_col = COUNT_COLUMNS[category]
    if normalized_rows.empty:
        return pd.DataFrame({"grower": pd.Series(dtype="string"), count_col: pd.Series(dtype="int64")})
    counts = normalized_rows.groupby("grower", sort=True)["item"].nunique(dropna=True).reset_index(name=count_col)
    counts[count_col] = counts[count_col].astype("int64")
    return counts


def combine_counts(tables: List[pd.DataFrame]) -> pd.DataFrame:
    # Full outer join so a grower missing from any one table still gets a zero there.
    counts = reduce(lambda left, right: left.merge(right, on="grower", how="outer"), tables)
    count_cols = list(COUNT_COLUMNS.values())
    counts[count_cols] = counts[count_cols].fillna(0).astype("int64")
    counts["n_product"] = counts[count_cols].sum(axis=1).astype("int64")
    return counts.sort_values("grower").reset_index(drop=True)


def count_products(growers: pd.DataFrame) -> pd.DataFrame:
    return combine_counts(
        [
            count_by_category(expand_items(growers, CATEGORY_SOURCE[category]), category)
            for category in ["vegetable", "fruit", "herb"]
        ]
    )


def grower_markets(growers: pd.DataFrame, vendors: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    pairs = expand_items(growers, "markets").rename(columns={"item": "market"})
    if vendors is not None and not vendors.empty and not pairs.empty:
        extra = vendors[vendors["grower"].isin(set(pairs["grower"].dropna()))][["grower", "market"]]
        pairs = pd.concat([pairs, extra.astype("string")], ignore_index=True)
        has_market = set(pairs.dropna(subset=["market"])["grower"])
        pairs = pairs[pairs["market"].notna() | ~pairs["grower"].isin(has_market)]
        pairs = pairs.drop_duplicates(subset=["grower", "market"])
    return pairs.reset_index(drop=True)


def join_county(grower_market_rows: pd.DataFrame, market_lookup: pd.DataFrame) -> pd.DataFrame:
    """Attach county by exact market name; unmatched markets get a null county."""
    # First listed county wins; rows without a county never shadow a later one.
    lookup = market_lookup[["market", "county"]].dropna(subset=["market", "county"])
    lookup = lookup.drop_duplicates(subset=["market"], keep="first")
    lookup = lookup.astype("string")
    rows = grower_market_rows.copy()
    rows["market"] = rows["market"].astype("string")
    return rows.merge(lookup, on="market", how="left", validate="many_to_one")


def build_grower_table(
    growers: pd.DataFrame,
    markets: pd.DataFrame,
    vendors: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    if growers.empty:
        return pd.DataFrame(columns=GROWER_TABLE_COLUMNS)
    counts = count_products(growers)
    located = join_county(grower_markets(growers, vendors), markets)
    table = located.merge(counts, on="grower", how="left", validate="many_to_one")
    count_cols = ["n_veggie", "n_fruit", "n_herb", "n_product"]
    table[count_cols] = table[count_cols].fillna(0).astype("int64")
    return table[GROWER_TABLE_COLUMNS].sort_values(["grower", "market"], na_position="last").reset_index(drop=True)


def county_choices(grower_table: pd.DataFrame) -> List[str]:
    if grower_table.empty or "county" not in grower_table.columns:
        return []
    return sorted(str(c) for c in grower_table["county"].dropna().unique())
