from __future__ import annotations

import re
from typing import Iterable, List

import numpy as np
import pandas as pd

GROWER_COLUMNS = {
    "grower": "grower",
    "grower name": "grower",
    "grower_name": "grower",
    "vendor": "grower",
    "vendor name": "grower",
    "vendor_name": "grower",
    "name": "grower",
    "markets": "markets",
    "market": "markets",
    "market name": "markets",
    "market_name": "markets",
    "market names": "markets",
    "vegetables": "vegetables",
    "vegetable": "vegetables",
    "veggies": "vegetables",
    "fruits": "fruits",
    "fruit": "fruits",
    "herbs": "herbs",
    "herb": "herbs",
}

VENDOR_COLUMNS = {
    "grower": "grower",
    "grower name": "grower",
    "vendor": "grower",
    "vendor name": "grower",
    "vendor_name": "grower",
    "market": "market",
    "market name": "market",
    "market_name": "market",
}

MARKET_COLUMNS = {
    "market": "market",
    "market name": "market",
    "market_name": "market",
    "name": "market",
    "county": "county",
    "county name": "county",
    "county_name": "county",
}

ITEM_COLUMNS = ["markets", "vegetables", "fruits", "herbs"]
_SPLIT_RE = re.compile(r"[,;]")


def rename_columns(df: pd.DataFrame, mapping: dict) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]
    df = df.rename(columns=mapping)
    return df.loc[:, ~df.columns.duplicated()]


def trim_strings(series: pd.Series) -> pd.Series:
    series = series.astype("string").str.strip()
    return series.replace({"": pd.NA})


def split_items(value: object) -> List[str]:
    """Turn a list-valued or delimited cell into a list of trimmed item names."""
    if isinstance(value, (list, tuple, set, frozenset, np.ndarray, pd.Series)):
        raw: Iterable[object] = list(value)
    elif isinstance(value, str):
        raw = _SPLIT_RE.split(value)
    else:
        return []
    items = []
    for v in raw:
        if v is None or not isinstance(v, str):
            continue
        s = v.strip()
        if s:
            items.append(s)
    return items


def normalize_growers(raw: pd.DataFrame) -> pd.DataFrame:
    if raw is None or raw.empty:
        return pd.DataFrame(columns=["grower"] + ITEM_COLUMNS)
    df = rename_columns(raw, GROWER_COLUMNS)
    if "grower" not in df.columns:
        return pd.DataFrame(columns=["grower"] + ITEM_COLUMNS)
    for col in ITEM_COLUMNS:
        if col not in df.columns:
            df[col] = None
    df["grower"] = trim_strings(df["grower"])
    df = df.dropna(subset=["grower"])
    return df[["grower"] + ITEM_COLUMNS].reset_index(drop=True)


def normalize_vendors(raw: pd.DataFrame) -> pd.DataFrame:
    if raw is None or raw.empty:
        return pd.DataFrame(columns=["grower", "market"])
    df = rename_columns(raw, VENDOR_COLUMNS)
    if not {"grower", "market"}.issubset(df.columns):
        return pd.DataFrame(columns=["grower", "market"])
    for col in ["grower", "market"]:
        df[col] = trim_strings(df[col])
    df = df.dropna(subset=["grower", "market"]).drop_duplicates(subset=["grower", "market"])
    return df[["grower", "market"]].reset_index(drop=True)


def normalize_markets(raw: pd.DataFrame) -> pd.DataFrame:
    if raw is None or raw.empty:
        return pd.DataFrame(columns=["market", "county"])
    df = rename_columns(raw, MARKET_COLUMNS)
    if not {"market", "county"}.issubset(df.columns):
        return pd.DataFrame(columns=["market", "county"])
    for col in ["market", "county"]:
        df[col] = trim_strings(df[col])
    df = df.dropna(subset=["market"])
    return df[["market", "county"]].reset_index(drop=True)


def expand_items(growers: pd.DataFrame, column: str) -> pd.DataFrame:
    """One row per (grower, item) for ``column``.

    Growers with nothing in the column keep a single row with a null item.
    """
    if growers.empty or column not in growers.columns:
        return pd.DataFrame({"grower": pd.Series(dtype="string"), "item": pd.Series(dtype="string")})
    items = growers[["grower", column]].copy()
    items["item"] = items[column].apply(split_items)
    items = items.drop(columns=[column]).explode("item")
    items["item"] = trim_strings(items["item"])
    items = items.dropna(subset=["item"]).drop_duplicates(subset=["grower", "item"])

    all_growers = growers[["grower"]].drop_duplicates()
    out = all_growers.merge(items, on="grower", how="left")
    out["grower"] = out["grower"].astype("string")
    out["item"] = out["item"].astype("string")
    return out.reset_index(drop=True)
