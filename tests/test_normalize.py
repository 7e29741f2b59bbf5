"""Tests for grower/market normalization."""

import numpy as np
import pandas as pd

from diversity.normalize import expand_items, normalize_growers, normalize_markets, normalize_vendors, split_items


def test_split_items_accepts_lists_and_delimited_strings():
    assert split_items(["corn ", " bean", ""]) == ["corn", "bean"]
    assert split_items(np.array(["kale", "chard"])) == ["kale", "chard"]
    assert split_items("apple, pear; plum") == ["apple", "pear", "plum"]


def test_split_items_malformed_is_empty():
    assert split_items(None) == []
    assert split_items(float("nan")) == []
    assert split_items(42) == []
    assert split_items([None, 3, "  "]) == []


def test_normalize_growers_trims_and_renames(raw_growers):
    out = normalize_growers(raw_growers)
    assert list(out.columns) == ["grower", "markets", "vegetables", "fruits", "herbs"]
    assert out["grower"].tolist() == ["A", "B", "C", "D"]


def test_normalize_growers_drops_blank_names_and_fills_missing_columns():
    raw = pd.DataFrame({"Vendor Name": ["  ", "Farm X"], "Vegetables": [["corn"], ["beet"]]})
    out = normalize_growers(raw)
    assert out["grower"].tolist() == ["Farm X"]
    assert out["herbs"].isna().all()


def test_expand_items_keeps_growers_without_items(growers):
    herbs = expand_items(growers, "herbs")
    assert set(herbs["grower"]) == {"A", "B", "C", "D"}
    assert herbs[herbs["grower"] == "A"]["item"].tolist() == ["mint"]
    for name in ["B", "C", "D"]:
        rows = herbs[herbs["grower"] == name]
        assert len(rows) == 1
        assert rows["item"].isna().all()


def test_expand_items_trims_and_collapses_duplicates():
    growers = pd.DataFrame({"grower": ["A"], "markets": [[" M1", "M1 ", "M2"]]})
    out = expand_items(growers, "markets")
    assert sorted(out["item"].tolist()) == ["M1", "M2"]


def test_normalize_markets_and_vendors_rename_and_trim():
    markets = normalize_markets(pd.DataFrame({"Market Name": [" M1 ", None], "County Name": ["LANCASTER ", "YORK"]}))
    assert markets.to_dict(orient="records") == [{"market": "M1", "county": "LANCASTER"}]

    vendors = normalize_vendors(pd.DataFrame({"Vendor Name": ["B", "B", "Z "], "Market": ["M4", "M4", None]}))
    assert vendors.to_dict(orient="records") == [{"grower": "B", "market": "M4"}]


def test_missing_required_columns_yield_empty_frames():
    assert normalize_markets(pd.DataFrame({"foo": [1]})).empty
    assert normalize_vendors(pd.DataFrame({"grower": ["A"]})).empty
    assert normalize_growers(pd.DataFrame({"foo": [1]})).empty


def test_null_like_names_are_kept_as_text():
    raw = pd.DataFrame({"grower": ["None", None, "  "], "herbs": [["nan", " NA "], ["mint"], ["sage"]]})
    growers = normalize_growers(raw)
    assert growers["grower"].tolist() == ["None"]
    herbs = expand_items(growers, "herbs")
    assert sorted(herbs["item"].tolist()) == ["NA", "nan"]

    markets = normalize_markets(pd.DataFrame({"market": ["<NA>", "M2"], "county": ["None", pd.NA]}))
    assert markets["market"].tolist() == ["<NA>", "M2"]
    assert markets["county"].iloc[0] == "None"
    assert pd.isna(markets["county"].iloc[1])
