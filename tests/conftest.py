"""Shared fixtures: a handful of growers across two counties."""

import pandas as pd
import pytest

from diversity.aggregate import build_grower_table, county_choices
from diversity.normalize import normalize_growers, normalize_markets


@pytest.fixture
def raw_growers() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Grower": [" A ", "B", "C", "D"],
            "Markets": [["M1", "M2"], ["M2 "], "M3", []],
            "Vegetables": [["corn", "bean"], ["kale"], None, []],
            "Fruits": [[], ["apple", "pear"], "plum", None],
            "Herbs": [["mint"], [], None, None],
        }
    )


@pytest.fixture
def raw_markets() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Market Name": ["M1", "M2", "M3", "M4"],
            "County": ["LANCASTER", "LANCASTER", "YORK", "YORK"],
        }
    )


@pytest.fixture
def growers(raw_growers) -> pd.DataFrame:
    return normalize_growers(raw_growers)


@pytest.fixture
def markets(raw_markets) -> pd.DataFrame:
    return normalize_markets(raw_markets)


@pytest.fixture
def grower_table(growers, markets) -> pd.DataFrame:
    return build_grower_table(growers, markets)


@pytest.fixture
def data_ctx(grower_table) -> dict:
    return {
        "files": ["dashboard_snapshot.pkl"],
        "source": "snapshot",
        "grower_table": grower_table,
        "county_choices": county_choices(grower_table),
    }
