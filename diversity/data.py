from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from diversity.aggregate import GROWER_TABLE_COLUMNS, build_grower_table, county_choices
from diversity.normalize import normalize_growers, normalize_markets, normalize_vendors

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.environ.get("MARKET_DATA_DIR", Path(__file__).resolve().parents[1] / "data"))

GROWER_PATH = DATA_DIR / "growers.pkl"
VENDOR_PATH = DATA_DIR / "vendor_info.csv"
MARKET_PATH = DATA_DIR / "market_info.csv"
MARKET_XLSX = DATA_DIR / "market_info.xlsx"
SNAPSHOT_PATH = DATA_DIR / "dashboard_snapshot.pkl"

SNAPSHOT_KEYS = ("grower_table", "county_choices")


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(f), f.stat().st_mtime) for f in files if f.exists())


# ---------------- Loaders ----------------
def load_growers(path: Optional[Path] = None) -> pd.DataFrame:
    path = Path(path or GROWER_PATH)
    if not path.exists():
        logger.warning("grower dataset not found: %s", path)
        return normalize_growers(pd.DataFrame())
    raw = pd.read_pickle(path)
    if not isinstance(raw, pd.DataFrame):
        raw = pd.DataFrame(raw)
    return normalize_growers(raw)


def load_vendors(path: Optional[Path] = None) -> pd.DataFrame:
    path = Path(path or VENDOR_PATH)
    if not path.exists():
        return normalize_vendors(pd.DataFrame())
    return normalize_vendors(pd.read_csv(path, dtype=str, encoding="utf-8-sig", keep_default_na=False, na_values=[""]))


def load_markets(path: Optional[Path] = None) -> pd.DataFrame:
    if path is None:
        path = MARKET_XLSX if MARKET_XLSX.exists() else MARKET_PATH
    path = Path(path)
    if not path.exists():
        logger.warning("market directory not found: %s", path)
        return normalize_markets(pd.DataFrame())
    if path.suffix.lower() in {".xlsx", ".xlsm"}:
        raw = pd.read_excel(path, dtype=str, engine="openpyxl", keep_default_na=False, na_values=[""])
    else:
        raw = pd.read_csv(path, dtype=str, encoding="utf-8-sig", keep_default_na=False, na_values=[""])
    return normalize_markets(raw)


# ---------------- Snapshot ----------------
def build_snapshot(
    grower_path: Optional[Path] = None,
    vendor_path: Optional[Path] = None,
    market_path: Optional[Path] = None,
) -> Dict[str, object]:
    growers = load_growers(grower_path)
    vendors = load_vendors(vendor_path)
    markets = load_markets(market_path)
    grower_table = build_grower_table(growers, markets, vendors)
    logger.info(
        "built grower table: %d growers, %d rows, %d markets",
        len(growers),
        len(grower_table),
        len(markets),
    )
    return {"grower_table": grower_table, "county_choices": county_choices(grower_table)}


def write_snapshot(snapshot: Dict[str, object], path: Optional[Path] = None) -> Path:
    path = Path(path or SNAPSHOT_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {key: snapshot[key] for key in SNAPSHOT_KEYS}
    pd.to_pickle(payload, path)
    logger.info("wrote snapshot %s", path)
    return path


def read_snapshot(path: Optional[Path] = None) -> Dict[str, object]:
    path = Path(path or SNAPSHOT_PATH)
    payload = pd.read_pickle(path)
    grower_table = payload.get("grower_table")
    if not isinstance(grower_table, pd.DataFrame):
        grower_table = pd.DataFrame(columns=GROWER_TABLE_COLUMNS)
    choices = [str(c) for c in (payload.get("county_choices") or [])]
    return {"grower_table": grower_table, "county_choices": choices}


# ---------------- Public API (Streamlit + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_snapshot_cached(files_sig: Tuple[Tuple[str, float], ...]) -> Dict[str, object]:
    path = Path(files_sig[0][0])
    return {"files": [path.name], "source": "snapshot", **read_snapshot(path)}


@lru_cache(maxsize=4)
def _load_sources_cached(files_sig: Tuple[Tuple[str, float], ...]) -> Dict[str, object]:
    return {"files": [Path(name).name for name, _ in files_sig], "source": "raw", **build_snapshot()}


def load_dashboard_data(snapshot_path: Optional[Path] = None) -> Dict[str, object]:
    snapshot_path = Path(snapshot_path or SNAPSHOT_PATH)
    if snapshot_path.exists():
        return _load_snapshot_cached(file_signature([snapshot_path]))
    sources = [GROWER_PATH, VENDOR_PATH, MARKET_XLSX, MARKET_PATH]
    if not GROWER_PATH.exists():
        return {
            "files": [],
            "source": "none",
            "grower_table": pd.DataFrame(columns=GROWER_TABLE_COLUMNS),
            "county_choices": [],
        }
    logger.info("snapshot %s missing, building from raw sources", snapshot_path)
    return _load_sources_cached(file_signature(sources))
