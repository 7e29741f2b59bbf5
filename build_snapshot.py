"""Offline prep: build the grower table, write the dashboard snapshot and a static chart."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from diversity.charts import product_chart
from diversity.data import DATA_DIR, SNAPSHOT_PATH, build_snapshot, write_snapshot
from diversity.filters import Selection
from diversity.view import compute_view

logger = logging.getLogger("build_snapshot")

STATIC_CHART_PATH = DATA_DIR / "product_diversity.html"


def run(snapshot_path: Optional[Path] = None, chart_path: Optional[Path] = None) -> Path:
    snapshot = build_snapshot()
    out = write_snapshot(snapshot, snapshot_path or SNAPSHOT_PATH)

    view = compute_view(Selection(), snapshot["grower_table"])
    chart = product_chart(view, title="Number of products by grower")
    chart_path = Path(chart_path or STATIC_CHART_PATH)
    chart.save(str(chart_path))
    logger.info("wrote static chart %s (%d growers)", chart_path, view["grower"].nunique())
    return out


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run()
