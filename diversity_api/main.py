from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
import uvicorn
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from diversity.data import load_dashboard_data
from diversity.filters import with_placeholder
from diversity.quality import compute_debug
from diversity.view import compute_diversity, compute_view, market_choices
from diversity_api.schemas import MetaListResponse, SelectionModel

app = FastAPI(title="Market Diversity API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(name: str, exc: Exception) -> JSONResponse:
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/counties", response_model=MetaListResponse)
def meta_counties():
    try:
        data_ctx = load_dashboard_data()
        return _json({"values": with_placeholder(data_ctx.get("county_choices", []))})
    except Exception as exc:
        return _error("meta_counties", exc)


@app.get("/meta/markets", response_model=MetaListResponse)
def meta_markets(county: str = Query(default="")):
    try:
        data_ctx = load_dashboard_data()
        grower_table: pd.DataFrame = data_ctx.get("grower_table", pd.DataFrame())
        return _json({"values": market_choices(grower_table, county)})
    except Exception as exc:
        return _error("meta_markets", exc)


@app.post("/view")
def view(selection: SelectionModel):
    try:
        data_ctx = load_dashboard_data()
        return _json(compute_diversity(selection.model_dump(), data_ctx))
    except Exception as exc:
        return _error("view", exc)


@app.get("/debug")
def debug():
    try:
        return _json(compute_debug(load_dashboard_data()))
    except Exception as exc:
        return _error("debug", exc)


@app.post("/export")
def export_view(selection: SelectionModel):
    data_ctx = load_dashboard_data()
    grower_table: pd.DataFrame = data_ctx.get("grower_table", pd.DataFrame())
    export_df = compute_view(selection.model_dump(), grower_table)
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=product_diversity.csv"},
    )


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
