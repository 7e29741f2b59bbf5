from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class SelectionModel(BaseModel):
    county: Optional[str] = None
    market: Optional[str] = None


class MetaListResponse(BaseModel):
    values: List[str] = Field(default_factory=list)
