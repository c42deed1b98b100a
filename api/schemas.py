from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class TableStateModel(BaseModel):
    filters: Dict[str, Optional[str]] = Field(default_factory=dict)
    sort_key: Optional[str] = None
    sort_direction: Literal["ascending", "descending"] = "ascending"
    page: int = 1


class CustomFilterModel(BaseModel):
    type: str = "select"
    options: List[str]
    label: Optional[str] = None


class ReportMetaModel(BaseModel):
    key: str
    title: str
    short_title: str
    icon: str
    exclude_filters: List[str] = Field(default_factory=list)
    custom_filters: Dict[str, CustomFilterModel] = Field(default_factory=dict)
    header_note: Optional[str] = None


class ReportListResponse(BaseModel):
    reports: List[ReportMetaModel]
    default: str
