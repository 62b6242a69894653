"""Row and filter schemas for the lexical segment store.

These pydantic models describe what goes into the store (Segment), what comes
back out (SegmentRow, WorkCount, WorkRow) and how queries are scoped
(ScopeFilter).
"""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

CollectionType = Literal["tanakh", "mishnah", "bavli"]


class Segment(BaseModel):
    id: str
    type: CollectionType
    work: str
    ref: str
    normalized_ref: str
    lang: Literal["he"] = "he"
    source: str = "unknown"
    text: str


class SegmentRow(BaseModel):
    id: str
    type: str
    work: str
    ref: str
    normalized_ref: str
    lang: str
    source: str
    text_plain: str


class WorkCount(BaseModel):
    work: str
    count: int


class WorkRow(BaseModel):
    type: str
    work: str
    count: int


class ScopeFilter(BaseModel):
    type: Optional[str] = None
    work: Optional[str] = None
    work_in: Optional[List[str]] = Field(default=None)
    normalized_ref_prefix: Optional[str] = None


__all__ = ["CollectionType", "Segment", "SegmentRow", "WorkCount", "WorkRow", "ScopeFilter"]
