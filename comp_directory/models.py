from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Dict, List, Literal, Optional

# One spreadsheet row: header (case preserved) -> cell text
RawRecord = Dict[str, str]

SearchMode = Literal["exact", "fuzzy"]


class CanonicalRecord(BaseModel):
    id: str
    title: str
    date: str = ""
    type: str = ""
    overview: str = ""
    details: str = ""
    link: str = ""
    raw: RawRecord = Field(default_factory=dict)


class ScoredRecord(BaseModel):
    record: RawRecord
    score: int = Field(default=0, ge=0)
    is_fuzzy_only: bool = False
    position: int = -1  # index in the loaded batch


class DetailLine(BaseModel):
    label: str
    header: str

    @field_validator("label", "header")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not (v or "").strip():
            raise ValueError("must be a non-empty string")
        return v


class SectionEntry(DetailLine):
    visibility: Literal["public", "admin"] = "public"


class DirectoryConfig(BaseModel):
    field_map: Dict[str, List[str]]
    detail_fallbacks: List[DetailLine] = Field(default_factory=list)
    sections: Dict[str, List[SectionEntry]] = Field(default_factory=dict)
    type_field: str = "type"
    untitled: str = "Untitled competition"

    @field_validator("field_map")
    @classmethod
    def _headers_present(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        for logical, headers in v.items():
            if not (logical or "").strip():
                raise ValueError("field map contains a blank logical name")
            if not headers:
                raise ValueError(f"field '{logical}' has no candidate headers")
            if any(not (h or "").strip() for h in headers):
                raise ValueError(f"field '{logical}' has a blank candidate header")
        return v

    @field_validator("sections")
    @classmethod
    def _titles_present(cls, v: Dict[str, List[SectionEntry]]) -> Dict[str, List[SectionEntry]]:
        for title in v:
            if not (title or "").strip():
                raise ValueError("section title must be non-empty")
        return v


class PageInfo(BaseModel):
    page: int = 1
    total_pages: int = 1
    page_size: int = 10
    count: int = 0


class SectionLine(BaseModel):
    label: str
    html: str


class RenderItem(BaseModel):
    id: str
    title_html: str
    type: str = ""
    date: str = ""
    is_past: bool = False
    link: Optional[str] = None
    overview_html: str = ""
    details_html: str = ""
    fuzzy_only: bool = False
    sections: Dict[str, List[SectionLine]] = Field(default_factory=dict)


class RenderPayload(BaseModel):
    items: List[RenderItem] = Field(default_factory=list)
    page: PageInfo = Field(default_factory=PageInfo)
    query: str = ""
    mode: SearchMode = "fuzzy"
    category: str = ""
    categories: List[str] = Field(default_factory=list)


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)
    records: List[RawRecord] = Field(default_factory=list)
    results: List[ScoredRecord] = Field(default_factory=list)
    query: str = ""
    mode: SearchMode = "fuzzy"
    category: str = ""
    page: int = 1
    page_size: int = Field(default=10, ge=1)
    generation: int = 0
