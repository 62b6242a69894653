from typing import Literal, Optional
from pydantic import BaseModel, Field


class PlanRequest(BaseModel):
    query: str = Field(min_length=1, max_length=2000)


class AskRequest(BaseModel):
    query: str = Field(min_length=1, max_length=2000)
    limit: Optional[int] = Field(default=None, ge=1, le=500)
    offset: int = Field(default=0, ge=0)
    format: Literal["json", "text"] = "json"
    show_tanakh_text: bool = False
    show_mishnah_text: bool = False


class DetectQuotesRequest(BaseModel):
    text: str = Field(min_length=1, max_length=20000)
    link: bool = True
    top_k: Optional[int] = Field(default=None, ge=1, le=20)
