from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from patentos.models.patent import Patent
from patentos.models.session import SortMode


# --- Requests ---


class SearchRequest(BaseModel):
    query: str = Field(min_length=1, max_length=500)

    @field_validator("query")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("query must not be blank")
        return value


class SortRequest(BaseModel):
    mode: SortMode


# --- Responses ---


class SelectionResponse(BaseModel):
    patent: Patent
    analysis: str


class PriorArtResponse(BaseModel):
    patent: Patent
