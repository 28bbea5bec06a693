"""Pydantic schemas for the weekly digest payloads."""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

MAX_ARTICLES = 50


class ArticleReference(BaseModel):
    """A single article link returned to callers."""

    model_config = ConfigDict(extra="ignore")

    url: StrictStr
    title: str = ""

    @field_validator("url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        if not value.startswith("http"):
            raise ValueError("url must start with http")
        return value

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class DigestResult(BaseModel):
    """Response body of ``GET /api/weekly``."""

    articles: List[ArticleReference] = Field(default_factory=list, max_length=MAX_ARTICLES)


class UpstreamDigestPayload(BaseModel):
    """Loose top-level shape of the model output.

    Items are validated one at a time later so that a single bad entry does
    not throw away the whole list.
    """

    model_config = ConfigDict(extra="ignore")

    articles: List[Any] = Field(default_factory=list)

    @field_validator("articles", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> List[Any]:
        return value if isinstance(value, list) else []

