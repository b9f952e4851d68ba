"""Pydantic request models for FastAPI endpoints."""

from typing import Optional

from pydantic import BaseModel, Field

MAX_RESULT_LIMIT = 100


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    limit: Optional[int] = Field(None, ge=0, le=MAX_RESULT_LIMIT)


class PatternFiltersRequest(BaseModel):
    repo: Optional[str] = Field(None, description="owner/repo")
    user: Optional[str] = None
    stars: Optional[int] = Field(None, ge=0)
    forks: Optional[int] = Field(None, ge=0)


class PatternAnalyzerRequest(BaseModel):
    code_pattern: str = Field(..., min_length=1)
    language: Optional[str] = None
    filters: Optional[PatternFiltersRequest] = None
    limit: Optional[int] = Field(None, ge=0, le=MAX_RESULT_LIMIT)
