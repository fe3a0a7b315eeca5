"""Pydantic schemas for the study plan API."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PlanRequest(BaseModel):
    index: Optional[str] = Field(default=None, description="Book index or table of contents.")
    goal: Optional[str] = Field(default=None, description="Free-text learning goal.")


class PlanResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    plan: str
    suggested_sprints: Optional[int] = Field(default=None, ge=1, alias="suggestedSprints")
