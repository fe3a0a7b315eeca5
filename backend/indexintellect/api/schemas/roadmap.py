"""Pydantic schemas for the sprint roadmap API."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class RoadmapRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    study_plan: str = Field(..., alias="studyPlan", min_length=1)
    sprints: int = Field(..., ge=1)


class Task(BaseModel):
    id: str
    title: str
    description: str = ""
    completed: bool = False


class RoadmapResponse(BaseModel):
    tasks: List[Task] = Field(default_factory=list)
