"""
Pydantic v2 models for slide records and the parse response envelope.

Field names follow the editor's JSON (`coreIdea`, `usedAI`, ...); Python code
uses the snake_case attributes.
"""
from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Slide(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    core_idea: str = Field(..., alias="coreIdea")
    arguments: List[str] = Field(default_factory=list)


class ParseMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    used_ai: bool = Field(..., alias="usedAI")
    parse_method: str = Field(..., alias="parseMethod", description="direct-ai | proxied-ai | rule-fallback")
    api_call_time: str = Field(..., alias="apiCallTime")
    quality: str = Field(..., description="high | medium")
    timed_out: bool = Field(default=False, alias="timedOut")
    reason: Optional[str] = Field(default=None, description="Why the rule-based path ran")
    elapsed_ms: Optional[int] = Field(default=None, alias="elapsedMs")
    text_length: int = Field(default=0, alias="textLength")
    slide_count: int = Field(default=0, alias="slideCount")
    environment: str = "development"
    transport: Optional[str] = None


class ParseOutcome(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    slides: List[Slide]
    count: int
    metadata: ParseMetadata
    message: str
    # Visited orchestrator states; diagnostic only
    trail: List[str] = Field(default_factory=list, exclude=True)

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True)
