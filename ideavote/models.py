from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Phase(str, Enum):
    PLANNING = "Planning"
    ACTION = "Action"
    INTEGRATION = "Integration"


class Idea(BaseModel):
    """
    One catalog card. Optional sections are None when the card omits them
    and must then be left out of any rendering.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    phase: Phase
    journey_phase: Optional[str] = None
    purpose: Optional[str] = None
    how_it_works: Optional[str] = None
    output: Optional[str] = None
    why_this_works: Optional[str] = None
    toolsets_used: Optional[List[str]] = None


class Selection(BaseModel):
    id: int = Field(..., examples=[3])
    title: Optional[str] = Field(None, examples=["Daily stand-up"])
    phase: Optional[Phase] = Field(None, examples=["Planning"])
    votes: int = Field(..., ge=1, examples=[2])


class VoteIn(BaseModel):
    """
    Submission body. voter and selections are optional at parse time so
    their absence is reported as a 400 by the service, not a schema error.
    """
    voter: Optional[str] = Field(None, examples=["Alice"])
    timestamp: Optional[str] = Field(None, examples=["2026-10-18T09:30:00.000Z"])
    selections: Optional[List[Selection]] = None


class VoteRecord(BaseModel):
    voter: str
    timestamp: Optional[str] = None
    selections: List[Selection]

    def to_stored(self) -> dict:
        # absent optional fields are omitted so a record reads back unchanged
        return self.model_dump(mode="json", exclude_none=True)


class SubmitAck(BaseModel):
    success: bool = True
    message: str = "Vote saved successfully"


class IdeaTally(BaseModel):
    """
    Aggregated result for one idea across all stored ballots.
    """
    id: int
    title: Optional[str] = None
    phase: Optional[Phase] = None
    total_stars: int = 0
    voters: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def voter_count(self) -> int:
        return len(self.voters)
