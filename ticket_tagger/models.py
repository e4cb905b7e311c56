"""
Data models for the Ticket Tagger.

Uses Pydantic for data validation and serialization.
"""

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrainingExample(BaseModel):
    """A labeled reference text the classifier scores tickets against."""

    text: str = Field(..., description="Example ticket text")
    label: str = Field(..., min_length=1, description="Tag assigned to matching tickets")

    model_config = {"frozen": True}


class Ticket(BaseModel):
    """A support ticket identified by an opaque id."""

    id: str = Field(..., min_length=1, description="Ticket identifier")
    content: str = Field(default="", description="Free-text ticket content")

    model_config = {"frozen": True}


class ClassificationResult(BaseModel):
    """
    Result of classifying a single ticket.

    Attributes:
        label: Label of the best-scoring training example
        score: Similarity score of that example
        reasoning: Human-readable justification sent along with the tag
    """

    label: str = Field(..., description="Selected tag")
    score: float = Field(..., description="TF-IDF similarity score")
    reasoning: str = Field(default="", description="Explanation for the tag")

    model_config = {"frozen": True}

    @field_validator("score")
    @classmethod
    def validate_score(cls, v: float) -> float:
        """Reject NaN and infinite scores."""
        if not math.isfinite(v):
            raise ValueError("score must be a finite number")
        return v


class TagRequest(BaseModel):
    """JSON body of a tagging request."""

    ticket_id: str = Field(..., alias="ticketId")
    tags: list[str] = Field(..., min_length=1)
    reasoning: str = Field(default="")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the wire field names."""
        return self.model_dump(by_alias=True)


class TagOutcome(BaseModel):
    """Outcome of a tagging request, returned instead of raising."""

    ticket_id: str
    success: bool
    status_code: Optional[int] = None
    payload: Any = None
    error: Optional[str] = None

    model_config = {"frozen": True}

    def describe(self) -> str:
        """Best-available detail for logging."""
        if self.success:
            return str(self.payload)
        if self.payload not in (None, ""):
            return str(self.payload)
        return self.error or "unknown error"
