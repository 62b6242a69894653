from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class QuoteMethod(str, Enum):
    INTRO_WORD = "INTRO_WORD"
    QUOTATION_MARKS = "QUOTATION_MARKS"


class Confidence(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


CONFIDENCE_RANK = {
    Confidence.HIGH: 3,
    Confidence.MEDIUM: 2,
    Confidence.LOW: 1,
}


class QuoteVerdict(str, Enum):
    CONFIRMED = "CONFIRMED"
    UNCONFIRMED = "UNCONFIRMED"


class QuoteCandidate(BaseModel):
    """A span of rabbinic text suspected of quoting Tanakh.

    ``start``/``end`` are offsets into the scanned segment, end exclusive.
    """

    model_config = ConfigDict(frozen=True)

    method: QuoteMethod
    start: int
    end: int
    raw_text: str
    normalized_text: str
    signal: str
    confidence: Confidence

    def overlaps(self, other: "QuoteCandidate") -> bool:
        return not (self.end <= other.start or self.start >= other.end)


class QuoteLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    tanakh_ref: str
    tanakh_id: str
    score: float = Field(ge=0.0, le=1.0)
    shared_words: int
    total_words: int
    tanakh_text: str


class QuoteDetectionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate: QuoteCandidate
    verdict: QuoteVerdict
    links: List[QuoteLink] = Field(default_factory=list)

    @property
    def confirmed(self) -> bool:
        return self.verdict == QuoteVerdict.CONFIRMED


__all__ = [
    "QuoteMethod",
    "Confidence",
    "CONFIDENCE_RANK",
    "QuoteVerdict",
    "QuoteCandidate",
    "QuoteLink",
    "QuoteDetectionResult",
]
