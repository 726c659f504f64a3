"""
Evaluation Result Data Model
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class EvaluationItem(BaseModel):
    """Verdict on one playability criterion."""

    result: bool = False
    confidence: float = Field(default=0.5, ge=0, le=1)


class EvaluationResult(BaseModel):
    """Evaluation produced by the language model or the heuristic fallback."""

    load_successful: EvaluationItem = Field(default_factory=EvaluationItem)
    controls_responsive: EvaluationItem = Field(default_factory=EvaluationItem)
    no_crashes: EvaluationItem = Field(default_factory=EvaluationItem)
    playability_score: float = Field(default=0, ge=0, le=100)
    issues: List[str] = Field(default_factory=list)
    confidence: float = Field(default=0.5, ge=0, le=1)
    reasoning: Optional[str] = None
    source: str = "llm"  # llm, heuristic

    @property
    def all_criteria_met(self) -> bool:
        return (
            self.load_successful.result
            and self.controls_responsive.result
            and self.no_crashes.result
        )
