"""
Report Data Model
"""
import json
from typing import List, Literal
from pydantic import BaseModel, Field

from .evaluation import EvaluationItem


class Evaluations(BaseModel):
    """Per-criterion verdicts in the report."""

    load_successful: EvaluationItem
    controls_responsive: EvaluationItem
    no_crashes: EvaluationItem

    @property
    def all_criteria_met(self) -> bool:
        return (
            self.load_successful.result
            and self.controls_responsive.result
            and self.no_crashes.result
        )


class TestMetadata(BaseModel):
    """Evidence counts."""

    __test__ = False

    interactions_count: int = Field(default=0, ge=0)
    errors_count: int = Field(default=0, ge=0)
    screenshots_count: int = Field(default=0, ge=0)
    ui_elements_detected: int = Field(default=0, ge=0)


class TestResult(BaseModel):
    """Final playability report for one session."""

    __test__ = False

    status: Literal["pass", "fail", "partial", "error"]
    playability_score: float = Field(..., ge=0, le=100)
    confidence: float = Field(..., ge=0, le=1)
    timestamp: str
    game_url: str
    session_id: str
    test_duration_seconds: float = Field(..., ge=0)
    evaluations: Evaluations
    issues: List[str] = Field(default_factory=list)
    screenshots: List[str] = Field(default_factory=list)
    metadata: TestMetadata = Field(default_factory=TestMetadata)

    def to_json(self) -> str:
        """Serialize the report as indented JSON."""
        return json.dumps(self.model_dump(mode="json"), indent=2, default=str)
