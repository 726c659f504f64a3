"""
Score fusion and status classification
"""
from typing import Union

from ..models.evaluation import EvaluationResult
from ..models.evidence import Evidence
from ..models.report import Evaluations
from ..utils.helpers import clamp

LLM_WEIGHT = 0.7
HEURISTIC_WEIGHT = 0.3
CONFIDENCE_THRESHOLD = 0.6
PASS_SCORE = 70


def heuristic_confidence(evidence: Evidence) -> float:
    """
    Confidence derived from how much evidence was gathered.

    Args:
        evidence: Evidence snapshot

    Returns:
        Value in [0, 1]
    """
    score = 0.0

    screenshot_count = len(evidence.captured_screenshots)
    if screenshot_count >= 5:
        score += 20
    elif screenshot_count >= 3:
        score += 15
    elif screenshot_count >= 1:
        score += 10

    if evidence.console_logs:
        score += 15

    if evidence.error_count == 0:
        score += 25
    elif evidence.error_count <= 2:
        score += 15
    else:
        score += 5

    ui = evidence.ui_detection
    if ui is not None:
        score += 20 if (ui.buttons or ui.canvas) else 10

    if evidence.interactions:
        score += (evidence.successful_interactions / len(evidence.interactions)) * 20

    return clamp(score / 100, 0, 1)


def combined_confidence(evaluation: EvaluationResult, evidence: Evidence) -> float:
    """Blend the evaluation confidence with the evidence-based confidence."""
    return clamp(
        evaluation.confidence * LLM_WEIGHT + heuristic_confidence(evidence) * HEURISTIC_WEIGHT,
        0,
        1
    )


def classify_status(
    playability_score: float,
    confidence: float,
    evaluations: Union[Evaluations, EvaluationResult]
) -> str:
    """
    Derive the report status.

    Args:
        playability_score: Score in [0, 100]
        confidence: Combined confidence in [0, 1]
        evaluations: Anything exposing the three criteria

    Returns:
        "pass", "partial" or "fail"
    """
    if confidence < CONFIDENCE_THRESHOLD:
        return "partial"

    if playability_score >= PASS_SCORE and evaluations.all_criteria_met:
        return "pass"
    if playability_score >= PASS_SCORE:
        return "partial"
    return "fail"
