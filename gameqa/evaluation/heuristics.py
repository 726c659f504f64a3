"""
Heuristic evaluation and language model reply parsing
"""
import json
from typing import Any

from ..models.evaluation import EvaluationItem, EvaluationResult
from ..models.evidence import Evidence
from ..utils.errors import ErrorKind, GameQAError
from ..utils.helpers import clamp

CRITERIA = ("load_successful", "controls_responsive", "no_crashes")


def heuristic_evaluation(evidence: Evidence) -> EvaluationResult:
    """
    Evaluate evidence without a language model.

    Args:
        evidence: Evidence snapshot

    Returns:
        EvaluationResult with source "heuristic", never more than 0.6 confident
    """
    has_screenshots = len(evidence.captured_screenshots) > 0
    has_interactions = len(evidence.interactions) > 0
    error_count = evidence.error_count

    load_successful = has_screenshots and error_count == 0
    controls_responsive = has_interactions and evidence.successful_interactions > 0
    no_crashes = error_count == 0

    score = 0
    if load_successful:
        score += 30
    if controls_responsive:
        score += 40
    if no_crashes:
        score += 30

    issues = []
    if not load_successful:
        issues.append("Game may not have loaded successfully")
    if not controls_responsive:
        issues.append("Controls may not be responsive")
    if not no_crashes:
        issues.append(f"Detected {error_count} errors")

    return EvaluationResult(
        load_successful=EvaluationItem(result=load_successful, confidence=0.7 if load_successful else 0.3),
        controls_responsive=EvaluationItem(
            result=controls_responsive,
            confidence=0.7 if controls_responsive else 0.3
        ),
        no_crashes=EvaluationItem(result=no_crashes, confidence=0.8 if no_crashes else 0.2),
        playability_score=score,
        issues=issues,
        confidence=min(0.6, score / 100),
        reasoning="Heuristic evaluation based on captured evidence",
        source="heuristic"
    )


def parse_evaluation(text: str) -> EvaluationResult:
    """
    Parse a language model reply into an EvaluationResult.

    Out-of-range numbers are clamped and missing fields take defaults.

    Args:
        text: Raw reply, possibly wrapped in prose or code fences

    Returns:
        EvaluationResult with source "llm"

    Raises:
        GameQAError: LLM_FAILURE if no JSON object can be extracted
    """
    content = text or ""
    start = content.find("{")
    end = content.rfind("}") + 1

    if start < 0 or end <= start:
        raise GameQAError(ErrorKind.LLM_FAILURE, "No JSON object in language model response")

    try:
        data = json.loads(content[start:end])
    except json.JSONDecodeError as e:
        raise GameQAError(ErrorKind.LLM_FAILURE, f"Invalid JSON in language model response: {e}") from e

    if not isinstance(data, dict):
        raise GameQAError(ErrorKind.LLM_FAILURE, "Language model response is not a JSON object")

    items = {name: _parse_item(data.get(name)) for name in CRITERIA}

    raw_issues = data.get("issues")
    if isinstance(raw_issues, list):
        issues = [str(issue) for issue in raw_issues if issue is not None]
    elif raw_issues:
        issues = [str(raw_issues)]
    else:
        issues = []

    reasoning = data.get("reasoning")

    return EvaluationResult(
        **items,
        playability_score=clamp(_to_float(data.get("playability_score"), 0.0), 0, 100),
        issues=issues,
        confidence=clamp(_to_float(data.get("confidence"), 0.5), 0, 1),
        reasoning=str(reasoning) if reasoning is not None else None,
        source="llm"
    )


def _parse_item(raw: Any) -> EvaluationItem:
    if not isinstance(raw, dict) or not isinstance(raw.get("result"), bool):
        return EvaluationItem(result=False, confidence=0.5)
    return EvaluationItem(
        result=raw["result"],
        confidence=clamp(_to_float(raw.get("confidence"), 0.5), 0, 1)
    )


def _to_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return number
