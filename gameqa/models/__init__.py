"""Models package"""
from .evidence import (
    Screenshot,
    ConsoleLog,
    ErrorLog,
    UIElement,
    UIDetectionResult,
    Interaction,
    Evidence,
)
from .evaluation import EvaluationItem, EvaluationResult
from .report import Evaluations, TestMetadata, TestResult
from .session import Phase, TestOptions, TestSession

__all__ = [
    "Screenshot",
    "ConsoleLog",
    "ErrorLog",
    "UIElement",
    "UIDetectionResult",
    "Interaction",
    "Evidence",
    "EvaluationItem",
    "EvaluationResult",
    "Evaluations",
    "TestMetadata",
    "TestResult",
    "Phase",
    "TestOptions",
    "TestSession",
]
