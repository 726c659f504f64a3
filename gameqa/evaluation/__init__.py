"""Evaluation package"""
from .prompt_builder import Prompt, PromptBuilder
from .llm_client import LanguageModel, OllamaLanguageModel
from .heuristics import heuristic_evaluation, parse_evaluation
from .scoring import heuristic_confidence, combined_confidence, classify_status

__all__ = [
    "Prompt",
    "PromptBuilder",
    "LanguageModel",
    "OllamaLanguageModel",
    "heuristic_evaluation",
    "parse_evaluation",
    "heuristic_confidence",
    "combined_confidence",
    "classify_status",
]
