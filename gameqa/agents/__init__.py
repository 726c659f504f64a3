"""Agents package"""
from .base_agent import BaseAgent
from .evaluator_agent import EvaluatorAgent
from .reporter_agent import ReporterAgent
from .orchestrator_agent import TestOrchestrator

__all__ = [
    "BaseAgent",
    "EvaluatorAgent",
    "ReporterAgent",
    "TestOrchestrator",
]
