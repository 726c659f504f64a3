"""
Evaluator Agent - Judges playability from captured evidence
"""
from typing import Any, Dict, Optional

from .base_agent import BaseAgent
from ..config import settings
from ..evaluation.heuristics import heuristic_evaluation, parse_evaluation
from ..evaluation.llm_client import LanguageModel
from ..evaluation.prompt_builder import PromptBuilder
from ..models.evaluation import EvaluationResult
from ..models.evidence import Evidence
from ..utils.errors import ErrorKind, GameQAError, describe_error
from ..utils.retry import retry_with_classification


class EvaluatorAgent(BaseAgent):
    """
    Evaluates evidence with a language model.
    Falls back to the heuristic evaluation when no model is configured
    or every attempt fails, so evaluate() always returns a result.
    """

    def __init__(
        self,
        llm: Optional[LanguageModel] = None,
        prompt_builder: Optional[PromptBuilder] = None
    ):
        super().__init__(
            name="Evaluator",
            description="Evaluates game playability from evidence"
        )
        self.llm = llm
        self.prompt_builder = prompt_builder or PromptBuilder()

    async def execute(self, context: Dict[str, Any]) -> EvaluationResult:
        """Evaluate the evidence in the context."""
        return await self.evaluate(
            evidence=context["evidence"],
            max_retries=context.get("max_retries")
        )

    async def evaluate(self, evidence: Evidence, max_retries: Optional[int] = None) -> EvaluationResult:
        """
        Evaluate an evidence snapshot.

        Args:
            evidence: Frozen evidence for one session
            max_retries: Optional cap on language model retries

        Returns:
            EvaluationResult from the model, or the heuristic fallback
        """
        if self.llm is None:
            self.log_info("No language model configured, using heuristic evaluation")
            return heuristic_evaluation(evidence)

        self.log_info(f"Evaluating evidence for session {evidence.session_id}")

        try:
            prompt = self.prompt_builder.build(evidence)

            async def attempt() -> EvaluationResult:
                try:
                    text = await self.llm.evaluate(
                        prompt.system,
                        prompt.user,
                        json_mode=True,
                        temperature=settings.LLM_TEMPERATURE,
                        max_tokens=settings.LLM_MAX_TOKENS
                    )
                    return parse_evaluation(text)
                except GameQAError as e:
                    if e.kind is ErrorKind.LLM_FAILURE:
                        raise
                    raise GameQAError(ErrorKind.LLM_FAILURE, e.message, e.context) from e
                except Exception as e:
                    raise GameQAError(ErrorKind.LLM_FAILURE, describe_error(e)) from e

            evaluation = await retry_with_classification(attempt, ErrorKind.LLM_FAILURE, max_retries)

        except Exception as e:
            self.log_warning(f"Language model evaluation failed, using heuristic fallback: {describe_error(e)}")
            return heuristic_evaluation(evidence)

        self.log_info(
            f"Evaluation complete: score={evaluation.playability_score}, "
            f"confidence={evaluation.confidence}"
        )
        return evaluation
