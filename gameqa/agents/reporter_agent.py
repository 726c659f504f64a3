"""
Reporter Agent - Assembles and validates the final test report
"""
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .base_agent import BaseAgent
from ..evaluation.scoring import classify_status, combined_confidence
from ..models.evaluation import EvaluationItem, EvaluationResult
from ..models.evidence import Evidence
from ..models.report import Evaluations, TestMetadata, TestResult
from ..utils.errors import ErrorKind, GameQAError
from ..utils.helpers import clamp, is_valid_url, parse_timestamp, timestamp_now


class ReporterAgent(BaseAgent):
    """
    Turns evidence and an evaluation into a TestResult.
    Provides:
    - Confidence fusion and status classification
    - Metadata counts
    - Report validation
    - Error-shaped reports for failed sessions
    """

    def __init__(self):
        super().__init__(
            name="Reporter",
            description="Builds and validates playability reports"
        )

    async def execute(self, context: Dict[str, Any]) -> TestResult:
        """Build a report from the evidence and evaluation in the context."""
        return self.build(context["evidence"], context["evaluation"])

    def build(self, evidence: Evidence, evaluation: EvaluationResult) -> TestResult:
        """
        Build the report for a completed session.

        Args:
            evidence: Evidence snapshot
            evaluation: Evaluation of that evidence

        Returns:
            Validated TestResult

        Raises:
            GameQAError: FATAL if the report fails validation
        """
        self.log_info(
            f"Building report for session {evidence.session_id} "
            f"(score={evaluation.playability_score}, source={evaluation.source})"
        )

        confidence = combined_confidence(evaluation, evidence)
        score = clamp(evaluation.playability_score, 0, 100)
        evaluations = Evaluations(
            load_successful=evaluation.load_successful,
            controls_responsive=evaluation.controls_responsive,
            no_crashes=evaluation.no_crashes
        )
        status = classify_status(score, confidence, evaluations)

        try:
            report = TestResult(
                status=status,
                playability_score=score,
                confidence=confidence,
                timestamp=evidence.timestamp,
                game_url=evidence.game_url,
                session_id=evidence.session_id,
                test_duration_seconds=evidence.duration_seconds,
                evaluations=evaluations,
                issues=list(evaluation.issues),
                screenshots=[s.file_path for s in evidence.captured_screenshots],
                metadata=self.metadata_for(evidence)
            )
        except ValidationError as e:
            raise GameQAError(ErrorKind.FATAL, f"Invalid report structure: {e}") from e

        self.validate(report)

        self.log_info(f"Report built: status={report.status}, confidence={report.confidence:.2f}")
        return report

    @staticmethod
    def metadata_for(evidence: Evidence) -> TestMetadata:
        """Evidence counts for the report metadata."""
        return TestMetadata(
            interactions_count=len(evidence.interactions),
            errors_count=evidence.error_count,
            screenshots_count=len(evidence.captured_screenshots),
            ui_elements_detected=evidence.ui_element_count
        )

    def validate(self, report: TestResult):
        """
        Check the cross-field rules the schema cannot express.

        Raises:
            GameQAError: FATAL on the first violated rule
        """
        if not report.session_id:
            raise GameQAError(ErrorKind.FATAL, "Report has no session id")
        if parse_timestamp(report.timestamp) is None:
            raise GameQAError(ErrorKind.FATAL, f"Report timestamp is not ISO-8601: {report.timestamp!r}")
        if report.status == "error":
            return
        if not is_valid_url(report.game_url):
            raise GameQAError(ErrorKind.FATAL, f"Report game URL is invalid: {report.game_url!r}")

        expected = classify_status(report.playability_score, report.confidence, report.evaluations)
        if report.status != expected:
            raise GameQAError(
                ErrorKind.FATAL,
                f"Report status {report.status!r} does not match derived status {expected!r}"
            )

    def error_result(
        self,
        session_id: str,
        game_url: str,
        message: str,
        duration_seconds: float = 0.0,
        counts: Optional[TestMetadata] = None,
        screenshots: Optional[list] = None
    ) -> TestResult:
        """
        Build the report for a session that could not complete.

        Args:
            session_id: Session identifier
            game_url: URL under test, as given
            message: What went wrong
            duration_seconds: Time spent before the failure
            counts: Evidence counts gathered before the failure
            screenshots: Paths of screenshots captured before the failure

        Returns:
            TestResult with status "error"
        """
        failed = EvaluationItem(result=False, confidence=0)
        return TestResult(
            status="error",
            playability_score=0,
            confidence=0,
            timestamp=timestamp_now(),
            game_url=game_url or "",
            session_id=session_id,
            test_duration_seconds=max(0.0, duration_seconds),
            evaluations=Evaluations(
                load_successful=failed,
                controls_responsive=failed,
                no_crashes=failed
            ),
            issues=[f"Test execution failed: {message}"],
            screenshots=list(screenshots or []),
            metadata=counts or TestMetadata(errors_count=1)
        )
