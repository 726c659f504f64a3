"""
Evidence Aggregator - Accumulates session evidence into an immutable snapshot
"""
import logging
from typing import Dict, Iterable, List, Optional

from ..models.evidence import (
    ConsoleLog,
    ErrorLog,
    Evidence,
    Interaction,
    Screenshot,
    UIDetectionResult,
)
from ..utils.errors import ErrorKind, GameQAError
from ..utils.helpers import timestamp_now

logger = logging.getLogger(__name__)


class EvidenceAggregator:
    """
    Append-only store for the evidence of one session.

    Phases add screenshots, logs, the UI detection result and interaction
    records. snapshot() freezes everything into an Evidence value and seals
    the aggregator.
    """

    def __init__(self, session_id: str, game_url: str):
        self.session_id = session_id
        self.game_url = game_url
        self._screenshots: Dict[int, Screenshot] = {}
        self._console_logs: List[ConsoleLog] = []
        self._errors: List[ErrorLog] = []
        self._ui_detection: Optional[UIDetectionResult] = None
        self._interactions: List[Interaction] = []
        self._sealed = False

    def add_screenshot(
        self,
        index: int,
        file_path: str,
        description: str,
        captured: bool = True
    ) -> Screenshot:
        """
        Record a screenshot.

        Args:
            index: Schedule index, unique and non-negative
            file_path: Where the image was (or would have been) written
            description: What the screenshot shows
            captured: False for a failed capture

        Returns:
            The stored Screenshot
        """
        self._ensure_open()
        if index < 0:
            raise GameQAError(ErrorKind.VALIDATION_ERROR, f"Screenshot index must be non-negative, got {index}")
        if index in self._screenshots:
            raise GameQAError(ErrorKind.VALIDATION_ERROR, f"Duplicate screenshot index {index}")

        screenshot = Screenshot(
            index=index,
            file_path=file_path,
            timestamp=timestamp_now(),
            description=description,
            captured=captured
        )
        self._screenshots[index] = screenshot
        return screenshot

    def add_failed_screenshot(self, index: int, file_path: str, description: str) -> Screenshot:
        """Record a partial entry for a capture that did not succeed."""
        return self.add_screenshot(index, file_path, f"{description} (failed)", captured=False)

    def add_console_logs(self, logs: Iterable[ConsoleLog]):
        self._ensure_open()
        self._console_logs.extend(logs)

    def add_errors(self, errors: Iterable[ErrorLog]):
        self._ensure_open()
        self._errors.extend(errors)

    def set_ui_detection(self, result: Optional[UIDetectionResult]):
        self._ensure_open()
        self._ui_detection = result

    def record_interaction(self, interaction: Interaction):
        self._ensure_open()
        self._interactions.append(interaction)

    def has_screenshot(self, index: int) -> bool:
        return index in self._screenshots

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def screenshot_count(self) -> int:
        return sum(1 for s in self._screenshots.values() if s.captured)

    @property
    def error_count(self) -> int:
        return len(self._errors)

    @property
    def interaction_count(self) -> int:
        return len(self._interactions)

    @property
    def ui_element_count(self) -> int:
        if self._ui_detection is None:
            return 0
        return self._ui_detection.element_count

    def captured_paths(self) -> List[str]:
        """Paths of successfully captured screenshots, in index order."""
        return [
            self._screenshots[i].file_path
            for i in sorted(self._screenshots)
            if self._screenshots[i].captured
        ]

    def snapshot(self, duration_seconds: float) -> Evidence:
        """
        Freeze the accumulated evidence.

        Args:
            duration_seconds: Session duration so far

        Returns:
            Immutable Evidence value
        """
        self._ensure_open()
        self._sealed = True

        evidence = Evidence(
            session_id=self.session_id,
            game_url=self.game_url,
            screenshots=tuple(self._screenshots[i] for i in sorted(self._screenshots)),
            console_logs=tuple(self._console_logs),
            errors=tuple(self._errors),
            ui_detection=self._ui_detection,
            interactions=tuple(self._interactions),
            duration_seconds=max(0.0, duration_seconds),
            timestamp=timestamp_now()
        )

        logger.debug(
            f"Evidence snapshot for {self.session_id}: "
            f"{len(evidence.screenshots)} screenshots, {evidence.error_count} errors, "
            f"{len(evidence.interactions)} interactions"
        )
        return evidence

    def _ensure_open(self):
        if self._sealed:
            raise GameQAError(
                ErrorKind.VALIDATION_ERROR,
                f"Evidence for session {self.session_id} is already snapshotted"
            )
