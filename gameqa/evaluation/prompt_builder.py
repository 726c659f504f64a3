"""
Prompt Builder - Renders evidence into the evaluation prompt
"""
from typing import List, NamedTuple

from langchain_core.prompts import ChatPromptTemplate

from ..models.evidence import Evidence
from ..utils.helpers import truncate_text

MAX_CONSOLE_LINES = 20


class Prompt(NamedTuple):
    system: str
    user: str


SYSTEM_PROMPT = """You are an expert QA engineer evaluating web-based games for playability.
Analyze the captured evidence: screenshots, console logs, errors, detected UI and interactions.
Judge whether the game loads, responds to controls and runs without crashing.

Output ONLY a valid JSON object. No explanation text."""

USER_PROMPT = """Game URL: {url}
Session ID: {session_id}
Test Duration: {duration} seconds

Screenshots:
{screenshots}

Console Logs (most recent {console_limit} of {console_total}):
{console_logs}

Errors ({error_total}):
{errors}

UI Detection:
{ui_summary}

Interactions ({interaction_total} total, {interaction_success} successful, {interaction_failed} failed):
{interactions}

Respond with this JSON structure:
{{
  "load_successful": {{"result": true, "confidence": 0.9}},
  "controls_responsive": {{"result": true, "confidence": 0.8}},
  "no_crashes": {{"result": true, "confidence": 0.95}},
  "playability_score": 85,
  "issues": ["issue1", "issue2"],
  "confidence": 0.85,
  "reasoning": "short explanation"
}}

Evaluation criteria:
1. load_successful: the game rendered and reached a playable or menu state
2. controls_responsive: inputs produced visible or logged reactions
3. no_crashes: no uncaught errors, freezes or blank screens
4. playability_score: 0-100 overall playability
5. confidence: 0-1 certainty of this evaluation"""


class PromptBuilder:
    """Builds an order-stable prompt from an Evidence snapshot."""

    def __init__(self):
        self.template = ChatPromptTemplate.from_messages([
            ("system", SYSTEM_PROMPT),
            ("human", USER_PROMPT),
        ])

    def build(self, evidence: Evidence) -> Prompt:
        """
        Render the prompt for one session.

        Args:
            evidence: Evidence snapshot

        Returns:
            Prompt with system and user text
        """
        recent_logs = evidence.console_logs[-MAX_CONSOLE_LINES:]

        messages = self.template.format_messages(
            url=evidence.game_url,
            session_id=evidence.session_id,
            duration=f"{evidence.duration_seconds:.1f}",
            screenshots=self._format_screenshots(evidence),
            console_limit=MAX_CONSOLE_LINES,
            console_total=len(evidence.console_logs),
            console_logs=self._lines(
                [f"[{log.level.upper()}] {truncate_text(log.message, 300)}" for log in recent_logs]
            ),
            error_total=evidence.error_count,
            errors=self._format_errors(evidence),
            ui_summary=self._format_ui(evidence),
            interaction_total=len(evidence.interactions),
            interaction_success=evidence.successful_interactions,
            interaction_failed=evidence.failed_interactions,
            interactions=self._lines([
                f"- {i.type} {i.target or i.action or ''}: {'success' if i.success else 'failed'}"
                for i in evidence.interactions
            ]),
        )
        return Prompt(system=messages[0].content, user=messages[1].content)

    @staticmethod
    def _lines(lines: List[str]) -> str:
        return "\n".join(lines) if lines else "None"

    def _format_screenshots(self, evidence: Evidence) -> str:
        return self._lines([
            f"{s.index}. {s.description} at {s.timestamp} ({s.file_path})"
            f"{'' if s.captured else ' [capture failed]'}"
            for s in evidence.screenshots
        ])

    def _format_errors(self, evidence: Evidence) -> str:
        lines = []
        for err in evidence.errors:
            lines.append(f"- [{err.type}] {truncate_text(err.message, 300)}")
            if err.stack:
                lines.append(f"  Stack: {truncate_text(err.stack, 500)}")
            if err.source:
                lines.append(f"  Source: {err.source}")
        return self._lines(lines)

    @staticmethod
    def _format_ui(evidence: Evidence) -> str:
        ui = evidence.ui_detection
        if ui is None:
            return "UI detection unavailable"
        button_texts = [b.text for b in ui.buttons if b.text]
        summary = (
            f"Buttons: {len(ui.buttons)}, Canvas: {len(ui.canvas)}, Menus: {len(ui.menus)}"
        )
        if button_texts:
            summary += f"\nButton labels: {', '.join(button_texts[:10])}"
        return summary
