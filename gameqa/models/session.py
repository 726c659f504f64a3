"""
Test Session Data Models
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from ..config import settings


class Phase(str, Enum):
    """States of the test session state machine."""

    INIT = "INIT"
    LOAD = "LOAD"
    OBSERVE = "OBSERVE"
    DETECT_UI = "DETECT_UI"
    INTERACT = "INTERACT"
    CAPTURE_EVIDENCE = "CAPTURE_EVIDENCE"
    EVALUATE = "EVALUATE"
    BUILD_REPORT = "BUILD_REPORT"
    PERSIST = "PERSIST"
    DONE = "DONE"
    ERROR = "ERROR"


# Linear successor of every non-terminal state; ERROR is reachable from any of them.
NEXT_PHASE = {
    Phase.INIT: Phase.LOAD,
    Phase.LOAD: Phase.OBSERVE,
    Phase.OBSERVE: Phase.DETECT_UI,
    Phase.DETECT_UI: Phase.INTERACT,
    Phase.INTERACT: Phase.CAPTURE_EVIDENCE,
    Phase.CAPTURE_EVIDENCE: Phase.EVALUATE,
    Phase.EVALUATE: Phase.BUILD_REPORT,
    Phase.BUILD_REPORT: Phase.PERSIST,
    Phase.PERSIST: Phase.DONE,
}

TERMINAL_PHASES = (Phase.DONE, Phase.ERROR)


class TestOptions(BaseModel):
    """Per-run options. Unset values come from settings."""

    __test__ = False

    timeout: float = Field(default_factory=lambda: settings.DEFAULT_TIMEOUT, gt=0, description="Session deadline in seconds")
    max_retries: int = Field(default_factory=lambda: settings.MAX_RETRIES, ge=0)
    output_dir: Optional[str] = None
    verbose: bool = False
    screenshot_resolution: str = Field(default_factory=lambda: settings.SCREENSHOT_RESOLUTION)


class TestSession(BaseModel):
    """
    Runtime state of one test session.
    Mutated only by the orchestrator.
    """

    __test__ = False

    session_id: str
    game_url: str
    started_at: str
    start_time: float  # clock reading at INIT
    deadline: float  # clock reading after which the session times out
    timeout: float
    phase: Phase = Phase.INIT
    history: List[Phase] = Field(default_factory=lambda: [Phase.INIT])

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES
