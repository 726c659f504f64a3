"""
Evidence Data Models
"""
from typing import Dict, Optional, Tuple
from pydantic import BaseModel, Field


class Screenshot(BaseModel):
    """A screenshot taken during the session."""

    index: int = Field(..., ge=0, description="Position in the capture schedule")
    file_path: str
    timestamp: str
    description: str = ""
    captured: bool = Field(default=True, description="False when the capture failed")

    class Config:
        frozen = True


class ConsoleLog(BaseModel):
    """Console message emitted by the game page."""

    timestamp: str
    level: str = "log"  # log, info, warn, error, debug
    message: str = ""
    source: Optional[str] = None

    class Config:
        frozen = True


class ErrorLog(BaseModel):
    """Uncaught error or unhandled rejection from the game page."""

    timestamp: str
    type: str = "error"
    message: str = ""
    stack: Optional[str] = None
    source: Optional[str] = None

    class Config:
        frozen = True


class UIElement(BaseModel):
    """Detected UI element."""

    type: str = "other"  # button, canvas, menu, input, other
    selector: str
    text: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)

    class Config:
        frozen = True


class UIDetectionResult(BaseModel):
    """UI elements found on the page."""

    buttons: Tuple[UIElement, ...] = ()
    canvas: Tuple[UIElement, ...] = ()
    menus: Tuple[UIElement, ...] = ()
    detected_at: str

    class Config:
        frozen = True

    @property
    def element_count(self) -> int:
        return len(self.buttons) + len(self.canvas) + len(self.menus)


class Interaction(BaseModel):
    """Record of one simulated player action."""

    type: str  # click, keyboard, mouse, wait
    timestamp: str
    target: Optional[str] = None
    action: Optional[str] = None
    success: bool = False

    class Config:
        frozen = True


class Evidence(BaseModel):
    """
    Immutable snapshot of everything captured for one session.
    Built by EvidenceAggregator.snapshot() and consumed by the evaluator.
    """

    session_id: str
    game_url: str
    screenshots: Tuple[Screenshot, ...] = ()
    console_logs: Tuple[ConsoleLog, ...] = ()
    errors: Tuple[ErrorLog, ...] = ()
    ui_detection: Optional[UIDetectionResult] = None
    interactions: Tuple[Interaction, ...] = ()
    duration_seconds: float = Field(default=0.0, ge=0)
    timestamp: str

    class Config:
        frozen = True

    @property
    def captured_screenshots(self) -> Tuple[Screenshot, ...]:
        return tuple(s for s in self.screenshots if s.captured)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def successful_interactions(self) -> int:
        return sum(1 for i in self.interactions if i.success)

    @property
    def failed_interactions(self) -> int:
        return len(self.interactions) - self.successful_interactions

    @property
    def ui_element_count(self) -> int:
        if self.ui_detection is None:
            return 0
        return self.ui_detection.element_count
