"""
Pytest configuration and fakes for GameQA tests.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from gameqa.browser.console import COLLECT_SCRIPT
from gameqa.capture.artifact_store import ArtifactStore
from gameqa.models.evidence import (
    ConsoleLog,
    ErrorLog,
    Evidence,
    Interaction,
    Screenshot,
    UIDetectionResult,
    UIElement,
)

GAME_URL = "https://example.com/game"

PASSING_REPLY = json.dumps(
    {
        "load_successful": {"result": True, "confidence": 0.9},
        "controls_responsive": {"result": True, "confidence": 0.85},
        "no_crashes": {"result": True, "confidence": 0.95},
        "playability_score": 85,
        "issues": [],
        "confidence": 0.9,
        "reasoning": "Game loaded and responded to input",
    }
)


def default_ui() -> UIDetectionResult:
    return UIDetectionResult(
        buttons=(UIElement(type="button", selector="#start", text="Start Game"),),
        canvas=(UIElement(type="canvas", selector="#game", attributes={"width": "800", "height": "600"}),),
        menus=(),
        detected_at="2024-01-01T00:00:00",
    )


class FakeBrowser:
    """In-memory browser session that records every call."""

    def __init__(
        self,
        ui=None,
        load_failures=0,
        fail_detect=False,
        fail_screenshots=(),
        console_logs=None,
        page_errors=None,
        on_script=None,
        fail_close=False,
        load_error=None,
    ):
        self.ui = default_ui() if ui is None else ui
        self.load_failures = load_failures
        self.fail_detect = fail_detect
        self.fail_screenshots = set(fail_screenshots)
        self.console_logs = (
            [{"level": "log", "message": "Game initialized", "timestamp": "2024-01-01T00:00:01"}]
            if console_logs is None
            else console_logs
        )
        self.page_errors = page_errors or []
        self.on_script = on_script
        self.fail_close = fail_close
        self.load_error = load_error

        self.load_calls = 0
        self.close_calls = 0
        self.scripts = []
        self.screenshots = []

    async def load(self, url, timeout_ms):
        self.load_calls += 1
        if self.load_error is not None:
            raise self.load_error
        if self.load_calls <= self.load_failures:
            raise RuntimeError("Target page crashed")

    async def detect_ui(self):
        if self.fail_detect:
            raise RuntimeError("Detection script failed")
        return self.ui

    async def run_script(self, source):
        self.scripts.append(source)
        if self.on_script is not None:
            self.on_script(source)
        if source == COLLECT_SCRIPT:
            return {"logs": list(self.console_logs), "errors": list(self.page_errors)}
        return True

    async def screenshot(self, path):
        index = int(Path(path).stem.rsplit("-", 1)[-1])
        if index in self.fail_screenshots:
            raise RuntimeError("Screenshot capture failed")
        Path(path).write_bytes(b"\x89PNG")
        self.screenshots.append(path)
        return path

    async def close(self):
        self.close_calls += 1
        if self.fail_close:
            raise RuntimeError("Browser already gone")

    @property
    def key_presses(self):
        return [s for s in self.scripts if "KeyboardEvent" in s]


class FakeLanguageModel:
    """Language model returning canned replies; exceptions in the list are raised."""

    def __init__(self, *replies):
        self.replies = list(replies) or [PASSING_REPLY]
        self.calls = []

    async def evaluate(self, system_prompt, user_prompt, *, json_mode=True, temperature=0.3, max_tokens=1000):
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "json_mode": json_mode,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        reply = self.replies[min(len(self.calls), len(self.replies)) - 1]
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def build_evidence(
    screenshots=5,
    failed_screenshots=0,
    console_logs=2,
    errors=0,
    interactions=3,
    successful=None,
    ui=True,
    duration=12.5,
):
    """Evidence with the requested amount of each kind of entry."""
    successful = interactions if successful is None else successful
    shots = [
        Screenshot(index=i, file_path=f"/tmp/s/screenshot-{i}.png", timestamp="2024-01-01T00:00:00", description=f"Shot {i}")
        for i in range(screenshots)
    ]
    shots += [
        Screenshot(
            index=screenshots + i,
            file_path=f"/tmp/s/screenshot-{screenshots + i}.png",
            timestamp="2024-01-01T00:00:00",
            description="Lost shot (failed)",
            captured=False,
        )
        for i in range(failed_screenshots)
    ]
    return Evidence(
        session_id="session-1",
        game_url=GAME_URL,
        screenshots=tuple(shots),
        console_logs=tuple(
            ConsoleLog(timestamp="2024-01-01T00:00:01", level="log", message=f"log line {i}") for i in range(console_logs)
        ),
        errors=tuple(
            ErrorLog(timestamp="2024-01-01T00:00:02", type="error", message=f"TypeError {i}", stack="at game.js:1")
            for i in range(errors)
        ),
        ui_detection=default_ui() if ui else None,
        interactions=tuple(
            Interaction(type="keyboard", timestamp="2024-01-01T00:00:03", action="ArrowUp", success=i < successful)
            for i in range(interactions)
        ),
        duration_seconds=duration,
        timestamp="2024-01-01T00:00:10",
    )


@pytest.fixture
def no_sleep():
    """Make retry backoff and interaction waits instant."""
    with patch("gameqa.utils.retry.asyncio.sleep", new=AsyncMock()) as sleep_mock:
        yield sleep_mock


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(tmp_path)


@pytest.fixture
def make_evidence():
    return build_evidence
