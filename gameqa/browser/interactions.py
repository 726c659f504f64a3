"""
Interaction Handler - Simulates player input and records each action
"""
import asyncio
import json
import logging
from typing import Dict, List, Optional

from .controller import BrowserSession
from ..capture.evidence import EvidenceAggregator
from ..models.evidence import Interaction, UIDetectionResult, UIElement
from ..utils.errors import ErrorKind, GameQAError, describe_error
from ..utils.helpers import timestamp_now

logger = logging.getLogger(__name__)

START_BUTTON_KEYWORDS = ("start", "play")

# Default gameplay sequence: arrow keys and space cover most browser games
GAMEPLAY_SEQUENCE: List[Dict] = [
    {"type": "keyboard", "key": "ArrowUp"},
    {"type": "wait", "ms": 1000},
    {"type": "keyboard", "key": "ArrowRight"},
    {"type": "wait", "ms": 1000},
    {"type": "keyboard", "key": "Space"},
    {"type": "wait", "ms": 2000},
]


def find_start_button(ui_detection: Optional[UIDetectionResult]) -> Optional[UIElement]:
    """
    Pick the button most likely to start the game.

    Args:
        ui_detection: Detection result, possibly None

    Returns:
        First button whose text mentions start/play, or None
    """
    if ui_detection is None:
        return None
    for button in ui_detection.buttons:
        text = (button.text or "").lower()
        if any(keyword in text for keyword in START_BUTTON_KEYWORDS):
            return button
    return None


class InteractionHandler:
    """
    Drives clicks and key presses through the browser session.
    Every attempt, successful or not, is recorded as an Interaction.
    """

    def __init__(
        self,
        browser: BrowserSession,
        aggregator: EvidenceAggregator,
        delay_ms: int = 0
    ):
        self.browser = browser
        self.aggregator = aggregator
        self.delay_ms = delay_ms

    async def click(self, element: UIElement):
        """
        Click a detected element.

        Args:
            element: UI element to click
        """
        selector = json.dumps(element.selector)
        script = f"""
            (() => {{
                const el = document.querySelector({selector});
                if (!el) throw new Error('Element not found: ' + {selector});
                el.click();
                return true;
            }})()
        """
        await self._perform(script, "click", target=element.selector, action="click")

    async def click_canvas(self, x: int, y: int):
        """
        Click a point on the first canvas.

        Args:
            x: X offset inside the canvas
            y: Y offset inside the canvas
        """
        script = f"""
            (() => {{
                const canvas = document.querySelector('canvas');
                if (!canvas) throw new Error('No canvas found');
                const rect = canvas.getBoundingClientRect();
                const opts = {{ clientX: rect.left + {int(x)}, clientY: rect.top + {int(y)}, bubbles: true }};
                canvas.dispatchEvent(new MouseEvent('mousedown', opts));
                canvas.dispatchEvent(new MouseEvent('mouseup', opts));
                canvas.dispatchEvent(new MouseEvent('click', opts));
                return true;
            }})()
        """
        await self._perform(script, "click", target=f"canvas({x},{y})", action="click")

    async def press_key(self, key: str):
        """
        Dispatch keydown/keyup for a key.

        Args:
            key: Key to press (e.g., 'Enter', 'Space', 'ArrowUp')
        """
        key_value = json.dumps(" " if key == "Space" else key)
        code = json.dumps(key)
        script = f"""
            (() => {{
                const opts = {{ key: {key_value}, code: {code}, bubbles: true, cancelable: true }};
                const target = document.activeElement || document.body || document;
                target.dispatchEvent(new KeyboardEvent('keydown', opts));
                target.dispatchEvent(new KeyboardEvent('keyup', opts));
                return true;
            }})()
        """
        await self._perform(script, "keyboard", action=key)

    async def execute_sequence(self, actions: List[Dict], delay_ms: Optional[int] = None):
        """
        Run a list of actions, continuing past individual failures.

        Args:
            actions: Action dicts with a type of click, keyboard or wait
            delay_ms: Pause after each action. Defaults to the handler delay
        """
        delay_ms = self.delay_ms if delay_ms is None else delay_ms
        logger.info(f"Executing interaction sequence of {len(actions)} actions")

        for action in actions:
            action_type = action.get("type")
            try:
                if action_type == "keyboard" and action.get("key"):
                    await self.press_key(action["key"])
                elif action_type == "click" and action.get("selector"):
                    await self.click(UIElement(type="button", selector=action["selector"]))
                elif action_type == "click" and "x" in action and "y" in action:
                    await self.click_canvas(action["x"], action["y"])
                elif action_type == "wait":
                    await self.wait(action.get("ms", delay_ms))
                    continue
            except GameQAError as e:
                logger.warning(f"Interaction {action} failed, continuing: {e}")

            await self.wait(delay_ms)

        logger.info(f"Interaction sequence completed: {self.aggregator.interaction_count} recorded")

    async def wait(self, ms: int):
        """Pause for the given milliseconds."""
        if ms and ms > 0:
            await asyncio.sleep(ms / 1000)

    async def _perform(
        self,
        script: str,
        interaction_type: str,
        target: Optional[str] = None,
        action: Optional[str] = None
    ):
        try:
            await self.browser.run_script(script)
        except Exception as e:
            self._record(interaction_type, target, action, success=False)
            raise GameQAError(
                ErrorKind.BROWSER_CRASH,
                f"{interaction_type} failed: {describe_error(e)}",
                {"target": target, "action": action}
            ) from e

        self._record(interaction_type, target, action, success=True)

    def _record(self, interaction_type: str, target: Optional[str], action: Optional[str], success: bool):
        self.aggregator.record_interaction(Interaction(
            type=interaction_type,
            timestamp=timestamp_now(),
            target=target,
            action=action,
            success=success
        ))
