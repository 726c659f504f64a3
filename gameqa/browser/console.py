"""
Console Collector - Captures console output and uncaught errors from the page
"""
import logging
from typing import List, Tuple

from .controller import BrowserSession
from ..models.evidence import ConsoleLog, ErrorLog
from ..utils.errors import ErrorKind, GameQAError, describe_error
from ..utils.helpers import timestamp_now

logger = logging.getLogger(__name__)


INSTALL_HOOK_SCRIPT = """
(() => {
    if (window.__gameqa_hooked__) return true;
    window.__gameqa_hooked__ = true;
    window.__gameqa_logs__ = [];
    window.__gameqa_errors__ = [];

    ['log', 'info', 'warn', 'error', 'debug'].forEach((level) => {
        const original = console[level];
        console[level] = function (...args) {
            window.__gameqa_logs__.push({
                level: level,
                message: args.map((a) => String(a)).join(' '),
                timestamp: new Date().toISOString()
            });
            return original.apply(console, args);
        };
    });

    window.addEventListener('error', (event) => {
        window.__gameqa_errors__.push({
            type: 'error',
            message: String(event.message),
            source: event.filename || '',
            stack: (event.error && event.error.stack) || '',
            timestamp: new Date().toISOString()
        });
    });

    window.addEventListener('unhandledrejection', (event) => {
        window.__gameqa_errors__.push({
            type: 'unhandledrejection',
            message: String(event.reason),
            stack: (event.reason && event.reason.stack) || '',
            timestamp: new Date().toISOString()
        });
    });

    return true;
})()
"""

COLLECT_SCRIPT = """
(() => {
    const logs = window.__gameqa_logs__ || [];
    const errors = window.__gameqa_errors__ || [];
    window.__gameqa_logs__ = [];
    window.__gameqa_errors__ = [];
    return { logs: logs, errors: errors };
})()
"""


class ConsoleCollector:
    """Installs a console hook in the page and drains what it buffered."""

    def __init__(self, browser: BrowserSession):
        self.browser = browser
        self.listening = False

    async def start(self):
        """
        Install the console/error hook.

        Raises:
            GameQAError: BROWSER_CRASH if the page cannot run scripts
        """
        if self.listening:
            return
        try:
            await self.browser.run_script(INSTALL_HOOK_SCRIPT)
        except Exception as e:
            raise GameQAError(
                ErrorKind.BROWSER_CRASH,
                f"Failed to start console logger: {describe_error(e)}"
            ) from e
        self.listening = True
        logger.debug("Console hook installed")

    async def collect(self) -> Tuple[List[ConsoleLog], List[ErrorLog]]:
        """
        Drain buffered console messages and errors.

        Returns:
            (console_logs, error_logs); both empty if collection fails
        """
        try:
            result = await self.browser.run_script(COLLECT_SCRIPT) or {}
        except Exception as e:
            logger.warning(f"Failed to collect console logs: {describe_error(e)}")
            return [], []

        console_logs = [
            ConsoleLog(
                timestamp=entry.get("timestamp") or timestamp_now(),
                level=entry.get("level", "log"),
                message=str(entry.get("message", "")),
                source=entry.get("source") or None
            )
            for entry in result.get("logs", [])
        ]
        error_logs = [
            ErrorLog(
                timestamp=entry.get("timestamp") or timestamp_now(),
                type=entry.get("type", "error"),
                message=str(entry.get("message", "")),
                stack=entry.get("stack") or None,
                source=entry.get("source") or None
            )
            for entry in result.get("errors", [])
        ]

        logger.info(f"Collected {len(console_logs)} console logs and {len(error_logs)} errors")
        return console_logs, error_logs
