"""Browser package"""
from .controller import BrowserSession, PlaywrightBrowser
from .interactions import InteractionHandler, find_start_button
from .console import ConsoleCollector

__all__ = [
    "BrowserSession",
    "PlaywrightBrowser",
    "InteractionHandler",
    "find_start_button",
    "ConsoleCollector",
]
