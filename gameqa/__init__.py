"""
GameQA - Automated playability testing for browser games
"""
from typing import Any, Dict, Optional, Union

from .agents.orchestrator_agent import BrowserFactory, TestOrchestrator
from .capture.artifact_store import ArtifactStore
from .config import settings
from .evaluation.llm_client import LanguageModel, OllamaLanguageModel
from .models.report import TestResult
from .models.session import TestOptions
from .utils.errors import ConfigurationError, ErrorKind, GameQAError

__version__ = "1.0.0"


def default_language_model() -> Optional[LanguageModel]:
    """Ollama model from settings, or None when the LLM is disabled."""
    if not settings.LLM_ENABLED:
        return None
    return OllamaLanguageModel()


async def run(
    url: str,
    options: Optional[Union[TestOptions, Dict[str, Any]]] = None,
    *,
    llm: Optional[LanguageModel] = None,
    browser_factory: Optional[BrowserFactory] = None,
    store: Optional[ArtifactStore] = None
) -> TestResult:
    """
    Run a playability test against a game URL.

    Args:
        url: Game URL
        options: TestOptions or a dict of its fields
        llm: Language model to share; created from settings when omitted
        browser_factory: Builds the browser session; Playwright by default
        store: Artifact store; defaults to the options/settings output dir

    Returns:
        TestResult for the session
    """
    orchestrator = TestOrchestrator(
        llm=llm if llm is not None else default_language_model(),
        browser_factory=browser_factory,
        store=store
    )
    return await orchestrator.run(url, options)


__all__ = [
    "run",
    "default_language_model",
    "TestOrchestrator",
    "TestOptions",
    "TestResult",
    "ArtifactStore",
    "LanguageModel",
    "OllamaLanguageModel",
    "GameQAError",
    "ConfigurationError",
    "ErrorKind",
]
