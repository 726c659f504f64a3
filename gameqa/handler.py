"""
Serverless entry point
"""
import logging
from typing import Any, Dict, Optional, Union

from . import run
from .agents.reporter_agent import ReporterAgent
from .capture.artifact_store import ArtifactStore
from .evaluation.llm_client import LanguageModel
from .models.report import TestResult
from .utils.errors import describe_error

logger = logging.getLogger(__name__)


async def handler(
    event: Union[str, Dict[str, Any]],
    context: Any = None,
    *,
    llm: Optional[LanguageModel] = None,
    store: Optional[ArtifactStore] = None
) -> TestResult:
    """
    Run a test from a serverless event.

    Args:
        event: Game URL, or a dict with "url" and optional "options"
        context: Platform context object (unused)
        llm: Shared language model, if the caller holds one
        store: Shared artifact store; defaults to the options/settings output dir

    Returns:
        TestResult; failures before the session starts come back as an
        error report with session_id "error"
    """
    url = ""
    try:
        if isinstance(event, str):
            url, options = event, None
        elif isinstance(event, dict):
            url, options = event.get("url") or "", event.get("options")
        else:
            raise ValueError(f"Unsupported event type: {type(event).__name__}")

        logger.info(f"Handling test request for {url}")
        return await run(url, options, llm=llm, store=store)

    except Exception as e:
        logger.error(f"Test request failed before the session started: {describe_error(e)}")
        return ReporterAgent().error_result(
            session_id="error",
            game_url=str(url),
            message=describe_error(e)
        )


async def test_game(url: str, options: Optional[Dict[str, Any]] = None) -> TestResult:
    """Convenience wrapper around run()."""
    return await run(url, options)

