"""
Test Orchestrator - Drives one playability test session through its phases
"""
import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from pydantic import ValidationError

from .base_agent import BaseAgent
from .evaluator_agent import EvaluatorAgent
from .reporter_agent import ReporterAgent
from ..browser.console import ConsoleCollector
from ..browser.controller import BrowserSession, PlaywrightBrowser
from ..browser.interactions import GAMEPLAY_SEQUENCE, InteractionHandler, find_start_button
from ..capture.artifact_store import ArtifactKind, ArtifactStore
from ..capture.evidence import EvidenceAggregator
from ..config import parse_resolution, settings, validate_settings
from ..evaluation.llm_client import LanguageModel
from ..models.evaluation import EvaluationResult
from ..models.evidence import Evidence, UIDetectionResult
from ..models.report import TestMetadata, TestResult
from ..models.session import NEXT_PHASE, TERMINAL_PHASES, Phase, TestOptions, TestSession
from ..utils.errors import ErrorKind, GameQAError, classify_error, describe_error
from ..utils.helpers import generate_session_id, is_valid_url, timestamp_now
from ..utils.retry import retry_with_classification

BrowserFactory = Callable[[TestOptions], BrowserSession]


def default_browser_factory(options: TestOptions) -> BrowserSession:
    return PlaywrightBrowser(resolution=options.screenshot_resolution)


class _SessionContext:
    """Mutable state of a single run. Never shared between runs."""

    def __init__(
        self,
        session: TestSession,
        options: TestOptions,
        store: ArtifactStore,
        aggregator: EvidenceAggregator
    ):
        self.session = session
        self.options = options
        self.store = store
        self.aggregator = aggregator
        self.browser: Optional[BrowserSession] = None
        self.console: Optional[ConsoleCollector] = None
        self.ui_detection: Optional[UIDetectionResult] = None
        self.evidence: Optional[Evidence] = None
        self.evaluation: Optional[EvaluationResult] = None
        self.report: Optional[TestResult] = None
        self.closed = False


class TestOrchestrator(BaseAgent):
    """
    Runs the session state machine:

        INIT -> LOAD -> OBSERVE -> DETECT_UI -> INTERACT -> CAPTURE_EVIDENCE
             -> EVALUATE -> BUILD_REPORT -> PERSIST -> DONE

    Any failure moves the session to ERROR and produces an error report.
    The browser session is closed exactly once on every exit path.
    """

    __test__ = False

    def __init__(
        self,
        llm: Optional[LanguageModel] = None,
        browser_factory: Optional[BrowserFactory] = None,
        store: Optional[ArtifactStore] = None,
        clock: Callable[[], float] = time.monotonic,
        interaction_delay_ms: Optional[int] = None
    ):
        """
        Args:
            llm: Shared language model; None means heuristic evaluation only
            browser_factory: Builds one browser session per run
            store: Artifact store; defaults to one rooted at the run's output_dir
            clock: Monotonic clock in seconds, used for the session deadline
            interaction_delay_ms: Pause between simulated actions
        """
        super().__init__(
            name="Orchestrator",
            description="Runs a playability test session"
        )
        self.evaluator = EvaluatorAgent(llm)
        self.reporter = ReporterAgent()
        self.browser_factory = browser_factory or default_browser_factory
        self.store = store
        self.clock = clock
        self.interaction_delay_ms = (
            settings.INTERACTION_DELAY_MS if interaction_delay_ms is None else interaction_delay_ms
        )

    async def execute(self, context: Dict[str, Any]) -> TestResult:
        """Run a session for the URL in the context."""
        return await self.run(context.get("url"), context.get("options"))

    async def run(
        self,
        url: str,
        options: Optional[Union[TestOptions, Dict[str, Any]]] = None
    ) -> TestResult:
        """
        Test one game.

        Args:
            url: Game URL (http or https)
            options: TestOptions or a dict of its fields

        Returns:
            TestResult; failures inside the session produce status "error"

        Raises:
            GameQAError: VALIDATION_ERROR for a malformed URL or bad options
            ConfigurationError: If settings cannot drive a session
        """
        options = self._resolve_options(options)
        if not is_valid_url(url):
            raise GameQAError(ErrorKind.VALIDATION_ERROR, f"Invalid game URL: {url}", {"url": url})
        validate_settings()
        parse_resolution(options.screenshot_resolution)

        ctx = self._new_context(url, options)
        session = ctx.session
        self.log_info(f"Starting session {session.session_id} for {url} (timeout {options.timeout:g}s)")

        try:
            ctx.browser = self.browser_factory(options)
            report = await self._run_pipeline(ctx)
        except Exception as e:
            report = self._handle_error(ctx, e)
        finally:
            await self._cleanup(ctx)

        self.log_info(
            f"Session {session.session_id} finished: status={report.status}, "
            f"score={report.playability_score}, phases={[p.value for p in session.history]}"
        )
        return report

    def _resolve_options(self, options) -> TestOptions:
        if options is None:
            return TestOptions()
        if isinstance(options, TestOptions):
            return options
        try:
            return TestOptions(**options)
        except (TypeError, ValidationError) as e:
            raise GameQAError(ErrorKind.VALIDATION_ERROR, f"Invalid test options: {e}") from e

    def _new_context(self, url: str, options: TestOptions) -> _SessionContext:
        now = self.clock()
        session = TestSession(
            session_id=generate_session_id(),
            game_url=url,
            started_at=timestamp_now(),
            start_time=now,
            deadline=now + options.timeout,
            timeout=options.timeout
        )
        store = self.store or ArtifactStore(options.output_dir)
        aggregator = EvidenceAggregator(session.session_id, url)
        return _SessionContext(session, options, store, aggregator)

    async def _run_pipeline(self, ctx: _SessionContext) -> TestResult:
        await self._run_phase(ctx, Phase.LOAD, self._load)
        await self._run_phase(ctx, Phase.OBSERVE, self._observe)
        await self._run_phase(ctx, Phase.DETECT_UI, self._detect_ui)
        await self._run_phase(ctx, Phase.INTERACT, self._interact)
        await self._run_phase(ctx, Phase.CAPTURE_EVIDENCE, self._capture_evidence)
        await self._run_phase(ctx, Phase.EVALUATE, self._evaluate)
        await self._run_phase(ctx, Phase.BUILD_REPORT, self._build_report)
        await self._run_phase(ctx, Phase.PERSIST, self._persist)
        self._enter(ctx, Phase.DONE)
        return ctx.report

    async def _run_phase(
        self,
        ctx: _SessionContext,
        phase: Phase,
        step: Callable[[_SessionContext], Awaitable[None]]
    ):
        self._enter(ctx, phase)

        async def attempt():
            self._check_deadline(ctx)
            try:
                await step(ctx)
            except GameQAError:
                raise
            except Exception as e:
                raise GameQAError(classify_error(e), describe_error(e), {"phase": phase.value}) from e
            self._check_deadline(ctx)

        await retry_with_classification(attempt, ErrorKind.TIMEOUT, ctx.options.max_retries)

    def _enter(self, ctx: _SessionContext, phase: Phase):
        session = ctx.session
        if session.is_terminal:
            raise GameQAError(ErrorKind.FATAL, f"Session already ended in {session.phase.value}")
        if phase is not Phase.ERROR and NEXT_PHASE.get(session.phase) is not phase:
            raise GameQAError(
                ErrorKind.FATAL,
                f"Invalid transition {session.phase.value} -> {phase.value}"
            )

        session.phase = phase
        session.history.append(phase)
        self.log_debug(f"Session {session.session_id} entered {phase.value}")

        if phase not in TERMINAL_PHASES:
            self._check_deadline(ctx)

    def _check_deadline(self, ctx: _SessionContext):
        session = ctx.session
        if self.clock() > session.deadline:
            raise GameQAError(
                ErrorKind.TIMEOUT,
                f"Session deadline of {session.timeout:g}s exceeded during {session.phase.value}",
                {"phase": session.phase.value}
            )

    def _elapsed(self, ctx: _SessionContext) -> float:
        return max(0.0, self.clock() - ctx.session.start_time)

    async def _pause(self):
        if self.interaction_delay_ms > 0:
            await asyncio.sleep(self.interaction_delay_ms / 1000)

    # Phases

    async def _load(self, ctx: _SessionContext):
        remaining_ms = int((ctx.session.deadline - self.clock()) * 1000)
        timeout_ms = max(1, min(settings.BROWSER_TIMEOUT, remaining_ms))
        url = ctx.session.game_url

        self.log_info(f"Loading game: {url}")
        await retry_with_classification(
            lambda: ctx.browser.load(url, timeout_ms),
            ErrorKind.BROWSER_CRASH,
            ctx.options.max_retries
        )

    async def _observe(self, ctx: _SessionContext):
        await self._capture_screenshot(ctx, 0, "Initial page load")

        if ctx.console is None:
            ctx.console = ConsoleCollector(ctx.browser)
        try:
            await ctx.console.start()
        except GameQAError as e:
            self.log_warning(f"Console capture unavailable, continuing: {e.message}")

    async def _detect_ui(self, ctx: _SessionContext):
        ctx.ui_detection = await self._try_detect_ui(ctx)
        ctx.aggregator.set_ui_detection(ctx.ui_detection)

    async def _try_detect_ui(self, ctx: _SessionContext) -> Optional[UIDetectionResult]:
        try:
            result = await ctx.browser.detect_ui()
        except Exception as e:
            self.log_warning(f"UI detection failed, continuing: {describe_error(e)}")
            return None

        self.log_info(
            f"UI detection: {len(result.buttons)} buttons, "
            f"{len(result.canvas)} canvas, {len(result.menus)} menus"
        )
        return result

    async def _interact(self, ctx: _SessionContext):
        handler = InteractionHandler(ctx.browser, ctx.aggregator, self.interaction_delay_ms)

        start_button = find_start_button(ctx.ui_detection)
        if start_button is not None:
            try:
                await handler.click(start_button)
            except GameQAError as e:
                self.log_warning(f"Failed to click start button: {e.message}")
            else:
                await self._capture_screenshot(ctx, 1, "After UI detection and start button click")

        await self._pause()
        await handler.execute_sequence(GAMEPLAY_SEQUENCE)
        await self._capture_screenshot(ctx, 2, "Mid-gameplay interaction")

    async def _capture_evidence(self, ctx: _SessionContext):
        await self._pause()
        await self._capture_screenshot(ctx, 3, "Final game state")

        if ctx.console is not None:
            console_logs, error_logs = await ctx.console.collect()
            ctx.aggregator.add_console_logs(console_logs)
            ctx.aggregator.add_errors(error_logs)

        ctx.evidence = ctx.aggregator.snapshot(self._elapsed(ctx))

    async def _evaluate(self, ctx: _SessionContext):
        ctx.evaluation = await self.evaluator.evaluate(ctx.evidence, ctx.options.max_retries)

    async def _build_report(self, ctx: _SessionContext):
        ctx.report = self.reporter.build(ctx.evidence, ctx.evaluation)

    async def _persist(self, ctx: _SessionContext):
        session_id = ctx.session.session_id
        evidence = ctx.evidence

        ctx.store.save(ArtifactKind.CONSOLE_LOGS, session_id, list(evidence.console_logs))
        ctx.store.save(ArtifactKind.ERROR_LOGS, session_id, list(evidence.errors))
        ctx.store.save(ArtifactKind.METADATA, session_id, {
            "session_id": session_id,
            "game_url": evidence.game_url,
            "started_at": ctx.session.started_at,
            "test_duration_seconds": evidence.duration_seconds,
            "timestamp": evidence.timestamp,
            "evaluation_source": ctx.evaluation.source,
            "phases": [p.value for p in ctx.session.history],
        })
        ctx.store.save(ArtifactKind.REPORT, session_id, ctx.report.model_dump(mode="json"))

    # Screenshots

    async def _capture_screenshot(self, ctx: _SessionContext, index: int, description: str):
        aggregator = ctx.aggregator
        if aggregator.has_screenshot(index):
            return

        path = ctx.store.screenshot_path(ctx.session.session_id, index)
        try:
            await retry_with_classification(
                lambda: ctx.browser.screenshot(path),
                ErrorKind.SCREENSHOT_FAILURE
            )
        except GameQAError as e:
            self.log_warning(f"Screenshot {index} ({description}) failed: {e.message}")
            aggregator.add_failed_screenshot(index, path, description)
            return

        aggregator.add_screenshot(index, path, description)
        self.log_debug(f"Screenshot {index} captured: {path}")

    # Terminal handling

    def _handle_error(self, ctx: _SessionContext, error: Exception) -> TestResult:
        session = ctx.session
        failed_phase = session.phase
        kind = classify_error(error)
        message = describe_error(error)

        self.log_error(f"Session {session.session_id} failed in {failed_phase.value} ({kind.value}): {message}")

        if not session.is_terminal:
            self._enter(ctx, Phase.ERROR)

        aggregator = ctx.aggregator
        counts = TestMetadata(
            interactions_count=aggregator.interaction_count,
            errors_count=aggregator.error_count + 1,
            screenshots_count=aggregator.screenshot_count,
            ui_elements_detected=aggregator.ui_element_count
        )
        return self.reporter.error_result(
            session_id=session.session_id,
            game_url=session.game_url,
            message=message,
            duration_seconds=self._elapsed(ctx),
            counts=counts,
            screenshots=aggregator.captured_paths()
        )

    async def _cleanup(self, ctx: _SessionContext):
        if ctx.browser is None or ctx.closed:
            return
        ctx.closed = True
        try:
            await ctx.browser.close()
        except Exception as e:
            self.log_warning(f"Browser cleanup failed: {describe_error(e)}")
