"""
Artifact Store - Persists session logs, metadata and reports
"""
import json
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config import settings
from ..models.evidence import ConsoleLog, ErrorLog
from ..utils.errors import ErrorKind, GameQAError

logger = logging.getLogger(__name__)

SESSION_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class ArtifactKind(str, Enum):
    CONSOLE_LOGS = "console_logs"
    ERROR_LOGS = "error_logs"
    METADATA = "metadata"
    REPORT = "report"


class ArtifactStore:
    """
    Stores test artifacts on disk, one directory per session:

        <output_dir>/<session_id>/
            screenshots/screenshot-<index>.png
            logs/console.log
            logs/errors.log
            metadata.json
            report.json
    """

    def __init__(self, output_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the store.

        Args:
            output_dir: Root directory. Defaults to settings.OUTPUT_DIR
        """
        self.output_dir = Path(output_dir) if output_dir else Path(settings.OUTPUT_DIR)

    @staticmethod
    def is_valid_session_id(session_id: Any) -> bool:
        """Session ids are a single path component of letters, digits, '_' and '-'."""
        return isinstance(session_id, str) and bool(SESSION_ID_PATTERN.fullmatch(session_id))

    def session_dir(self, session_id: str) -> Path:
        if not self.is_valid_session_id(session_id):
            raise GameQAError(ErrorKind.VALIDATION_ERROR, f"Invalid session id: {session_id!r}")
        return self.output_dir / session_id

    def screenshot_path(self, session_id: str, index: int) -> str:
        """
        Path for a screenshot file. The parent directory is created.

        Args:
            session_id: Session identifier
            index: Screenshot index

        Returns:
            Path where the screenshot should be written
        """
        screenshots_dir = self.session_dir(session_id) / "screenshots"
        screenshots_dir.mkdir(parents=True, exist_ok=True)
        return str(screenshots_dir / f"screenshot-{index}.png")

    def save(self, kind: Union[ArtifactKind, str], session_id: str, content: Any) -> str:
        """
        Save an artifact.

        Args:
            kind: console_logs, error_logs, metadata or report
            session_id: Session identifier
            content: Log entries for the log kinds, a dict for metadata/report

        Returns:
            Path to the saved file
        """
        try:
            kind = ArtifactKind(kind)
        except ValueError:
            raise GameQAError(ErrorKind.VALIDATION_ERROR, f"Unknown artifact kind: {kind}")

        session_dir = self.session_dir(session_id)

        if kind is ArtifactKind.CONSOLE_LOGS:
            path = session_dir / "logs" / "console.log"
            text = self._format_console_logs(content)
        elif kind is ArtifactKind.ERROR_LOGS:
            path = session_dir / "logs" / "errors.log"
            text = self._format_error_logs(content)
        elif kind is ArtifactKind.METADATA:
            path = session_dir / "metadata.json"
            text = json.dumps(content, indent=2, default=str)
        else:
            path = session_dir / "report.json"
            text = json.dumps(content, indent=2, default=str)

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding='utf-8')

        logger.info(f"Saved {kind.value} for {session_id}: {path}")
        return str(path)

    def load_report(self, session_id: str) -> Optional[Dict]:
        """Read a persisted report, or None if there is none."""
        if not self.is_valid_session_id(session_id):
            return None
        path = self.session_dir(session_id) / "report.json"
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding='utf-8'))

    def list_artifacts(self, session_id: str) -> List[Dict]:
        """
        List the files stored for a session.

        Args:
            session_id: Session identifier

        Returns:
            One dict per file with name, path, size and type
        """
        session_dir = self.session_dir(session_id)
        if not session_dir.exists():
            return []

        artifacts = []
        for file in sorted(session_dir.glob("**/*")):
            if file.is_file():
                artifacts.append({
                    "name": file.name,
                    "path": str(file.relative_to(self.output_dir)),
                    "size": file.stat().st_size,
                    "type": file.suffix[1:] if file.suffix else "unknown"
                })
        return artifacts

    @staticmethod
    def _format_console_logs(logs: List[ConsoleLog]) -> str:
        return "\n".join(
            f"[{log.timestamp}] [{log.level.upper()}] {log.message}"
            for log in logs
        )

    @staticmethod
    def _format_error_logs(errors: List[ErrorLog]) -> str:
        return "\n".join(
            f"[{err.timestamp}] [{err.type}] {err.message}\n{err.stack or ''}\n{err.source or ''}\n---\n"
            for err in errors
        )
