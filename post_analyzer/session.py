"""Observable state of one document-analysis session."""

import asyncio
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Optional

from post_analyzer.config import AnalyzerConfig
from post_analyzer.exceptions import (
    ExtractionError,
    SessionBusyError,
    UnsupportedTypeError,
)
from post_analyzer.logger import get_logger, set_session_id
from post_analyzer.models import ExtractedDocument, SubmittedFile
from post_analyzer.orchestrator import ExtractionOrchestrator
from post_analyzer.suggestions import analyze

logger = get_logger(__name__)


UNSUPPORTED_TYPE_MESSAGE = "Unsupported file type. Upload PDF or an image."
EXTRACTION_FAILED_MESSAGE = "An error occurred while processing the file."


class Phase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SessionState:
    """Everything a host needs to render the current session."""

    phase: Phase = Phase.IDLE
    loading: bool = False
    progress: int = 0
    document: Optional[ExtractedDocument] = None
    file_name: Optional[str] = None
    suggestions: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def text(self) -> str:
        return self.document.text if self.document is not None else ""


class Session:
    """State machine around one extraction at a time.

    Transitions: IDLE -> SUBMITTING -> EXTRACTING -> ANALYZING -> DONE, with
    FAILED reachable from SUBMITTING (unsupported type) and EXTRACTING
    (backend failure). Every submission starts from a full reset. A reset while
    an extraction is running supersedes it: its result is dropped when it
    eventually arrives. A cancelled submission leaves the session IDLE.
    """

    def __init__(
        self,
        orchestrator: Optional[ExtractionOrchestrator] = None,
        config: Optional[AnalyzerConfig] = None,
        on_change: Optional[Callable[[SessionState], None]] = None,
    ) -> None:
        config = config or AnalyzerConfig()
        self.orchestrator = orchestrator or ExtractionOrchestrator(config=config.ocr)
        self._on_change = on_change
        self._state = SessionState()
        self._generation = 0

    @property
    def state(self) -> SessionState:
        """Snapshot of the current state."""
        return replace(self._state, suggestions=list(self._state.suggestions))

    def reset(self) -> None:
        """Return to IDLE, discarding any result, error and progress."""
        self._generation += 1
        self._state = SessionState()
        logger.debug("Session reset", extra_data={"generation": self._generation})
        self._notify()

    async def submit(self, file: SubmittedFile) -> SessionState:
        """Extract and analyze a file, recording every step in the state.

        Unsupported types and extraction failures end in the FAILED phase with
        a user-facing message rather than an exception.

        Raises:
            SessionBusyError: If another extraction is still running
        """
        if self._state.loading:
            raise SessionBusyError(
                f"Still processing {self._state.file_name}; reset or wait before submitting"
            )

        self.reset()
        generation = self._generation
        set_session_id()

        self._transition(Phase.SUBMITTING, file_name=file.name, loading=True)

        try:
            backend = self.orchestrator.router.route(file)
        except UnsupportedTypeError:
            self._transition(
                Phase.FAILED, error=UNSUPPORTED_TYPE_MESSAGE, loading=False, progress=0
            )
            return self.state

        self._transition(Phase.EXTRACTING)

        def on_progress(percent: int) -> None:
            if generation != self._generation:
                return
            self._state.progress = percent
            self._notify()

        try:
            document = await self.orchestrator.extract(file, on_progress, backend=backend)
        except ExtractionError:
            if self._superseded(generation, file):
                return self.state
            self._transition(
                Phase.FAILED, error=EXTRACTION_FAILED_MESSAGE, loading=False, progress=0
            )
            return self.state
        except asyncio.CancelledError:
            if generation == self._generation:
                logger.warning(
                    "Extraction cancelled, session returned to idle",
                    extra_data={"file_name": file.name},
                )
                self.reset()
            raise

        if self._superseded(generation, file):
            return self.state

        self._transition(Phase.ANALYZING, document=document)
        suggestions = analyze(document.text)
        self._transition(Phase.DONE, suggestions=suggestions, loading=False, progress=0)

        logger.info(
            "Document analyzed",
            extra_data={
                "file_name": file.name,
                "backend": document.backend.value,
                "suggestion_count": len(suggestions),
            },
        )
        return self.state

    def export_text(self, sink: Callable[[str], None]) -> str:
        """Hand the extracted text to a clipboard-like sink.

        Returns:
            The exported text, or "" when there is no document (sink not called)
        """
        if self._state.document is None:
            return ""
        text = self._state.document.text
        sink(text)
        return text

    def _superseded(self, generation: int, file: SubmittedFile) -> bool:
        if generation == self._generation:
            return False
        logger.info(
            "Discarding result of superseded extraction",
            extra_data={"file_name": file.name},
        )
        return True

    def _transition(self, phase: Phase, **changes) -> None:
        previous = self._state.phase
        self._state = replace(self._state, phase=phase, **changes)
        logger.debug(
            "Session transition",
            extra_data={"from": previous.value, "to": phase.value},
        )
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.state)
