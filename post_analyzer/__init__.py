"""Document text extraction and social-media posting suggestions."""

from post_analyzer.backends import PyMuPDFReader, TesseractRecognizer, TextItem
from post_analyzer.config import AnalyzerConfig, OCRConfig
from post_analyzer.exceptions import (
    AnalyzerError,
    ExtractionError,
    SessionBusyError,
    UnsupportedTypeError,
)
from post_analyzer.models import (
    AnalysisResult,
    Backend,
    ExtractedDocument,
    SubmittedFile,
)
from post_analyzer.orchestrator import ExtractionOrchestrator
from post_analyzer.parser import analyze_document
from post_analyzer.router import FileTypeRouter
from post_analyzer.session import Phase, Session, SessionState
from post_analyzer.suggestions import analyze

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "analyze_document",
    "analyze",
    # Core classes
    "Session",
    "ExtractionOrchestrator",
    "FileTypeRouter",
    "TesseractRecognizer",
    "PyMuPDFReader",
    # Data models
    "SubmittedFile",
    "ExtractedDocument",
    "AnalysisResult",
    "SessionState",
    "Phase",
    "Backend",
    "TextItem",
    # Configuration
    "OCRConfig",
    "AnalyzerConfig",
    # Exceptions
    "AnalyzerError",
    "UnsupportedTypeError",
    "ExtractionError",
    "SessionBusyError",
]
