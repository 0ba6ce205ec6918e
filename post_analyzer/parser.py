"""High-level API for document analysis."""

import asyncio
import mimetypes
from pathlib import Path
from typing import Optional

from post_analyzer.config import AnalyzerConfig
from post_analyzer.models import (
    AnalysisResult,
    Backend,
    ProgressCallback,
    SubmittedFile,
)
from post_analyzer.orchestrator import ExtractionOrchestrator
from post_analyzer.suggestions import analyze


def analyze_document(
    file_path: Optional[str] = None,
    file_bytes: Optional[bytes] = None,
    file_name: Optional[str] = None,
    media_type: Optional[str] = None,
    config: Optional[AnalyzerConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> AnalysisResult:
    """Extract text from a document and suggest improvements for posting it.

    High-level convenience function that accepts either a file path or raw bytes.
    Unlike ``Session``, failures are raised to the caller.

    Args:
        file_path: Path to document file (alternative to file_bytes)
        file_bytes: Raw document bytes (alternative to file_path)
        file_name: Original filename (required if using file_bytes)
        media_type: Declared media type (guessed from the file name if not provided)
        config: Analyzer configuration (optional, uses defaults if not provided)
        on_progress: Receives extraction progress percentages

    Returns:
        AnalysisResult with extracted text and suggestions

    Raises:
        ValueError: If neither file_path nor file_bytes provided, or if file_bytes
            provided without file_name
        UnsupportedTypeError: If the media type is neither PDF nor image
        ExtractionError: If text extraction fails

    Examples:
        >>> result = analyze_document(file_path="flyer.png")
        >>> for suggestion in result.suggestions:
        ...     print(suggestion)

        >>> with open("deck.pdf", "rb") as f:
        ...     result = analyze_document(
        ...         file_bytes=f.read(),
        ...         file_name="deck.pdf",
        ...     )
    """
    if file_path and file_bytes:
        raise ValueError("Provide either file_path or file_bytes, not both")

    if not file_path and not file_bytes:
        raise ValueError("Must provide either file_path or file_bytes")

    if file_path:
        path = Path(file_path)
        if not path.exists():
            raise ValueError(f"File not found: {file_path}")
        file = SubmittedFile.from_path(path, media_type=media_type)
    else:
        if not file_name:
            raise ValueError("file_name is required when using file_bytes")
        if media_type is None:
            guessed, _ = mimetypes.guess_type(file_name)
            media_type = guessed or ""
        file = SubmittedFile.from_bytes(file_name, media_type, file_bytes)

    config = config or AnalyzerConfig()
    orchestrator = ExtractionOrchestrator(config=config.ocr)
    document = asyncio.run(orchestrator.extract(file, on_progress))

    return AnalysisResult(
        text=document.text,
        suggestions=analyze(document.text),
        media_type=file.media_type,
        file_name=file.name,
        character_count=len(document.text),
        ocr_used=document.backend is Backend.OCR,
    )
