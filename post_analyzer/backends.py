"""Text extraction engines: Tesseract OCR and PyMuPDF text layer reader."""

import os
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

import fitz  # PyMuPDF
import pytesseract
from PIL import Image

from post_analyzer.config import OCRConfig
from post_analyzer.logger import get_logger

logger = get_logger(__name__)

# Receives (status, fraction in [0, 1]) events from the recognizer
RecognizerEvents = Callable[[str, float], None]

RECOGNIZING_TEXT = "recognizing text"


class Recognizer(Protocol):
    """Image-to-text engine with an expensive one-time initialization."""

    def initialize(self, language: str, progress: Optional[RecognizerEvents] = None) -> None: ...

    def recognize(self, image: Image.Image, progress: Optional[RecognizerEvents] = None) -> str: ...


class PDFDocument(Protocol):
    page_count: int

    def close(self) -> None: ...


class PDFReader(Protocol):
    """Reader for the text layer of a PDF document."""

    def open(self, data: bytes) -> PDFDocument: ...

    def get_page(self, document: PDFDocument, page_number: int) -> Any: ...

    def get_text_content(self, page: Any) -> list["TextItem"]: ...


@dataclass
class TextItem:
    """One text run of a PDF page."""

    text: str


def _emit(progress: Optional[RecognizerEvents], status: str, fraction: float) -> None:
    if progress is not None:
        progress(status, fraction)


class TesseractRecognizer:
    """Recognizer backed by the Tesseract binary through pytesseract."""

    def __init__(self, config: Optional[OCRConfig] = None):
        self.config = config or OCRConfig()
        self.language: Optional[str] = None

    def initialize(self, language: str, progress: Optional[RecognizerEvents] = None) -> None:
        """Locate the Tesseract binary and check the language model is installed.

        Raises:
            pytesseract.TesseractNotFoundError: If the binary is missing
            ValueError: If the language traineddata is not installed
        """
        if self.config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.config.tesseract_cmd
        if self.config.tessdata_prefix:
            os.environ["TESSDATA_PREFIX"] = self.config.tessdata_prefix

        _emit(progress, "loading tesseract core", 0.0)
        version = pytesseract.get_tesseract_version()
        _emit(progress, "loading tesseract core", 1.0)

        _emit(progress, "loading language traineddata", 0.0)
        available = pytesseract.get_languages(config="")
        if language not in available:
            raise ValueError(
                f"Tesseract language '{language}' is not installed "
                f"(available: {', '.join(sorted(available)) or 'none'})"
            )
        _emit(progress, "loading language traineddata", 1.0)

        self.language = language
        _emit(progress, "initialized api", 1.0)

        logger.info(
            "Tesseract recognizer initialized",
            extra_data={
                "tesseract_version": version,
                "language": language,
                "options": self.config.tesseract_options(),
            },
        )

    def recognize(self, image: Image.Image, progress: Optional[RecognizerEvents] = None) -> str:
        if self.language is None:
            raise RuntimeError("Recognizer used before initialize()")

        _emit(progress, RECOGNIZING_TEXT, 0.0)
        text = pytesseract.image_to_string(
            image,
            lang=self.language,
            config=self.config.tesseract_options(),
        )
        _emit(progress, RECOGNIZING_TEXT, 1.0)
        return text


class PyMuPDFReader:
    """PDF text layer reader on top of PyMuPDF.

    Text items are the spans of each page in PyMuPDF reading order, the
    closest match to a PDF content stream's individual text runs.
    """

    def open(self, data: bytes) -> fitz.Document:
        return fitz.open(stream=data, filetype="pdf")

    def get_page(self, document: fitz.Document, page_number: int) -> fitz.Page:
        # Page numbers are 1-based, PyMuPDF indexes from 0
        return document.load_page(page_number - 1)

    def get_text_content(self, page: fitz.Page) -> list[TextItem]:
        content = page.get_text("dict")
        items = []
        for block in content.get("blocks", []):
            # type 1 blocks are images
            if block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    items.append(TextItem(text=span.get("text", "")))
        return items
