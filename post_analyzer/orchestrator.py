"""Asynchronous text extraction with progress reporting."""

import asyncio
import io
from typing import Callable, Optional

from PIL import Image

from post_analyzer.backends import (
    RECOGNIZING_TEXT,
    PDFReader,
    PyMuPDFReader,
    Recognizer,
    TesseractRecognizer,
)
from post_analyzer.config import OCRConfig
from post_analyzer.exceptions import ExtractionError
from post_analyzer.logger import Timer, get_logger
from post_analyzer.models import (
    Backend,
    ExtractedDocument,
    ProgressCallback,
    SubmittedFile,
)
from post_analyzer.router import FileTypeRouter

logger = get_logger(__name__)


class ProgressReporter:
    """Normalizes backend fractions into a non-decreasing 0-100 percentage."""

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback
        self.percent = 0

    def report(self, fraction: float) -> None:
        percent = min(100, max(0, round(fraction * 100)))
        self.percent = max(self.percent, percent)
        if self.callback is not None:
            self.callback(self.percent)

    def on_recognizer_event(self, status: str, fraction: float) -> None:
        if status == RECOGNIZING_TEXT:
            self.report(fraction)
        else:
            logger.debug(
                "Recognizer status",
                extra_data={"status": status, "fraction": fraction},
            )


class ExtractionOrchestrator:
    """Drives the selected backend to completion for one file at a time.

    The OCR recognizer is expensive to build (it loads a language model), so it
    is created on first use and kept for every later image. PDF readers are
    opened per document and always closed afterwards.
    """

    def __init__(
        self,
        config: Optional[OCRConfig] = None,
        router: Optional[FileTypeRouter] = None,
        recognizer_factory: Optional[Callable[[OCRConfig], Recognizer]] = None,
        pdf_reader_factory: Optional[Callable[[], PDFReader]] = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            config: OCR configuration. If None, uses defaults.
            router: File type router. If None, creates default.
            recognizer_factory: Builds the OCR engine from the config.
                Defaults to TesseractRecognizer.
            pdf_reader_factory: Builds a PDF reader per document.
                Defaults to PyMuPDFReader.
        """
        self.config = config or OCRConfig()
        self.router = router or FileTypeRouter()
        self._recognizer_factory = recognizer_factory or TesseractRecognizer
        self._pdf_reader_factory = pdf_reader_factory or PyMuPDFReader
        self._recognizer: Optional[Recognizer] = None
        self._recognizer_lock = asyncio.Lock()

    @property
    def recognizer_ready(self) -> bool:
        return self._recognizer is not None

    async def extract(
        self,
        file: SubmittedFile,
        on_progress: Optional[ProgressCallback] = None,
        backend: Optional[Backend] = None,
    ) -> ExtractedDocument:
        """Extract plain text from a submitted file.

        Args:
            file: Document to extract
            on_progress: Receives integer percentages in [0, 100]
            backend: Backend already selected by the caller. Routed if None.

        Returns:
            ExtractedDocument with the text in page order

        Raises:
            UnsupportedTypeError: If no backend handles the media type
            ExtractionError: If reading or extracting the file fails
        """
        if backend is None:
            backend = self.router.route(file)

        reporter = ProgressReporter(on_progress)

        logger.debug(
            "Starting document extraction",
            extra_data={
                "file_name": file.name,
                "media_type": file.media_type,
                "backend": backend.value,
            },
        )

        try:
            with Timer("extraction") as timer:
                data = await asyncio.to_thread(file.read_bytes)
                if backend is Backend.PDF:
                    document = await self._extract_pdf(data, file.name, reporter)
                else:
                    document = await self._extract_image(data, file.name, reporter)
        except Exception as exc:
            logger.error(
                "Document extraction failed",
                extra_data={
                    "file_name": file.name,
                    "backend": backend.value,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
                exc_info=True,
            )
            raise ExtractionError(f"Failed to extract document: {exc}") from exc

        logger.info(
            "Document extraction completed",
            extra_data={
                "file_name": file.name,
                "backend": backend.value,
                "page_count": document.page_count,
                "characters_extracted": len(document.text),
                "extraction_time_ms": timer.get_elapsed_ms(),
            },
        )
        return document

    async def _get_recognizer(self) -> Recognizer:
        async with self._recognizer_lock:
            if self._recognizer is None:
                recognizer = self._recognizer_factory(self.config)
                with Timer("recognizer_init") as timer:
                    await asyncio.to_thread(
                        recognizer.initialize,
                        self.config.language,
                        self._log_init_event,
                    )
                self._recognizer = recognizer
                logger.info(
                    "OCR recognizer ready",
                    extra_data={
                        "language": self.config.language,
                        "init_time_ms": timer.get_elapsed_ms(),
                    },
                )
        return self._recognizer

    @staticmethod
    def _log_init_event(status: str, fraction: float) -> None:
        logger.debug(
            "Recognizer initialization",
            extra_data={"status": status, "fraction": fraction},
        )

    async def _extract_image(
        self, data: bytes, file_name: str, reporter: ProgressReporter
    ) -> ExtractedDocument:
        """Extract from image using the cached recognizer."""
        recognizer = await self._get_recognizer()
        image = await asyncio.to_thread(_decode_image, data)

        logger.debug(
            "Starting OCR on image",
            extra_data={
                "file_name": file_name,
                "image_format": image.format,
                "image_width": image.size[0],
                "image_height": image.size[1],
            },
        )

        # Recognition runs in a worker thread, events are replayed on the loop
        # in the order they were emitted
        loop = asyncio.get_running_loop()

        def on_event(status: str, fraction: float) -> None:
            loop.call_soon_threadsafe(reporter.on_recognizer_event, status, fraction)

        text = await asyncio.to_thread(recognizer.recognize, image, on_event)
        return ExtractedDocument(text=text, backend=Backend.OCR, page_count=1)

    async def _extract_pdf(
        self, data: bytes, file_name: str, reporter: ProgressReporter
    ) -> ExtractedDocument:
        """Concatenate the text layer of every page, newline-prefixed per page."""
        reader = self._pdf_reader_factory()
        loop = asyncio.get_running_loop()

        def on_page(page_number: int, page_count: int) -> None:
            loop.call_soon_threadsafe(reporter.report, page_number / page_count)

        # Open, read and close share one worker call; close() runs even if the
        # awaiting task is cancelled
        text, page_count = await asyncio.to_thread(_read_pdf, reader, data, file_name, on_page)
        return ExtractedDocument(text=text, backend=Backend.PDF, page_count=page_count)


def _decode_image(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def _read_pdf(
    reader: PDFReader,
    data: bytes,
    file_name: str,
    on_page: Callable[[int, int], None],
) -> tuple[str, int]:
    document = reader.open(data)
    try:
        page_count = document.page_count
        logger.debug(
            "Opened PDF document",
            extra_data={"file_name": file_name, "page_count": page_count},
        )

        text = ""
        for page_number in range(1, page_count + 1):
            page = reader.get_page(document, page_number)
            items = reader.get_text_content(page)
            text += "\n" + " ".join(item.text for item in items)
            on_page(page_number, page_count)
        return text, page_count
    finally:
        document.close()
