"""Shared test fixtures and fake extraction backends."""

import io
import threading

import fitz
import pytest
from PIL import Image

from post_analyzer.backends import RECOGNIZING_TEXT, TextItem
from post_analyzer.models import SubmittedFile
from post_analyzer.orchestrator import ExtractionOrchestrator


class FakeRecognizer:
    """In-memory recognizer that replays scripted progress events."""

    def __init__(self, text="hello world", events=None, init_error=None, gate=None):
        self.text = text
        self.events = events if events is not None else [
            (RECOGNIZING_TEXT, 0.0),
            (RECOGNIZING_TEXT, 0.5),
            (RECOGNIZING_TEXT, 1.0),
        ]
        self.init_error = init_error
        self.gate = gate
        self.started = threading.Event()
        self.init_calls = 0
        self.language = None
        self.images = []

    def initialize(self, language, progress=None):
        self.init_calls += 1
        if progress:
            progress("loading language traineddata", 0.5)
        if self.init_error:
            raise self.init_error
        self.language = language

    def recognize(self, image, progress=None):
        self.images.append(image)
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        for status, fraction in self.events:
            progress(status, fraction)
        return self.text


class FakePDFDocument:
    def __init__(self, pages):
        self.pages = pages
        self.page_count = len(pages)
        self.closed = False

    def close(self):
        self.closed = True


class FakePDFReader:
    """PDF reader whose pages are lists of text fragments."""

    def __init__(self, pages, open_error=None, fail_on_page=None, gate=None):
        self.pages = pages
        self.open_error = open_error
        self.fail_on_page = fail_on_page
        self.gate = gate
        self.started = threading.Event()
        self.documents = []
        self.requested_pages = []

    def open(self, data):
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.open_error:
            raise self.open_error
        document = FakePDFDocument(self.pages)
        self.documents.append(document)
        return document

    def get_page(self, document, page_number):
        self.requested_pages.append(page_number)
        if page_number == self.fail_on_page:
            raise RuntimeError(f"broken page {page_number}")
        return document.pages[page_number - 1]

    def get_text_content(self, page):
        return [TextItem(text=fragment) for fragment in page]


def make_orchestrator(recognizer=None, pdf_reader=None):
    recognizer = recognizer or FakeRecognizer()
    pdf_reader = pdf_reader or FakePDFReader([["A", "B"]])
    return ExtractionOrchestrator(
        recognizer_factory=lambda config: recognizer,
        pdf_reader_factory=lambda: pdf_reader,
    )


@pytest.fixture
def png_bytes() -> bytes:
    """Small white PNG image."""
    image = Image.new("RGB", (40, 20), "white")
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def image_file(png_bytes) -> SubmittedFile:
    return SubmittedFile.from_bytes("flyer.png", "image/png", png_bytes)


@pytest.fixture
def pdf_file() -> SubmittedFile:
    # Payload is ignored by FakePDFReader
    return SubmittedFile.from_bytes("deck.pdf", "application/pdf", b"%PDF-1.7")


@pytest.fixture
def real_pdf_bytes() -> bytes:
    """Two-page PDF with a text layer, built with PyMuPDF."""
    doc = fitz.open()
    for line in ("Hello world", "Second page"):
        page = doc.new_page()
        page.insert_text((72, 72), line)
    data = doc.tobytes()
    doc.close()
    return data
