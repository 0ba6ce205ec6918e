"""Tests for extraction orchestration, progress and error mapping."""

import asyncio
import threading

import pytest
from conftest import FakePDFReader, FakeRecognizer, make_orchestrator

from post_analyzer.backends import RECOGNIZING_TEXT
from post_analyzer.exceptions import ExtractionError, UnsupportedTypeError
from post_analyzer.models import Backend, SubmittedFile
from post_analyzer.orchestrator import ProgressReporter


class TestPDFExtraction:
    def test_pages_joined_in_order(self, pdf_file):
        reader = FakePDFReader([["A", "B"], ["C"], ["D", "E"]])
        orchestrator = make_orchestrator(pdf_reader=reader)

        document = asyncio.run(orchestrator.extract(pdf_file))

        assert document.text == "\nA B\nC\nD E"
        assert document.backend is Backend.PDF
        assert document.page_count == 3
        assert reader.requested_pages == [1, 2, 3]

    def test_empty_page_still_separated(self, pdf_file):
        reader = FakePDFReader([["A"], [], ["B"]])
        document = asyncio.run(make_orchestrator(pdf_reader=reader).extract(pdf_file))
        assert document.text == "\nA\n\nB"

    def test_progress_per_page_ends_at_100(self, pdf_file):
        reader = FakePDFReader([["A"], ["B"], ["C"]])
        seen = []

        asyncio.run(make_orchestrator(pdf_reader=reader).extract(pdf_file, seen.append))

        assert seen == [33, 67, 100]

    def test_document_closed_after_success(self, pdf_file):
        reader = FakePDFReader([["A"]])
        asyncio.run(make_orchestrator(pdf_reader=reader).extract(pdf_file))
        assert reader.documents[0].closed

    def test_document_closed_after_page_failure(self, pdf_file):
        reader = FakePDFReader([["A"], ["B"]], fail_on_page=2)

        with pytest.raises(ExtractionError) as excinfo:
            asyncio.run(make_orchestrator(pdf_reader=reader).extract(pdf_file))

        assert reader.documents[0].closed
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_document_closed_when_cancelled_while_opening(self, pdf_file):
        gate = threading.Event()
        reader = FakePDFReader([["A"], ["B"]], gate=gate)
        orchestrator = make_orchestrator(pdf_reader=reader)

        async def scenario():
            task = asyncio.create_task(orchestrator.extract(pdf_file))
            while not reader.started.is_set():
                await asyncio.sleep(0.01)
            task.cancel()
            gate.set()
            with pytest.raises(asyncio.CancelledError):
                await task

        # asyncio.run waits for the worker thread before returning
        asyncio.run(scenario())
        assert len(reader.documents) == 1
        assert reader.documents[0].closed

    def test_corrupt_pdf(self, pdf_file):
        reader = FakePDFReader([], open_error=ValueError("not a PDF"))
        with pytest.raises(ExtractionError):
            asyncio.run(make_orchestrator(pdf_reader=reader).extract(pdf_file))

    def test_fresh_reader_per_document(self, pdf_file):
        created = []

        def factory():
            reader = FakePDFReader([["A"]])
            created.append(reader)
            return reader

        from post_analyzer.orchestrator import ExtractionOrchestrator

        orchestrator = ExtractionOrchestrator(pdf_reader_factory=factory)

        async def run_twice():
            await orchestrator.extract(pdf_file)
            await orchestrator.extract(pdf_file)

        asyncio.run(run_twice())
        assert len(created) == 2


class TestImageExtraction:
    def test_returns_recognizer_text_verbatim(self, image_file):
        recognizer = FakeRecognizer(text="  Big Sale!\n#deals \n")
        orchestrator = make_orchestrator(recognizer=recognizer)

        document = asyncio.run(orchestrator.extract(image_file))

        assert document.text == "  Big Sale!\n#deals \n"
        assert document.backend is Backend.OCR
        assert recognizer.images[0].size == (40, 20)

    def test_recognizer_initialized_once(self, image_file):
        recognizer = FakeRecognizer()
        orchestrator = make_orchestrator(recognizer=recognizer)

        async def run_twice():
            await orchestrator.extract(image_file)
            await orchestrator.extract(image_file)

        asyncio.run(run_twice())

        assert recognizer.init_calls == 1
        assert recognizer.language == "eng"
        assert len(recognizer.images) == 2
        assert orchestrator.recognizer_ready

    def test_concurrent_first_use_shares_initialization(self, image_file):
        recognizer = FakeRecognizer()
        orchestrator = make_orchestrator(recognizer=recognizer)

        async def run_together():
            await asyncio.gather(
                orchestrator.extract(image_file),
                orchestrator.extract(image_file),
            )

        asyncio.run(run_together())
        assert recognizer.init_calls == 1

    def test_only_recognizing_events_forwarded(self, image_file):
        recognizer = FakeRecognizer(
            events=[
                ("initializing api", 0.9),
                (RECOGNIZING_TEXT, 0.1),
                (RECOGNIZING_TEXT, 0.456),
                ("something else", 0.2),
                (RECOGNIZING_TEXT, 1.0),
            ]
        )
        seen = []

        asyncio.run(make_orchestrator(recognizer=recognizer).extract(image_file, seen.append))

        assert seen == [10, 46, 100]

    def test_progress_never_decreases(self, image_file):
        recognizer = FakeRecognizer(
            events=[(RECOGNIZING_TEXT, 0.6), (RECOGNIZING_TEXT, 0.3), (RECOGNIZING_TEXT, 1.2)]
        )
        seen = []

        asyncio.run(make_orchestrator(recognizer=recognizer).extract(image_file, seen.append))

        assert seen == [60, 60, 100]

    def test_init_failure_is_extraction_error_and_retried_later(self, image_file):
        recognizer = FakeRecognizer(init_error=RuntimeError("tesseract missing"))
        orchestrator = make_orchestrator(recognizer=recognizer)

        with pytest.raises(ExtractionError):
            asyncio.run(orchestrator.extract(image_file))
        assert not orchestrator.recognizer_ready

        recognizer.init_error = None
        document = asyncio.run(orchestrator.extract(image_file))
        assert document.text == "hello world"
        assert recognizer.init_calls == 2

    def test_undecodable_image(self):
        file = SubmittedFile.from_bytes("broken.png", "image/png", b"not an image")
        with pytest.raises(ExtractionError):
            asyncio.run(make_orchestrator().extract(file))


class TestErrors:
    def test_read_failure_is_extraction_error(self, tmp_path):
        file = SubmittedFile.from_path(tmp_path / "gone.pdf")
        with pytest.raises(ExtractionError) as excinfo:
            asyncio.run(make_orchestrator().extract(file))
        assert isinstance(excinfo.value.__cause__, FileNotFoundError)

    def test_unsupported_type_not_wrapped(self):
        file = SubmittedFile.from_bytes("notes.txt", "text/plain", b"hello")
        with pytest.raises(UnsupportedTypeError):
            asyncio.run(make_orchestrator().extract(file))

    def test_explicit_backend_skips_routing(self, pdf_file):
        reader = FakePDFReader([["X"]])
        file = SubmittedFile.from_bytes("scan", "text/plain", b"")
        document = asyncio.run(
            make_orchestrator(pdf_reader=reader).extract(file, backend=Backend.PDF)
        )
        assert document.text == "\nX"


class TestProgressReporter:
    def test_clamps_to_range(self):
        seen = []
        reporter = ProgressReporter(seen.append)
        reporter.report(-0.5)
        reporter.report(2.0)
        assert seen == [0, 100]

    def test_without_callback(self):
        reporter = ProgressReporter()
        reporter.report(0.25)
        assert reporter.percent == 25
