"""Data models for post analyzer."""

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

# Receives extraction progress as an integer percentage in [0, 100]
ProgressCallback = Callable[[int], None]


class Backend(str, Enum):
    """Text extraction backend selected for a submitted file."""

    PDF = "pdf"
    OCR = "ocr"


@dataclass(frozen=True)
class SubmittedFile:
    """A single user-supplied document.

    The payload is exposed through ``read_bytes`` so that files picked from
    disk are only read when extraction starts.
    """

    name: str
    media_type: str
    _reader: Callable[[], bytes] = field(repr=False, compare=False)

    def read_bytes(self) -> bytes:
        return self._reader()

    @classmethod
    def from_bytes(cls, name: str, media_type: str, data: bytes) -> "SubmittedFile":
        return cls(name=name, media_type=media_type, _reader=lambda: data)

    @classmethod
    def from_path(
        cls, path: Union[str, Path], media_type: Optional[str] = None
    ) -> "SubmittedFile":
        """Build a submission for a file on disk.

        Args:
            path: Location of the document
            media_type: Declared media type. Guessed from the extension if None.
        """
        path = Path(path)
        if media_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            media_type = guessed or ""
        return cls(name=path.name, media_type=media_type, _reader=path.read_bytes)


@dataclass
class ExtractedDocument:
    """Plain text pulled out of a submitted file."""

    text: str
    backend: Backend
    page_count: int = 1


@dataclass
class AnalysisResult:
    """Result of analyzing one document."""

    text: str
    suggestions: list[str]
    media_type: str
    file_name: str
    character_count: int
    ocr_used: bool
