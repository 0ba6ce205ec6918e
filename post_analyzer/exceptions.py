"""Custom exceptions for post analyzer."""


class AnalyzerError(Exception):
    """Base exception for post analyzer errors."""

    pass


class UnsupportedTypeError(AnalyzerError):
    """Raised when the declared media type has no extraction backend."""

    def __init__(self, media_type: str):
        self.media_type = media_type
        super().__init__(f"Unsupported media type: {media_type or '<empty>'}")


class ExtractionError(AnalyzerError):
    """Raised when text extraction fails."""

    pass


class SessionBusyError(AnalyzerError):
    """Raised when a file is submitted while another extraction is running."""

    pass
