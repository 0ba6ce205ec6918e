"""Configuration classes for post analyzer."""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class OCRConfig:
    """Configuration for the Tesseract recognizer.

    Only one language model is loaded per session; the recognizer is built
    once and reused for every image submitted afterwards.

    Examples:
        >>> # Default configuration (English, uniform block of text)
        >>> config = OCRConfig()

        >>> # Custom binary location for hosts without tesseract in PATH
        >>> config = OCRConfig(tesseract_cmd="/opt/tesseract/bin/tesseract")
    """

    tesseract_cmd: str = "tesseract"
    """Path to tesseract binary. Default: "tesseract" (assumes in PATH)."""

    tessdata_prefix: Optional[str] = None
    """Optional path to tessdata directory. If None, uses system default."""

    language: str = "eng"
    """Single OCR language in Tesseract format (e.g., "eng", "fra")."""

    psm_mode: int = 3
    """Page segmentation mode (0-13). Default: 3 (fully automatic).

    Common modes:
    - 3: Fully automatic page segmentation (posters, screenshots)
    - 6: Uniform block of text (scanned documents)
    - 11: Sparse text (slides with few words)
    """

    use_oem_1: bool = True
    """Use Tesseract OEM 1 (LSTM engine only).

    - True: Faster, less memory, modern engine (recommended)
    - False: Uses default engine (may use legacy engine, slower)
    """

    def tesseract_options(self) -> str:
        """Build the extra command line options passed to tesseract."""
        options = f"--psm {self.psm_mode}"
        if self.use_oem_1:
            options += " --oem 1"
        return options


@dataclass
class AnalyzerConfig:
    """Top-level configuration for a document analysis session."""

    ocr: OCRConfig = field(default_factory=OCRConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """Build configuration from POST_ANALYZER_* environment variables."""
        ocr = OCRConfig()
        ocr.tesseract_cmd = os.environ.get("POST_ANALYZER_TESSERACT_CMD", ocr.tesseract_cmd)
        ocr.tessdata_prefix = os.environ.get("POST_ANALYZER_TESSDATA_PREFIX") or None
        ocr.language = os.environ.get("POST_ANALYZER_OCR_LANGUAGE", ocr.language)
        return cls(
            ocr=ocr,
            log_level=os.environ.get("POST_ANALYZER_LOG_LEVEL", "INFO"),
        )
