"""Backend selection from the declared media type."""

from post_analyzer.exceptions import UnsupportedTypeError
from post_analyzer.logger import get_logger
from post_analyzer.models import Backend, SubmittedFile

logger = get_logger(__name__)


PDF_MEDIA_TYPE = "application/pdf"
IMAGE_MEDIA_PREFIX = "image/"


class FileTypeRouter:
    """Maps a submitted file to the backend able to extract its text."""

    def route(self, file: SubmittedFile) -> Backend:
        media_type = file.media_type

        if media_type == PDF_MEDIA_TYPE:
            backend = Backend.PDF
        elif media_type.startswith(IMAGE_MEDIA_PREFIX):
            backend = Backend.OCR
        else:
            logger.warning(
                "Unsupported media type",
                extra_data={
                    "file_name": file.name,
                    "media_type": media_type or "<empty>",
                },
            )
            raise UnsupportedTypeError(media_type)

        logger.debug(
            "Routed file to extraction backend",
            extra_data={
                "file_name": file.name,
                "media_type": media_type,
                "backend": backend.value,
            },
        )
        return backend
