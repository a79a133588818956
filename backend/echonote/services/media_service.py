"""
EchoNote Backend — Upload Handling Service
============================================

What:  Reads multipart uploads into memory under a hard byte cap, checks the
       declared content type, and encodes images as inline data URIs.
How:   Reads at most ``max_size + 1`` bytes so an oversized upload is
       detected without buffering all of it. Nothing touches the disk.
Who:   Avatar upload (UserService) and audio transcription (AI routes).

Validation order:
    1. Declared size (UploadFile.size, when the client sent it)
    2. Declared content type (prefix match, e.g. ``image/``)
    3. Actual byte count
"""

import base64
import logging
from typing import Iterable, Optional, Tuple

from fastapi import UploadFile

from echonote.exceptions import ValidationError

logger = logging.getLogger(__name__)

IMAGE_TYPES = ("image/",)
AUDIO_TYPES = ("audio/", "video/webm")


class MediaService:
    """Bounded in-memory upload reader."""

    def __init__(self, max_size: int = 10_485_760):
        self.max_size = max_size

    def validate_size(
        self,
        field: str,
        declared_size: Optional[int],
        actual_size: Optional[int] = None,
    ) -> None:
        """
        Raises ValidationError for empty uploads or uploads above ``max_size``.

        ``declared_size`` comes from the multipart part and may be missing;
        ``actual_size`` is None until the content has been read.
        """
        max_mb = self.max_size / (1024 * 1024)

        if declared_size and declared_size > self.max_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field=field,
                context={"max_size": self.max_size, "reported_size": declared_size},
            )

        if actual_size is None:
            return

        if actual_size > self.max_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field=field,
                context={"max_size": self.max_size},
            )

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field=field)

    def validate_mime_type(self, field: str, content_type: Optional[str], allowed: Iterable[str]) -> str:
        """Returns the normalized MIME type (parameters dropped, lower-cased)."""
        allowed = tuple(allowed)
        mime_type = (content_type or "").split(";")[0].strip().lower()
        if not mime_type or not mime_type.startswith(allowed):
            raise ValidationError(
                message=f"File type '{mime_type or 'unknown'}' is not supported.",
                field=field,
                context={"content_type": mime_type, "allowed": list(allowed)},
            )
        return mime_type

    async def read_upload(
        self,
        upload: UploadFile,
        field: str,
        allowed_types: Iterable[str],
    ) -> Tuple[bytes, str]:
        """
        Validates and reads one uploaded file.

        Returns:
            (content bytes, normalized MIME type)
        Raises:
            ValidationError on wrong type, empty or oversized content.
        """
        self.validate_size(field, upload.size)
        mime_type = self.validate_mime_type(field, upload.content_type, allowed_types)

        try:
            content = await upload.read(self.max_size + 1)
        finally:
            await upload.close()

        self.validate_size(field, None, len(content))
        logger.info("Read %s upload: %s, %d bytes", field, mime_type, len(content))
        return content, mime_type

    @staticmethod
    def to_data_uri(content: bytes, mime_type: str) -> str:
        encoded = base64.b64encode(content).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"
