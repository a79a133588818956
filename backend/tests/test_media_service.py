"""
EchoNote Backend — Media Service Unit Tests
=============================================

What:  Size and content-type checks of the in-memory upload reader.
How:   Starlette UploadFile objects over BytesIO; no HTTP involved.
"""

import io

import pytest
from starlette.datastructures import Headers, UploadFile

from echonote.exceptions import ValidationError
from echonote.services.media_service import AUDIO_TYPES, IMAGE_TYPES, MediaService


def make_upload(content: bytes, content_type: str, filename: str = "upload.bin", size=None) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        size=len(content) if size is None else size,
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class TestMediaService:

    def setup_method(self):
        self.service = MediaService(max_size=1024)

    @pytest.mark.asyncio
    async def test_reads_content_and_normalizes_type(self):
        upload = make_upload(b"RIFF....WAVE", "Audio/WAV; codecs=1")

        content, mime_type = await self.service.read_upload(upload, "audio", AUDIO_TYPES)

        assert content == b"RIFF....WAVE"
        assert mime_type == "audio/wav"

    @pytest.mark.asyncio
    async def test_accepts_webm_video_container_for_audio(self):
        _, mime_type = await self.service.read_upload(make_upload(b"\x1aE\xdf\xa3", "video/webm"), "audio", AUDIO_TYPES)
        assert mime_type == "video/webm"

    @pytest.mark.asyncio
    async def test_rejects_other_video_types(self):
        with pytest.raises(ValidationError):
            await self.service.read_upload(make_upload(b"data", "video/mp4"), "audio", AUDIO_TYPES)

    @pytest.mark.asyncio
    async def test_exactly_max_size_is_allowed(self):
        content, _ = await self.service.read_upload(make_upload(b"x" * 1024, "image/png"), "avatar", IMAGE_TYPES)
        assert len(content) == 1024

    @pytest.mark.asyncio
    async def test_declared_oversize_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.read_upload(make_upload(b"x" * 1025, "image/png"), "avatar", IMAGE_TYPES)
        assert exc_info.value.field == "avatar"

    @pytest.mark.asyncio
    async def test_undeclared_oversize_is_rejected_after_read(self):
        upload = make_upload(b"x" * 2048, "image/png", size=0)
        with pytest.raises(ValidationError):
            await self.service.read_upload(upload, "avatar", IMAGE_TYPES)

    @pytest.mark.asyncio
    async def test_empty_upload_is_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            await self.service.read_upload(make_upload(b"", "image/png"), "avatar", IMAGE_TYPES)

    @pytest.mark.asyncio
    async def test_missing_content_type_is_rejected(self):
        with pytest.raises(ValidationError):
            await self.service.read_upload(make_upload(b"data", ""), "avatar", IMAGE_TYPES)

    def test_data_uri(self):
        assert MediaService.to_data_uri(b"hi", "image/gif") == "data:image/gif;base64,aGk="
