"""Unit tests for resource type detection, embed URLs, uploads and progress"""

import asyncio
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.models import ResourceType
from app.services.resource_service import ResourceService


@pytest.fixture
def service():
    return ResourceService()


class TestDetectResourceType:

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", ResourceType.YOUTUBE),
            ("https://youtu.be/dQw4w9WgXcQ", ResourceType.YOUTUBE),
            ("https://example.com/diagram.PNG", ResourceType.IMAGE),
            ("https://example.com/paper.pdf", ResourceType.DOCUMENT),
            ("https://example.com/readme.md", ResourceType.DOCUMENT),
            ("https://en.wikipedia.org/wiki/Matrix", ResourceType.WEBPAGE),
            ("", ResourceType.WEBPAGE),
        ],
    )
    def test_detection(self, service, url, expected):
        assert service.detect_resource_type(url) == expected


class TestEmbedUrl:

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
        ],
    )
    def test_youtube_forms(self, service, url):
        assert service.youtube_embed_url(url) == "https://www.youtube.com/embed/dQw4w9WgXcQ"

    def test_only_youtube_gets_embed(self, service):
        assert service.embed_url_for(ResourceType.WEBPAGE, "https://example.com") is None
        assert service.embed_url_for("youtube", "https://youtu.be/dQw4w9WgXcQ") is not None

    def test_unparseable_youtube_link(self, service):
        assert service.youtube_embed_url("https://www.youtube.com/channel") is None


class TestUploads:

    def test_upload_type(self, service):
        assert service.upload_type("scan.JPG") == ResourceType.IMAGE
        assert service.upload_type("essay.docx") == ResourceType.DOCUMENT
        with pytest.raises(ValueError):
            service.upload_type("archive.zip")

    def test_save_upload_writes_file(self, service, tmp_path, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))

        path, resource_type = asyncio.run(service.save_upload("stack-1", "my notes.txt", b"hello"))

        assert resource_type == ResourceType.DOCUMENT
        assert os.path.dirname(path) == os.path.join(str(tmp_path), "stack-1")
        assert path.endswith("_my_notes.txt")
        with open(path, "rb") as f:
            assert f.read() == b"hello"

    def test_size_limit(self, service, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)

        with pytest.raises(ValueError, match="1 MB limit"):
            asyncio.run(service.save_upload("stack-1", "big.pdf", b"x" * (1024 * 1024 + 1)))

    def test_declared_size_is_checked_before_reading(self, service, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)
        upload = MagicMock(size=5 * 1024 * 1024)
        upload.read = AsyncMock()

        with pytest.raises(ValueError, match="1 MB limit"):
            asyncio.run(service.read_upload(upload))
        upload.read.assert_not_awaited()

    def test_read_is_bounded_when_size_unknown(self, service, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)
        upload = MagicMock(size=None)
        upload.read = AsyncMock(return_value=b"x" * (1024 * 1024 + 1))

        with pytest.raises(ValueError):
            asyncio.run(service.read_upload(upload))
        upload.read.assert_awaited_once_with(1024 * 1024 + 1)


class TestLearningProgress:

    def test_reference_is_excluded(self, service):
        resources = [SimpleNamespace(status=s) for s in ("reference", "todo", "inprogress", "done")]

        progress = service.learning_progress(resources)

        assert progress == {"total": 3, "todo": 1, "inprogress": 1, "done": 1, "percent": 33}

    def test_nothing_to_learn(self, service):
        progress = service.learning_progress([SimpleNamespace(status="reference")])

        assert progress["total"] == 0
        assert progress["percent"] == 0
