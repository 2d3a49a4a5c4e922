"""
Tests for the archive download client.
"""

import asyncio

import httpx
import pytest

from aokege.Errors import NetworkError
from aokege.FileIO import DEFAULT_HOST, build_url, download_archive


def mock_transport(status_code=200, content=b"PK\x05\x06" + b"\x00" * 18, requests=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, content=content)

    return httpx.MockTransport(handler)


class TestBuildUrl:
    """Tests for build_url."""

    def test_default_filename(self):
        assert build_url(DEFAULT_HOST, "demo") == "https://aokege.github.io/zhucechu/zujian/demo/demo.zip"

    def test_filename_override(self):
        assert build_url("http://host/", "demo", "demo-1.0.zip") == "http://host/zujian/demo/demo-1.0.zip"

    def test_quotes_path_segments(self):
        assert build_url("http://host", "my pkg") == "http://host/zujian/my%20pkg/my%20pkg.zip"


class TestDownloadArchive:
    """Tests for download_archive."""

    def test_writes_body(self, tmp_path):
        requests = []
        destination = tmp_path / "demo.zip"

        size = asyncio.run(download_archive(
            "http://host/zujian/demo/demo.zip",
            destination,
            transport=mock_transport(content=b"archive-bytes", requests=requests),
        ))

        assert size == len(b"archive-bytes")
        assert destination.read_bytes() == b"archive-bytes"
        assert not (tmp_path / "demo.zip.part").exists()
        assert [str(r.url) for r in requests] == ["http://host/zujian/demo/demo.zip"]
        assert requests[0].method == "GET"

    def test_progress_callback(self, tmp_path):
        seen = []

        asyncio.run(download_archive(
            "http://host/a.zip",
            tmp_path / "a.zip",
            progress_callback=lambda chunk, total: seen.append((chunk, total)),
            transport=mock_transport(content=b"x" * 100),
        ))

        assert sum(chunk for chunk, _ in seen) == 100
        assert all(total == 100 for _, total in seen)

    def test_error_status(self, tmp_path):
        destination = tmp_path / "demo.zip"

        with pytest.raises(NetworkError, match="404"):
            asyncio.run(download_archive(
                "http://host/zujian/demo/demo.zip",
                destination,
                transport=mock_transport(status_code=404, content=b"not found"),
            ))

        assert list(tmp_path.iterdir()) == []

    def test_transport_failure(self, tmp_path):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError) as excinfo:
            asyncio.run(download_archive(
                "http://host/a.zip", tmp_path / "a.zip", transport=httpx.MockTransport(handler)
            ))

        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
        assert list(tmp_path.iterdir()) == []

    def test_failed_download_keeps_existing_archive(self, tmp_path):
        destination = tmp_path / "demo.zip"
        destination.write_bytes(b"previous")

        with pytest.raises(NetworkError):
            asyncio.run(download_archive(
                "http://host/demo.zip", destination, transport=mock_transport(status_code=500)
            ))

        assert destination.read_bytes() == b"previous"
