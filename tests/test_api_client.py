"""
Web API Client Tests
--------------------
Status mapping, auth headers, multipart uploads and downloads.
"""

import asyncio

import httpx
import pytest

from api.client import UploadFile, WebAPIClient
from core.errors import APIError, ValidationError

from conftest import RecordingTransport, json_response, request_json


def _client(config, handler):
    transport = RecordingTransport(handler)
    return WebAPIClient(config, transport=transport), transport


class TestPostJson:

    def test_bearer_token_and_json_body(self, config):
        client, transport = _client(config, lambda r: json_response({"result": "ok"}))
        data = asyncio.run(client.post_json("/tools/perplexity-search", {"query": "q"}, purpose="search"))

        request = transport.requests[0]
        assert data == {"result": "ok"}
        assert str(request.url) == "https://api.bolide.test/tools/perplexity-search"
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request_json(request) == {"query": "q"}

    def test_missing_token_raises_before_request(self, config):
        config.api_token = None
        client, transport = _client(config, lambda r: json_response({}))

        with pytest.raises(ValidationError, match="BOLIDEAI_API_TOKEN environment variable is required for search"):
            asyncio.run(client.post_json("/x", {}, purpose="search"))
        assert transport.requests == []

    @pytest.mark.parametrize("status,message", [
        (401, "Authentication failed. Please check your BOLIDEAI_API_TOKEN."),
        (403, "Authentication failed. Please check your BOLIDEAI_API_TOKEN."),
        (429, "Rate limit exceeded. Please try again later."),
        (500, "search failed: 500 Internal Server Error"),
    ])
    def test_status_mapping(self, config, status, message):
        client, _ = _client(config, lambda r: httpx.Response(status, text="nope"))

        with pytest.raises(APIError) as exc_info:
            asyncio.run(client.post_json("/x", {}, purpose="search"))
        assert exc_info.value.message == message
        assert exc_info.value.status_code == status
        assert exc_info.value.details == "nope"

    def test_validation_message_for_422(self, config):
        client, _ = _client(config, lambda r: httpx.Response(422, json={"detail": "bad"}))

        with pytest.raises(APIError, match="Check the query"):
            asyncio.run(client.post_json("/x", {}, purpose="search", validation_message="Check the query"))

    def test_success_false_body(self, config):
        client, _ = _client(config, lambda r: json_response({"success": False, "error": "quota"}))

        with pytest.raises(APIError, match="search failed: quota"):
            asyncio.run(client.post_json("/x", {}, purpose="search"))

    def test_non_object_body(self, config):
        client, _ = _client(config, lambda r: json_response(["a"]))

        with pytest.raises(APIError, match="Invalid response format from web API for search"):
            asyncio.run(client.post_json("/x", {}, purpose="search"))


class TestPostFiles:

    def test_multipart_fields(self, config, tmp_path):
        video = tmp_path / "demo.mp4"
        video.write_bytes(b"video-bytes")
        client, transport = _client(config, lambda r: json_response({"analyses": []}))

        asyncio.run(client.post_files(
            "/tools/analyze-videos",
            [UploadFile(field="video_files[]", path=video, content_type="video/mp4")],
            purpose="analysis",
            data={"force": "true"},
        ))

        request = transport.requests[0]
        body = request.content
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="video_files[]"; filename="demo.mp4"' in body
        assert b"video-bytes" in body
        assert b'name="force"' in body


class TestGetAndDownload:

    def test_get_json_sends_no_token(self, config):
        client, transport = _client(config, lambda r: json_response({"data": {}}))
        asyncio.run(client.get_json("https://www.reddit.com/r/python/hot.json", params={"limit": 5}))

        request = transport.requests[0]
        assert "Authorization" not in request.headers
        assert request.url.params["limit"] == "5"

    def test_get_json_error_status(self, config):
        client, _ = _client(config, lambda r: httpx.Response(404))

        with pytest.raises(APIError, match="Reddit listing failed: 404"):
            asyncio.run(client.get_json("https://www.reddit.com/r/x/hot.json", purpose="Reddit listing"))

    def test_download_writes_file(self, config, tmp_path):
        client, _ = _client(config, lambda r: httpx.Response(200, content=b"mp3"))
        destination = tmp_path / "out.mp3"

        asyncio.run(client.download("https://files.test/out.mp3", destination))
        assert destination.read_bytes() == b"mp3"

    def test_download_failure(self, config, tmp_path):
        client, _ = _client(config, lambda r: httpx.Response(403))

        with pytest.raises(APIError, match="Failed to download enhanced audio"):
            asyncio.run(client.download("https://files.test/x", tmp_path / "x", purpose="enhanced audio"))
