"""
Web API Client
--------------
Async client for the Bolide web API.
The API token comes from configuration only and is never echoed back.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
import asyncio
import logging

import httpx

from core.errors import APIError, ValidationError
from infra.config import ServerConfig

USER_AGENT = "bolide-ai-mcp/0.4"


@dataclass
class UploadFile:
    """A file to send as one multipart field."""
    field: str
    path: Path
    content_type: str = "application/octet-stream"


# status code -> message; the 422 text is supplied per call
STATUS_MESSAGES: Dict[int, str] = {
    401: "Authentication failed. Please check your BOLIDEAI_API_TOKEN.",
    403: "Authentication failed. Please check your BOLIDEAI_API_TOKEN.",
    429: "Rate limit exceeded. Please try again later.",
}


class WebAPIClient:
    """
    Client for the Bolide web API.

    Rules:
    - Token loaded from configuration only
    - Every request has a timeout
    - Error statuses become APIError with a readable message
    """

    def __init__(
        self,
        config: ServerConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport
        self._logger = logging.getLogger("bolide.api.client")

    def url_for(self, endpoint: str) -> str:
        return f"{self.config.api_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def require_token(self, purpose: str) -> str:
        if not self.config.api_token:
            raise ValidationError(
                f"BOLIDEAI_API_TOKEN environment variable is required for {purpose}",
                param_name="BOLIDEAI_API_TOKEN",
            )
        return self.config.api_token

    def build_headers(self, token: Optional[str], json_body: bool = False) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        if json_body:
            headers["Content-Type"] = "application/json"
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def session(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout if timeout is not None else self.config.request_timeout_seconds,
            transport=self._transport,
        )

    async def post_json(
        self,
        endpoint: str,
        payload: Mapping[str, Any],
        purpose: str,
        validation_message: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """POST a JSON body to an authenticated endpoint and return the decoded body."""
        token = self.require_token(purpose)
        url = self.url_for(endpoint)
        self._logger.info(f"Calling web API for {purpose}: {url}")

        start_time = datetime.now()
        async with self.session(timeout) as client:
            response = await client.post(url, json=dict(payload), headers=self.build_headers(token, json_body=True))

        return self._decode(response, purpose, validation_message, start_time)

    async def post_files(
        self,
        endpoint: str,
        files: List[UploadFile],
        purpose: str,
        data: Optional[Mapping[str, str]] = None,
        validation_message: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """POST a multipart body to an authenticated endpoint."""
        token = self.require_token(purpose)
        url = self.url_for(endpoint)
        self._logger.info(f"Uploading {len(files)} file(s) for {purpose}: {url}")

        multipart: List[Tuple[str, Tuple[str, bytes, str]]] = []
        for upload in files:
            content = await asyncio.to_thread(upload.path.read_bytes)
            multipart.append((upload.field, (upload.path.name, content, upload.content_type)))

        start_time = datetime.now()
        async with self.session(timeout) as client:
            response = await client.post(
                url,
                files=multipart,
                data=dict(data or {}),
                headers=self.build_headers(token),
            )

        return self._decode(response, purpose, validation_message, start_time)

    async def get_json(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        purpose: str = "request",
    ) -> Any:
        """GET a public JSON resource (no token)."""
        start_time = datetime.now()
        merged = self.build_headers(None)
        merged.update(headers or {})
        async with self.session() as client:
            response = await client.get(url, params=dict(params or {}), headers=merged, follow_redirects=True)

        if response.status_code != 200:
            self._log_failure(response, purpose)
            raise APIError(
                f"{purpose} failed: {response.status_code} {response.reason_phrase}",
                response.status_code,
                response.text[:500] or None,
            )
        self._log_timing(purpose, start_time)
        return response.json()

    async def download(self, url: str, destination: Path, purpose: str = "download") -> Path:
        """Fetch a (pre-signed) URL into a local file."""
        self._logger.info(f"Downloading {purpose} from temporary URL")
        async with self.session() as client:
            response = await client.get(url, follow_redirects=True)

        if response.status_code != 200:
            raise APIError(f"Failed to download {purpose} from temporary URL", 404)

        await asyncio.to_thread(destination.write_bytes, response.content)
        return destination

    def _decode(
        self,
        response: httpx.Response,
        purpose: str,
        validation_message: Optional[str],
        start_time: datetime,
    ) -> Dict[str, Any]:
        if response.status_code >= 400:
            self._log_failure(response, purpose)
            if response.status_code == 422:
                message = validation_message or "Request validation failed."
            else:
                message = STATUS_MESSAGES.get(
                    response.status_code,
                    f"{purpose} failed: {response.status_code} {response.reason_phrase}",
                )
            raise APIError(message, response.status_code, response.text[:500] or None)

        try:
            data = response.json()
        except ValueError as e:
            raise APIError(f"Invalid response format from web API for {purpose}", response.status_code) from e

        if not isinstance(data, dict):
            raise APIError(f"Invalid response format from web API for {purpose}", response.status_code)

        if data.get("success") is False:
            raise APIError(f"{purpose} failed: {data.get('error') or 'Unknown error'}", response.status_code)

        self._log_timing(purpose, start_time)
        return data

    def _log_failure(self, response: httpx.Response, purpose: str) -> None:
        self._logger.error(
            f"Web API error for {purpose}: {response.status_code} {response.reason_phrase} - {response.text[:200]}",
            extra={"status_code": response.status_code},
        )

    def _log_timing(self, purpose: str, start_time: datetime) -> None:
        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        self._logger.debug(f"{purpose} completed in {elapsed_ms:.0f} ms")
