"""
Composio Service
----------------
Forwards connector tool calls (Notion, Slack, Linear) to the web API's
Composio endpoint. Never raises: every outcome is a ComposioResult.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
import logging

import httpx

from .client import WebAPIClient

COMPOSIO_ENDPOINT = "/tools/composio/call-mcp-tool"
COMPOSIO_TIMEOUT_SECONDS = 30.0


@dataclass
class ComposioResult:
    """Outcome of a connector call."""
    success: bool
    result: Any = None
    error: Optional[str] = None
    details: Optional[str] = None
    status: Optional[int] = None


class ComposioService:
    """Generic Composio tool calling through the web API."""

    def __init__(self, client: WebAPIClient, timeout_seconds: float = COMPOSIO_TIMEOUT_SECONDS):
        self._client = client
        self._timeout = timeout_seconds
        self._logger = logging.getLogger("bolide.api.composio")

    async def call_tool(self, action: str, parameters: Mapping[str, Any]) -> ComposioResult:
        """Call one Composio action with already validated parameters."""
        config = self._client.config
        if not config.api_token:
            return ComposioResult(
                success=False,
                error="BOLIDEAI_API_TOKEN environment variable is required for Composio tool calls",
            )

        url = self._client.url_for(COMPOSIO_ENDPOINT)
        body: Dict[str, Any] = {"tool_name": action, "parameters": dict(parameters)}
        self._logger.info(f"Making Composio tool call via web API: {action} to {url}")

        try:
            async with self._client.session(self._timeout) as client:
                response = await client.post(
                    url,
                    json=body,
                    headers=self._client.build_headers(config.api_token, json_body=True),
                )
        except httpx.HTTPError as e:
            self._logger.error(f"Exception during Composio tool call: {action} - {e}")
            return ComposioResult(
                success=False,
                error="Internal error during Composio tool call",
                details=str(e) or e.__class__.__name__,
            )

        if response.status_code >= 400:
            self._logger.error(
                f"Composio tool call failed: {action} - Status {response.status_code}: {response.text[:200]}"
            )
            return ComposioResult(
                success=False,
                error="Web API request failed",
                details=response.text,
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            return ComposioResult(
                success=False,
                error="Internal error during Composio tool call",
                details=f"Invalid JSON response: {e}",
                status=response.status_code,
            )

        self._logger.info(f"Composio tool call successful: {action}")

        if not isinstance(data, dict):
            return ComposioResult(success=True, result=data, status=response.status_code)

        success = data.get("success")
        return ComposioResult(
            success=True if success is None else bool(success),
            result=data.get("result", data),
            error=data.get("error"),
            details=data.get("details"),
            status=response.status_code,
        )
