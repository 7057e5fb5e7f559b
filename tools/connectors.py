"""
Connector Tools
---------------
Shared plumbing for tools that forward to a Composio action
(Notion, Slack, Linear).

Each connector tool is a thin descriptor: a parameter model, an action
name and a group. Validated parameters are forwarded as-is; the result
comes back as pretty-printed JSON.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Type
import json
import logging

from core.gate import ToolGroup

from .dispatcher import ToolResponse
from .registry import ToolDescriptor, ToolParams

if TYPE_CHECKING:
    from .catalog import ToolContext

logger = logging.getLogger("bolide.tools.connectors")


@dataclass(frozen=True)
class ConnectorTool:
    """Static definition of one Composio-backed tool."""
    name: str
    description: str
    params: Type[ToolParams]
    action: Optional[str] = None

    @property
    def action_name(self) -> str:
        return self.action or self.name.upper()


async def call_connector(
    ctx: "ToolContext",
    service: str,
    action: str,
    params: ToolParams,
) -> ToolResponse:
    """Forward validated parameters to Composio and wrap the outcome."""
    parameters = params.model_dump(exclude_none=True)
    result = await ctx.composio.call_tool(action, parameters)

    if result.success:
        return ToolResponse.text(json.dumps(result.result, indent=2, default=str))

    logger.warning(f"{service} action {action} failed: {result.error}")
    details = f"\nDetails: {result.details}" if result.details else ""
    return ToolResponse.text(
        f"Error calling {service} tool: {result.error or 'Unknown error'}{details}",
        is_error=True,
    )


def _make_handler(ctx: "ToolContext", service: str, action: str) -> Callable:
    async def handler(params: ToolParams) -> ToolResponse:
        return await call_connector(ctx, service, action, params)

    handler.__name__ = f"call_{action.lower()}"
    return handler


def connector_descriptors(
    ctx: "ToolContext",
    service: str,
    group: ToolGroup,
    tools: Iterable[ConnectorTool],
) -> List[ToolDescriptor]:
    """Descriptors for a connector's tool table."""
    return [
        ToolDescriptor(
            name=tool.name,
            description=tool.description,
            handler=_make_handler(ctx, service, tool.action_name),
            parameter_schema=tool.params,
            groups=frozenset({group}),
        )
        for tool in tools
    ]
