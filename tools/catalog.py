"""
Tool Catalog
------------
Shared handler context and the full list of tool descriptors.

Every handler module exposes ``descriptors(ctx)``; the catalog
concatenates them in a fixed order so registration is deterministic.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional
import time

import httpx

from api.client import WebAPIClient
from api.composio import ComposioService
from core.gate import EnablementGate
from infra.command import CommandRunner
from infra.config import ServerConfig

from . import (
    artifacts,
    assets,
    content_generators,
    diagnostic,
    launch,
    linear,
    notion,
    research,
    scaffold,
    slack,
)
from .registry import ToolDescriptor, ToolRegistry


@dataclass
class ToolContext:
    """Everything a handler may touch outside its own arguments."""
    config: ServerConfig
    api: WebAPIClient
    composio: ComposioService
    runner: CommandRunner = field(default_factory=CommandRunner)
    gate: EnablementGate = field(default_factory=EnablementGate)
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def create(
        cls,
        config: ServerConfig,
        gate: Optional[EnablementGate] = None,
        runner: Optional[CommandRunner] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ToolContext":
        api = WebAPIClient(config, transport=transport)
        return cls(
            config=config,
            api=api,
            composio=ComposioService(api),
            runner=runner or CommandRunner(),
            gate=gate or EnablementGate(),
        )


def all_descriptors(ctx: ToolContext) -> List[ToolDescriptor]:
    """Every tool the server knows, in registration order."""
    modules = [
        diagnostic,
        launch,
        scaffold,
        artifacts,
        assets,
        content_generators,
        research,
        notion,
        slack,
        linear,
    ]

    result: List[ToolDescriptor] = []
    for module in modules:
        result.extend(module.descriptors(ctx))
    return result


def build_registry(ctx: ToolContext) -> ToolRegistry:
    """Registry of every tool; duplicate names raise DuplicateToolError."""
    return ToolRegistry(all_descriptors(ctx))
