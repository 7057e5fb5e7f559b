# Tools module - Tool descriptors, dispatch and the tool catalog
# Each tool: name, parameter model, groups, handler
# The dispatcher is the only path from a client call to a handler

from .registry import ToolRegistry, ToolDescriptor, ToolParams, NoParams
from .dispatcher import Dispatcher, ToolResponse, TextContent
from .catalog import ToolContext, all_descriptors, build_registry

__all__ = [
    "ToolRegistry",
    "ToolDescriptor",
    "ToolParams",
    "NoParams",
    "Dispatcher",
    "ToolResponse",
    "TextContent",
    "ToolContext",
    "all_descriptors",
    "build_registry",
]
