"""
Tool Registry
-------------
Schema-validated tool descriptors.
Each tool is unit-testable without the serving runtime.

A descriptor names an operation, its parameter model, its handler and the
groups it belongs to. Descriptors are immutable; names are unique.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple, Type
import logging

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from core.errors import DuplicateToolError
from core.gate import ToolGroup, tool_flag_name


class ToolParams(BaseModel):
    """Base class for tool parameter models."""
    model_config = ConfigDict(extra="ignore")


class NoParams(ToolParams):
    """Parameters for tools that take no arguments."""


def describe_validation_error(error: PydanticValidationError) -> str:
    """Turn a pydantic error into one line per failing field."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        if item.get("type") == "missing":
            problems.append(f"Missing required parameter: {location}")
        else:
            problems.append(f"Invalid value for {location}: {item.get('msg')}")
    return "; ".join(problems)


@dataclass(frozen=True)
class ToolDescriptor:
    """
    Tool definition with schema and handler.

    Each tool defines:
    - Name and description
    - Parameter model (pydantic)
    - Handler taking the validated model (sync or async)
    - Group memberships and its individual enablement switch
    - Optionally a bundle switch shared with sibling tools
    """
    name: str
    description: str
    handler: Callable[[Any], Any]
    parameter_schema: Type[BaseModel] = NoParams
    groups: FrozenSet[ToolGroup] = field(default_factory=frozenset)
    flag_name: str = ""
    bundle_flag: Optional[str] = None
    requires_debug: bool = False

    def __post_init__(self):
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "groups", frozenset(self.groups))
        if not self.flag_name:
            object.__setattr__(self, "flag_name", tool_flag_name(self.name))

    def validate_args(self, args: Optional[Dict[str, Any]]) -> Tuple[Optional[BaseModel], Optional[str]]:
        """
        Validate arguments against the parameter model.
        Returns (params, error_message); exactly one is None.
        """
        if args is None:
            args = {}
        if not isinstance(args, dict):
            return None, f"Arguments must be an object, got {type(args).__name__}"

        try:
            return self.parameter_schema.model_validate(args), None
        except PydanticValidationError as e:
            return None, describe_validation_error(e)

    def input_schema(self) -> Dict[str, Any]:
        """JSON Schema for the tool's arguments."""
        schema = self.parameter_schema.model_json_schema()
        schema.setdefault("type", "object")
        schema.setdefault("properties", {})
        return schema

    def __repr__(self) -> str:
        groups = ",".join(sorted(g.display_name for g in self.groups))
        return f"ToolDescriptor(name={self.name}, groups={groups})"


class ToolRegistry:
    """
    Ordered, name-unique collection of tool descriptors.

    Built once at startup and not modified afterwards.
    """

    def __init__(self, descriptors: Iterable[ToolDescriptor] = ()):
        self._tools: Dict[str, ToolDescriptor] = {}
        self._logger = logging.getLogger("bolide.tools.registry")

        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: ToolDescriptor) -> None:
        """Register a descriptor. Duplicate names fail fast."""
        if descriptor.name in self._tools:
            raise DuplicateToolError(descriptor.name)

        self._tools[descriptor.name] = descriptor
        self._logger.debug(f"Registered tool: {descriptor.name}")

    def get(self, name: str) -> Optional[ToolDescriptor]:
        """Get a descriptor by name."""
        return self._tools.get(name)

    def list_tools(self) -> List[ToolDescriptor]:
        """List all descriptors in registration order."""
        return list(self._tools.values())

    def list_by_group(self, group: ToolGroup) -> List[ToolDescriptor]:
        """List descriptors belonging to a group."""
        return [t for t in self._tools.values() if group in t.groups]

    def names(self) -> List[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(list(self._tools.values()))
