"""
Tool Dispatcher
---------------
Binds enabled descriptors and turns every call into a response envelope.

Rules:
- Registration happens once, before any call is accepted
- Arguments are validated before the handler runs
- Handler exceptions never escape; they become isError envelopes
- No timeout, no retry
"""

from typing import Any, Dict, Iterable, List, Literal, Optional
import asyncio
import inspect
import json
import time

from pydantic import BaseModel, ConfigDict, Field

from core.errors import DuplicateToolError, ErrorHandler, ToolNotFoundError, format_error_text
from core.gate import EnablementGate
from infra.logging import CallContext, get_logger, log_call_end

from .registry import ToolDescriptor


class TextContent(BaseModel):
    """A text content item of an envelope."""
    type: Literal["text"] = "text"
    text: str


class ToolResponse(BaseModel):
    """
    Uniform envelope returned by every invocation.

    Serialised with the wire name ``isError``.
    """
    model_config = ConfigDict(populate_by_name=True)

    content: List[TextContent] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def text(cls, *texts: str, is_error: bool = False) -> "ToolResponse":
        return cls(content=[TextContent(text=t) for t in texts], is_error=is_error)

    @classmethod
    def error(cls, message: str, details: Optional[str] = None) -> "ToolResponse":
        return cls.text(format_error_text(message, details), is_error=True)

    @property
    def joined_text(self) -> str:
        return "\n".join(item.text for item in self.content)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def normalize_result(result: Any) -> ToolResponse:
    """Wrap a handler's return value in an envelope."""
    if isinstance(result, ToolResponse):
        return result
    if result is None:
        return ToolResponse()
    if isinstance(result, str):
        return ToolResponse.text(result)
    if isinstance(result, BaseModel):
        return ToolResponse.text(result.model_dump_json(indent=2))
    return ToolResponse.text(json.dumps(result, indent=2, default=str))


class Dispatcher:
    """
    Registers enabled tools and invokes them.

    Each invocation is independent; the only shared state is the
    read-only bound table built by register_all().
    """

    def __init__(self, gate: EnablementGate, error_handler: Optional[ErrorHandler] = None):
        self._gate = gate
        self._errors = error_handler or ErrorHandler()
        self._bound: Dict[str, ToolDescriptor] = {}
        self._logger = get_logger("tools.dispatcher")

    @property
    def error_handler(self) -> ErrorHandler:
        return self._errors

    def register_all(self, descriptors: Iterable[ToolDescriptor]) -> List[str]:
        """
        Bind every descriptor the gate allows.

        Returns the names bound by this call, in order.
        """
        debug = self._gate.is_debug_enabled()
        selective = self._gate.is_selective_mode_active()
        bound: List[str] = []

        for descriptor in descriptors:
            if descriptor.requires_debug and not debug:
                continue

            if not self._gate.should_register(descriptor):
                if debug:
                    self._logger.debug(f"Skipping {descriptor.name}: not enabled")
                continue

            if descriptor.name in self._bound:
                raise DuplicateToolError(descriptor.name)

            self._bound[descriptor.name] = descriptor
            bound.append(descriptor.name)

            if debug:
                reason = "selective" if selective else "open mode"
                self._logger.debug(f"Registered {descriptor.name} ({reason})")

        self._logger.info(
            f"Registered {len(bound)} tools ({'selective' if selective else 'open'} mode)"
        )
        return bound

    def list_bound(self) -> List[ToolDescriptor]:
        return list(self._bound.values())

    def get_bound(self, name: str) -> Optional[ToolDescriptor]:
        return self._bound.get(name)

    async def invoke(self, name: str, raw_arguments: Optional[Dict[str, Any]] = None) -> ToolResponse:
        """
        Validate, run and wrap one call.

        Raises ToolNotFoundError for names that are not bound; every other
        failure comes back as an isError envelope.
        """
        descriptor = self._bound.get(name)
        if descriptor is None:
            raise ToolNotFoundError(name)

        with CallContext() as call_id:
            params, error = descriptor.validate_args(raw_arguments)
            if error is not None:
                self._logger.warning(f"Validation failed for {name}: {error}")
                log_call_end(call_id, name, success=False, error=error)
                return ToolResponse.error(f"Invalid arguments for {name}", error)

            start = time.monotonic()
            try:
                response = normalize_result(await self._call_handler(descriptor, params))
            except Exception as e:
                text = self._errors.handle_exception(e, name)
                log_call_end(
                    call_id, name, success=False,
                    execution_time_ms=(time.monotonic() - start) * 1000,
                    error=str(e),
                )
                return ToolResponse.text(text, is_error=True)

            log_call_end(
                call_id, name, success=not response.is_error,
                execution_time_ms=(time.monotonic() - start) * 1000,
                error=response.joined_text if response.is_error else None,
            )
            return response

    async def _call_handler(self, descriptor: ToolDescriptor, params: Any) -> Any:
        handler = descriptor.handler
        if inspect.iscoroutinefunction(handler):
            return await handler(params)

        result = await asyncio.to_thread(handler, params)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __contains__(self, name: str) -> bool:
        return name in self._bound

    def __len__(self) -> int:
        return len(self._bound)
