"""
Dispatcher Tests
----------------
Registration filtering and the response envelope contract.
"""

import asyncio

import pytest
from pydantic import Field

from core.errors import APIError, DuplicateToolError, ToolNotFoundError, ValidationError
from core.gate import DEBUG_SWITCH, EnablementGate, ToolGroup
from tools.dispatcher import Dispatcher, ToolResponse, normalize_result
from tools.registry import ToolDescriptor, ToolParams


class EchoParams(ToolParams):
    text: str = Field(description="Text to echo")


def _echo(name="echo", group=ToolGroup.RESEARCH, handler=None, requires_debug=False):
    return ToolDescriptor(
        name=name,
        description="Echo text",
        handler=handler or (lambda params: params.text),
        parameter_schema=EchoParams,
        groups=frozenset({group}),
        requires_debug=requires_debug,
    )


def _dispatcher(switches=None, *descriptors):
    dispatcher = Dispatcher(EnablementGate(switches or {}))
    dispatcher.register_all(descriptors or [_echo()])
    return dispatcher


class TestRegistration:

    def test_open_mode_binds_everything(self):
        dispatcher = Dispatcher(EnablementGate({}))
        bound = dispatcher.register_all([_echo("a"), _echo("b", ToolGroup.SLACK)])
        assert bound == ["a", "b"]
        assert len(dispatcher) == 2

    def test_selective_mode_binds_enabled_group_only(self):
        dispatcher = Dispatcher(EnablementGate({ToolGroup.SLACK.switch: "true"}))
        bound = dispatcher.register_all([_echo("a"), _echo("b", ToolGroup.SLACK)])
        assert bound == ["b"]
        assert "a" not in dispatcher

    def test_debug_only_tool_skipped_without_debug(self):
        dispatcher = Dispatcher(EnablementGate({}))
        assert dispatcher.register_all([_echo("diag", requires_debug=True)]) == []

    def test_debug_only_tool_bound_with_debug(self):
        dispatcher = Dispatcher(EnablementGate({DEBUG_SWITCH: "true"}))
        assert dispatcher.register_all([_echo("diag", ToolGroup.DIAGNOSTICS, requires_debug=True)]) == ["diag"]

    def test_duplicate_names_rejected(self):
        dispatcher = Dispatcher(EnablementGate({}))
        with pytest.raises(DuplicateToolError):
            dispatcher.register_all([_echo("a"), _echo("a")])


class TestInvoke:

    def test_sync_handler_result_wrapped(self):
        response = asyncio.run(_dispatcher().invoke("echo", {"text": "hi"}))
        assert response.is_error is False
        assert response.joined_text == "hi"

    def test_async_handler_awaited(self):
        async def handler(params):
            return ToolResponse.text(params.text.upper())

        dispatcher = _dispatcher(None, _echo(handler=handler))
        response = asyncio.run(dispatcher.invoke("echo", {"text": "hi"}))
        assert response.joined_text == "HI"

    def test_unknown_tool_raises(self):
        with pytest.raises(ToolNotFoundError):
            asyncio.run(_dispatcher().invoke("nope", {}))

    def test_invalid_arguments_become_error_envelope(self):
        response = asyncio.run(_dispatcher().invoke("echo", {}))
        assert response.is_error is True
        assert response.joined_text.startswith("Error: Invalid arguments for echo")
        assert "Missing required parameter: text" in response.joined_text

    def test_handler_not_called_on_invalid_arguments(self):
        calls = []
        dispatcher = _dispatcher(None, _echo(handler=lambda params: calls.append(params)))
        asyncio.run(dispatcher.invoke("echo", {"text": 3}))
        assert calls == []

    def test_bolide_error_formatted_with_details(self):
        def handler(params):
            raise APIError("Rate limit exceeded. Please try again later.", 429, "slow down")

        dispatcher = _dispatcher(None, _echo(handler=handler))
        response = asyncio.run(dispatcher.invoke("echo", {"text": "x"}))
        assert response.is_error is True
        assert response.joined_text == "Error: Rate limit exceeded. Please try again later.\nDetails: slow down"

    def test_unexpected_exception_contained(self):
        def handler(params):
            raise KeyError("boom")

        dispatcher = _dispatcher(None, _echo(handler=handler))
        response = asyncio.run(dispatcher.invoke("echo", {"text": "x"}))
        assert response.is_error is True
        assert "boom" in response.joined_text

    def test_errors_recorded_in_history(self):
        def handler(params):
            raise ValidationError("bad path")

        dispatcher = _dispatcher(None, _echo(handler=handler))
        asyncio.run(dispatcher.invoke("echo", {"text": "x"}))
        assert dispatcher.error_handler.get_error_stats() == {"VALIDATION_ERROR": 1}


class TestNormalizeResult:

    def test_dict_becomes_json_text(self):
        response = normalize_result({"success": True})
        assert response.joined_text == '{\n  "success": true\n}'

    def test_none_becomes_empty_envelope(self):
        assert normalize_result(None).content == []

    def test_envelope_passes_through(self):
        envelope = ToolResponse.text("a", "b", is_error=True)
        assert normalize_result(envelope) is envelope

    def test_wire_name_is_is_error(self):
        data = ToolResponse.error("failed", "why").to_dict()
        assert data == {
            "content": [{"type": "text", "text": "Error: failed\nDetails: why"}],
            "isError": True,
        }

    def test_unserialisable_result_becomes_error_envelope(self):
        looped = {}
        looped["self"] = looped
        dispatcher = _dispatcher(None, _echo(handler=lambda params: looped))

        response = asyncio.run(dispatcher.invoke("echo", {"text": "x"}))

        assert response.is_error is True
        assert "Circular reference" in response.joined_text
