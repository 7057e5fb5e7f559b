"""
Logging Tests
-------------
call_id propagation and JSON file output.
"""

import json
import logging
from pathlib import Path

from infra.logging import (
    DEFAULT_LOG_DIR,
    CallContext,
    configure_logging,
    get_call_id,
    get_logger,
    log_call_end,
)


class TestCallContext:

    def test_call_id_set_and_reset(self):
        assert get_call_id() is None
        with CallContext() as call_id:
            assert call_id.startswith("call_")
            assert get_call_id() == call_id
        assert get_call_id() is None

    def test_explicit_call_id(self):
        with CallContext("call_fixed") as call_id:
            assert call_id == "call_fixed"

    def test_nested_contexts_restore_outer(self):
        with CallContext("outer"):
            with CallContext("inner"):
                assert get_call_id() == "inner"
            assert get_call_id() == "outer"


class TestGetLogger:

    def test_namespace_prefixed(self):
        assert get_logger("tools.research").name == "bolide.tools.research"

    def test_existing_namespace_kept(self):
        assert get_logger("bolide.main").name == "bolide.main"


class TestFileOutput:

    def test_json_lines_carry_call_id(self, tmp_path):
        log_file = configure_logging(level=logging.DEBUG, log_dir=str(tmp_path), console=False, force=True)
        try:
            with CallContext("call_abc"):
                get_logger("tests").info("hello")
                log_call_end("call_abc", "generate_gif", success=False, error="boom")

            for handler in logging.getLogger("bolide").handlers:
                handler.flush()

            entries = [json.loads(line) for line in log_file.read_text().splitlines()]
        finally:
            configure_logging(console=False, file=False, force=True)

        assert entries[0]["message"] == "hello"
        assert entries[0]["call_id"] == "call_abc"
        assert entries[1]["level"] == "WARNING"
        assert entries[1]["tool_name"] == "generate_gif"
        assert entries[1]["success"] is False
        assert entries[1]["error"] == "boom"

    def test_unwritable_log_dir_falls_back_to_console(self, tmp_path):
        blocker = tmp_path / "logs"
        blocker.write_text("not a directory")

        try:
            log_file = configure_logging(log_dir=str(blocker / "nested"), console=True, force=True)
            handlers = list(logging.getLogger("bolide").handlers)
        finally:
            configure_logging(console=False, file=False, force=True)

        assert log_file is None
        assert not any(isinstance(h, logging.FileHandler) for h in handlers)
        assert len(handlers) == 1

    def test_default_log_dir_is_under_home(self):
        assert DEFAULT_LOG_DIR == Path.home() / ".bolide-ai-mcp" / "logs"
