"""
Enablement Gate
---------------
Decides which tools are exposed, given the current switch mapping.

Rules:
- No switch set to "true" -> open mode, every tool is exposed
- Any tool or group switch set to "true" -> selective mode
- In selective mode a tool is exposed if its own switch OR any of its
  group switches is "true" (there is no deny switch)
- Comparison is exact: "TRUE", "1", True are all off
- Group switches are also accepted under the older BOLIDE_AI_MCP_GROUP_
  spelling; a tool can carry a bundle switch shared with its siblings

The mapping is rescanned on every call; nothing is cached.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, List, Mapping, Optional
import logging
import os

if TYPE_CHECKING:
    from tools.registry import ToolDescriptor


TOOL_PREFIX = "BOLIDEAI_MCP_TOOL_"
GROUP_PREFIX = "BOLIDEAI_MCP_GROUP_"
LEGACY_GROUP_PREFIX = "BOLIDE_AI_MCP_GROUP_"
DEBUG_SWITCH = "BOLIDEAI_MCP_DEBUG"

SWITCH_PREFIXES = (TOOL_PREFIX, GROUP_PREFIX, LEGACY_GROUP_PREFIX)

ENABLED_VALUE = "true"


class ToolGroup(str, Enum):
    """Tool groups. Each value is the switch that enables the group."""
    LAUNCH = "BOLIDEAI_MCP_GROUP_LAUNCH"
    SCAFFOLDING = "BOLIDEAI_MCP_GROUP_SCAFFOLDING"
    DIAGNOSTICS = "BOLIDEAI_MCP_GROUP_DIAGNOSTICS"
    CONTENT_GENERATORS = "BOLIDEAI_MCP_GROUP_CONTENT_GENERATORS"
    RESEARCH = "BOLIDEAI_MCP_GROUP_RESEARCH"
    NOTION = "BOLIDEAI_MCP_GROUP_NOTION"
    SLACK = "BOLIDEAI_MCP_GROUP_SLACK"
    LINEAR = "BOLIDEAI_MCP_GROUP_LINEAR"
    ARTIFACTS = "BOLIDEAI_MCP_GROUP_ARTIFACTS"
    ASSET_GENERATORS = "BOLIDEAI_MCP_GROUP_ASSET_GENERATORS"

    @property
    def switch(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return self.value[len(GROUP_PREFIX):]

    @property
    def legacy_switch(self) -> str:
        return f"{LEGACY_GROUP_PREFIX}{self.display_name}"


def tool_flag_name(tool_name: str) -> str:
    """Individual switch name for a tool."""
    return f"{TOOL_PREFIX}{tool_name.upper()}"


class EnablementGate:
    """
    Pure decision logic over a read-only switch mapping.

    The mapping defaults to the live process environment, so switches
    set after start are observed.
    """

    def __init__(self, switches: Optional[Mapping[str, Any]] = None):
        self._switches = switches if switches is not None else os.environ
        self._logger = logging.getLogger("bolide.core.gate")

    def _is_on(self, name: str) -> bool:
        return self._switches.get(name) == ENABLED_VALUE

    @staticmethod
    def _is_switch_name(key: Any) -> bool:
        return isinstance(key, str) and key.startswith(SWITCH_PREFIXES)

    def is_selective_mode_active(self) -> bool:
        """True iff any tool or group switch is exactly "true"."""
        for key in list(self._switches.keys()):
            if self._is_switch_name(key) and self._switches.get(key) == ENABLED_VALUE:
                return True
        return False

    def is_debug_enabled(self) -> bool:
        return self._is_on(DEBUG_SWITCH)

    def is_group_enabled(self, group: ToolGroup) -> bool:
        if not self.is_selective_mode_active():
            return True
        if group is ToolGroup.DIAGNOSTICS and self.is_debug_enabled():
            return True
        return self._is_on(group.switch) or self._is_on(group.legacy_switch)

    def is_tool_enabled(self, flag_name: str) -> bool:
        if not self.is_selective_mode_active():
            return True
        return self._is_on(flag_name)

    def should_register(self, descriptor: "ToolDescriptor") -> bool:
        """
        Decide whether a descriptor is exposed.

        Open mode registers everything. Selective mode registers on the
        individual switch, its bundle switch OR any group switch.
        """
        if not self.is_selective_mode_active():
            return True
        if self.is_tool_enabled(descriptor.flag_name):
            return True
        if descriptor.bundle_flag and self.is_tool_enabled(descriptor.bundle_flag):
            return True
        return any(self.is_group_enabled(group) for group in descriptor.groups)

    def list_enabled_groups(self) -> List[ToolGroup]:
        """Groups currently enabled, in catalog order."""
        return [group for group in ToolGroup if self.is_group_enabled(group)]

    def individually_enabled_tools(self) -> List[str]:
        """Suffixes of tool switches set to "true"."""
        return sorted(
            key[len(TOOL_PREFIX):]
            for key in list(self._switches.keys())
            if isinstance(key, str)
            and key.startswith(TOOL_PREFIX)
            and self._switches.get(key) == ENABLED_VALUE
        )

    def switch_values(self) -> dict:
        """Snapshot of every recognised switch, for reporting."""
        return {
            key: self._switches.get(key)
            for key in sorted(k for k in self._switches.keys() if isinstance(k, str))
            if self._is_switch_name(key) or key == DEBUG_SWITCH
        }
