"""
Tool registry

Auto-discovers all *_tools.py modules and exposes:
  - get_all_tools()          -> list of tool definitions (name, description, input_schema)
  - get_handler(name)        -> handler function or None
  - execute_tool(name, args) -> JSON result string from running a tool
"""

import importlib
import json
import logging
import pkgutil
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Auto-discovery: import every *_tools module in this package
# ---------------------------------------------------------------------------

_TOOL_DEFS: List[Dict] = []             # All tool schemas
_HANDLERS: Dict[str, Callable] = {}     # tool_name -> handler function


def _discover_tools():
    """Scan this package for *_tools modules, collect TOOLS and HANDLERS."""
    for _, module_name, _ in sorted(pkgutil.iter_modules(__path__), key=lambda m: m[1]):
        if not module_name.endswith("_tools"):
            continue

        fqn = f"{__name__}.{module_name}"
        try:
            mod = importlib.import_module(fqn)
        except ImportError as e:
            logger.warning("Failed to import %s: %s", fqn, e)
            continue

        tools = getattr(mod, "TOOLS", [])
        handlers = getattr(mod, "HANDLERS", {})
        for tool in tools:
            if tool["name"] not in handlers:
                logger.warning("Tool '%s' in %s has no handler, skipped", tool["name"], fqn)
                continue
            if tool["name"] in _HANDLERS:
                logger.warning("Duplicate tool name '%s' from %s, overwriting", tool["name"], fqn)
                _TOOL_DEFS[:] = [t for t in _TOOL_DEFS if t["name"] != tool["name"]]
            _TOOL_DEFS.append(tool)
            _HANDLERS[tool["name"]] = handlers[tool["name"]]

        logger.debug("Loaded %d tools from %s", len(tools), module_name)


# Run discovery on import
_discover_tools()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_all_tools() -> List[Dict]:
    """Return list of all registered tool definitions."""
    return list(_TOOL_DEFS)


def get_handler(name: str) -> Optional[Callable]:
    return _HANDLERS.get(name)


def execute_tool(name: str, args: dict) -> str:
    """
    Execute a tool by name with the given arguments.

    Args:
        name: Tool name (must match a registered tool)
        args: Dictionary of arguments to pass to the handler

    Returns:
        Result string (JSON) from the handler
    """
    handler = _HANDLERS.get(name)
    if handler is None:
        return json.dumps({"error": f"Unknown tool: {name}"})
    try:
        return handler(**(args or {}))
    except TypeError as e:
        return json.dumps({"error": f"Invalid arguments for {name}: {e}"})
