"""
Vaadin documentation MCP server.

Registers every discovered tool with FastMCP. Each call goes through the
hot-reload check and is written to the trace log.
"""

import functools
import json
import logging
import time
import uuid
from typing import Callable, Optional

from mcp.server.fastmcp import FastMCP

from vaadin_skills.config import Settings, get_settings
from vaadin_skills.docs import DocsLibrary, get_library, set_library
from vaadin_skills.services import HotReloader
from vaadin_skills.skills.registry import SkillRegistry
from vaadin_skills.tools import get_all_tools, get_handler
from vaadin_skills.tools.skill_tools import get_registry, set_registry
from vaadin_skills.trace_logger import TraceLogger

logger = logging.getLogger(__name__)

SERVER_NAME = "vaadin-docs"

INSTRUCTIONS = """\
Documentation lookups for Vaadin application development.
- Pass vaadin_version "25" unless the project uses another major.
- Pass ui_language "java" for Flow views, "react" for Hilla/React views.
- Search first (search_vaadin_docs), then read whole pages (get_full_document).
- For a specific component use get_component_java_api / get_component_styling.
- find_skills returns coding instructions that apply to the current task."""


def _is_error(result: str) -> bool:
    try:
        payload = json.loads(result)
    except (TypeError, ValueError):
        return True
    return isinstance(payload, dict) and "error" in payload


def traced(name: str, handler: Callable, trace_logger: Optional[TraceLogger],
           reloader: Optional[HotReloader] = None, session_id: str = "") -> Callable:
    """Wrap a tool handler with hot-reload checking and trace logging."""

    @functools.wraps(handler)
    def wrapper(*args, **kwargs):
        if reloader is not None:
            reloader.check_and_apply()

        started = time.perf_counter()
        result = handler(*args, **kwargs)
        duration_ms = (time.perf_counter() - started) * 1000

        status = "error" if _is_error(result) else "ok"
        if status == "error":
            logger.warning("Tool %s returned an error: %s", name, result[:200])
        else:
            logger.debug("Tool %s ok in %.1f ms", name, duration_ms)

        if trace_logger is not None:
            trace_logger.log(
                tool=name,
                args=kwargs if kwargs else {"args": list(args)},
                result=result,
                status=status,
                duration_ms=duration_ms,
                session_id=session_id,
            )
        return result

    return wrapper


def build_reloader(settings: Settings) -> HotReloader:
    reloader = HotReloader(
        auto_reload=settings.auto_reload,
        check_interval=settings.reload_check_interval,
    )
    reloader.add_watch(settings.skills_dir, lambda: get_registry().refresh())
    for path in settings.external_skill_paths:
        reloader.add_watch(path, lambda: get_registry().refresh(), pattern="**/SKILL.md")
    reloader.add_watch(settings.docs_dir, lambda: get_library().refresh())
    return reloader


def build_server(
    settings: Optional[Settings] = None,
    library: Optional[DocsLibrary] = None,
    registry: Optional[SkillRegistry] = None,
    trace_logger: Optional[TraceLogger] = None,
    reloader: Optional[HotReloader] = None,
    session_id: Optional[str] = None,
) -> FastMCP:
    """Create the FastMCP server with all tools registered.

    Every call made through this server is traced under *session_id*
    (a fresh id per server when not given).
    """
    settings = settings or get_settings()
    if library is not None:
        set_library(library)
    if registry is not None:
        set_registry(registry)
    if trace_logger is None:
        trace_logger = TraceLogger(settings.trace_db)
    if reloader is None:
        reloader = build_reloader(settings)
    if session_id is None:
        session_id = uuid.uuid4().hex[:12]

    server = FastMCP(
        SERVER_NAME,
        instructions=INSTRUCTIONS,
        host=settings.mcp_host,
        port=settings.mcp_port,
    )

    for tool in get_all_tools():
        handler = get_handler(tool["name"])
        server.add_tool(
            traced(tool["name"], handler, trace_logger, reloader, session_id=session_id),
            name=tool["name"],
            description=tool["description"],
        )
        logger.debug("Registered tool %s", tool["name"])

    logger.info("MCP server '%s' ready with %d tools (session %s)", SERVER_NAME, len(get_all_tools()), session_id)
    return server


def run_server(settings: Optional[Settings] = None):
    """Index the docs, then serve on the configured transport until stopped."""
    settings = settings or get_settings()
    library = get_library()
    logger.info("Docs index: %s", library.index.stats())
    logger.info("Skills: %d indexed", len(get_registry().list_all()))

    server = build_server(settings)
    logger.info("Serving over %s", settings.mcp_transport)
    server.run(transport=settings.mcp_transport)
