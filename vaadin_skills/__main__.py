"""
vaadin-skills command line.

    python -m vaadin_skills serve
    python -m vaadin_skills index --force
    python -m vaadin_skills search "grid lazy loading" --ui-language java
    python -m vaadin_skills doc components/button/index
    python -m vaadin_skills component Button --styling
    python -m vaadin_skills version
    python -m vaadin_skills skills match "add a login view"
    python -m vaadin_skills lint skills docs
    python -m vaadin_skills trace --summary
"""

import argparse
import json
import logging
import sys

from vaadin_skills.config import UI_LANGUAGES, get_settings

logger = logging.getLogger(__name__)


def _print(payload):
    if isinstance(payload, str):
        payload = json.loads(payload)
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 1 if isinstance(payload, dict) and "error" in payload else 0


def cmd_serve(args) -> int:
    from vaadin_skills.server import run_server

    settings = get_settings()
    if args.transport:
        settings.mcp_transport = args.transport
    if args.port:
        settings.mcp_port = args.port
    run_server(settings)
    return 0


def cmd_index(args) -> int:
    from vaadin_skills.docs import DocsLibrary

    library = DocsLibrary.from_settings(build_index=False)
    stats = library.refresh(force=args.force)
    stats["index"] = library.index.stats()
    return _print(stats)


def cmd_search(args) -> int:
    from vaadin_skills.tools import execute_tool

    return _print(execute_tool("search_vaadin_docs", {
        "question": args.question,
        "vaadin_version": args.version,
        "ui_language": args.ui_language,
        "max_results": args.max_results,
        "max_tokens": args.max_tokens,
    }))


def cmd_doc(args) -> int:
    from vaadin_skills.tools import execute_tool

    return _print(execute_tool("get_full_document", {
        "document_ids": args.document_ids,
        "vaadin_version": args.version,
    }))


def cmd_component(args) -> int:
    from vaadin_skills.tools import execute_tool

    tool = "get_component_styling" if args.styling else "get_component_java_api"
    return _print(execute_tool(tool, {"component_name": args.name, "vaadin_version": args.version}))


def cmd_version(args) -> int:
    from vaadin_skills.tools import execute_tool

    return _print(execute_tool("get_vaadin_version", {}))


def cmd_skills(args) -> int:
    from vaadin_skills.tools import execute_tool

    if args.action == "match":
        if not args.value:
            print("skills match needs a message", file=sys.stderr)
            return 2
        return _print(execute_tool("find_skills", {"message": args.value, "include_prompt": False}))
    if args.action == "show":
        if not args.value:
            print("skills show needs a skill name", file=sys.stderr)
            return 2
        return _print(execute_tool("get_skill", {"name": args.value}))
    return _print(execute_tool("list_skills", {}))


def cmd_lint(args) -> int:
    from vaadin_skills.skills.linter import lint_paths

    settings = get_settings()
    paths = args.paths or [settings.skills_dir, settings.docs_dir]
    report = lint_paths(paths, docs_root=settings.docs_dir)
    for issue in report["issues"]:
        print(f"{issue['path']}:{issue['line']}: {issue['level']}: {issue['message']}")
    print(f"{report['files']} files, {report['errors']} errors, {report['warnings']} warnings")
    return 1 if report["errors"] else 0


def cmd_trace(args) -> int:
    from vaadin_skills.trace_logger import TraceLogger

    trace = TraceLogger(get_settings().trace_db)
    if args.summary:
        return _print(trace.summary())
    filters = {
        "tool": args.tool,
        "session_id": args.session,
        "status": "error" if args.errors else None,
        "since": args.since,
    }
    if args.export:
        print(trace.export_json(**filters))
        return 0
    return _print(trace.query(limit=args.limit, **filters))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vaadin-skills",
        description="Vaadin skill corpus tooling and documentation MCP server",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: VAADIN_LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("serve", help="Run the MCP server")
    p.add_argument("--transport", choices=["stdio", "sse", "streamable-http"], default=None)
    p.add_argument("--port", type=int, default=None)
    p.set_defaults(func=cmd_serve)

    p = sub.add_parser("index", help="(Re)build the documentation index")
    p.add_argument("--force", action="store_true", help="Re-index unchanged pages too")
    p.set_defaults(func=cmd_index)

    p = sub.add_parser("search", help="Search the documentation")
    p.add_argument("question")
    p.add_argument("--version", default=None, help="Vaadin major (default: 25)")
    p.add_argument("--ui-language", choices=UI_LANGUAGES, default=None)
    p.add_argument("--max-results", type=int, default=5)
    p.add_argument("--max-tokens", type=int, default=1500)
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("doc", help="Print full documentation pages")
    p.add_argument("document_ids", nargs="+")
    p.add_argument("--version", default=None)
    p.set_defaults(func=cmd_doc)

    p = sub.add_parser("component", help="Component Java API or styling reference")
    p.add_argument("name")
    p.add_argument("--styling", action="store_true")
    p.add_argument("--version", default=None)
    p.set_defaults(func=cmd_component)

    p = sub.add_parser("version", help="Latest Vaadin version")
    p.set_defaults(func=cmd_version)

    p = sub.add_parser("skills", help="List, match or show skills")
    p.add_argument("action", nargs="?", choices=["list", "match", "show"], default="list")
    p.add_argument("value", nargs="?", default=None)
    p.set_defaults(func=cmd_skills)

    p = sub.add_parser("trace", help="Show the tool-call audit trail")
    p.add_argument("--tool", default=None)
    p.add_argument("--session", default=None)
    p.add_argument("--since", default=None, help="ISO date or timestamp")
    p.add_argument("--errors", action="store_true", help="Only failed calls")
    p.add_argument("--limit", type=int, default=20)
    p.add_argument("--summary", action="store_true", help="Per-tool call and error counts")
    p.add_argument("--export", action="store_true", help="All matching records as JSON, oldest first")
    p.set_defaults(func=cmd_trace)

    p = sub.add_parser("lint", help="Lint skill documents and documentation pages")
    p.add_argument("paths", nargs="*")
    p.set_defaults(func=cmd_lint)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=(args.log_level or settings.log_level).upper(),
        stream=sys.stderr,
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
