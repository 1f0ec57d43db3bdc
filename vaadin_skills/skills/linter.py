"""
Structural lint for skill documents and documentation pages.

Checks that the frontmatter is well formed and that every fenced code
sample is syntactically plausible in the language it advertises.
"""

import ast
import json
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

ERROR = "error"
WARNING = "warning"

# Languages checked by bracket balance
C_FAMILY = {"java", "kotlin", "typescript", "ts", "tsx", "javascript", "js", "jsx", "css"}

# Known languages that are not syntax checked
UNCHECKED = {
    "html", "text", "txt", "plaintext", "bash", "sh", "shell", "console",
    "properties", "sql", "diff", "markdown", "md", "asciidoc", "ini", "toml",
    "dockerfile", "groovy",
}

_NAME_RE = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")
_FENCE_RE = re.compile(r"^(\s*)(`{3,}|~{3,})\s*([\w+#.-]*)")
_PAIRS = {")": "(", "]": "[", "}": "{"}


def _issue(level: str, path: str, line: int, message: str) -> Dict:
    return {"level": level, "path": path, "line": line, "message": message}


# ----------------------------------------------------------------------
# Frontmatter
# ----------------------------------------------------------------------

def _split_frontmatter(text: str, path: str, issues: List[Dict]) -> Tuple[Optional[dict], str, int]:
    """Return (header, body, body_start_line). Header is None when unusable."""
    lines = text.split("\n")
    if not lines or lines[0].strip() != "---":
        issues.append(_issue(ERROR, path, 1, "missing frontmatter block"))
        return None, text, 1

    for idx in range(1, len(lines)):
        if lines[idx].strip() == "---":
            break
    else:
        issues.append(_issue(ERROR, path, 1, "frontmatter block is not closed"))
        return None, text, 1

    raw = "\n".join(lines[1:idx])
    body = "\n".join(lines[idx + 1:])
    body_start = idx + 2

    try:
        header = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 2 if mark is not None else 1
        issues.append(_issue(ERROR, path, line, f"frontmatter is not valid YAML: {e}"))
        return None, body, body_start

    if not isinstance(header, dict):
        issues.append(_issue(ERROR, path, 1, "frontmatter must be a YAML mapping"))
        return None, body, body_start
    return header, body, body_start


def _check_skill_header(header: dict, path: Path, issues: List[Dict]):
    spath = str(path)
    for key in ("name", "description"):
        value = header.get(key)
        if not isinstance(value, str) or not value.strip():
            issues.append(_issue(ERROR, spath, 1, f"'{key}' is missing or empty"))

    name = header.get("name")
    if isinstance(name, str) and name.strip():
        if not _NAME_RE.match(name):
            issues.append(_issue(ERROR, spath, 1, f"name '{name}' must be lower-case kebab or snake case"))
        expected = path.parent.name if path.name == "SKILL.md" else path.stem
        if name != expected:
            issues.append(_issue(ERROR, spath, 1, f"name '{name}' does not match '{expected}'"))

    version = header.get("version")
    if version is not None and (isinstance(version, bool) or not isinstance(version, (str, int, float))):
        issues.append(_issue(ERROR, spath, 1, "'version' must be a string or number"))


def _check_page_header(header: dict, path: Path, issues: List[Dict]):
    framework = header.get("framework", "common")
    if framework not in ("java", "react", "common"):
        issues.append(_issue(ERROR, str(path), 1, f"unknown framework '{framework}'"))


# ----------------------------------------------------------------------
# Code samples
# ----------------------------------------------------------------------

def iter_code_blocks(body: str, first_line: int = 1) -> Iterable[Tuple[str, str, int, bool]]:
    """Yield (language, code, start_line, closed) for each fenced block."""
    lines = body.split("\n")
    i = 0
    while i < len(lines):
        match = _FENCE_RE.match(lines[i])
        if not match:
            i += 1
            continue
        fence = match.group(2)
        language = match.group(3).lower()
        start = i
        code_lines = []
        i += 1
        closed = False
        while i < len(lines):
            stripped = lines[i].strip()
            if stripped.startswith(fence[0] * len(fence)) and not stripped.strip(fence[0]):
                closed = True
                break
            code_lines.append(lines[i])
            i += 1
        yield language, "\n".join(code_lines), first_line + start, closed
        i += 1


def check_brackets(code: str, language: str) -> Optional[Tuple[int, str]]:
    """Bracket balance ignoring strings and comments.

    Returns (line_offset, message) for the first problem, or None.
    """
    stack: List[Tuple[str, int]] = []
    line = 0
    i = 0
    n = len(code)
    quotes = "\"'`" if language not in ("java", "kotlin") else "\"'"

    while i < n:
        ch = code[i]
        nxt = code[i + 1] if i + 1 < n else ""

        if ch == "\n":
            line += 1
            i += 1
            continue
        if ch == "/" and nxt == "/" and language != "css":
            while i < n and code[i] != "\n":
                i += 1
            continue
        if ch == "/" and nxt == "*":
            end = code.find("*/", i + 2)
            if end == -1:
                return line, "unterminated block comment"
            line += code.count("\n", i, end)
            i = end + 2
            continue
        if code.startswith('"""', i):
            end = code.find('"""', i + 3)
            if end == -1:
                return line, "unterminated text block"
            line += code.count("\n", i, end)
            i = end + 3
            continue
        if ch in quotes:
            j = i + 1
            while j < n and code[j] != ch:
                if code[j] == "\\":
                    j += 1
                elif code[j] == "\n" and ch != "`":
                    return line, f"unterminated string literal {ch}"
                j += 1
            if j >= n:
                return line, f"unterminated string literal {ch}"
            line += code.count("\n", i, j)
            i = j + 1
            continue

        if ch in "([{":
            stack.append((ch, line))
        elif ch in ")]}":
            if not stack or stack[-1][0] != _PAIRS[ch]:
                return line, f"unbalanced '{ch}'"
            stack.pop()
        i += 1

    if stack:
        opener, opened_at = stack[-1]
        return opened_at, f"unclosed '{opener}'"
    return None


def check_code_block(language: str, code: str) -> Optional[Tuple[int, str]]:
    """Syntax-check one sample. Returns (line_offset, message) or None."""
    if language == "json":
        try:
            json.loads(code)
        except json.JSONDecodeError as e:
            return e.lineno - 1, f"invalid JSON: {e.msg}"
        return None

    if language in ("yaml", "yml"):
        try:
            list(yaml.safe_load_all(code))
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            return (mark.line if mark is not None else 0), "invalid YAML"
        return None

    if language == "xml":
        body = re.sub(r"^\s*<\?xml[^>]*\?>", "", code)
        try:
            ET.fromstring(f"<root>{body}</root>")
        except ET.ParseError as e:
            return max(e.position[0] - 1, 0), f"invalid XML: {e}"
        return None

    if language in ("python", "py"):
        try:
            ast.parse(code)
        except SyntaxError as e:
            return (e.lineno or 1) - 1, f"invalid Python: {e.msg}"
        return None

    if language in C_FAMILY:
        return check_brackets(code, language)

    return None


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def lint_text(text: str, path: str, kind: str = "skill") -> List[Dict]:
    """Lint markdown *text*. *kind* is "skill" or "page"."""
    issues: List[Dict] = []
    header, body, body_start = _split_frontmatter(text, path, issues)

    if header is not None:
        if kind == "skill":
            _check_skill_header(header, Path(path), issues)
        else:
            _check_page_header(header, Path(path), issues)

    if not body.strip():
        issues.append(_issue(ERROR, path, body_start, "document body is empty"))

    for language, code, start, closed in iter_code_blocks(body, body_start):
        if not closed:
            issues.append(_issue(ERROR, path, start, "code block is not closed"))
            continue
        if not language:
            continue
        if language not in C_FAMILY and language not in UNCHECKED and language not in (
            "json", "yaml", "yml", "xml", "python", "py"
        ):
            issues.append(_issue(WARNING, path, start, f"unknown code block language '{language}'"))
            continue
        problem = check_code_block(language, code)
        if problem:
            offset, message = problem
            issues.append(_issue(ERROR, path, start + 1 + offset, f"{language} sample: {message}"))

    return issues


def lint_file(path, kind: Optional[str] = None, docs_root=None) -> List[Dict]:
    """Lint one markdown file.

    *kind* is "skill" or "page"; when omitted, files under *docs_root* are
    pages and everything else is a skill.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return [_issue(ERROR, str(path), 0, f"unreadable: {e}")]
    if kind is None:
        kind = "page" if _is_under(path, docs_root) else "skill"
    return lint_text(text, str(path), kind)


def _is_under(path: Path, root) -> bool:
    if root is None:
        return False
    return path.resolve().is_relative_to(Path(root).resolve())


def lint_paths(paths: Iterable, docs_root=None) -> Dict:
    """Lint files and directories (recursively, *.md, README.md skipped).

    Files under *docs_root* are linted as documentation pages.

    Returns:
        {"files": int, "errors": int, "warnings": int, "issues": [...]}
    """
    files: List[Path] = []
    for raw in paths:
        base = Path(raw)
        if base.is_dir():
            files.extend(p for p in sorted(base.rglob("*.md")) if p.name != "README.md")
        elif base.exists():
            files.append(base)
        else:
            logger.warning("Lint path not found: %s", base)

    issues: List[Dict] = []
    for path in files:
        issues.extend(lint_file(path, docs_root=docs_root))

    report = {
        "files": len(files),
        "errors": sum(1 for i in issues if i["level"] == ERROR),
        "warnings": sum(1 for i in issues if i["level"] == WARNING),
        "issues": issues,
    }
    logger.info(
        "Lint: %d files, %d errors, %d warnings",
        report["files"], report["errors"], report["warnings"],
    )
    return report
