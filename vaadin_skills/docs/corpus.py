"""
Documentation corpus — read-only access to the local Markdown docs tree.

Layout::

    <docs_root>/<major>/<relative/path>.md     (major dir: "25" or "v25")

A page's document id is its version-relative POSIX path without ".md".
Pages carry YAML frontmatter (title, framework, component, section, url);
anything missing is inferred from the file location.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

from vaadin_skills.docs.errors import InvalidArgumentError
from vaadin_skills.skills.skill_loader import parse_frontmatter

logger = logging.getLogger(__name__)

DOCS_BASE_URL = "https://vaadin.com/docs"

FRAMEWORKS = ("java", "react", "common")

# File stem -> section when the frontmatter does not say
STEM_SECTIONS = {
    "index": "overview",
    "java-api": "java-api",
    "react-api": "react-api",
    "styling": "styling",
}

_VERSION_DIR_RE = re.compile(r"^v?(\d+)$")
_VERSION_RE = re.compile(r"^v?(\d+)(?:\.\d+)*(?:[.-][\w.]+)?$")
_FENCE_RE = re.compile(r"^\s*(`{3,}|~{3,})")


def normalize_version(version) -> str:
    """Return the major of *version* ("25", "25.0", "v25", "25.0.3" -> "25")."""
    text = str(version).strip()
    match = _VERSION_RE.match(text)
    if not match:
        raise InvalidArgumentError(f"Invalid Vaadin version '{version}'")
    return str(int(match.group(1)))


def normalize_component(name: str) -> str:
    """Turn a component name into its slug ("GridPro", "vaadin-grid-pro" -> "grid-pro")."""
    text = (name or "").strip()
    text = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", text)
    text = re.sub(r"[\s_]+", "-", text).lower()
    text = re.sub(r"-{2,}", "-", text).strip("-")
    if text.startswith("vaadin-"):
        text = text[len("vaadin-"):]
    return text


def normalize_document_id(document_id: str) -> str:
    """Strip a leading slash and a trailing ".md" from a document id."""
    text = (document_id or "").strip().replace("\\", "/").lstrip("/")
    if text.endswith(".md"):
        text = text[:-3]
    return text


def split_chunks(body: str) -> List[Dict]:
    """Split a page body at `## ` headings (fenced code is left intact).

    Returns list of {section, content, order}; empty chunks are dropped.
    """
    chunks = []
    section = ""
    lines: List[str] = []
    in_fence = False

    def flush():
        content = "\n".join(lines).strip()
        if content:
            chunks.append({"section": section, "content": content, "order": len(chunks)})

    for line in body.split("\n"):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
        if not in_fence and line.startswith("## "):
            flush()
            section = line[3:].strip()
            lines = []
            continue
        if not in_fence and not section and line.startswith("# "):
            continue
        lines.append(line)
    flush()
    return chunks


class DocsCorpus:
    """Scanner and parser for the documentation tree."""

    def __init__(self, root: str):
        self.root = Path(root)

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def versions(self) -> List[str]:
        """Available majors, ascending numerically."""
        if not self.root.exists():
            return []
        majors = set()
        for child in self.root.iterdir():
            match = _VERSION_DIR_RE.match(child.name)
            if child.is_dir() and match:
                majors.add(str(int(match.group(1))))
        return sorted(majors, key=int)

    def version_dir(self, major: str) -> Optional[Path]:
        for name in (major, f"v{major}"):
            candidate = self.root / name
            if candidate.is_dir():
                return candidate
        return None

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan(self, major: Optional[str] = None) -> List[Dict]:
        """List page files, for one major or all of them.

        Returns list of dicts: {path, document_id, version, modified_time, size}
        """
        majors = [major] if major else self.versions()
        results = []
        for ver in majors:
            version_dir = self.version_dir(ver)
            if version_dir is None:
                logger.warning("Docs version directory not found: %s", ver)
                continue
            for md_file in sorted(version_dir.rglob("*.md")):
                rel = md_file.relative_to(version_dir)
                if any(part.startswith(".") for part in rel.parts):
                    continue
                stat = md_file.stat()
                results.append({
                    "path": str(md_file),
                    "document_id": rel.with_suffix("").as_posix(),
                    "version": ver,
                    "modified_time": stat.st_mtime,
                    "size": stat.st_size,
                })

        logger.debug("Scanned docs %s: %d pages", majors, len(results))
        return results

    def page_path(self, document_id: str, major: str) -> Optional[Path]:
        version_dir = self.version_dir(major)
        if version_dir is None:
            return None
        doc_id = normalize_document_id(document_id)
        if not doc_id:
            return None
        path = (version_dir / f"{doc_id}.md").resolve()
        # Ids must stay inside the version directory
        if version_dir.resolve() not in path.parents or not path.is_file():
            return None
        return path

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse_page(self, filepath: str, document_id: str, major: str) -> Optional[Dict]:
        """Parse one page into structured data, or None when unreadable."""
        path = Path(filepath)
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", filepath, e)
            return None

        header, body = parse_frontmatter(raw)
        parts = document_id.split("/")

        title = header.get("title")
        if not title:
            heading = re.search(r"^# (.+)$", body, re.MULTILINE)
            title = heading.group(1).strip() if heading else path.stem

        framework = str(header.get("framework", "common")).lower()
        if framework not in FRAMEWORKS:
            logger.warning("Unknown framework '%s' in %s, treating as common", framework, filepath)
            framework = "common"

        component = header.get("component")
        if not component and len(parts) >= 2 and parts[0] == "components":
            component = parts[1]

        section = header.get("section") or STEM_SECTIONS.get(path.stem, "guide")

        url = header.get("url")
        if not url:
            url_path = document_id[: -len("/index")] if document_id.endswith("/index") else document_id
            url = f"{DOCS_BASE_URL}/v{major}/{url_path}"

        tags = header.get("tags", [])
        if isinstance(tags, str):
            tags = [tags]

        return {
            "document_id": document_id,
            "version": major,
            "title": str(title),
            "description": str(header.get("description", "") or ""),
            "framework": framework,
            "component": normalize_component(component) if component else "",
            "section": str(section),
            "url": url,
            "tags": [str(t) for t in tags],
            "content": body,
            "chunks": split_chunks(body),
            "path": str(path),
        }

    def load_page(self, document_id: str, major: str) -> Optional[Dict]:
        path = self.page_path(document_id, major)
        if path is None:
            return None
        return self.parse_page(str(path), normalize_document_id(document_id), major)
