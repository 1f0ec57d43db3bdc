"""
Skill loader — Markdown skill documents with YAML frontmatter.

A skill is advisory text for the assistant, not executable code. The
frontmatter tells the assistant *when* a skill applies (its trigger
description); the body tells it *how* to write the code.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# Body sections handed to the assistant; everything else (notes, changelog) is skipped
PROMPT_SECTIONS = {"instructions", "examples"}

_STOPWORDS = {
    "use", "when", "user", "users", "asks", "ask", "about", "for", "with",
    "related", "question", "questions", "the", "and", "or", "a", "an", "to",
    "in", "of", "on", "is", "are", "this", "that", "skill", "code", "writing",
}


class SkillLoader:
    """Load and parse skill markdown files."""

    def __init__(self, skills_dir: Optional[str] = None):
        if skills_dir:
            self.skills_dir = Path(skills_dir)
        else:
            self.skills_dir = Path(__file__).resolve().parent.parent.parent / "skills"

    def load_skill(self, name: str) -> Optional[dict]:
        """Load a skill by name.

        Args:
            name: Skill name (without .md extension).

        Returns:
            Dict with 'name', 'header' (parsed YAML), 'body' (markdown),
            or None if not found.
        """
        path = self.skills_dir / f"{name}.md"
        if not path.exists():
            logger.warning("Skill not found: %s", name)
            return None

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Failed to read skill %s: %s", name, e)
            return None

        header, body = parse_frontmatter(content)
        return {
            "name": header.get("name", name),
            "header": header,
            "body": body,
            "path": str(path),
        }

    def list_skills(self) -> list:
        """List all internal skills.

        Returns:
            List of skill info dicts (name, description, triggers, category,
            version, tools_required, source, path).
        """
        if not self.skills_dir.exists():
            return []

        skills = []
        for path in sorted(self.skills_dir.glob("*.md")):
            if path.name == "README.md":
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except OSError as e:
                logger.warning("Failed to read skill %s: %s", path.name, e)
                continue
            header, _ = parse_frontmatter(content)
            if not header:
                logger.warning("Skill %s has no frontmatter, skipped", path.name)
                continue
            skills.append(self._skill_info(header, path.stem, path, "internal"))

        return skills

    def match_skills(self, message: str) -> list:
        """Match skills whose trigger phrases appear in *message*.

        Returns:
            Matching skill info dicts, most triggers hit first.
        """
        return rank_matches(self.list_skills(), message)

    def extract_trigger_keywords(self, description: str) -> list:
        """Derive trigger phrases from a skill description."""
        if not description:
            return []

        match = re.search(r"\((?:e\.g\.,?|for example,?)\s*([^)]+)\)", description, re.IGNORECASE)
        if match:
            return self._split_items(match.group(1))

        match = re.search(
            r"Use when\s*(?:the\s+)?user(?:s)?\s*(?:asks?|wants?|needs?)\s*(?:about|for|to|regarding)?\s*(.+?)(?:\.|$)",
            description,
            re.IGNORECASE,
        )
        if match:
            return self._split_items(match.group(1))

        words = re.findall(r"[A-Za-z0-9_+\-#]{2,}", description)
        deduped = []
        seen = set()
        for word in words:
            key = word.lower()
            if key in _STOPWORDS or key in seen:
                continue
            seen.add(key)
            deduped.append(word)
        return deduped[:10]

    def load_external_skill(self, skill_dir: Path) -> Optional[dict]:
        """Load an external skill from a directory containing SKILL.md."""
        skill_md = Path(skill_dir) / "SKILL.md"
        if not skill_md.exists():
            return None

        try:
            content = skill_md.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to read external skill %s: %s", skill_md, e)
            return None

        header, body = parse_frontmatter(content)
        info = self._skill_info(header, Path(skill_dir).name, skill_md, "external")
        info["prompt"] = extract_prompt_sections(body if header else content)
        return info

    def scan_external_skills(self, search_paths: list) -> list:
        """Scan external paths recursively and load every SKILL.md found."""
        loaded = []
        seen_paths = set()

        for raw_path in search_paths:
            base = Path(raw_path).expanduser()
            if not base.exists():
                logger.debug("External skill path missing: %s", base)
                continue

            if (base / "SKILL.md").exists():
                candidates = [base]
            else:
                candidates = sorted(p.parent for p in base.rglob("SKILL.md"))

            for candidate in candidates:
                skill_md = str((candidate / "SKILL.md").resolve())
                if skill_md in seen_paths:
                    continue
                seen_paths.add(skill_md)
                skill = self.load_external_skill(candidate)
                if skill:
                    loaded.append(skill)

        return loaded

    def get_skill_prompt(self, name: str) -> Optional[str]:
        """Return the Instructions/Examples sections of a skill.

        Returns:
            Prompt content string, or None if skill not found.
        """
        skill = self.load_skill(name)
        if not skill:
            return None
        return extract_prompt_sections(skill["body"])

    def _skill_info(self, header: dict, default_name: str, path: Path, source: str) -> dict:
        description = str(header.get("description", "") or "")

        triggers = header.get("triggers", [])
        if isinstance(triggers, str):
            triggers = self._split_items(triggers)
        if not triggers:
            triggers = self.extract_trigger_keywords(description)

        tools_req = header.get("tools_required", [])
        if isinstance(tools_req, str):
            tools_req = self._split_items(tools_req)

        return {
            "name": str(header.get("name") or default_name),
            "description": description,
            "triggers": [str(t) for t in triggers],
            "category": header.get("category", ""),
            "version": str(header.get("version", "") or ""),
            "tools_required": list(tools_req),
            "source": source,
            "path": str(path),
        }

    def _split_items(self, text: str) -> list:
        """Split comma-separated text into cleaned, de-duplicated items."""
        if not text:
            return []
        normalized = re.sub(r"\s+(?:and|or)\s+", ",", text)
        parts = [p.strip(" .:;\"'") for p in normalized.split(",")]
        cleaned = []
        seen = set()
        for part in parts:
            if not part:
                continue
            key = part.lower()
            if key in seen:
                continue
            seen.add(key)
            cleaned.append(part)
        return cleaned


# ----------------------------------------------------------------------
# Module helpers, shared with the registry and the linter
# ----------------------------------------------------------------------

def parse_frontmatter(content: str) -> Tuple[dict, str]:
    """Split markdown *content* into (header_dict, body).

    Content without a frontmatter block, or with one that is unclosed or
    not a YAML mapping, yields an empty header.
    """
    lines = content.split("\n")
    if lines[0].strip() != "---":
        return {}, content

    # The block ends at the first line that is exactly ---
    for end_idx in range(1, len(lines)):
        if lines[end_idx].strip() == "---":
            break
    else:
        return {}, content

    frontmatter = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1:]).strip()

    try:
        header = yaml.safe_load(frontmatter)
    except yaml.YAMLError as e:
        logger.warning("YAML parse error: %s", e)
        return {}, body

    if not isinstance(header, dict):
        return {}, body
    return header, body


def extract_prompt_sections(body: str) -> str:
    """Keep the `## Instructions` / `## Examples` sections of *body*.

    Falls back to the whole body when neither section exists.
    """
    sections = []
    current_section = None
    current_lines: List[str] = []

    for line in body.split("\n"):
        if line.startswith("## "):
            if current_section and current_section.lower() in PROMPT_SECTIONS:
                sections.append("\n".join(current_lines).strip())
            current_section = line[3:].strip()
            current_lines = [line]
        else:
            current_lines.append(line)

    # Last section
    if current_section and current_section.lower() in PROMPT_SECTIONS:
        sections.append("\n".join(current_lines).strip())

    return "\n\n".join(sections) if sections else body


def rank_matches(skills: list, message: str) -> list:
    """Return the skills whose triggers occur in *message*, best first."""
    if not message:
        return []
    msg_lower = message.lower()

    scored = []
    for skill_info in skills:
        hits = {t.lower() for t in skill_info.get("triggers", []) if t and t.lower() in msg_lower}
        if hits:
            scored.append((len(hits), skill_info))

    scored.sort(key=lambda item: (-item[0], item[1]["name"]))
    return [skill for _, skill in scored]
