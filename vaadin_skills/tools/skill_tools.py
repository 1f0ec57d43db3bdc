"""
Skill tools — let the assistant discover and read skill documents.
"""

import threading
from typing import Optional

from vaadin_skills.config import get_settings
from vaadin_skills.docs.errors import DocsError
from vaadin_skills.skills.registry import SkillRegistry
from vaadin_skills.tools._common import respond

_registry: Optional[SkillRegistry] = None
_lock = threading.Lock()


def get_registry() -> SkillRegistry:
    global _registry
    with _lock:
        if _registry is None:
            settings = get_settings()
            _registry = SkillRegistry(settings.skills_dir, external_paths=settings.external_skill_paths)
        return _registry


def set_registry(registry: Optional[SkillRegistry]):
    global _registry
    with _lock:
        _registry = registry


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

TOOLS = [
    {
        "name": "list_skills",
        "description": "Inventory of available Vaadin skills (name, description, triggers, version).",
        "input_schema": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": "find_skills",
        "description": (
            "Find the skills whose trigger phrases match a task description. Call this "
            "before writing Vaadin code to pick up the relevant instructions."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "message": {
                    "type": "string",
                    "description": "Task description or user request",
                },
                "include_prompt": {
                    "type": "boolean",
                    "description": "Include each skill's instruction text (default: true)",
                },
            },
            "required": ["message"],
        },
    },
    {
        "name": "get_skill",
        "description": "Instruction text of one skill by name.",
        "input_schema": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Skill name"},
            },
            "required": ["name"],
        },
    },
]


# ---------------------------------------------------------------------------
# Handler functions
# ---------------------------------------------------------------------------

def _summary(skill: dict) -> dict:
    return {
        "name": skill["name"],
        "description": skill["description"],
        "triggers": skill["triggers"],
        "version": skill["version"],
        "category": skill["category"],
        "source": skill["source"],
    }


def _list_skills() -> dict:
    skills = [_summary(s) for s in get_registry().list_all()]
    return {"count": len(skills), "skills": skills}


def _find_skills(message: str, include_prompt: bool) -> dict:
    registry = get_registry()
    matched = []
    for skill in registry.match(message):
        entry = _summary(skill)
        if include_prompt:
            entry["prompt"] = registry.get_prompt(skill["name"])
        matched.append(entry)
    return {"count": len(matched), "skills": matched}


def _get_skill(name: str) -> dict:
    registry = get_registry()
    skill = registry.get(name)
    if skill is None:
        raise DocsError(f"Unknown skill: {name}")
    entry = _summary(skill)
    entry["prompt"] = registry.get_prompt(name)
    return entry


def handle_list_skills() -> str:
    return respond(_list_skills)


def handle_find_skills(message: str, include_prompt: bool = True) -> str:
    return respond(_find_skills, message, include_prompt)


def handle_get_skill(name: str) -> str:
    return respond(_get_skill, name)


HANDLERS = {
    "list_skills": handle_list_skills,
    "find_skills": handle_find_skills,
    "get_skill": handle_get_skill,
}
