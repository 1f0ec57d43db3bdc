"""
Skills — Markdown instruction documents for the coding assistant.

Skills are NOT executable code; they are manuals that tell the assistant
how to write Vaadin application code and when each manual applies.
"""

from vaadin_skills.skills.skill_loader import SkillLoader
from vaadin_skills.skills.registry import SkillRegistry
from vaadin_skills.skills.linter import lint_file, lint_paths

__all__ = ["SkillLoader", "SkillRegistry", "lint_file", "lint_paths"]
