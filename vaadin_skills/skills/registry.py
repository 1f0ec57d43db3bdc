"""
Skills registry — indexes internal and external skills for lookup.
"""

import logging
from pathlib import Path
from typing import Optional

from vaadin_skills.skills.skill_loader import SkillLoader, rank_matches

logger = logging.getLogger(__name__)


class SkillRegistry:
    """Registry that indexes all skills and answers trigger matches."""

    def __init__(self, skills_dir: Optional[str] = None, external_paths: Optional[list] = None):
        self.loader = SkillLoader(skills_dir)
        self.external_paths = list(external_paths or [])
        self._index: dict = {}
        self._scan()

    def _scan(self):
        """Scan the skills directory (and external paths) and index all skills."""
        self._index = {}
        for skill_info in self.loader.list_skills():
            self._index[skill_info["name"]] = skill_info

        if self.external_paths:
            self.register_external_skills(self.external_paths)

        if self._index:
            logger.info("Skills registry: %d skills indexed", len(self._index))
        else:
            logger.info("Skills registry: no skills found")

    def refresh(self):
        """Re-scan skills (call when skills are added/removed)."""
        self._scan()

    def match(self, message: str) -> list:
        """Match skills for a free-text message, most triggers hit first."""
        return rank_matches(list(self._index.values()), message)

    def get_prompt(self, name: str) -> Optional[str]:
        """Get the instruction text for a skill, or None."""
        skill = self._index.get(name)
        if skill is None:
            return None
        if skill.get("source") == "external":
            return skill.get("prompt", "")
        return self.loader.get_skill_prompt(Path(skill["path"]).stem)

    def get(self, name: str) -> Optional[dict]:
        """Get skill info by name."""
        return self._index.get(name)

    def list_all(self) -> list:
        """List all indexed skills, sorted by name."""
        return [self._index[name] for name in sorted(self._index)]

    def register_external_skills(self, search_paths: list) -> int:
        """Scan external skill paths and register discovered skills.

        An external skill replaces an internal one of the same name.
        """
        registered = 0
        for skill in self.loader.scan_external_skills(search_paths):
            name = skill["name"]
            if name in self._index:
                logger.info("External skill '%s' overrides %s", name, self._index[name]["path"])
            self._index[name] = skill
            registered += 1

        if registered:
            logger.info("Registered %d external skills", registered)
        return registered
