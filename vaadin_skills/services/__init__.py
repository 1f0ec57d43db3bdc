"""Runtime services."""

from vaadin_skills.services.hot_reload import HotReloader

__all__ = ["HotReloader"]
