"""
vaadin-skills configuration — environment driven, `.env` aware.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_RELEASES_URL = "https://api.github.com/repos/vaadin/platform/releases/latest"
DEFAULT_OLLAMA_EMBED_URL = "http://localhost:11434/api/embeddings"
DEFAULT_OLLAMA_EMBED_MODEL = "nomic-embed-text"

UI_LANGUAGES = ("java", "react", "common")
MCP_TRANSPORTS = ("stdio", "sse", "streamable-http")


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"true", "1", "yes", "y", "on"}


def _split_paths(value: str) -> List[str]:
    return [p.strip() for p in value.split(os.pathsep) if p.strip()]


class Settings:
    """Snapshot of all runtime settings, read from the environment."""

    def __init__(self):
        self.skills_dir = os.getenv("VAADIN_SKILLS_DIR", str(PROJECT_ROOT / "skills"))
        self.external_skill_paths = _split_paths(os.getenv("VAADIN_EXTERNAL_SKILL_PATHS", ""))
        self.docs_dir = os.getenv("VAADIN_DOCS_DIR", str(PROJECT_ROOT / "docs"))
        self.index_db = os.getenv("VAADIN_INDEX_DB", str(PROJECT_ROOT / "data" / "docs_index.db"))
        self.trace_db = os.getenv("VAADIN_TRACE_DB", str(PROJECT_ROOT / "data" / "trace.db"))

        self.default_version = os.getenv("VAADIN_DEFAULT_VERSION", "25")
        self.default_ui_language = os.getenv("VAADIN_DEFAULT_UI_LANGUAGE", "java").lower()
        self.latest_version = os.getenv("VAADIN_LATEST_VERSION", "").strip()
        self.releases_url = os.getenv("VAADIN_RELEASES_URL", DEFAULT_RELEASES_URL)
        self.version_cache_ttl = float(os.getenv("VAADIN_VERSION_CACHE_TTL", "3600"))
        self.http_timeout = float(os.getenv("VAADIN_HTTP_TIMEOUT", "10"))

        self.semantic_search = _as_bool(os.getenv("VAADIN_SEMANTIC_SEARCH", "false"))
        self.ollama_embed_url = os.getenv("OLLAMA_EMBED_URL", DEFAULT_OLLAMA_EMBED_URL)
        self.ollama_embed_model = os.getenv("OLLAMA_EMBED_MODEL", DEFAULT_OLLAMA_EMBED_MODEL)

        self.mcp_transport = os.getenv("VAADIN_MCP_TRANSPORT", "stdio")
        self.mcp_host = os.getenv("VAADIN_MCP_HOST", "127.0.0.1")
        self.mcp_port = int(os.getenv("VAADIN_MCP_PORT", "8000"))

        self.auto_reload = _as_bool(os.getenv("VAADIN_AUTO_RELOAD", "true"))
        self.reload_check_interval = float(os.getenv("VAADIN_RELOAD_CHECK_INTERVAL", "2.0"))

        self.log_level = os.getenv("VAADIN_LOG_LEVEL", "INFO").upper()

        self._validate()

    def _validate(self):
        if self.default_ui_language not in UI_LANGUAGES:
            raise ValueError(
                f"VAADIN_DEFAULT_UI_LANGUAGE must be one of {UI_LANGUAGES}, "
                f"got '{self.default_ui_language}'"
            )
        if self.mcp_transport not in MCP_TRANSPORTS:
            raise ValueError(
                f"VAADIN_MCP_TRANSPORT must be one of {MCP_TRANSPORTS}, "
                f"got '{self.mcp_transport}'"
            )

    def as_dict(self) -> dict:
        return {k: v for k, v in vars(self).items() if not k.startswith("_")}


_settings: Optional[Settings] = None


def get_settings(reload: bool = False) -> Settings:
    """Return the process-wide settings, loading `.env` on first use."""
    global _settings
    if _settings is None or reload:
        load_dotenv()
        _settings = Settings()
        logger.debug("Settings loaded: %s", _settings.as_dict())
    return _settings
