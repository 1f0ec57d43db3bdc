"""
Documentation lookups — local Vaadin docs corpus, search index and version info.

The process shares one DocsLibrary, built lazily from settings on first
use; the server and tests install their own with set_library().
"""

import logging
import threading
from typing import Optional

from vaadin_skills.docs.corpus import DocsCorpus
from vaadin_skills.docs.errors import DocsError
from vaadin_skills.docs.index import DocsIndex
from vaadin_skills.docs.library import DocsLibrary
from vaadin_skills.docs.versions import VersionResolver

logger = logging.getLogger(__name__)

_library: Optional[DocsLibrary] = None
_lock = threading.Lock()


def get_library() -> DocsLibrary:
    """Return the shared library, building it from settings if needed."""
    global _library
    with _lock:
        if _library is None:
            _library = DocsLibrary.from_settings()
            logger.info("Docs library ready: %s", _library.index.stats())
        return _library


def set_library(library: Optional[DocsLibrary]):
    """Install (or with None, reset) the shared library."""
    global _library
    with _lock:
        _library = library


__all__ = [
    "DocsCorpus",
    "DocsError",
    "DocsIndex",
    "DocsLibrary",
    "VersionResolver",
    "get_library",
    "set_library",
]
