"""Shared pytest fixtures for vaadin-skills tests."""

import os
from pathlib import Path

import pytest

from vaadin_skills.docs import set_library
from vaadin_skills.docs.corpus import DocsCorpus
from vaadin_skills.docs.index import DocsIndex
from vaadin_skills.docs.library import DocsLibrary
from vaadin_skills.docs.versions import VersionResolver
from vaadin_skills.tools.skill_tools import set_registry

REPO_ROOT = Path(__file__).resolve().parent.parent
DOCS_DIR = REPO_ROOT / "docs"
SKILLS_DIR = REPO_ROOT / "skills"


class FakeEmbedder:
    """Deterministic embedder for tests."""

    available = True

    def embed(self, text):
        seed = len(text) + ord(text[0]) if text else 0
        return [float(seed % (i + 1)) / (i + 1) for i in range(8)]


def write_page(root, version_dir, document_id, text):
    """Create a documentation page under root/version_dir."""
    path = Path(root) / version_dir / f"{document_id}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path."""
    return str(tmp_path / "test_trace.db")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment and cached settings out of tests."""
    for key in list(os.environ):
        if key.startswith("VAADIN_") or key.startswith("OLLAMA_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("vaadin_skills.config._settings", None)
    monkeypatch.setattr("vaadin_skills.config.load_dotenv", lambda *a, **kw: False)


@pytest.fixture(autouse=True)
def reset_shared_state():
    yield
    set_library(None)
    set_registry(None)


@pytest.fixture
def library():
    """DocsLibrary over the repository docs/ tree with an in-memory index."""
    corpus = DocsCorpus(str(DOCS_DIR))
    index = DocsIndex(":memory:")
    resolver = VersionResolver(
        releases_url="https://releases.invalid/latest",
        pinned_version="25.0.3",
        corpus_versions=index.versions,
    )
    lib = DocsLibrary(corpus, index, resolver)
    lib.refresh()
    return lib


@pytest.fixture
def installed_library(library):
    """Install the repository library as the process-wide one."""
    set_library(library)
    return library
