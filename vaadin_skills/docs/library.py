"""
Documentation library — the lookup operations behind the MCP tools.

Wraps the corpus, the search index and the version resolver, validates
caller arguments (version major, UI language) and shapes responses.
"""

import difflib
import logging
import re
from typing import Dict, Iterable, List, Optional, Union

from vaadin_skills.config import UI_LANGUAGES, Settings, get_settings
from vaadin_skills.docs.corpus import DocsCorpus, normalize_component, normalize_document_id, normalize_version
from vaadin_skills.docs.embedder import DisabledEmbedder, OllamaEmbedder
from vaadin_skills.docs.errors import (
    ComponentNotFoundError,
    DocumentNotFoundError,
    InvalidArgumentError,
    UnknownVersionError,
)
from vaadin_skills.docs.index import DocsIndex
from vaadin_skills.docs.versions import VersionResolver
from vaadin_skills.skills.linter import iter_code_blocks

logger = logging.getLogger(__name__)

MAX_RESULTS_LIMIT = 20
DEFAULT_MAX_RESULTS = 5
DEFAULT_MAX_TOKENS = 1500
CHARS_PER_TOKEN = 4
MIN_FIRST_SNIPPET = 200

_NEW_CLASS_RE = re.compile(r"\bnew\s+([A-Z]\w*)")
_DECLARED_CLASS_RE = re.compile(r"\b(?:class|interface|extends|implements)\s+([A-Z]\w*)")
_GENERIC_RE = re.compile(r"\b([A-Z]\w*)\s*<")
_METHOD_RE = re.compile(r"\.([a-z]\w*)\s*\(")
_CSS_PROPERTY_RE = re.compile(r"--(?:vaadin|lumo)-[\w-]*\w")
_PART_SELECTOR_RE = re.compile(r"::part\(\s*([\w-]+)\s*\)")
_PART_ATTR_RE = re.compile(r"\bpart\s*=\s*\"([\w\s-]+)\"")
_STATE_ATTR_RE = re.compile(r"\[([a-z][\w-]*)(?:\s*[~|^$*]?=[^\]]*)?\]")


def _trim(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    if limit <= 3:
        return text[:limit]
    cut = text.rfind(" ", 0, limit - 3)
    if cut <= 0:
        cut = limit - 3
    return text[:cut].rstrip() + "..."


def _code(content: str, languages: Iterable[str]) -> List[str]:
    wanted = set(languages)
    return [code for lang, code, _, _ in iter_code_blocks(content) if lang in wanted]


def extract_java_api(content: str) -> Dict[str, List[str]]:
    """Classes and methods referenced by the Java samples of a page."""
    classes = set()
    methods = set()
    for code in _code(content, ("java",)):
        classes.update(_NEW_CLASS_RE.findall(code))
        classes.update(_DECLARED_CLASS_RE.findall(code))
        classes.update(_GENERIC_RE.findall(code))
        methods.update(_METHOD_RE.findall(code))
    return {"classes": sorted(classes), "methods": sorted(methods)}


def extract_styling(content: str) -> Dict[str, List[str]]:
    """CSS custom properties, parts and state attributes mentioned on a page."""
    properties = set(_CSS_PROPERTY_RE.findall(content))
    parts = set(_PART_SELECTOR_RE.findall(content))
    for attr in _PART_ATTR_RE.findall(content):
        parts.update(attr.split())

    states = set()
    for code in _code(content, ("css",)):
        states.update(name for name in _STATE_ATTR_RE.findall(code) if name != "part")

    return {
        "css_properties": sorted(properties),
        "parts": sorted(parts),
        "state_attributes": sorted(states),
    }


class DocsLibrary:
    """Version-aware documentation lookups over an indexed corpus."""

    def __init__(
        self,
        corpus: DocsCorpus,
        index: DocsIndex,
        resolver: VersionResolver,
        default_version: str = "25",
        default_ui_language: str = "java",
    ):
        self.corpus = corpus
        self.index = index
        self.resolver = resolver
        self.default_version = default_version
        self.default_ui_language = default_ui_language

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, build_index: bool = True) -> "DocsLibrary":
        """Wire a library from settings; indexes the corpus incrementally."""
        settings = settings or get_settings()

        if settings.semantic_search:
            embedder = OllamaEmbedder(url=settings.ollama_embed_url, model=settings.ollama_embed_model)
        else:
            embedder = DisabledEmbedder()

        corpus = DocsCorpus(settings.docs_dir)
        index = DocsIndex(settings.index_db, embedder=embedder)
        resolver = VersionResolver(
            releases_url=settings.releases_url,
            pinned_version=settings.latest_version,
            corpus_versions=index.versions,
            cache_ttl=settings.version_cache_ttl,
            timeout=settings.http_timeout,
        )
        library = cls(
            corpus,
            index,
            resolver,
            default_version=settings.default_version,
            default_ui_language=settings.default_ui_language,
        )
        if build_index:
            library.refresh()
        return library

    def refresh(self, force: bool = False) -> Dict:
        """Bring the index up to date with the corpus."""
        return self.index.index_corpus(self.corpus, force=force)

    # ------------------------------------------------------------------
    # Argument handling
    # ------------------------------------------------------------------

    def resolve_version(self, vaadin_version: Optional[str]) -> str:
        """Map a caller version to an indexed major, or raise UnknownVersionError."""
        available = self.index.versions()
        raw = str(vaadin_version).strip() if vaadin_version not in (None, "") else self.default_version

        if raw.lower() == "latest":
            if not available:
                raise UnknownVersionError("No documentation is indexed")
            return available[-1]

        major = normalize_version(raw)
        if major not in available:
            listed = ", ".join(available) if available else "none"
            raise UnknownVersionError(
                f"Vaadin version {major} is not available; available versions: {listed}"
            )
        return major

    def resolve_ui_language(self, ui_language: Optional[str]) -> str:
        value = (ui_language or self.default_ui_language).strip().lower()
        if value not in UI_LANGUAGES:
            raise InvalidArgumentError(
                f"Unsupported ui_language '{ui_language}'; expected one of: {', '.join(UI_LANGUAGES)}"
            )
        return value

    def _component_pages(self, component_name: str, major: str) -> List[Dict]:
        slug = normalize_component(component_name)
        if not slug:
            raise InvalidArgumentError("component_name must not be empty")

        pages = self.index.component_pages(major, slug)
        if pages:
            return pages

        suggestions = difflib.get_close_matches(slug, self.index.components(major), n=3)
        message = f"Unknown component '{component_name}' for Vaadin {major}"
        if suggestions:
            message += f"; did you mean: {', '.join(suggestions)}"
        raise ComponentNotFoundError(message)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def search(
        self,
        question: str,
        vaadin_version: Optional[str] = None,
        ui_language: Optional[str] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> Dict:
        """Full-text search; snippets share a budget of *max_tokens*."""
        if not question or not question.strip():
            raise InvalidArgumentError("question must not be empty")
        if max_tokens < 1:
            raise InvalidArgumentError("max_tokens must be positive")

        major = self.resolve_version(vaadin_version)
        language = self.resolve_ui_language(ui_language)
        limit = min(max(int(max_results), 1), MAX_RESULTS_LIMIT)

        hits = self.index.search(question, major, language, limit=limit)

        budget = max_tokens * CHARS_PER_TOKEN
        used = 0
        results = []
        for hit in hits:
            remaining = budget - used
            if results and remaining <= 0:
                break
            allowed = max(remaining, MIN_FIRST_SNIPPET) if not results else remaining
            content = hit.pop("content")
            hit["snippet"] = _trim(content, allowed)
            used += len(hit["snippet"])
            results.append(hit)

        logger.debug("search %r v%s/%s: %d results", question, major, language, len(results))
        return {
            "question": question,
            "vaadin_version": major,
            "ui_language": language,
            "count": len(results),
            "results": results,
        }

    def get_documents(self, document_ids: Union[str, List[str]], vaadin_version: Optional[str] = None) -> Dict:
        """Full text of one or more pages by id."""
        if isinstance(document_ids, str):
            document_ids = [document_ids]

        ids = []
        for raw in document_ids or []:
            doc_id = normalize_document_id(raw)
            if doc_id and doc_id not in ids:
                ids.append(doc_id)
        if not ids:
            raise InvalidArgumentError("document_ids must contain at least one id")

        major = self.resolve_version(vaadin_version)

        documents = []
        missing = []
        for doc_id in ids:
            doc = self.index.get_document(major, doc_id)
            if doc is None:
                missing.append(doc_id)
                continue
            documents.append({
                "document_id": doc["document_id"],
                "title": doc["title"],
                "framework": doc["framework"],
                "component": doc["component"],
                "section": doc["section"],
                "url": doc["url"],
                "content": doc["content"],
            })

        if not documents:
            raise DocumentNotFoundError(
                f"Document(s) not found for Vaadin {major}: {', '.join(missing)}"
            )
        return {"vaadin_version": major, "documents": documents, "missing": missing}

    def component_java_api(self, component_name: str, vaadin_version: Optional[str] = None) -> Dict:
        """Java API page of a component plus the classes/methods its samples use."""
        major = self.resolve_version(vaadin_version)
        pages = self._component_pages(component_name, major)

        page = next((p for p in pages if p["section"] == "java-api"), None)
        if page is None:
            page = next(
                (p for p in pages if p["section"] == "overview" and p["framework"] in ("java", "common")),
                None,
            )
        if page is None:
            raise ComponentNotFoundError(
                f"No Java API documentation for '{component_name}' in Vaadin {major}"
            )

        response = self._component_response(page, pages, major)
        response.update(extract_java_api(page["content"]))
        return response

    def component_styling(self, component_name: str, vaadin_version: Optional[str] = None) -> Dict:
        """Styling page of a component plus its CSS properties, parts and states."""
        major = self.resolve_version(vaadin_version)
        pages = self._component_pages(component_name, major)

        page = next((p for p in pages if p["section"] == "styling"), None)
        if page is None:
            raise ComponentNotFoundError(
                f"No styling documentation for '{component_name}' in Vaadin {major}"
            )

        response = self._component_response(page, pages, major)
        response.update(extract_styling(page["content"]))
        return response

    def latest_version(self) -> Dict:
        return self.resolver.latest()

    def list_components(self, vaadin_version: Optional[str] = None) -> Dict:
        major = self.resolve_version(vaadin_version)
        return {"vaadin_version": major, "components": self.index.components(major)}

    @staticmethod
    def _component_response(page: Dict, pages: List[Dict], major: str) -> Dict:
        return {
            "component": page["component"],
            "vaadin_version": major,
            "document_id": page["document_id"],
            "title": page["title"],
            "url": page["url"],
            "content": page["content"],
            "related": [p["document_id"] for p in pages if p["document_id"] != page["document_id"]],
        }
