"""
Documentation index — SQLite store of pages and their heading chunks.

Chunks are embedded via OllamaEmbedder when it is available and ranked by
cosine similarity; otherwise a keyword score is used. Indexing is
incremental: unchanged source files (by mtime) are skipped and files that
disappeared from the corpus are dropped.
"""

import json
import logging
import os
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from vaadin_skills.docs.corpus import DocsCorpus
from vaadin_skills.docs.embedder import (
    DisabledEmbedder,
    OllamaEmbedder,
    chunk_text,
    cosine_similarity,
    pack_vector,
    unpack_vector,
)

logger = logging.getLogger(__name__)

# Keyword scoring weights
TITLE_WEIGHT = 3
SECTION_WEIGHT = 2
MAX_OCCURRENCES = 5
PHRASE_BONUS = 5

STOPWORDS = {
    "a", "an", "and", "are", "as", "at", "be", "by", "can", "do", "does", "for",
    "from", "how", "i", "in", "is", "it", "me", "my", "of", "on", "or", "should",
    "that", "the", "to", "use", "using", "what", "when", "where", "which", "with",
    "you", "your", "vaadin",
}

# UI language -> frameworks whose pages it may see
FRAMEWORK_FILTER = {
    "java": ("java", "common"),
    "react": ("react", "common"),
    "common": ("java", "react", "common"),
}


def tokenize(text: str) -> List[str]:
    """Lower-case query tokens of two or more characters, stopwords removed."""
    tokens = []
    seen = set()
    for raw in re.findall(r"[a-z0-9][a-z0-9_+#.-]*", (text or "").lower()):
        token = raw.rstrip(".-")
        if len(token) < 2 or token in STOPWORDS or token in seen:
            continue
        seen.add(token)
        tokens.append(token)
    return tokens


def keyword_score(tokens: List[str], phrase: str, title: str, section: str, content: str) -> float:
    """Score one chunk for *tokens*; 0 when no token matches."""
    title_l = (title or "").lower()
    section_l = (section or "").lower()
    content_l = (content or "").lower()

    score = 0.0
    matched = False
    for token in tokens:
        hits = len(re.findall(r"(?<![a-z0-9])" + re.escape(token), content_l))
        in_title = token in title_l
        in_section = token in section_l
        if not (hits or in_title or in_section):
            continue
        matched = True
        if in_title:
            score += TITLE_WEIGHT
        if in_section:
            score += SECTION_WEIGHT
        score += min(hits, MAX_OCCURRENCES)

    if not matched:
        return 0.0
    if phrase and phrase in content_l:
        score += PHRASE_BONUS
    return score


class DocsIndex:
    """SQLite-backed search index over a DocsCorpus."""

    def __init__(self, db_path: str = ":memory:", embedder: Optional[OllamaEmbedder] = None):
        if db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)

        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

        self.embedder = embedder if embedder is not None else DisabledEmbedder()

    def _init_schema(self):
        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            self.conn.executescript(f.read())

    def close(self):
        self.conn.close()

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def index_corpus(self, corpus: DocsCorpus, force: bool = False, progress_callback=None) -> Dict:
        """Index every page of *corpus*.

        Args:
            corpus: The documentation tree.
            force: Re-index all pages, ignoring recorded mtimes.
            progress_callback: Optional callable(current, total).

        Chunks stored without an embedding (indexed while the embedder was
        off or failing) are embedded afterwards when the embedder is available.

        Returns: {total, new, updated, skipped, removed, errors, embedded}
        """
        pages = corpus.scan()
        known = {
            row["path"]: row
            for row in self.conn.execute("SELECT path, version, document_id, modified_time FROM sources")
        }

        stats = {
            "total": len(pages), "new": 0, "updated": 0, "skipped": 0,
            "removed": 0, "errors": 0, "embedded": 0,
        }
        seen_paths = set()

        for i, info in enumerate(pages):
            path = info["path"]
            seen_paths.add(path)

            if progress_callback and (i % 10 == 0 or i == len(pages) - 1):
                progress_callback(i + 1, len(pages))

            previous = known.get(path)
            if not force and previous is not None and info["modified_time"] <= previous["modified_time"]:
                stats["skipped"] += 1
                continue

            page = corpus.parse_page(path, info["document_id"], info["version"])
            if page is None:
                stats["errors"] += 1
                continue

            self.index_page(page)
            self.conn.execute(
                """INSERT OR REPLACE INTO sources (path, version, document_id, modified_time, indexed_time)
                   VALUES (?, ?, ?, ?, ?)""",
                (path, info["version"], info["document_id"], info["modified_time"],
                 datetime.now(timezone.utc).isoformat()),
            )
            if previous is None:
                stats["new"] += 1
            else:
                stats["updated"] += 1

        for path, row in known.items():
            if path not in seen_paths:
                self.remove(row["version"], row["document_id"])
                self.conn.execute("DELETE FROM sources WHERE path = ?", (path,))
                stats["removed"] += 1

        if self.embedder.available:
            stats["embedded"] = self.embed_missing()

        self.conn.commit()
        logger.info(
            "Docs indexing complete: %d total, %d new, %d updated, %d skipped, %d removed, %d errors",
            stats["total"], stats["new"], stats["updated"], stats["skipped"],
            stats["removed"], stats["errors"],
        )
        return stats

    def index_page(self, page: Dict) -> int:
        """(Re)write one parsed page and its chunks. Returns the chunk count."""
        self.remove(page["version"], page["document_id"])
        self.conn.execute(
            """INSERT INTO documents
               (version, document_id, title, description, framework, component, section, url, tags, content, path)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                page["version"], page["document_id"], page["title"], page["description"],
                page["framework"], page["component"], page["section"], page["url"],
                json.dumps(page["tags"], ensure_ascii=False), page["content"], page["path"],
            ),
        )
        for chunk in page["chunks"]:
            embedding = self.embedder.embed(chunk_text(page["title"], chunk["section"], chunk["content"]))
            blob = pack_vector(embedding) if embedding else None
            self.conn.execute(
                """INSERT INTO chunks (version, document_id, chunk_order, section, content, embedding)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (page["version"], page["document_id"], chunk["order"], chunk["section"],
                 chunk["content"], blob),
            )
        return len(page["chunks"])

    def embed_missing(self) -> int:
        """Embed chunks that have no stored vector. Returns how many were filled."""
        rows = self.conn.execute(
            """SELECT c.id, c.section, c.content, d.title
               FROM chunks c
               JOIN documents d ON d.version = c.version AND d.document_id = c.document_id
               WHERE c.embedding IS NULL"""
        ).fetchall()

        filled = 0
        for row in rows:
            embedding = self.embedder.embed(chunk_text(row["title"], row["section"], row["content"]))
            if not embedding:
                continue
            self.conn.execute("UPDATE chunks SET embedding = ? WHERE id = ?", (pack_vector(embedding), row["id"]))
            filled += 1
        if filled:
            logger.info("Embedded %d of %d chunks that had no vector", filled, len(rows))
        return filled

    def remove(self, version: str, document_id: str):
        self.conn.execute("DELETE FROM chunks WHERE version = ? AND document_id = ?", (version, document_id))
        self.conn.execute("DELETE FROM documents WHERE version = ? AND document_id = ?", (version, document_id))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def versions(self) -> List[str]:
        rows = self.conn.execute("SELECT DISTINCT version FROM documents").fetchall()
        return sorted((r["version"] for r in rows), key=int)

    def get_document(self, version: str, document_id: str) -> Optional[Dict]:
        row = self.conn.execute(
            "SELECT * FROM documents WHERE version = ? AND document_id = ?",
            (version, document_id),
        ).fetchone()
        return self._document_row(row) if row else None

    def component_pages(self, version: str, component: str) -> List[Dict]:
        rows = self.conn.execute(
            "SELECT * FROM documents WHERE version = ? AND component = ? ORDER BY document_id",
            (version, component),
        ).fetchall()
        return [self._document_row(r) for r in rows]

    def components(self, version: str) -> List[str]:
        rows = self.conn.execute(
            "SELECT DISTINCT component FROM documents WHERE version = ? AND component != '' ORDER BY component",
            (version,),
        ).fetchall()
        return [r["component"] for r in rows]

    def stats(self) -> Dict:
        documents = self.conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]
        chunks = self.conn.execute("SELECT COUNT(*) FROM chunks").fetchone()[0]
        embedded = self.conn.execute("SELECT COUNT(*) FROM chunks WHERE embedding IS NOT NULL").fetchone()[0]
        return {"documents": documents, "chunks": chunks, "embedded_chunks": embedded, "versions": self.versions()}

    @staticmethod
    def _document_row(row: sqlite3.Row) -> Dict:
        doc = dict(row)
        doc.pop("id", None)
        doc["tags"] = json.loads(doc.get("tags") or "[]")
        return doc

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, query: str, version: str, ui_language: str = "java", limit: int = 5) -> List[Dict]:
        """Rank chunks of *version* visible to *ui_language* against *query*.

        Returns list of {document_id, title, section, framework, url, score, content}.
        """
        frameworks = FRAMEWORK_FILTER[ui_language]
        placeholders = ",".join("?" for _ in frameworks)
        cursor = self.conn.execute(
            f"""SELECT c.document_id, c.chunk_order, c.section, c.content, c.embedding,
                       d.title, d.framework, d.url
                FROM chunks c
                JOIN documents d ON d.version = c.version AND d.document_id = c.document_id
                WHERE c.version = ? AND d.framework IN ({placeholders})""",
            (version, *frameworks),
        )
        rows = cursor.fetchall()

        query_vec = self.embedder.embed(query) if self.embedder.available else None
        # Without any stored vector the query vector has nothing to compare to
        if query_vec is not None and any(row["embedding"] is not None for row in rows):
            candidates = self._semantic_rank(rows, query_vec)
        else:
            candidates = self._keyword_rank(rows, query)

        candidates.sort(key=lambda c: (-c["score"], c["document_id"], c["_order"]))
        results = candidates[:limit]
        for result in results:
            del result["_order"]
        return results

    def _semantic_rank(self, rows, query_vec: list) -> List[Dict]:
        candidates = []
        for row in rows:
            if row["embedding"] is None:
                continue
            vec = unpack_vector(row["embedding"])
            sim = cosine_similarity(query_vec, vec)
            candidates.append(self._candidate(row, sim))
        return candidates

    def _keyword_rank(self, rows, query: str) -> List[Dict]:
        tokens = tokenize(query)
        if not tokens:
            return []
        phrase = " ".join(query.lower().split())

        candidates = []
        for row in rows:
            score = keyword_score(tokens, phrase, row["title"], row["section"], row["content"])
            if score > 0:
                candidates.append(self._candidate(row, score))
        return candidates

    @staticmethod
    def _candidate(row, score: float) -> Dict:
        return {
            "document_id": row["document_id"],
            "title": row["title"],
            "section": row["section"],
            "framework": row["framework"],
            "url": row["url"],
            "score": round(score, 4),
            "content": row["content"],
            "_order": row["chunk_order"],
        }
