"""
Ollama Embedder — chunk embeddings for semantic documentation search.

Talks to a local Ollama server (/api/embeddings). An embedder that cannot
reach its model reports `available = False`; the index then stores no
vectors and ranks by keywords.
"""

import logging
import math
import struct
from typing import List, Optional

import requests

from vaadin_skills.config import DEFAULT_OLLAMA_EMBED_MODEL, DEFAULT_OLLAMA_EMBED_URL

logger = logging.getLogger(__name__)

# nomic-embed-text has an 8k token context; pages are cut well below that
MAX_INPUT_CHARS = 8000


def chunk_text(title: str, section: str, content: str) -> str:
    """Text embedded for one chunk: page title and heading give it context."""
    heading = f"{title} / {section}" if section else title
    return f"{heading}\n{content}"[:MAX_INPUT_CHARS]


def pack_vector(vector: List[float]) -> bytes:
    """float32 BLOB of *vector*."""
    return struct.pack(f"{len(vector)}f", *vector)


def unpack_vector(blob: bytes) -> List[float]:
    return list(struct.unpack(f"{len(blob) // 4}f", blob))


def cosine_similarity(a: List[float], b: List[float]) -> float:
    """Cosine of the angle between *a* and *b*; 0 for zero or mismatched vectors."""
    if len(a) != len(b):
        return 0.0
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if norm == 0:
        return 0.0
    return sum(x * y for x, y in zip(a, b)) / norm


class OllamaEmbedder:
    """Embeds chunk and query text with a local Ollama model."""

    def __init__(
        self,
        url: str = DEFAULT_OLLAMA_EMBED_URL,
        model: str = DEFAULT_OLLAMA_EMBED_MODEL,
        timeout: float = 30,
    ):
        self.url = url
        self.model = model
        self.timeout = timeout
        self.dimensions: Optional[int] = None
        self.session = requests.Session()
        self.available = self._probe()

    def _request(self, text: str, timeout: float) -> List[float]:
        resp = self.session.post(self.url, json={"model": self.model, "prompt": text}, timeout=timeout)
        resp.raise_for_status()
        vector = resp.json()["embedding"]
        if not isinstance(vector, list) or not vector:
            raise ValueError(f"empty embedding from {self.model}")
        return vector

    def _probe(self) -> bool:
        try:
            self.dimensions = len(self._request("vaadin", timeout=5))
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.warning("Ollama model %s at %s not available (%s); keyword search only",
                           self.model, self.url, e)
            return False
        logger.info("Ollama model %s ready (%d dimensions)", self.model, self.dimensions)
        return True

    def embed(self, text: str) -> Optional[List[float]]:
        """Vector for *text*, or None when the model fails or changes shape."""
        if not self.available:
            return None
        try:
            vector = self._request(text[:MAX_INPUT_CHARS], timeout=self.timeout)
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error("Embedding failed: %s", e)
            return None
        if self.dimensions is not None and len(vector) != self.dimensions:
            logger.error("Embedding has %d dimensions, expected %d", len(vector), self.dimensions)
            return None
        return vector


class DisabledEmbedder:
    """Stand-in used when semantic search is switched off in settings."""

    available = False
    model = ""

    def embed(self, text: str) -> Optional[List[float]]:
        return None
