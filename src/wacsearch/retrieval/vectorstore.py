"""In-memory embedding index and vector similarity."""

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Calculate cosine similarity between two vectors.

    Vectors of different lengths are compared over the shorter length.
    A zero-norm vector yields ``nan``.
    """
    length = min(len(a), len(b))

    dot_product = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for i in range(length):
        dot_product += a[i] * b[i]
        norm_a += a[i] * a[i]
        norm_b += b[i] * b[i]

    denominator = math.sqrt(norm_a) * math.sqrt(norm_b)
    if denominator == 0:
        return math.nan

    return dot_product / denominator


class EmbeddingIndex(Generic[T]):
    """Exact cosine search over a fixed set of items.

    Each item is paired with the embedding stored under its key. Items
    whose key has no embedding are left out of the index, so a partially
    embedded corpus is still searchable.
    """

    def __init__(
        self,
        items: Iterable[T],
        embeddings: Mapping[str, list[float]],
        key: Callable[[T], str],
    ) -> None:
        """Initialize the index.

        Args:
            items: Items to index, in corpus order
            embeddings: Map from item key to embedding vector
            key: Function returning the embedding key of an item
        """
        self._entries: list[tuple[T, list[float]]] = []
        self.missing: list[str] = []

        for item in items:
            item_key = key(item)
            vector = embeddings.get(item_key)
            if vector is None:
                self.missing.append(item_key)
                continue
            self._entries.append((item, vector))

        if self.missing:
            logger.warning(
                f"{len(self.missing)} items have no embedding and will be skipped "
                f"(first: {self.missing[0]!r})"
            )

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, query_embedding: list[float]) -> list[tuple[T, float]]:
        """Score every item against a query vector.

        Returns:
            (item, similarity) pairs sorted by similarity, highest first.
            Items whose similarity is ``nan`` are dropped.
        """
        scored = []
        dropped = 0
        for item, vector in self._entries:
            score = cosine_similarity(query_embedding, vector)
            if math.isnan(score):
                dropped += 1
                continue
            scored.append((item, score))

        if dropped:
            logger.debug(f"Dropped {dropped} items with undefined similarity")

        # Stable sort keeps corpus order among equal scores
        scored.sort(key=lambda x: x[1], reverse=True)
        return scored
