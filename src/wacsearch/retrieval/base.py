"""Base classes and abstract interfaces for retrieval components."""

from abc import ABC, abstractmethod

from wacsearch.utils.config import EmbeddingSchema

from .document import SearchResult


class BaseEmbedding(ABC):
    """Abstract base class for embedding providers.

    Providers turn text into fixed-length vectors. Queries and documents
    use different prefixes, and every vector is truncated to
    ``schema.dimension``, so that live query vectors stay comparable with
    the precomputed corpus vectors.
    """

    def __init__(self, schema: EmbeddingSchema | None = None):
        self._schema = schema or EmbeddingSchema()

    @property
    def schema(self) -> EmbeddingSchema:
        """The model/prefix/dimension convention of this provider."""
        return self._schema

    @property
    def dimension(self) -> int:
        """Return the dimension of the embedding vectors."""
        return self._schema.dimension

    def truncate(self, vector: list[float]) -> list[float]:
        """Truncate a full-length vector to the schema dimension."""
        return list(vector[: self._schema.dimension])

    @abstractmethod
    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed corpus texts with the document prefix.

        Args:
            texts: List of text strings to embed

        Returns:
            List of embedding vectors
        """
        pass

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        """Embed a search query with the query prefix.

        Args:
            text: Query text to embed

        Returns:
            Embedding vector
        """
        pass


class BaseReranker(ABC):
    """Abstract base class for rerankers.

    A reranker reorders candidates by a finer relevance model. It must not
    change ``score``, which stays the cosine similarity used for
    confidence.
    """

    @abstractmethod
    async def rerank(self, query: str, results: list[SearchResult]) -> list[SearchResult]:
        """Reorder results by relevance to the query.

        Args:
            query: Query text
            results: Candidates in fused order

        Returns:
            The same results, most relevant first
        """
        pass
