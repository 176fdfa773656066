"""Embedding provider implementations."""

import asyncio
import hashlib
import logging
import struct
from typing import Any, Optional

import httpx

from wacsearch.utils.config import EmbeddingSchema, SearchConfig

from .base import BaseEmbedding

logger = logging.getLogger(__name__)


class LocalEmbedding(BaseEmbedding):
    """Local embedding model using sentence-transformers.

    Runs the same model the corpus vectors were generated with, entirely
    on the local machine.

    Note: Requires the 'local' extra to be installed.
    """

    def __init__(
        self,
        schema: Optional[EmbeddingSchema] = None,
        device: Optional[str] = None,
        normalize: bool = True,
    ):
        """Initialize the local embedding model.

        Args:
            schema: Model name, prefixes and truncation dimension
            device: Device to run on (cuda, cpu, mps). Auto-detected if None.
            normalize: Whether to normalize embeddings
        """
        super().__init__(schema)
        self.device = device
        self.normalize = normalize
        self._model = None

    def _get_model(self):
        """Get or load the sentence-transformers model."""
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer

                self._model = SentenceTransformer(self.schema.model, device=self.device)
                logger.info(f"Loaded embedding model: {self.schema.model}")
            except ImportError:
                raise ImportError(
                    "Local embedding requires 'sentence-transformers'. "
                    "Install it with: pip install wac-search[local]"
                )
        return self._model

    async def _encode(self, texts: list[str]) -> list[list[float]]:
        model = self._get_model()

        # Run in thread pool to avoid blocking
        loop = asyncio.get_running_loop()
        embeddings = await loop.run_in_executor(
            None,
            lambda: model.encode(
                texts,
                normalize_embeddings=self.normalize,
                convert_to_numpy=True,
            ),
        )

        return [self.truncate(row) for row in embeddings.tolist()]

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed corpus texts using the local model."""
        prefix = self.schema.document_prefix
        return await self._encode([f"{prefix}{text}" for text in texts])

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query using the local model."""
        embeddings = await self._encode([f"{self.schema.query_prefix}{text}"])
        return embeddings[0]


class OllamaEmbedding(BaseEmbedding):
    """Embedding provider backed by an Ollama server's /api/embed endpoint.

    HTTP errors are raised to the caller as ``httpx.HTTPStatusError``;
    nothing is retried.
    """

    def __init__(
        self,
        schema: Optional[EmbeddingSchema] = None,
        base_url: str = "http://localhost:11434",
        model: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the Ollama embedding provider.

        Args:
            schema: Prefixes and truncation dimension
            base_url: Ollama server URL
            model: Ollama model tag (defaults to the schema model)
            timeout: Request timeout in seconds
            client: Optional preconfigured HTTP client
        """
        super().__init__(schema)
        self.base_url = base_url.rstrip("/")
        self.model = model or self.schema.model
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def _embed(self, inputs: list[str]) -> list[list[float]]:
        client = self._get_client()

        response = await client.post(
            f"{self.base_url}/api/embed",
            json={"model": self.model, "input": inputs},
        )
        response.raise_for_status()

        data = response.json()
        return [self.truncate(vector) for vector in data["embeddings"]]

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        prefix = self.schema.document_prefix
        return await self._embed([f"{prefix}{text}" for text in texts])

    async def embed_query(self, text: str) -> list[float]:
        embeddings = await self._embed([f"{self.schema.query_prefix}{text}"])
        return embeddings[0]

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


class OpenAIEmbedding(BaseEmbedding):
    """OpenAI embedding model.

    Uses OpenAI's embedding API with server-side truncation
    (``dimensions``) to the schema dimension.

    Note: Requires the 'openai' extra to be installed.
    """

    def __init__(
        self,
        schema: Optional[EmbeddingSchema] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        batch_size: int = 100,
    ):
        """Initialize the OpenAI embedding model.

        Args:
            schema: Model name (e.g. text-embedding-3-small), prefixes, dimension
            api_key: OpenAI API key (optional, uses env var if not provided)
            base_url: Optional base URL for API
            batch_size: Batch size for embedding documents
        """
        super().__init__(schema)
        self.api_key = api_key
        self.base_url = base_url
        self.batch_size = batch_size
        self._client = None

    def _get_client(self):
        """Get or create the OpenAI client."""
        if self._client is None:
            try:
                from openai import AsyncOpenAI

                kwargs = {}
                if self.api_key:
                    kwargs["api_key"] = self.api_key
                if self.base_url:
                    kwargs["base_url"] = self.base_url

                self._client = AsyncOpenAI(**kwargs)
            except ImportError:
                raise ImportError(
                    "OpenAI embedding requires the 'openai' package. "
                    "Install it with: pip install wac-search[openai]"
                )
        return self._client

    async def _create(self, inputs: list[str]) -> list[list[float]]:
        client = self._get_client()

        response = await client.embeddings.create(
            model=self.schema.model,
            input=inputs,
            dimensions=self.schema.dimension,
        )

        return [self.truncate(item.embedding) for item in response.data]

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed corpus texts using OpenAI API."""
        prefix = self.schema.document_prefix
        all_embeddings = []

        # Process in batches
        for i in range(0, len(texts), self.batch_size):
            batch = [f"{prefix}{text}" for text in texts[i : i + self.batch_size]]
            all_embeddings.extend(await self._create(batch))

        return all_embeddings

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query using OpenAI API."""
        embeddings = await self._create([f"{self.schema.query_prefix}{text}"])
        return embeddings[0]


class FakeEmbedding(BaseEmbedding):
    """Fake embedding that generates deterministic embeddings from text.

    Useful for testing and offline development. The vector is derived
    from a hash of the prefixed text, so the same text always maps to the
    same vector.
    """

    def __init__(self, schema: Optional[EmbeddingSchema] = None, seed: int = 42):
        """Initialize the fake embedding.

        Args:
            schema: Embedding schema (model defaults to "fake")
            seed: Seed mixed into the hash
        """
        super().__init__(schema or EmbeddingSchema(model="fake"))
        self.seed = seed

    def _hash_text(self, text: str) -> list[float]:
        """Generate a deterministic embedding from text hash."""
        text_hash = hashlib.sha256(f"{self.seed}:{text}".encode()).digest()

        embedding = []
        for i in range(self.dimension):
            # Cycle through hash bytes, two at a time
            byte_idx = (i * 2) % (len(text_hash) - 2)
            value = struct.unpack("H", text_hash[byte_idx : byte_idx + 2])[0]
            embedding.append(value / 32767.5 - 1.0)

        return embedding

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        prefix = self.schema.document_prefix
        return [self._hash_text(f"{prefix}{text}") for text in texts]

    async def embed_query(self, text: str) -> list[float]:
        return self._hash_text(f"{self.schema.query_prefix}{text}")


PROVIDERS: dict[str, type[BaseEmbedding]] = {
    "local": LocalEmbedding,
    "ollama": OllamaEmbedding,
    "openai": OpenAIEmbedding,
    "fake": FakeEmbedding,
}


def create_embedding(config: SearchConfig, **overrides: Any) -> BaseEmbedding:
    """Create the embedding provider named by ``config.provider``.

    Args:
        config: Search configuration
        **overrides: Extra keyword arguments for the provider constructor

    Returns:
        Embedding provider sharing the configured schema
    """
    try:
        provider_cls = PROVIDERS[config.provider]
    except KeyError:
        raise ValueError(
            f"Unknown embedding provider: {config.provider!r} "
            f"(expected one of {', '.join(sorted(PROVIDERS))})"
        )

    options = {**config.provider_options, **overrides}
    return provider_cls(schema=config.embedding, **options)
