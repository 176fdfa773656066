"""Corpus container and loading from the JSON data files."""

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from wacsearch.exceptions import CorpusError, EmbeddingSchemaMismatchError
from wacsearch.utils.config import EmbeddingSchema

from .document import ContentChunk, QAPair
from .slug import build_slug_map

logger = logging.getLogger(__name__)

CHUNKS_FILE = "chunks.json"
CHUNK_EMBEDDINGS_FILE = "embeddings.json"
QA_PAIRS_FILE = "qa-pairs.json"
QA_EMBEDDINGS_FILE = "qa-embeddings.json"


@dataclass(frozen=True)
class Corpus:
    """Everything the search engine reads: records plus their embeddings.

    Chunk embeddings are keyed by chunk id, Q&A embeddings by the verbatim
    question. Every stored vector must have ``embedding_schema.dimension``
    entries. Entries without an embedding are allowed and are skipped at
    search time.
    """

    chunks: tuple[ContentChunk, ...]
    qa_pairs: tuple[QAPair, ...] = ()
    chunk_embeddings: Mapping[str, list[float]] = field(default_factory=dict)
    qa_embeddings: Mapping[str, list[float]] = field(default_factory=dict)
    embedding_schema: EmbeddingSchema = field(default_factory=EmbeddingSchema)

    def __post_init__(self) -> None:
        object.__setattr__(self, "chunks", tuple(self.chunks))
        object.__setattr__(self, "qa_pairs", tuple(self.qa_pairs))

        seen: set[str] = set()
        for chunk in self.chunks:
            if chunk.chunk_id in seen:
                raise CorpusError(f"Duplicate chunk id: {chunk.chunk_id!r}")
            seen.add(chunk.chunk_id)

        self._check_dimensions(self.chunk_embeddings, "chunk embeddings")
        self._check_dimensions(self.qa_embeddings, "Q&A embeddings")

    def _check_dimensions(self, embeddings: Mapping[str, list[float]], where: str) -> None:
        expected = self.embedding_schema.dimension
        for key, vector in embeddings.items():
            if len(vector) != expected:
                raise EmbeddingSchemaMismatchError(
                    "dimension", expected, len(vector), where=f"{where} ({key!r})"
                )

    @cached_property
    def section_categories(self) -> dict[str, str]:
        """Category of each section, taken from its first chunk."""
        categories: dict[str, str] = {}
        for chunk in self.chunks:
            categories.setdefault(chunk.id, chunk.category)
        return categories

    @cached_property
    def slug_map(self) -> dict[str, QAPair]:
        return build_slug_map(self.qa_pairs)

    def find_qa(self, slug: str) -> Optional[QAPair]:
        """Look up a curated answer by its question slug."""
        return self.slug_map.get(slug)

    def get_chunk(self, chunk_id: str) -> Optional[ContentChunk]:
        for chunk in self.chunks:
            if chunk.chunk_id == chunk_id:
                return chunk
        return None


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise CorpusError(f"Corpus file not found: {path}")
    except json.JSONDecodeError as e:
        raise CorpusError(f"Invalid JSON in {path}: {e}")


def _parse_records(data: Any, model: type, path: Path) -> list:
    if not isinstance(data, list):
        raise CorpusError(f"Expected a list of records in {path}")
    try:
        return [model.model_validate(item) for item in data]
    except ValidationError as e:
        raise CorpusError(f"Invalid record in {path}: {e}")


def read_embedding_set(
    path: Path,
    key_field: str,
    schema: EmbeddingSchema,
) -> dict[str, list[float]]:
    """Read an embedding file and check it against ``schema``.

    Two layouts are accepted: a tagged object
    ``{"schema": {...}, "embeddings": [...]}`` and a bare list of records.
    Bare lists carry no schema, so only their vector lengths can be checked.

    Args:
        path: JSON file to read
        key_field: Record field holding the key ("chunkId" or "question")
        schema: Schema the engine was configured with

    Returns:
        Map from key to vector
    """
    data = _read_json(path)

    if isinstance(data, dict):
        if "schema" not in data or "embeddings" not in data:
            raise CorpusError(f"Embedding file {path} needs 'schema' and 'embeddings' keys")
        try:
            stored = EmbeddingSchema.model_validate(data["schema"])
        except ValidationError as e:
            raise CorpusError(f"Invalid embedding schema in {path}: {e}")
        schema.ensure_compatible(stored, where=path.name)
        records = data["embeddings"]
    else:
        logger.warning(f"{path.name} has no schema tag; only vector dimensions are checked")
        records = data

    if not isinstance(records, list):
        raise CorpusError(f"Expected a list of embeddings in {path}")

    embeddings: dict[str, list[float]] = {}
    for record in records:
        try:
            embeddings[record[key_field]] = [float(v) for v in record["embedding"]]
        except (KeyError, TypeError, ValueError):
            raise CorpusError(f"Malformed embedding record in {path}")

    return embeddings


def dump_embedding_set(
    path: str | Path,
    embeddings: Mapping[str, list[float]],
    key_field: str,
    schema: EmbeddingSchema,
) -> None:
    """Write embeddings in the tagged layout read by ``read_embedding_set``."""
    data = {
        "schema": schema.model_dump(),
        "embeddings": [
            {key_field: key, "embedding": list(vector)}
            for key, vector in embeddings.items()
        ],
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)


def load_corpus(
    data_dir: str | Path,
    schema: Optional[EmbeddingSchema] = None,
) -> Corpus:
    """Load a corpus from ``data_dir``.

    ``chunks.json`` and ``embeddings.json`` are required; the curated
    ``qa-pairs.json`` and ``qa-embeddings.json`` are optional.

    Args:
        data_dir: Directory holding the data files
        schema: Expected embedding schema (defaults to EmbeddingSchema())

    Returns:
        Corpus

    Raises:
        CorpusError: If a file is missing or malformed
        EmbeddingSchemaMismatchError: If stored vectors do not match ``schema``
    """
    data_dir = Path(data_dir)
    schema = schema or EmbeddingSchema()

    chunks = _parse_records(_read_json(data_dir / CHUNKS_FILE), ContentChunk, data_dir / CHUNKS_FILE)
    chunk_embeddings = read_embedding_set(data_dir / CHUNK_EMBEDDINGS_FILE, "chunkId", schema)

    qa_pairs: list[QAPair] = []
    qa_embeddings: dict[str, list[float]] = {}
    if (data_dir / QA_PAIRS_FILE).exists():
        qa_pairs = _parse_records(_read_json(data_dir / QA_PAIRS_FILE), QAPair, data_dir / QA_PAIRS_FILE)
        qa_embeddings = read_embedding_set(data_dir / QA_EMBEDDINGS_FILE, "question", schema)
    else:
        logger.info(f"No {QA_PAIRS_FILE} in {data_dir}; searching content only")

    corpus = Corpus(
        chunks=tuple(chunks),
        qa_pairs=tuple(qa_pairs),
        chunk_embeddings=chunk_embeddings,
        qa_embeddings=qa_embeddings,
        embedding_schema=schema,
    )

    logger.info(
        f"Loaded {len(corpus.chunks)} chunks and {len(corpus.qa_pairs)} Q&A pairs from {data_dir}"
    )
    return corpus


def build_corpus(
    chunks: Iterable[ContentChunk],
    qa_pairs: Iterable[QAPair] = (),
    chunk_embeddings: Optional[Mapping[str, list[float]]] = None,
    qa_embeddings: Optional[Mapping[str, list[float]]] = None,
    schema: Optional[EmbeddingSchema] = None,
) -> Corpus:
    """Build a corpus from in-memory records."""
    return Corpus(
        chunks=tuple(chunks),
        qa_pairs=tuple(qa_pairs),
        chunk_embeddings=dict(chunk_embeddings or {}),
        qa_embeddings=dict(qa_embeddings or {}),
        embedding_schema=schema or EmbeddingSchema(),
    )
