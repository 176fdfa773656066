"""
Configuration utilities.

Every ranking constant lives here as a named field. The defaults are
heuristics tuned against the evaluation set in ``wacsearch.retrieval.evaluation``;
treat them as tunable parameters, not protocol.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from pydantic import BaseModel, Field

from wacsearch import lexicon
from wacsearch.exceptions import EmbeddingSchemaMismatchError


class Config(BaseModel):
    """Base configuration class."""

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """Load configuration from file (YAML or JSON)."""
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        elif path.suffix == ".json":
            with open(path) as f:
                data = json.load(f)
            return cls(**data)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")


class EmbeddingSchema(BaseModel):
    """Describes how a set of embeddings was produced.

    Query vectors and stored vectors are only comparable when all of
    these fields agree.
    """

    model: str = "google/embeddinggemma-300m"
    dimension: int = 256
    query_prefix: str = "task: search result | query: "
    document_prefix: str = "title: none | text: "

    def ensure_compatible(self, other: "EmbeddingSchema", where: str = "embeddings") -> None:
        """Raise EmbeddingSchemaMismatchError if ``other`` differs from this schema."""
        for field in ("model", "dimension", "query_prefix", "document_prefix"):
            expected = getattr(self, field)
            actual = getattr(other, field)
            if expected != actual:
                raise EmbeddingSchemaMismatchError(field, expected, actual, where=where)


class BM25Config(BaseModel):
    """BM25 lexical scoring parameters."""
    k1: float = 1.5
    b: float = 0.75
    min_token_length: int = 3


class NormalizerConfig(BaseModel):
    """Synonym expansion and typo correction settings."""
    synonyms: dict[str, list[str]] = Field(default_factory=lambda: dict(lexicon.SYNONYMS))
    stopwords: list[str] = Field(default_factory=lambda: list(lexicon.STOPWORDS))
    min_token_length: int = 3
    min_correctable_length: int = 5
    long_word_length: int = 8
    long_word_max_distance: int = 2
    short_word_max_distance: int = 1
    question_word_min_length: int = 3
    content_word_min_length: int = 4


class FusionConfig(BaseModel):
    """Weighted Reciprocal Rank Fusion settings.

    ``rrf_k`` smooths the reciprocal rank so the first item of a list
    does not dominate. ``qa_weight`` applies only while the best curated
    answer scores at least as high as the best content chunk.
    """
    rrf_k: int = 60
    qa_weight: float = 1.2
    content_weight: float = 1.0
    lexical_weight: float = 1.0
    qa_window: int = 10
    content_window: int = 20
    lexical_window: int = 20
    use_lexical: bool = True
    tie_epsilon: float = 0.0001


class RerankConfig(BaseModel):
    """Cross-encoder reranking of the top fused candidates.

    Reranking only reorders candidates. Result scores stay cosine
    similarities, so the confidence bands are unaffected.
    """
    enabled: bool = False
    model: str = "cross-encoder/ms-marco-MiniLM-L-6-v2"
    candidates: int = 15
    max_chars: int = 512
    device: str | None = None


class ConfidenceConfig(BaseModel):
    """Score bands for the confidence classifier."""
    high_threshold: float = 0.75
    medium_threshold: float = 0.65
    low_threshold: float = 0.55
    scatter_margin: float = 0.03
    scatter_min_sections: int = 3


class BoostConfig(BaseModel):
    """Intent detection keyword lists and boost factors."""
    time_boost: float = 1.2
    numeric_boost: float = 1.1
    category_boost: float = 1.1
    time_keywords: list[str] = Field(default_factory=lambda: list(lexicon.TIME_KEYWORDS))
    time_content_keywords: list[str] = Field(default_factory=lambda: list(lexicon.TIME_CONTENT_KEYWORDS))
    number_keywords: list[str] = Field(default_factory=lambda: list(lexicon.NUMBER_KEYWORDS))
    category_keywords: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in lexicon.CATEGORY_KEYWORDS.items()}
    )


class SearchConfig(Config):
    """Top-level configuration for the search engine."""
    embedding: EmbeddingSchema = Field(default_factory=EmbeddingSchema)
    bm25: BM25Config = Field(default_factory=BM25Config)
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)
    fusion: FusionConfig = Field(default_factory=FusionConfig)
    rerank: RerankConfig = Field(default_factory=RerankConfig)
    confidence: ConfidenceConfig = Field(default_factory=ConfidenceConfig)
    boost: BoostConfig = Field(default_factory=BoostConfig)
    top_k: int = 5

    # Directory holding chunks.json, embeddings.json, qa-pairs.json, qa-embeddings.json
    data_dir: str | None = None

    # Provider settings
    provider: str = "local"
    provider_options: dict[str, Any] = Field(default_factory=dict)

    # Overrides WACSEARCH_LOG_LEVEL when set (DEBUG logs per-query diagnostics)
    log_level: str | None = None


def load_config(path: str | Path = "wacsearch.yaml") -> SearchConfig:
    """
    Load search configuration from file.

    Args:
        path: Path to config file

    Returns:
        SearchConfig instance (defaults if the file does not exist)
    """
    path = Path(path)

    if not path.exists():
        return SearchConfig()

    return SearchConfig.from_file(path)
