"""Hybrid retrieval and ranking for the childcare rules corpus.

This module provides:
- Corpus records and search result data structures
- Embedding providers (local, Ollama, OpenAI, fake)
- BM25 lexical index and cosine vector index
- Query normalization (synonym expansion, typo correction)
- Weighted Reciprocal Rank Fusion with intent boosting
- Optional cross-encoder reranking
- Confidence and topic coverage classification
- Evaluation harness for tuning

Example:
    ```python
    from wacsearch.retrieval import HybridSearchEngine, LocalEmbedding, load_corpus

    engine = HybridSearchEngine(LocalEmbedding())
    engine.initialize(load_corpus("public/data"))

    response = await engine.search("how long can formula sit out")
    for result in response.results:
        print(result.section_title, result.score)
    ```
"""

# Data structures
from .document import (
    Confidence,
    ContentChunk,
    QAPair,
    ResultSource,
    SearchResponse,
    SearchResult,
)

# Embedding providers
from .base import BaseEmbedding
from .embeddings import (
    FakeEmbedding,
    LocalEmbedding,
    OllamaEmbedding,
    OpenAIEmbedding,
    create_embedding,
)

# Indexes
from .bm25 import BM25Index
from .vectorstore import EmbeddingIndex, cosine_similarity

# Query normalization
from .normalizer import (
    Correction,
    QueryNormalizer,
    build_vocabulary,
    levenshtein_distance,
)

# Ranking
from .fusion import HybridRanker, deduplicate_by_section, reciprocal_rank_fusion
from .reranker import CrossEncoderReranker, create_reranker, rerank_text
from .base import BaseReranker
from .intent import IntentBooster, QueryIntent
from .confidence import ConfidenceVerdict, classify_confidence

# Corpus
from .corpus import (
    Corpus,
    build_corpus,
    dump_embedding_set,
    load_corpus,
    read_embedding_set,
)
from .slug import build_slug_map, generate_slug

# Pipeline
from .pipeline import HybridSearchEngine, SearchContext, hybrid_search, rerank_candidates

# Evaluation
from .evaluation import (
    EvaluationCase,
    EvaluationReport,
    evaluate,
    load_cases,
)

__all__ = [
    # Data structures
    "Confidence",
    "ContentChunk",
    "QAPair",
    "ResultSource",
    "SearchResponse",
    "SearchResult",
    # Embeddings
    "BaseEmbedding",
    "FakeEmbedding",
    "LocalEmbedding",
    "OllamaEmbedding",
    "OpenAIEmbedding",
    "create_embedding",
    # Indexes
    "BM25Index",
    "EmbeddingIndex",
    "cosine_similarity",
    # Normalization
    "Correction",
    "QueryNormalizer",
    "build_vocabulary",
    "levenshtein_distance",
    # Ranking
    "HybridRanker",
    "deduplicate_by_section",
    "reciprocal_rank_fusion",
    "BaseReranker",
    "CrossEncoderReranker",
    "create_reranker",
    "rerank_text",
    "IntentBooster",
    "QueryIntent",
    "ConfidenceVerdict",
    "classify_confidence",
    # Corpus
    "Corpus",
    "build_corpus",
    "dump_embedding_set",
    "load_corpus",
    "read_embedding_set",
    "build_slug_map",
    "generate_slug",
    # Pipeline
    "HybridSearchEngine",
    "SearchContext",
    "hybrid_search",
    "rerank_candidates",
    # Evaluation
    "EvaluationCase",
    "EvaluationReport",
    "evaluate",
    "load_cases",
]
