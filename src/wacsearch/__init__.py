"""
wacsearch - Hybrid semantic search over Washington childcare rules.
"""

from wacsearch.exceptions import (
    CorpusError,
    EmbeddingSchemaMismatchError,
    SearchError,
    SearchNotInitializedError,
)
from wacsearch.retrieval import (
    Confidence,
    ContentChunk,
    Corpus,
    HybridSearchEngine,
    QAPair,
    SearchResponse,
    SearchResult,
    create_embedding,
    create_reranker,
    load_corpus,
)
from wacsearch.utils.config import SearchConfig, load_config
from wacsearch.utils.logging import set_log_level

__version__ = "0.1.0"
__all__ = [
    # Engine
    "HybridSearchEngine",
    "SearchConfig",
    "load_config",
    "set_log_level",
    "create_embedding",
    "create_reranker",
    "load_corpus",
    # Data
    "Confidence",
    "ContentChunk",
    "Corpus",
    "QAPair",
    "SearchResponse",
    "SearchResult",
    # Errors
    "SearchError",
    "SearchNotInitializedError",
    "CorpusError",
    "EmbeddingSchemaMismatchError",
]
