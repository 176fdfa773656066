"""Hybrid search pipeline: the query surface of the engine."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from wacsearch.exceptions import SearchNotInitializedError
from wacsearch.utils.config import SearchConfig
from wacsearch.utils.logging import get_logger, set_log_level

from .base import BaseEmbedding, BaseReranker
from .bm25 import BM25Index
from .confidence import classify_confidence
from .corpus import Corpus, load_corpus
from .document import (
    ContentChunk,
    QAPair,
    ResultSource,
    SearchResponse,
    SearchResult,
)
from .fusion import HybridRanker, deduplicate_by_section
from .intent import IntentBooster
from .normalizer import QueryNormalizer, build_vocabulary
from .reranker import create_reranker
from .vectorstore import EmbeddingIndex

logger = get_logger(__name__)


@dataclass(frozen=True)
class SearchContext:
    """Immutable indexes built once from a corpus.

    Shared read-only by every query, so concurrent searches need no
    locking. Rebuild the context when the corpus changes.
    """

    corpus: Corpus
    config: SearchConfig
    bm25: BM25Index
    normalizer: QueryNormalizer
    qa_index: EmbeddingIndex[QAPair]
    chunk_index: EmbeddingIndex[ContentChunk]
    ranker: HybridRanker
    booster: IntentBooster

    @classmethod
    def build(cls, corpus: Corpus, config: Optional[SearchConfig] = None) -> "SearchContext":
        """Build all derived indexes for ``corpus``.

        Args:
            corpus: Loaded corpus
            config: Search configuration (defaults to SearchConfig())

        Returns:
            SearchContext
        """
        config = config or SearchConfig()
        config.embedding.ensure_compatible(corpus.embedding_schema, where="corpus")

        bm25 = BM25Index(
            k1=config.bm25.k1,
            b=config.bm25.b,
            min_token_length=config.bm25.min_token_length,
        )
        bm25.index([f"{c.section_title} {c.content}" for c in corpus.chunks])

        vocabulary = build_vocabulary(
            corpus.qa_pairs,
            corpus.chunks,
            question_min_length=config.normalizer.question_word_min_length,
            content_min_length=config.normalizer.content_word_min_length,
        )

        return cls(
            corpus=corpus,
            config=config,
            bm25=bm25,
            normalizer=QueryNormalizer(vocabulary, config=config.normalizer),
            qa_index=EmbeddingIndex(corpus.qa_pairs, corpus.qa_embeddings, key=lambda qa: qa.question),
            chunk_index=EmbeddingIndex(corpus.chunks, corpus.chunk_embeddings, key=lambda c: c.chunk_id),
            ranker=HybridRanker(config.fusion),
            booster=IntentBooster(config.boost),
        )

    @property
    def section_categories(self) -> Mapping[str, str]:
        return self.corpus.section_categories

    def qa_result(self, qa: QAPair, score: float) -> SearchResult:
        return SearchResult(
            document=qa,
            score=score,
            source=ResultSource.QA,
            category=self.section_categories.get(qa.section_id, ""),
        )

    def chunk_result(self, chunk: ContentChunk, score: float) -> SearchResult:
        return SearchResult(
            document=chunk,
            score=score,
            source=ResultSource.CONTENT,
            category=chunk.category,
        )

    def search_qa(self, query_embedding: list[float]) -> list[SearchResult]:
        """All embedded Q&A pairs by similarity, highest first."""
        return [self.qa_result(qa, score) for qa, score in self.qa_index.search(query_embedding)]

    def search_content(self, query_embedding: list[float]) -> list[SearchResult]:
        """All embedded chunks by similarity, highest first."""
        return [self.chunk_result(c, score) for c, score in self.chunk_index.search(query_embedding)]

    def search_lexical(self, query: str, content: list[SearchResult]) -> list[SearchResult]:
        """Chunks matching ``query`` lexically, ordered by BM25 score.

        Each hit carries the chunk's cosine similarity from ``content`` as
        its raw score; chunks without an embedding are skipped.
        """
        dense = {r.document.chunk_id: r for r in content}
        scores = self.bm25.search(query)

        ranked = sorted(
            (i for i, score in enumerate(scores) if score > 0),
            key=lambda i: scores[i],
            reverse=True,
        )

        results = []
        for i in ranked:
            hit = dense.get(self.corpus.chunks[i].chunk_id)
            if hit is not None:
                results.append(hit)
        return results


async def rerank_candidates(
    reranker: BaseReranker,
    query: str,
    candidates: list[SearchResult],
    count: int,
) -> list[SearchResult]:
    """Rerank the first ``count`` candidates, keeping the rest in fused order.

    A failing reranker leaves the fused order untouched.
    """
    head, tail = candidates[:count], candidates[count:]
    if not head:
        return candidates

    try:
        reranked = await reranker.rerank(query, head)
    except Exception as e:
        logger.warning(f"Reranking failed, keeping fused order: {e}")
        return candidates

    return list(reranked) + tail


async def hybrid_search(
    context: SearchContext,
    embedding: BaseEmbedding,
    query: str,
    top_k: Optional[int] = None,
    suppress_uncovered: bool = True,
    reranker: Optional[BaseReranker] = None,
) -> SearchResponse:
    """Run one query through the full hybrid pipeline.

    Args:
        context: Indexes built from the corpus
        embedding: Query embedding provider
        query: Free-text query as the user typed it
        top_k: Maximum number of results (defaults to config.top_k)
        suppress_uncovered: Return no results when the topic is not covered
        reranker: Optional reranker for the top fused candidates

    Returns:
        SearchResponse
    """
    config = context.config
    top_k = config.top_k if top_k is None else top_k

    correction = context.normalizer.correct(query)
    search_query = correction.corrected if correction.had_corrections else query
    expanded = context.normalizer.expand(search_query)

    # Provider failures propagate unchanged
    query_embedding = await embedding.embed_query(expanded)

    qa_hits = context.search_qa(query_embedding)
    content_hits = context.search_content(query_embedding)
    lexical_hits = context.search_lexical(expanded, content_hits) if config.fusion.use_lexical else []

    intent = context.booster.detect(search_query)
    candidates = context.ranker.fuse(
        qa_hits,
        content_hits,
        lexical_hits,
        boost=lambda result: context.booster.multiplier(intent, result),
    )

    if reranker is not None:
        candidates = await rerank_candidates(
            reranker, search_query, candidates, config.rerank.candidates
        )

    results = deduplicate_by_section(candidates, top_k)

    verdict = classify_confidence(results, config.confidence)

    logger.debug(
        f"Query {search_query!r}: top scores {[round(r.score, 4) for r in results[:3]]}, "
        f"sections {[r.section_title for r in results[:3]]}, "
        f"confidence={verdict.confidence.value} covered={verdict.topic_covered}"
    )

    if suppress_uncovered and not verdict.topic_covered:
        results = []

    return SearchResponse(
        query=query,
        results=results,
        confidence=verdict.confidence,
        topic_covered=verdict.topic_covered,
        corrected_query=correction.corrected if correction.had_corrections else None,
    )


class HybridSearchEngine:
    """Semantic search over the childcare rules corpus.

    Example:
        ```python
        config = load_config()
        engine = HybridSearchEngine(create_embedding(config), config)
        engine.initialize(load_corpus(config.data_dir, config.embedding))

        response = await engine.search("how long can formula sit out")
        if not response.topic_covered:
            ...  # show "topic not found"
        ```
    """

    def __init__(
        self,
        embedding: BaseEmbedding,
        config: Optional[SearchConfig] = None,
        reranker: Optional[BaseReranker] = None,
    ):
        """Initialize the engine.

        Args:
            embedding: Query embedding provider
            config: Search configuration (defaults to SearchConfig())
            reranker: Reranker for the top fused candidates (defaults to the
                one config.rerank describes, if enabled)
        """
        self.embedding = embedding
        self.config = config or SearchConfig()
        self.reranker = reranker or create_reranker(self.config)
        self._context: Optional[SearchContext] = None

        if self.config.log_level:
            set_log_level(self.config.log_level)

    @property
    def is_initialized(self) -> bool:
        return self._context is not None

    @property
    def context(self) -> SearchContext:
        if self._context is None:
            raise SearchNotInitializedError()
        return self._context

    def initialize(self, corpus: Corpus) -> None:
        """Build the indexes for ``corpus``.

        Raises:
            EmbeddingSchemaMismatchError: If the provider, the configuration
                and the corpus disagree on the embedding schema
        """
        self.config.embedding.ensure_compatible(self.embedding.schema, where="embedding provider")
        self._context = SearchContext.build(corpus, self.config)

        logger.info(
            f"Search initialized: {len(self._context.chunk_index)} embedded chunks, "
            f"{len(self._context.qa_index)} embedded Q&A pairs"
        )

    def load(self, data_dir: Optional[str] = None) -> None:
        """Load the corpus from ``data_dir`` (or config.data_dir) and initialize."""
        data_dir = data_dir or self.config.data_dir
        if data_dir is None:
            raise ValueError("No data directory given and config.data_dir is not set")
        self.initialize(load_corpus(data_dir, self.config.embedding))

    async def search(self, query: str, top_k: Optional[int] = None) -> SearchResponse:
        """Search curated answers and regulation text.

        Args:
            query: Free-text query
            top_k: Maximum number of results (defaults to config.top_k)

        Returns:
            SearchResponse; results are empty when the topic is not covered
        """
        return await hybrid_search(
            self.context, self.embedding, query, top_k, reranker=self.reranker
        )

    async def rank(self, query: str, top_k: Optional[int] = None) -> SearchResponse:
        """Like ``search`` but keeps the ranking even when the topic is not covered."""
        return await hybrid_search(
            self.context,
            self.embedding,
            query,
            top_k,
            suppress_uncovered=False,
            reranker=self.reranker,
        )

    async def search_qa(self, query: str, k: int = 5) -> list[SearchResult]:
        """Curated answers only, by similarity of their questions."""
        context = self.context
        query_embedding = await self.embedding.embed_query(query)
        return context.search_qa(query_embedding)[:k]

    async def search_content(self, query: str, k: int = 10) -> list[SearchResult]:
        """Regulation chunks only, by embedding similarity."""
        context = self.context
        query_embedding = await self.embedding.embed_query(query)
        return context.search_content(query_embedding)[:k]
