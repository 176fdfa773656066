"""Weighted Reciprocal Rank Fusion over several ranked result lists."""

import logging
from collections.abc import Callable, Sequence
from functools import cmp_to_key
from itertools import chain
from typing import Optional

from wacsearch.utils.config import FusionConfig

from .document import SearchResult

logger = logging.getLogger(__name__)


def reciprocal_rank_fusion(
    rankings: Sequence[Sequence[SearchResult]],
    weights: Sequence[float],
    k: int = 60,
) -> dict[str, float]:
    """Sum ``weight / (k + rank + 1)`` per result key across rankings.

    Args:
        rankings: Result lists, each already ordered best first
        weights: One weight per ranking
        k: Smoothing constant

    Returns:
        Map from result key to fused score
    """
    if len(rankings) != len(weights):
        raise ValueError("Number of rankings must match number of weights")

    fused: dict[str, float] = {}
    for ranking, weight in zip(rankings, weights):
        for rank, result in enumerate(ranking):
            fused[result.key] = fused.get(result.key, 0.0) + weight / (k + rank + 1)

    return fused


def deduplicate_by_section(results: Sequence[SearchResult], top_k: int) -> list[SearchResult]:
    """Keep the first result per section, up to ``top_k`` sections."""
    seen: set[str] = set()
    unique = []

    for result in results:
        if len(unique) >= top_k:
            break
        if result.section_id in seen:
            continue
        seen.add(result.section_id)
        unique.append(result)

    return unique


class HybridRanker:
    """Merges curated answers, dense content hits and lexical content hits.

    Example:
        ```python
        ranker = HybridRanker()
        results = ranker.rank(qa_hits, content_hits, bm25_hits, top_k=5)
        ```
    """

    def __init__(self, config: Optional[FusionConfig] = None):
        self.config = config or FusionConfig()

    def qa_weight(self, qa: Sequence[SearchResult], content: Sequence[SearchResult]) -> float:
        """Weight for curated answers.

        Curated answers are preferred only while they are at least as
        similar to the query as the best content chunk.
        """
        best_qa = qa[0].score if qa else 0.0
        best_content = content[0].score if content else 0.0

        if best_qa >= best_content:
            return self.config.qa_weight
        return self.config.content_weight

    def _compare(self, a: SearchResult, b: SearchResult) -> int:
        diff = b.fused_score - a.fused_score
        if abs(diff) >= self.config.tie_epsilon:
            return 1 if diff > 0 else -1

        diff = b.score - a.score
        if diff > 0:
            return 1
        if diff < 0:
            return -1
        return 0

    def fuse(
        self,
        qa: Sequence[SearchResult],
        content: Sequence[SearchResult],
        lexical: Sequence[SearchResult] = (),
        boost: Optional[Callable[[SearchResult], float]] = None,
    ) -> list[SearchResult]:
        """Fuse the ranked lists into one candidate list, best first.

        Args:
            qa: Curated Q&A hits sorted by similarity
            content: Content chunk hits sorted by similarity
            lexical: Content chunk hits sorted by BM25 score
            boost: Optional multiplier applied to each fused score before sorting

        Returns:
            Every admitted result once, carrying its fused score. Several
            results may share a section.
        """
        config = self.config

        qa_admitted = list(qa[: config.qa_window])
        content_admitted = list(content[: config.content_window])
        lexical_admitted = list(lexical[: config.lexical_window]) if config.use_lexical else []

        qa_weight = self.qa_weight(qa, content)
        fused = reciprocal_rank_fusion(
            [qa_admitted, content_admitted, lexical_admitted],
            [qa_weight, config.content_weight, config.lexical_weight],
            k=config.rrf_k,
        )

        # First appearance represents a key; dense and lexical hits for a chunk carry the same raw score
        representatives: dict[str, SearchResult] = {}
        for result in chain(qa_admitted, content_admitted, lexical_admitted):
            representatives.setdefault(result.key, result)

        candidates = []
        for key, result in representatives.items():
            score = fused[key]
            if boost is not None:
                score *= boost(result)
            candidates.append(result.model_copy(update={"fused_score": score}))

        candidates.sort(key=cmp_to_key(self._compare))

        logger.debug(
            f"Fused {len(qa_admitted)} Q&A, {len(content_admitted)} content and "
            f"{len(lexical_admitted)} lexical hits into {len(candidates)} candidates "
            f"(Q&A weight {qa_weight})"
        )

        return candidates

    def rank(
        self,
        qa: Sequence[SearchResult],
        content: Sequence[SearchResult],
        lexical: Sequence[SearchResult] = (),
        top_k: int = 5,
        boost: Optional[Callable[[SearchResult], float]] = None,
    ) -> list[SearchResult]:
        """Fuse the ranked lists into at most ``top_k`` results, one per section."""
        return deduplicate_by_section(self.fuse(qa, content, lexical, boost=boost), top_k)
