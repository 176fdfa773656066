"""Confidence and topic coverage classification."""

from collections.abc import Sequence
from typing import NamedTuple, Optional

from wacsearch.utils.config import ConfidenceConfig

from .document import Confidence, SearchResult


class ConfidenceVerdict(NamedTuple):
    """Confidence tier plus whether the corpus covers the topic at all."""

    confidence: Confidence
    topic_covered: bool


def classify_confidence(
    results: Sequence[SearchResult],
    config: Optional[ConfidenceConfig] = None,
) -> ConfidenceVerdict:
    """Classify a fused, deduplicated result list.

    The top raw score decides the band. In the lowest covered band, a
    nearly flat top three spread over unrelated sections means the engine
    is scattering rather than matching, which counts as not covered.

    Args:
        results: Final ranking, best first
        config: Score thresholds

    Returns:
        ConfidenceVerdict
    """
    config = config or ConfidenceConfig()

    scores = [r.score for r in results[:3]] + [0.0, 0.0, 0.0]
    top_score, _, third_score = scores[:3]

    if top_score >= config.high_threshold:
        return ConfidenceVerdict(Confidence.HIGH, True)

    if top_score >= config.medium_threshold:
        return ConfidenceVerdict(Confidence.MEDIUM, True)

    if top_score >= config.low_threshold:
        distinct_sections = len({r.section_title for r in results[:3]})
        scattered = (
            distinct_sections >= config.scatter_min_sections
            and (top_score - third_score) < config.scatter_margin
        )
        if scattered:
            return ConfidenceVerdict(Confidence.NONE, False)
        return ConfidenceVerdict(Confidence.LOW, True)

    return ConfidenceVerdict(Confidence.NONE, False)
