"""
Search quality evaluation.

Runs a set of labelled queries through the engine and reports:
- Hit Rate@K: share of queries with a relevant result in the top K
- MRR (Mean Reciprocal Rank): mean of 1/rank of the first relevant result
- Precision@K: share of the top K results that are relevant

Use it to re-tune the thresholds and boosts in ``SearchConfig``.
"""

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import yaml
from pydantic import BaseModel, Field

from wacsearch.utils.logging import get_logger

from .document import SearchResult

if TYPE_CHECKING:
    from .pipeline import HybridSearchEngine

logger = get_logger(__name__)

DEFAULT_CASES_PATH = Path(__file__).resolve().parent.parent / "data" / "evaluation_cases.yaml"

# (grade, minimum hit rate, minimum MRR), checked in order
GRADES: list[tuple[str, float, float]] = [
    ("A+", 0.95, 0.9),
    ("A", 0.90, 0.8),
    ("B+", 0.85, 0.7),
    ("B", 0.80, 0.6),
    ("C", 0.70, 0.5),
    ("D", 0.60, 0.0),
]


class EvaluationCase(BaseModel):
    """A labelled query.

    Attributes:
        query: Query text
        must_contain: Keywords that all appear in a correct answer
        correct_sections: Section ids (or prefixes) that count as correct
        category: Group used for the per-category breakdown
    """

    query: str
    must_contain: list[str] = Field(default_factory=list)
    correct_sections: list[str] = Field(default_factory=list)
    category: str = "general"


class QueryEvaluation(BaseModel):
    """Outcome of one evaluation case."""

    query: str
    category: str
    hit: bool
    rank: Optional[int] = None  # 1-based rank of the first relevant result
    precision: float = 0.0
    top_result: Optional[str] = None


class CategoryMetrics(BaseModel):
    """Metrics for one case category."""

    category: str
    count: int
    hit_rate: float
    mrr: float
    precision: float


class EvaluationReport(BaseModel):
    """Aggregate evaluation results."""

    k: int
    queries: list[QueryEvaluation] = Field(default_factory=list)
    hit_rate: float = 0.0
    mrr: float = 0.0
    precision: float = 0.0
    categories: list[CategoryMetrics] = Field(default_factory=list)
    grade: str = "F"

    @property
    def failed(self) -> list[QueryEvaluation]:
        return [q for q in self.queries if not q.hit]

    @property
    def not_first(self) -> list[QueryEvaluation]:
        return [q for q in self.queries if q.hit and q.rank and q.rank > 1]

    def to_dict(self) -> dict:
        """Rounded summary for logging or serialization."""
        return {
            "k": self.k,
            "queries": len(self.queries),
            "hit_rate": round(self.hit_rate, 3),
            "mrr": round(self.mrr, 3),
            "precision": round(self.precision, 3),
            "grade": self.grade,
        }


def is_relevant(result: SearchResult, case: EvaluationCase) -> bool:
    """A result is relevant if it has every keyword or sits in a correct section."""
    text = result.text.lower()
    has_keywords = bool(case.must_contain) and all(kw.lower() in text for kw in case.must_contain)
    in_section = any(result.section_id.startswith(s) for s in case.correct_sections)
    return has_keywords or in_section


def grade(hit_rate: float, mrr: float) -> str:
    """Letter grade for a hit rate / MRR pair."""
    for letter, min_hit_rate, min_mrr in GRADES:
        if hit_rate >= min_hit_rate and mrr >= min_mrr:
            return letter
    return "F"


def score_results(
    results: Sequence[SearchResult],
    case: EvaluationCase,
    k: int,
) -> QueryEvaluation:
    """Evaluate one ranked result list against its case."""
    relevant = [is_relevant(r, case) for r in results[:k]]
    rank = relevant.index(True) + 1 if any(relevant) else None

    return QueryEvaluation(
        query=case.query,
        category=case.category,
        hit=rank is not None,
        rank=rank,
        precision=sum(relevant) / k if k else 0.0,
        top_result=results[0].text[:100] if results else None,
    )


def summarize(queries: Sequence[QueryEvaluation], k: int) -> EvaluationReport:
    """Aggregate per-query outcomes into a report."""
    if not queries:
        return EvaluationReport(k=k)

    def _metrics(items: Sequence[QueryEvaluation]) -> tuple[float, float, float]:
        n = len(items)
        hit_rate = sum(q.hit for q in items) / n
        mrr = sum(1 / q.rank for q in items if q.rank) / n
        precision = sum(q.precision for q in items) / n
        return hit_rate, mrr, precision

    hit_rate, mrr, precision = _metrics(queries)

    categories = []
    for category in dict.fromkeys(q.category for q in queries):
        items = [q for q in queries if q.category == category]
        cat_hit, cat_mrr, cat_precision = _metrics(items)
        categories.append(CategoryMetrics(
            category=category,
            count=len(items),
            hit_rate=cat_hit,
            mrr=cat_mrr,
            precision=cat_precision,
        ))

    return EvaluationReport(
        k=k,
        queries=list(queries),
        hit_rate=hit_rate,
        mrr=mrr,
        precision=precision,
        categories=categories,
        grade=grade(hit_rate, mrr),
    )


async def evaluate(
    engine: "HybridSearchEngine",
    cases: Iterable[EvaluationCase],
    k: int = 5,
) -> EvaluationReport:
    """Run every case through the engine and report retrieval quality.

    The ranking is evaluated even when the engine would report the topic
    as not covered, so misses show up as misses rather than as empty
    result lists.
    """
    queries = []
    for case in cases:
        response = await engine.rank(case.query, top_k=k)
        queries.append(score_results(response.results, case, k))

    report = summarize(queries, k)
    logger.info(f"Evaluation: {report.to_dict()}")
    for failure in report.failed:
        logger.info(f"No relevant result in top {k}: {failure.query!r}")

    return report


def load_cases(path: Optional[str | Path] = None) -> list[EvaluationCase]:
    """Load evaluation cases from a YAML list.

    Args:
        path: Case file (defaults to the bundled childcare query set)
    """
    path = DEFAULT_CASES_PATH if path is None else path
    with open(path) as f:
        data = yaml.safe_load(f) or []
    return [EvaluationCase(**item) for item in data]
