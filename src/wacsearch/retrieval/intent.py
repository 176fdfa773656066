"""Query intent detection and score boosting."""

import re
from typing import NamedTuple, Optional

from wacsearch.utils.config import BoostConfig

from .document import SearchResult

_DIGIT = re.compile(r"\d")


class QueryIntent(NamedTuple):
    """What kind of answer a query is asking for."""

    time: bool = False
    numeric: bool = False
    categories: frozenset[str] = frozenset()


class IntentBooster:
    """Multiplies fused scores of results that fit the query's intent.

    A "how long" question prefers chunks that mention time units, a "how
    many" question prefers chunks containing numbers, and a query about
    a known topic prefers chunks from that topic's category.
    """

    def __init__(self, config: Optional[BoostConfig] = None):
        self.config = config or BoostConfig()

    def detect(self, query: str) -> QueryIntent:
        """Detect intents from the query as the user typed it (before expansion)."""
        lower = query.lower()
        config = self.config

        categories = frozenset(
            category
            for category, keywords in config.category_keywords.items()
            if any(kw in lower for kw in keywords)
        )

        return QueryIntent(
            time=any(kw in lower for kw in config.time_keywords),
            numeric=any(kw in lower for kw in config.number_keywords),
            categories=categories,
        )

    def has_time_content(self, text: str) -> bool:
        lower = text.lower()
        return any(kw in lower for kw in self.config.time_content_keywords)

    def multiplier(self, intent: QueryIntent, result: SearchResult) -> float:
        """Combined boost factor for one result (1.0 when nothing applies)."""
        factor = 1.0

        if intent.time and self.has_time_content(result.text):
            factor *= self.config.time_boost

        if intent.numeric and _DIGIT.search(result.text):
            factor *= self.config.numeric_boost

        if result.category and result.category in intent.categories:
            factor *= self.config.category_boost

        return factor
