"""Query normalization: synonym expansion and typo correction."""

import logging
import re
from collections.abc import Iterable, Mapping
from typing import NamedTuple, Optional

from wacsearch.utils.config import NormalizerConfig

from .document import ContentChunk, QAPair

logger = logging.getLogger(__name__)

_ALPHA_RUN = re.compile(r"[a-z]+")
_ALPHA_TOKEN = re.compile(r"^[a-zA-Z]+$")


class Correction(NamedTuple):
    """Result of typo correction."""

    corrected: str
    had_corrections: bool


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost insertion, deletion and substitution."""
    m, n = len(a), len(b)
    table = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(m + 1):
        table[i][0] = i
    for j in range(n + 1):
        table[0][j] = j

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if a[i - 1] == b[j - 1]:
                table[i][j] = table[i - 1][j - 1]
            else:
                table[i][j] = 1 + min(
                    table[i - 1][j - 1],  # substitution
                    table[i][j - 1],      # insertion
                    table[i - 1][j],      # deletion
                )

    return table[m][n]


def build_vocabulary(
    qa_pairs: Iterable[QAPair],
    chunks: Iterable[ContentChunk],
    question_min_length: int = 3,
    content_min_length: int = 4,
) -> frozenset[str]:
    """Collect the lowercase alphabetic words the corpus knows.

    Question words are kept from ``question_min_length`` letters, content
    words from ``content_min_length`` since chunk text is noisier.
    """
    words: set[str] = set()

    for qa in qa_pairs:
        words.update(
            w for w in _ALPHA_RUN.findall(qa.question.lower())
            if len(w) >= question_min_length
        )

    for chunk in chunks:
        words.update(
            w for w in _ALPHA_RUN.findall(chunk.content.lower())
            if len(w) >= content_min_length
        )

    logger.info(f"Built vocabulary with {len(words)} words")
    return frozenset(words)


class QueryNormalizer:
    """Rewrites user queries before retrieval.

    ``expand`` appends domain terms for colloquial phrases; ``correct``
    fixes likely misspellings against the corpus vocabulary.
    """

    def __init__(
        self,
        vocabulary: Iterable[str],
        synonyms: Optional[Mapping[str, list[str]]] = None,
        stopwords: Optional[Iterable[str]] = None,
        config: Optional[NormalizerConfig] = None,
    ):
        """Initialize the normalizer.

        Args:
            vocabulary: Known lowercase words
            synonyms: Phrase -> extra terms (defaults to config.synonyms)
            stopwords: Words never corrected (defaults to config.stopwords)
            config: Length and distance limits
        """
        self.config = config or NormalizerConfig()
        self.vocabulary = frozenset(vocabulary)
        # Sorted: equally close candidates resolve alphabetically
        self._candidates = tuple(sorted(self.vocabulary))
        self.synonyms = dict(synonyms if synonyms is not None else self.config.synonyms)
        self.stopwords = frozenset(stopwords if stopwords is not None else self.config.stopwords)

    def expand(self, query: str) -> str:
        """Append synonym terms for every phrase contained in the query."""
        expanded = query.lower()
        for phrase, terms in self.synonyms.items():
            if phrase in expanded:
                expanded += " " + " ".join(terms)
        return expanded

    def max_distance(self, word: str) -> int:
        if len(word) >= self.config.long_word_length:
            return self.config.long_word_max_distance
        return self.config.short_word_max_distance

    def find_best_match(self, word: str) -> Optional[str]:
        """Return the closest vocabulary word, or None if ``word`` should stay."""
        lower = word.lower()

        if lower in self.vocabulary or lower in self.stopwords:
            return None
        if len(lower) < self.config.min_correctable_length:
            return None

        max_distance = self.max_distance(lower)
        best_match = None
        best_distance = max_distance + 1

        for candidate in self._candidates:
            if abs(len(candidate) - len(lower)) > max_distance:
                continue
            # Plural and singular forms are not typos
            if lower in candidate or candidate in lower:
                continue

            distance = levenshtein_distance(lower, candidate)
            if distance < best_distance:
                best_distance = distance
                best_match = candidate

        return best_match

    def correct(self, query: str) -> Correction:
        """Correct typos word by word.

        Short or non-alphabetic tokens pass through untouched; every other
        token comes back lowercased, replaced by its correction if one
        was found.
        """
        words = []
        had_corrections = False

        for word in query.split():
            if len(word) < self.config.min_token_length or not _ALPHA_TOKEN.match(word):
                words.append(word)
                continue

            match = self.find_best_match(word)
            if match:
                logger.debug(f"Typo corrected: {word!r} -> {match!r}")
                words.append(match)
                had_corrections = True
            else:
                words.append(word.lower())

        return Correction(" ".join(words), had_corrections)
