"""BM25 lexical index."""

import logging
import math
import re
from collections import Counter
from collections.abc import Sequence

from wacsearch.exceptions import SearchNotInitializedError

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s]")


class BM25Index:
    """Okapi BM25 over a fixed list of documents.

    The index is built once by ``index()`` and is read-only afterwards;
    adding documents means re-indexing the whole corpus.
    """

    def __init__(
        self,
        k1: float = 1.5,
        b: float = 0.75,
        min_token_length: int = 3,
    ):
        """Initialize the index.

        Args:
            k1: BM25 k1 parameter (term frequency saturation)
            b: BM25 b parameter (document length normalization)
            min_token_length: Tokens shorter than this are discarded
        """
        self.k1 = k1
        self.b = b
        self.min_token_length = min_token_length
        self._num_docs = 0
        self._doc_lengths: list[int] = []
        self._term_freqs: dict[str, list[int]] = {}
        self._doc_freqs: Counter = Counter()
        self._avg_doc_length: float = 0.0
        self._built = False

    @property
    def num_docs(self) -> int:
        return self._num_docs

    def tokenize(self, text: str) -> list[str]:
        """Tokenize text into lowercase terms."""
        text = _NON_WORD.sub(" ", text.lower())
        return [t for t in text.split() if len(t) >= self.min_token_length]

    def index(self, documents: Sequence[str]) -> None:
        """Build term statistics for ``documents`` in one pass."""
        self._num_docs = len(documents)
        self._doc_lengths = []
        self._term_freqs = {}
        self._doc_freqs = Counter()

        for i, document in enumerate(documents):
            tokens = self.tokenize(document)
            self._doc_lengths.append(len(tokens))

            for term, count in Counter(tokens).items():
                if term not in self._term_freqs:
                    self._term_freqs[term] = [0] * self._num_docs
                self._term_freqs[term][i] = count
                self._doc_freqs[term] += 1

        total_length = sum(self._doc_lengths)
        self._avg_doc_length = total_length / self._num_docs if self._num_docs else 0.0
        self._built = True

        logger.info(f"Indexed {self._num_docs} documents ({len(self._doc_freqs)} terms)")

    def idf(self, term: str) -> float:
        """Inverse document frequency of a term (0 for unknown terms)."""
        df = self._doc_freqs.get(term, 0)
        if df == 0:
            return 0.0
        N = self._num_docs
        return math.log((N - df + 0.5) / (df + 0.5) + 1)

    def search(self, query: str) -> list[float]:
        """Score every document against ``query``.

        Returns:
            One score per indexed document, in document order; documents
            sharing no term with the query score 0.
        """
        if not self._built:
            raise SearchNotInitializedError("BM25 index has not been built")

        scores = [0.0] * self._num_docs

        for term in self.tokenize(query):
            if term not in self._doc_freqs:
                continue

            idf = self.idf(term)
            term_freqs = self._term_freqs[term]

            for i, tf in enumerate(term_freqs):
                if tf == 0:
                    continue

                # BM25 formula
                numerator = tf * (self.k1 + 1)
                denominator = tf + self.k1 * (
                    1 - self.b + self.b * (self._doc_lengths[i] / self._avg_doc_length)
                )
                scores[i] += idf * (numerator / denominator)

        return scores
