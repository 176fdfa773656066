"""
Search-specific exceptions.
"""


class SearchError(Exception):
    """Base exception for search errors."""

    def __init__(self, message: str, code: int | None = None):
        self.message = message
        self.code = code
        super().__init__(self.message)


class SearchNotInitializedError(SearchError):
    """Raised when searching before the indexes are built."""

    def __init__(self, message: str = "Search not initialized"):
        super().__init__(message, code=1001)


class CorpusError(SearchError):
    """Raised when the corpus cannot be loaded or is malformed."""

    def __init__(self, message: str, code: int = 1002):
        super().__init__(message, code=code)


class EmbeddingSchemaMismatchError(CorpusError):
    """Raised when two embedding sets are not comparable.

    Vectors produced by different models, prefixes or truncation
    dimensions give meaningless cosine scores, so they are rejected
    at load time.
    """

    def __init__(self, field: str, expected: object, actual: object, where: str = "embeddings"):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Embedding schema mismatch in {where}: {field} is {actual!r}, expected {expected!r}",
            code=1003,
        )
