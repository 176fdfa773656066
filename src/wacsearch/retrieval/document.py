"""Corpus records and search result data structures."""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ContentChunk(BaseModel):
    """A sub-section of a regulation, the smallest retrievable content unit.

    Attributes:
        id: Parent section identifier, e.g. "110-300-0280"
        chunk_id: Unique chunk identifier, e.g. "110-300-0280-3-l"
        section_title: Title of the parent section
        subsection_path: Position inside the section, e.g. "(3)(l)"
        content: Text of this chunk
        full_content: Text of the whole section
        url: Canonical source URL
        category: Coarse category label
        embedding_text: Enriched text used when the chunk embedding was generated
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    chunk_id: str = Field(alias="chunkId")
    section_title: str = Field(alias="sectionTitle")
    subsection_path: str = Field(default="", alias="subsectionPath")
    content: str
    full_content: str = Field(default="", alias="fullContent")
    url: str = ""
    category: str = ""
    embedding_text: str = Field(default="", alias="embeddingText")

    def __repr__(self) -> str:
        content_preview = self.content[:30] + "..." if len(self.content) > 30 else self.content
        return f"ContentChunk(chunk_id={self.chunk_id!r}, content={content_preview!r})"


class QAPair(BaseModel):
    """A curated question with a plain-English answer.

    Attributes:
        question: Natural-language question (also the embedding key)
        answer: Plain-English answer
        section_id: Section the answer was derived from
        section_title: Title of that section
        url: Canonical source URL
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question: str
    answer: str
    section_id: str = Field(alias="sectionId")
    section_title: str = Field(alias="sectionTitle")
    url: str = ""

    def __repr__(self) -> str:
        return f"QAPair(section_id={self.section_id!r}, question={self.question!r})"


class ResultSource(str, Enum):
    """Where a search result came from."""

    QA = "qa"
    CONTENT = "content"


class Confidence(str, Enum):
    """How certain the engine is that it found a relevant answer."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"

    @property
    def rank(self) -> int:
        """Numeric tier, higher is more confident."""
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {
    Confidence.NONE: 0,
    Confidence.LOW: 1,
    Confidence.MEDIUM: 2,
    Confidence.HIGH: 3,
}


class SearchResult(BaseModel):
    """A ranked search hit.

    Attributes:
        document: The matching chunk or curated Q&A pair
        score: Raw cosine similarity between the query and the document
        source: Whether the hit is a curated answer or a content chunk
        fused_score: Reciprocal rank fusion score after intent boosts
        rerank_score: Cross-encoder relevance, set only when reranking ran
        category: Coarse category of the hit's section
    """

    model_config = ConfigDict(frozen=True)

    document: Union[ContentChunk, QAPair]
    score: float
    source: ResultSource
    fused_score: float = 0.0
    rerank_score: Optional[float] = None
    category: str = ""

    @property
    def key(self) -> str:
        """Stable identity used to accumulate fusion scores."""
        if isinstance(self.document, QAPair):
            return f"qa:{self.document.section_id}:{self.document.question}"
        return f"chunk:{self.document.chunk_id}"

    @property
    def section_id(self) -> str:
        if isinstance(self.document, QAPair):
            return self.document.section_id
        return self.document.id

    @property
    def section_title(self) -> str:
        return self.document.section_title

    @property
    def text(self) -> str:
        """Answer text for Q&A hits, chunk content otherwise."""
        if isinstance(self.document, QAPair):
            return self.document.answer
        return self.document.content

    @property
    def url(self) -> str:
        return self.document.url

    def __repr__(self) -> str:
        return (
            f"SearchResult(key={self.key!r}, score={self.score:.4f}, "
            f"fused_score={self.fused_score:.5f})"
        )


class SearchResponse(BaseModel):
    """Answer to a single query.

    When ``topic_covered`` is False the corpus has nothing specific for the
    query and ``results`` is empty; callers show a "topic not found"
    message instead of low-quality hits.
    """

    query: str
    results: list[SearchResult] = Field(default_factory=list)
    confidence: Confidence = Confidence.NONE
    topic_covered: bool = False
    corrected_query: Optional[str] = None
