"""
Test configuration and fixtures.

The fixture corpus uses 4-dimensional vectors with one axis per topic
(feeding, sleep, staffing, other), so cosine scores are exact and easy to
reason about.
"""

import pytest

from wacsearch.retrieval import (
    BaseEmbedding,
    ContentChunk,
    HybridSearchEngine,
    QAPair,
    build_corpus,
)
from wacsearch.utils.config import EmbeddingSchema, SearchConfig

FEEDING = [1.0, 0.0, 0.0, 0.0]
SLEEP = [0.0, 1.0, 0.0, 0.0]
STAFFING = [0.0, 0.0, 1.0, 0.0]
OTHER = [0.0, 0.0, 0.0, 1.0]


class KeywordEmbedding(BaseEmbedding):
    """Maps text to a fixed vector by the first keyword it contains."""

    def __init__(self, schema=None, vectors=None, default=None):
        super().__init__(schema)
        self.vectors = vectors if vectors is not None else {
            "formula": FEEDING,
            "sleep": SLEEP,
            "staff": STAFFING,
        }
        self.default = default or OTHER
        self.queries: list[str] = []

    def _lookup(self, text: str) -> list[float]:
        lower = text.lower()
        for keyword, vector in self.vectors.items():
            if keyword in lower:
                return list(vector)
        return list(self.default)

    async def embed_documents(self, texts):
        return [self._lookup(text) for text in texts]

    async def embed_query(self, text):
        self.queries.append(text)
        return self._lookup(text)


@pytest.fixture
def schema():
    """Small embedding schema used across the tests."""
    return EmbeddingSchema(model="test-model", dimension=4)


@pytest.fixture
def config(schema):
    """Search configuration matching the test schema."""
    return SearchConfig(embedding=schema)


@pytest.fixture
def chunks():
    """Regulation chunks across four sections; the last one has no embedding."""
    return [
        ContentChunk(
            id="110-300-0285",
            chunkId="110-300-0285-1",
            sectionTitle="Bottle preparation",
            subsectionPath="(1)",
            content="Formula must be discarded within one hour of preparation.",
            url="https://app.leg.wa.gov/wac/default.aspx?cite=110-300-0285",
            category="Food & Nutrition",
        ),
        ContentChunk(
            id="110-300-0285",
            chunkId="110-300-0285-2",
            sectionTitle="Bottle preparation",
            subsectionPath="(2)",
            content="Breast milk must be labeled with the child's name and the date it was expressed.",
            url="https://app.leg.wa.gov/wac/default.aspx?cite=110-300-0285",
            category="Food & Nutrition",
        ),
        ContentChunk(
            id="110-300-0291",
            chunkId="110-300-0291-1",
            sectionTitle="Safe sleep for infants",
            subsectionPath="(1)",
            content="Infants must be placed on their backs to sleep in a crib with a firm mattress.",
            url="https://app.leg.wa.gov/wac/default.aspx?cite=110-300-0291",
            category="Health & Safety",
        ),
        ContentChunk(
            id="110-300-0356",
            chunkId="110-300-0356-1",
            sectionTitle="Staff-to-child ratios",
            subsectionPath="(1)",
            content="One staff member may care for no more than 4 infants at a time.",
            url="https://app.leg.wa.gov/wac/default.aspx?cite=110-300-0356",
            category="Staffing",
        ),
        ContentChunk(
            id="110-300-0400",
            chunkId="110-300-0400-1",
            sectionTitle="Field trips",
            subsectionPath="(1)",
            content="Field trips require written parent permission.",
            category="Licensing",
        ),
    ]


@pytest.fixture
def qa_pairs():
    """Curated answers for two of the sections."""
    return [
        QAPair(
            question="How long can formula sit out?",
            answer="Discard prepared formula one hour after preparation.",
            sectionId="110-300-0285",
            sectionTitle="Bottle preparation",
        ),
        QAPair(
            question="How many infants can one staff member care for?",
            answer="One staff member may care for up to 4 infants.",
            sectionId="110-300-0356",
            sectionTitle="Staff-to-child ratios",
        ),
    ]


@pytest.fixture
def chunk_embeddings():
    return {
        "110-300-0285-1": FEEDING,
        "110-300-0285-2": [0.8, 0.0, 0.6, 0.0],
        "110-300-0291-1": SLEEP,
        "110-300-0356-1": STAFFING,
    }


@pytest.fixture
def qa_embeddings():
    return {
        "How long can formula sit out?": [0.9, 0.1, 0.0, 0.0],
        "How many infants can one staff member care for?": STAFFING,
    }


@pytest.fixture
def corpus(chunks, qa_pairs, chunk_embeddings, qa_embeddings, schema):
    """In-memory corpus built from the fixture records."""
    return build_corpus(chunks, qa_pairs, chunk_embeddings, qa_embeddings, schema=schema)


@pytest.fixture
def make_embedding(schema):
    """Factory for keyword embeddings, optionally with another schema."""

    def _make(other_schema=None, **kwargs):
        return KeywordEmbedding(schema=other_schema or schema, **kwargs)

    return _make


@pytest.fixture
def embedding(make_embedding):
    return make_embedding()


@pytest.fixture
def engine(embedding, config, corpus):
    """Initialized search engine over the fixture corpus."""
    engine = HybridSearchEngine(embedding, config)
    engine.initialize(corpus)
    return engine
