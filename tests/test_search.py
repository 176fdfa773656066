"""Tests for the hybrid search pipeline and engine."""

import math

import pytest

from wacsearch.exceptions import EmbeddingSchemaMismatchError, SearchNotInitializedError
from wacsearch.retrieval import (
    Confidence,
    ContentChunk,
    HybridSearchEngine,
    ResultSource,
    SearchContext,
    build_corpus,
    hybrid_search,
)
from wacsearch.utils.config import EmbeddingSchema, SearchConfig


class TestSearchContext:
    """Tests for the immutable search context."""

    def test_build(self, corpus, config):
        """Test that only embedded records are searchable by vector."""
        context = SearchContext.build(corpus, config)

        assert len(context.chunk_index) == 4
        assert len(context.qa_index) == 2
        assert context.bm25.num_docs == 5
        assert "formula" in context.normalizer.vocabulary

    def test_build_rejects_foreign_corpus(self, chunks, chunk_embeddings, config):
        """Test that a corpus embedded with another model is refused."""
        corpus = build_corpus(
            chunks,
            chunk_embeddings=chunk_embeddings,
            schema=EmbeddingSchema(model="other-model", dimension=4),
        )

        with pytest.raises(EmbeddingSchemaMismatchError) as exc_info:
            SearchContext.build(corpus, config)

        assert exc_info.value.field == "model"

    def test_qa_results_inherit_section_category(self, corpus, config):
        context = SearchContext.build(corpus, config)
        results = context.search_qa([1.0, 0.0, 0.0, 0.0])

        assert results[0].source == ResultSource.QA
        assert results[0].document.question == "How long can formula sit out?"
        assert results[0].category == "Food & Nutrition"

    def test_lexical_hits_carry_dense_score(self, corpus, config):
        """Test that lexical hits reuse the chunk's cosine similarity."""
        context = SearchContext.build(corpus, config)
        content = context.search_content([1.0, 0.0, 0.0, 0.0])

        lexical = context.search_lexical("formula", content)

        assert [r.document.chunk_id for r in lexical] == ["110-300-0285-1"]
        assert lexical[0].score == pytest.approx(1.0)

    def test_lexical_skips_unembedded_chunks(self, corpus, config):
        context = SearchContext.build(corpus, config)
        content = context.search_content([1.0, 0.0, 0.0, 0.0])

        assert context.search_lexical("field trips permission", content) == []


class TestHybridSearch:
    """Tests for the full query pipeline."""

    @pytest.mark.asyncio
    async def test_formula_question(self, engine):
        """Test a direct question about a covered topic."""
        response = await engine.search("how long can formula sit out")

        assert response.topic_covered is True
        assert response.confidence == Confidence.HIGH
        assert response.corrected_query is None

        top = response.results[0]
        assert top.document.chunk_id == "110-300-0285-1"
        assert top.score >= 0.75
        assert "one hour" in top.text

    @pytest.mark.asyncio
    async def test_results_unique_per_section(self, engine):
        response = await engine.search("how long can formula sit out")

        section_ids = [r.section_id for r in response.results]
        assert len(section_ids) == len(set(section_ids))
        assert len(response.results) <= 5

    @pytest.mark.asyncio
    async def test_results_sorted_by_fused_score(self, engine):
        response = await engine.search("how long can formula sit out")

        fused = [r.fused_score for r in response.results]
        assert fused == sorted(fused, reverse=True)

    @pytest.mark.asyncio
    async def test_typo_corrected(self, engine, embedding):
        """Test that a misspelled query is corrected before embedding."""
        response = await engine.search("how long can formla sit out")

        assert response.corrected_query == "how long can formula sit out"
        assert response.query == "how long can formla sit out"
        assert embedding.queries[-1] == "how long can formula sit out"
        assert response.results[0].document.chunk_id == "110-300-0285-1"

    @pytest.mark.asyncio
    async def test_expanded_query_is_embedded(self, engine, embedding):
        """Test that synonym terms reach the embedding provider."""
        await engine.search("can I keep puree in the fridge")

        assert "leftover" in embedding.queries[-1]
        assert "refrigerated" in embedding.queries[-1]

    @pytest.mark.asyncio
    async def test_uncovered_topic(self, engine):
        """Test that a query matching nothing returns no results."""
        response = await engine.search("parking spaces for visitors")

        assert response.topic_covered is False
        assert response.confidence == Confidence.NONE
        assert response.results == []

    @pytest.mark.asyncio
    async def test_rank_keeps_uncovered_results(self, engine):
        """Test that ranking for evaluation does not drop results."""
        response = await engine.rank("parking spaces for visitors")

        assert response.topic_covered is False
        assert len(response.results) > 0

    @pytest.mark.asyncio
    async def test_top_k(self, engine):
        response = await engine.rank("parking spaces for visitors", top_k=2)
        assert len(response.results) == 2

    @pytest.mark.asyncio
    async def test_deterministic(self, engine):
        """Test that repeating a query gives identical output."""
        first = await engine.search("how many infants can one staff member care for")
        second = await engine.search("how many infants can one staff member care for")

        assert first.model_dump() == second.model_dump()

    @pytest.mark.asyncio
    async def test_staffing_question(self, engine):
        response = await engine.search("how many infants can one staff member care for")

        assert response.confidence == Confidence.HIGH
        assert response.results[0].section_id == "110-300-0356"

    @pytest.mark.asyncio
    async def test_function_form(self, corpus, config, embedding):
        """Test calling the pipeline directly with a context."""
        context = SearchContext.build(corpus, config)
        response = await hybrid_search(context, embedding, "how long can formula sit out", top_k=1)

        assert len(response.results) == 1
        assert response.results[0].section_id == "110-300-0285"

    @pytest.mark.asyncio
    async def test_provider_errors_propagate(self, corpus, config, make_embedding):
        """Test that embedding failures reach the caller."""

        class BrokenEmbedding(type(make_embedding())):
            async def embed_query(self, text):
                raise ConnectionError("provider down")

        engine = HybridSearchEngine(BrokenEmbedding(schema=config.embedding), config)
        engine.initialize(corpus)

        with pytest.raises(ConnectionError):
            await engine.search("how long can formula sit out")


class TestScatteredResults:
    """Tests for a query the corpus knows nothing about."""

    @staticmethod
    def unit_vector(similarity):
        """Vector with the given cosine similarity to the first axis."""
        return [similarity, math.sqrt(1 - similarity**2), 0.0, 0.0]

    @pytest.mark.asyncio
    async def test_flat_low_scores_not_covered(self, make_embedding, config):
        """Test that near-equal weak matches across sections are suppressed."""
        chunks = [
            ContentChunk(
                id=section,
                chunkId=f"{section}-1",
                sectionTitle=title,
                content=content,
            )
            for section, title, content in [
                ("110-300-0150", "Program records", "Providers keep attendance records for each child."),
                ("110-300-0200", "Outdoor play", "Outdoor play areas are checked daily for hazards."),
                ("110-300-0250", "Handwashing", "Children wash hands before meals."),
            ]
        ]
        corpus = build_corpus(
            chunks,
            chunk_embeddings={
                "110-300-0150-1": self.unit_vector(0.58),
                "110-300-0200-1": self.unit_vector(0.565),
                "110-300-0250-1": self.unit_vector(0.56),
            },
            schema=config.embedding,
        )
        engine = HybridSearchEngine(
            make_embedding(vectors={}, default=[1.0, 0.0, 0.0, 0.0]), config
        )
        engine.initialize(corpus)

        response = await engine.search("what about pets")
        ranked = await engine.rank("what about pets")

        assert response.confidence == Confidence.NONE
        assert response.topic_covered is False
        assert response.results == []
        assert [r.score for r in ranked.results] == pytest.approx([0.58, 0.565, 0.56])


class TestHybridSearchEngine:
    """Tests for engine lifecycle."""

    @pytest.mark.asyncio
    async def test_search_before_initialize(self, embedding, config):
        engine = HybridSearchEngine(embedding, config)

        assert engine.is_initialized is False
        with pytest.raises(SearchNotInitializedError):
            await engine.search("formula")

    def test_initialize(self, engine):
        assert engine.is_initialized is True
        assert engine.context.corpus.find_qa("how-long-can-formula-sit-out") is not None

    def test_provider_schema_mismatch(self, make_embedding, config, corpus):
        """Test that the provider must use the configured schema."""
        embedding = make_embedding(EmbeddingSchema(model="test-model", dimension=8))
        engine = HybridSearchEngine(embedding, config)

        with pytest.raises(EmbeddingSchemaMismatchError) as exc_info:
            engine.initialize(corpus)

        assert exc_info.value.field == "dimension"
        assert engine.is_initialized is False

    def test_load_without_data_dir(self, embedding, config):
        engine = HybridSearchEngine(embedding, config)
        with pytest.raises(ValueError):
            engine.load()

    @pytest.mark.asyncio
    async def test_search_qa(self, engine):
        results = await engine.search_qa("formula", k=1)

        assert len(results) == 1
        assert results[0].source == ResultSource.QA

    @pytest.mark.asyncio
    async def test_search_content(self, engine):
        results = await engine.search_content("sleep")

        assert results[0].document.chunk_id == "110-300-0291-1"
        assert all(r.source == ResultSource.CONTENT for r in results)

    def test_default_config(self, embedding):
        engine = HybridSearchEngine(embedding)
        assert isinstance(engine.config, SearchConfig)
        assert engine.config.top_k == 5
