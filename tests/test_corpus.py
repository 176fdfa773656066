"""Tests for corpus loading and question slugs."""

import json

import pytest

from wacsearch.exceptions import CorpusError, EmbeddingSchemaMismatchError
from wacsearch.retrieval import (
    ContentChunk,
    QAPair,
    build_corpus,
    build_slug_map,
    dump_embedding_set,
    generate_slug,
    load_corpus,
    read_embedding_set,
)
from wacsearch.utils.config import EmbeddingSchema


@pytest.fixture
def data_dir(tmp_path, chunks, qa_pairs, chunk_embeddings, qa_embeddings, schema):
    """Write the fixture corpus in the on-disk layout."""
    with open(tmp_path / "chunks.json", "w") as f:
        json.dump([c.model_dump(by_alias=True) for c in chunks], f)
    with open(tmp_path / "qa-pairs.json", "w") as f:
        json.dump([qa.model_dump(by_alias=True) for qa in qa_pairs], f)

    dump_embedding_set(tmp_path / "embeddings.json", chunk_embeddings, "chunkId", schema)
    dump_embedding_set(tmp_path / "qa-embeddings.json", qa_embeddings, "question", schema)
    return tmp_path


class TestCorpus:
    """Tests for the corpus container."""

    def test_duplicate_chunk_ids(self, chunks):
        with pytest.raises(CorpusError):
            build_corpus([chunks[0], chunks[0]])

    def test_wrong_vector_length(self, chunks, schema):
        """Test that stored vectors must match the schema dimension."""
        with pytest.raises(EmbeddingSchemaMismatchError) as exc_info:
            build_corpus(chunks, chunk_embeddings={"110-300-0285-1": [1.0, 0.0]}, schema=schema)

        assert exc_info.value.field == "dimension"
        assert exc_info.value.expected == 4
        assert exc_info.value.actual == 2

    def test_section_categories(self, corpus):
        assert corpus.section_categories["110-300-0285"] == "Food & Nutrition"
        assert corpus.section_categories["110-300-0356"] == "Staffing"

    def test_get_chunk(self, corpus):
        assert corpus.get_chunk("110-300-0291-1").section_title == "Safe sleep for infants"
        assert corpus.get_chunk("missing") is None

    def test_find_qa(self, corpus):
        qa = corpus.find_qa("how-many-infants-can-one-staff-member-care-for")
        assert qa.section_id == "110-300-0356"
        assert corpus.find_qa("no-such-question") is None

    def test_records_accept_field_names(self):
        """Test that records can be built with Python names as well as JSON names."""
        chunk = ContentChunk(
            id="110-300-0285",
            chunk_id="110-300-0285-1",
            section_title="Bottle preparation",
            content="Formula rules",
        )
        assert chunk.chunk_id == "110-300-0285-1"
        assert chunk.model_dump(by_alias=True)["chunkId"] == "110-300-0285-1"


class TestLoadCorpus:
    """Tests for loading the JSON data files."""

    def test_load(self, data_dir, schema):
        corpus = load_corpus(data_dir, schema)

        assert len(corpus.chunks) == 5
        assert len(corpus.qa_pairs) == 2
        assert corpus.chunk_embeddings["110-300-0285-1"] == [1.0, 0.0, 0.0, 0.0]
        assert "How long can formula sit out?" in corpus.qa_embeddings
        assert corpus.embedding_schema == schema

    def test_qa_files_optional(self, data_dir, schema):
        (data_dir / "qa-pairs.json").unlink()
        (data_dir / "qa-embeddings.json").unlink()

        corpus = load_corpus(data_dir, schema)

        assert len(corpus.chunks) == 5
        assert corpus.qa_pairs == ()

    def test_missing_chunks_file(self, data_dir, schema):
        (data_dir / "chunks.json").unlink()

        with pytest.raises(CorpusError):
            load_corpus(data_dir, schema)

    def test_invalid_json(self, data_dir, schema):
        (data_dir / "chunks.json").write_text("{not json")

        with pytest.raises(CorpusError):
            load_corpus(data_dir, schema)

    def test_invalid_record(self, data_dir, schema):
        (data_dir / "chunks.json").write_text(json.dumps([{"id": "110-300-0285"}]))

        with pytest.raises(CorpusError):
            load_corpus(data_dir, schema)

    def test_schema_mismatch(self, data_dir):
        """Test that embeddings tagged with another model are refused."""
        with pytest.raises(EmbeddingSchemaMismatchError) as exc_info:
            load_corpus(data_dir, EmbeddingSchema(model="another-model", dimension=4))

        assert exc_info.value.field == "model"


class TestEmbeddingSets:
    """Tests for reading and writing embedding files."""

    def test_dump_and_read(self, tmp_path, schema):
        path = tmp_path / "embeddings.json"
        dump_embedding_set(path, {"a": [0.1, 0.2, 0.3, 0.4]}, "chunkId", schema)

        with open(path) as f:
            data = json.load(f)
        assert data["schema"]["model"] == "test-model"
        assert data["embeddings"] == [{"chunkId": "a", "embedding": [0.1, 0.2, 0.3, 0.4]}]

        assert read_embedding_set(path, "chunkId", schema) == {"a": [0.1, 0.2, 0.3, 0.4]}

    def test_untagged_list(self, tmp_path, schema):
        """Test reading the bare list layout."""
        path = tmp_path / "qa-embeddings.json"
        path.write_text(json.dumps([{"question": "Q?", "embedding": [1, 0, 0, 0]}]))

        assert read_embedding_set(path, "question", schema) == {"Q?": [1.0, 0.0, 0.0, 0.0]}

    def test_prefix_mismatch(self, tmp_path, schema):
        path = tmp_path / "embeddings.json"
        stored = schema.model_copy(update={"query_prefix": "query: "})
        dump_embedding_set(path, {"a": [0.1, 0.2, 0.3, 0.4]}, "chunkId", stored)

        with pytest.raises(EmbeddingSchemaMismatchError) as exc_info:
            read_embedding_set(path, "chunkId", schema)

        assert exc_info.value.field == "query_prefix"

    def test_missing_key_field(self, tmp_path, schema):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps([{"embedding": [1, 0, 0, 0]}]))

        with pytest.raises(CorpusError):
            read_embedding_set(path, "chunkId", schema)

    def test_tagged_without_embeddings(self, tmp_path, schema):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps({"schema": schema.model_dump()}))

        with pytest.raises(CorpusError):
            read_embedding_set(path, "chunkId", schema)


class TestSlugs:
    """Tests for question slugs."""

    def test_generate_slug(self):
        assert generate_slug("How long can formula sit out?") == "how-long-can-formula-sit-out"

    def test_punctuation_and_spacing(self):
        assert generate_slug("  Can staff   use cell-phones?! ") == "can-staff-use-cell-phones"

    def test_length_limit(self):
        slug = generate_slug(
            "What are the requirements for outdoor play space fencing around the center?"
        )

        assert len(slug) <= 50
        assert not slug.endswith("-")
        assert slug.startswith("what-are-the-requirements")

    def test_first_pair_wins_on_collision(self):
        first = QAPair(question="Naps?", answer="First", sectionId="s1", sectionTitle="T")
        second = QAPair(question="naps", answer="Second", sectionId="s2", sectionTitle="T")

        slug_map = build_slug_map([first, second])

        assert list(slug_map) == ["naps"]
        assert slug_map["naps"].answer == "First"
