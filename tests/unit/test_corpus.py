"""
Unit tests for corpus loading.

Tests:
- Item record parsing
- File loading and error reporting
- Lookup and stats
- Synthetic corpus generation
"""

import json

import pytest

from vocabflow.delivery.card_factory import band_key
from vocabflow.delivery.corpus import Corpus, synthetic_corpus
from vocabflow.models import CorpusError, Item, UnknownItemError


@pytest.fixture
def words_file(tmp_path, sample_records):
    path = tmp_path / "words.json"
    path.write_text(json.dumps(sample_records), encoding="utf-8")
    return path


@pytest.fixture
def distractors_file(tmp_path):
    path = tmp_path / "distractors.json"
    path.write_text(json.dumps({"-1.0": ["a river", "a cloud"], "2.5": ["very old"], "bad": "skip"}), encoding="utf-8")
    return path


class TestItemParsing:
    """Tests for Item.from_dict."""

    def test_full_record(self, sample_records):
        item = Item.from_dict(sample_records[1])

        assert item.id == "2"
        assert item.word == "ephemeral"
        assert item.difficulty == 2.4
        assert item.rank == 18000
        assert item.pos == ("adjective",)
        assert item.primary_gloss == "lasting a very short time"
        assert item.definitions[0].examples == ("ephemeral fame",)
        assert item.ipa is not None

    def test_no_definitions(self, sample_records):
        item = Item.from_dict(sample_records[2])
        assert item.primary_gloss is None

    def test_numeric_id_becomes_string(self):
        item = Item.from_dict({"id": 7, "word": "seven", "difficulty": 0})
        assert item.id == "7"

    def test_gloss_key_accepted(self):
        item = Item.from_dict({"id": "g", "word": "go", "definitions": [{"pos": "verb", "gloss": "to move"}]})
        assert item.primary_gloss == "to move"


class TestLoading:
    """Tests for Corpus.from_files."""

    def test_loads_items_and_pool(self, words_file, distractors_file):
        corpus = Corpus.from_files(words_file, distractors_file)

        assert len(corpus) == 3
        assert corpus.get("1").word == "house"
        assert corpus.distractor_pool == {"-1.0": ["a river", "a cloud"], "2.5": ["very old"]}

    def test_distractors_optional(self, words_file):
        assert Corpus.from_files(words_file).distractor_pool == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(CorpusError, match="not found"):
            Corpus.from_files(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(CorpusError, match="Invalid JSON"):
            Corpus.from_files(path)

    def test_words_must_be_array(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text('{"id": "1"}', encoding="utf-8")

        with pytest.raises(CorpusError):
            Corpus.from_files(path)

    def test_distractors_must_be_object(self, words_file, tmp_path):
        path = tmp_path / "distractors.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(CorpusError):
            Corpus.from_files(words_file, path)

    def test_definition_must_be_object(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text(json.dumps([{"id": "1", "word": "cat", "definitions": ["a pet"]}]), encoding="utf-8")

        with pytest.raises(CorpusError, match="index 0"):
            Corpus.from_files(path)

    @pytest.mark.parametrize("word", [None, "", "   ", 42])
    def test_word_must_be_non_empty_string(self, word):
        with pytest.raises(CorpusError):
            Corpus.from_records([{"id": "1", "word": word, "difficulty": 0.0}])

    def test_malformed_record(self):
        with pytest.raises(CorpusError, match="index 1"):
            Corpus.from_records([{"id": "1", "word": "ok"}, {"id": "2"}])


class TestAccess:
    """Tests for lookups and stats."""

    def test_unknown_item(self, sample_corpus):
        with pytest.raises(UnknownItemError) as exc_info:
            sample_corpus.get("missing")
        assert exc_info.value.item_id == "missing"

    def test_contains_by_id(self, sample_corpus):
        assert "i00" in sample_corpus
        assert "missing" not in sample_corpus

    def test_sequence_protocol(self, sample_corpus, sample_items):
        assert list(sample_corpus) == sample_items
        assert sample_corpus[0] == sample_items[0]

    def test_duplicate_ids_keep_first(self, make_item):
        corpus = Corpus([make_item("a", 0.0, gloss="first"), make_item("a", 1.0, gloss="second")])
        assert corpus.get("a").primary_gloss == "first"

    def test_stats(self, sample_corpus):
        stats = sample_corpus.get_stats()

        assert stats["items"] == 25
        assert stats["with_definitions"] == 25
        assert stats["min_difficulty"] == -3.0
        assert stats["max_difficulty"] == 3.0
        assert stats["distractor_bands"] == 3

    def test_empty_stats(self):
        stats = Corpus([]).get_stats()
        assert stats["items"] == 0
        assert stats["min_difficulty"] is None


class TestSyntheticCorpus:
    """Tests for generated corpora."""

    def test_size_and_range(self):
        corpus = synthetic_corpus(50, seed=4)

        assert len(corpus) == 50
        assert all(-3.0 <= item.difficulty <= 3.0 for item in corpus)
        assert all(item.primary_gloss for item in corpus)

    def test_seed_reproducible(self):
        assert synthetic_corpus(20, seed=9).items == synthetic_corpus(20, seed=9).items

    def test_pool_keyed_by_band(self):
        corpus = synthetic_corpus(40, seed=2)
        bands = {band_key(item.difficulty) for item in corpus}
        assert set(corpus.distractor_pool) == bands
