"""Tests for sentence ingestion."""

import pytest

from ginkou import (
    SentenceBank,
    StaticSegmenter,
    StorageError,
    TokenizationError,
)


def _word_count(bank, text):
    return bank._conn.execute(
        "SELECT COUNT(*) FROM words WHERE word = ?", (text,)
    ).fetchone()[0]


def _link_count(bank, word):
    return bank._conn.execute(
        "SELECT COUNT(*) FROM word_sentence "
        "JOIN words ON words.id = word_sentence.word_id "
        "WHERE words.word = ?",
        (word,),
    ).fetchone()[0]


class TestIngest:
    def test_ingest_returns_stored_sentence(self, bank):
        result = bank.ingest("犬を見る")
        assert result.success
        assert result.sentence == "犬を見る"
        assert result.words == ("犬", "を", "見る")
        assert bank.get_sentence(result.sentence_id).text == "犬を見る"

    def test_links_every_word_form(self, bank):
        result = bank.ingest("猫を見た")
        assert bank.words_for_sentence(result.sentence_id) == ["猫", "を", "見る", "た"]

    def test_text_stored_unchanged(self, bank):
        result = bank.ingest("  犬を見る\n")
        assert result.sentence == "  犬を見る\n"
        assert bank.get_sentence(result.sentence_id).text == "  犬を見る\n"

    def test_empty_sentence_rejected(self, bank):
        with pytest.raises(ValueError):
            bank.ingest("   ")
        assert bank.stats().sentence_count == 0


class TestWordIdentity:
    """Shared word forms resolve to one Word row."""

    def test_shared_word_has_one_row(self, bank):
        bank.ingest("猫を見た")
        bank.ingest("犬を見る")
        assert _word_count(bank, "見る") == 1
        assert _link_count(bank, "見る") == 2

    def test_independent_of_order(self, segmenter):
        with SentenceBank(":memory:", segmenter) as bank:
            bank.ingest("犬を見る")
            bank.ingest("猫を見た")
            assert _word_count(bank, "見る") == 1
            assert _link_count(bank, "見る") == 2

    def test_get_word(self, bank):
        bank.ingest("猫を見た")
        word = bank.get_word("猫")
        assert word is not None
        assert word.text == "猫"
        assert bank.get_word("犬") is None


class TestSentenceOccurrences:
    """Identical sentences are stored as separate occurrences."""

    def test_same_text_twice_gives_two_rows(self, bank):
        first = bank.ingest("犬を見る")
        second = bank.ingest("犬を見る")
        assert first.sentence_id != second.sentence_id
        assert bank.stats().sentence_count == 2
        assert _word_count(bank, "犬") == 1
        assert bank.words_for_sentence(first.sentence_id) == bank.words_for_sentence(
            second.sentence_id
        )
        assert bank.lookup("犬") == ["犬を見る", "犬を見る"]


class TestWithinSentenceDedup:
    def test_repeated_word_linked_once(self, bank):
        result = bank.ingest("猫が猫を見る")
        assert result.words == ("猫", "が", "を", "見る")
        assert _link_count(bank, "猫") == 1
        assert bank.stats().link_count == 4

    def test_empty_forms_ignored(self):
        segmenter = StaticSegmenter({"a": ["a", "", "a"]})
        with SentenceBank(":memory:", segmenter) as bank:
            result = bank.ingest("a")
            assert result.words == ("a",)
            assert _word_count(bank, "") == 0


class TestAtomicity:
    """A failing sentence leaves nothing behind."""

    def test_segmenter_failure_rolls_back(self, bank):
        bank._segmenter = StaticSegmenter()
        with pytest.raises(TokenizationError):
            bank.ingest("未知の文")
        stats = bank.stats()
        assert stats.sentence_count == 0
        assert stats.word_count == 0

    def test_unexpected_exception_wrapped(self):
        def boom(text):
            raise RuntimeError("analyzer crashed")

        with SentenceBank(":memory:", StaticSegmenter(fallback=boom)) as bank:
            with pytest.raises(TokenizationError, match="analyzer crashed") as excinfo:
                bank.ingest("何か")
            assert isinstance(excinfo.value.__cause__, RuntimeError)
            assert bank.stats().sentence_count == 0

    def test_segmenter_failing_midway(self):
        def partial(text):
            yield "a"
            raise RuntimeError("analyzer crashed mid-stream")

        with SentenceBank(":memory:", StaticSegmenter(fallback=partial)) as bank:
            with pytest.raises(TokenizationError, match="mid-stream") as excinfo:
                bank.ingest("x")
            assert isinstance(excinfo.value.__cause__, RuntimeError)
            stats = bank.stats()
            assert stats.sentence_count == 0
            assert stats.word_count == 0

    def test_lazy_failure_does_not_end_batch(self):
        def partial(text):
            if text == "bad":
                yield "a"
                raise RuntimeError("analyzer crashed mid-stream")
            yield from text.split()

        with SentenceBank(":memory:", StaticSegmenter(fallback=partial)) as bank:
            result = bank.ingest_many(["one", "bad", "two"])
            assert result.success_count == 2
            assert result.failures[0].sentence == "bad"
            assert bank.lookup("two") == ["two"]

    def test_bad_segmenter_output(self):
        segmenter = StaticSegmenter({"x": "not a list", "y": ["ok", 3]})
        with SentenceBank(":memory:", segmenter) as bank:
            with pytest.raises(TokenizationError):
                bank.ingest("x")
            with pytest.raises(TokenizationError):
                bank.ingest("y")
            assert bank.stats().sentence_count == 0
            assert bank.stats().word_count == 0

    def test_no_segmenter(self):
        with SentenceBank(":memory:") as bank:
            with pytest.raises(TokenizationError):
                bank.ingest("犬を見る")
            assert bank.stats().sentence_count == 0

    def test_storage_failure_rolls_back(self, bank):
        bank._conn.execute("DROP TABLE word_sentence")
        with pytest.raises(StorageError):
            bank.ingest("犬を見る")
        stats = bank._conn.execute("SELECT COUNT(*) FROM sentences").fetchone()[0]
        words = bank._conn.execute("SELECT COUNT(*) FROM words").fetchone()[0]
        assert stats == 0
        assert words == 0

    def test_earlier_sentences_survive_failure(self, bank):
        bank.ingest("犬を見る")
        bank._segmenter = StaticSegmenter()
        with pytest.raises(TokenizationError):
            bank.ingest("未知の文")
        assert bank.lookup("犬") == ["犬を見る"]
        assert bank.stats().sentence_count == 1


class TestIngestMany:
    def test_counts(self, bank):
        result = bank.ingest_many(["猫を見た", "犬を見る"])
        assert result.total_count == 2
        assert result.success_count == 2
        assert result.failure_count == 0
        assert result.failures == []

    def test_blank_lines_skipped(self, bank):
        result = bank.ingest_many(["", "犬を見る", "   "])
        assert result.total_count == 1
        assert result.results[0].index == 1

    def test_continues_after_failure(self):
        segmenter = StaticSegmenter({"a b": ["a", "b"], "c": ["c"]})
        with SentenceBank(":memory:", segmenter) as bank:
            result = bank.ingest_many(["a b", "unknown", "c"])
            assert result.success_count == 2
            assert result.failure_count == 1
            failure = result.failures[0]
            assert failure.sentence == "unknown"
            assert failure.index == 1
            assert "unknown" in failure.error
            assert bank.lookup("c") == ["c"]

    def test_stop_on_error(self):
        segmenter = StaticSegmenter({"a b": ["a", "b"], "c": ["c"]})
        with SentenceBank(":memory:", segmenter) as bank:
            result = bank.ingest_many(["a b", "unknown", "c"], stop_on_error=True)
            assert result.total_count == 2
            assert result.failure_count == 1
            assert bank.lookup("c") == []

    def test_progress_logged(self, bank, caplog):
        caplog.set_level("INFO", logger="ginkou")
        bank.ingest_many(["犬を見る"])
        assert "#1: 犬を見る" in caplog.text

    def test_undecodable_bytes_recorded(self, bank):
        result = bank.ingest_many([b"\xff\xfe bad", "犬を見る".encode("utf-8")])
        assert result.success_count == 1
        failure = result.failures[0]
        assert failure.index == 0
        assert "Invalid UTF-8" in failure.error
        assert failure.sentence.endswith(" bad")
        assert bank.lookup("犬") == ["犬を見る"]
