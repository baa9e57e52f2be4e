"""SentenceBank, the main entry point for the ginkou library."""

from __future__ import annotations

import functools
import logging
import sqlite3
import time
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any, TypeVar

from ginkou import db as _db
from ginkou.exceptions import StorageError, TokenizationError
from ginkou.models import (
    BankStats,
    BatchResult,
    IngestResult,
    SentenceModel,
    WordModel,
)
from ginkou.segmenter import Segmenter

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])


def _modifies_db(method: _F) -> _F:
    """Decorator: runs a mutation in its own transaction.

    SQLite errors become :class:`StorageError`; any exception rolls the
    transaction back before it propagates.
    """

    @functools.wraps(method)
    def wrapper(self: SentenceBank, *args: Any, **kwargs: Any) -> Any:
        try:
            with self._conn:
                return method(self, *args, **kwargs)
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    return wrapper  # type: ignore[return-value]


def _distinct_forms(forms: Sequence[str]) -> list[str]:
    if isinstance(forms, (str, bytes)) or not isinstance(forms, Iterable):
        raise TokenizationError(
            f"Segmenter returned {type(forms).__name__}, expected a sequence of str"
        )
    seen: dict[str, None] = {}
    for form in forms:
        if not isinstance(form, str):
            raise TokenizationError(
                f"Segmenter returned a {type(form).__name__} word form: {form!r}"
            )
        if form:
            seen.setdefault(form, None)
    return list(seen)


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Invalid UTF-8: {e}") from e


class SentenceBank:
    """A store of example sentences indexed by the words they contain."""

    def __init__(
        self,
        db_path: str | Path = ":memory:",
        segmenter: Segmenter | None = None,
    ) -> None:
        self._db_path = str(db_path)
        self._segmenter = segmenter
        self._conn = _db.connect(db_path)
        try:
            _db.check_schema_version(self._conn)
            _db.init_db(self._conn)
        except BaseException:
            self._conn.close()
            raise

    @property
    def db_path(self) -> str:
        return self._db_path

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> SentenceBank:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def _segment(self, text: str) -> list[str]:
        if self._segmenter is None:
            raise TokenizationError("No segmenter configured for ingestion")
        # Results may be lazy, so they are consumed inside the try
        try:
            return _distinct_forms(self._segmenter.segment(text))
        except TokenizationError:
            raise
        except Exception as e:
            raise TokenizationError(f"Segmenter failed on {text!r}: {e}") from e

    @_modifies_db
    def _ingest(self, text: str) -> tuple[int, list[str]]:
        sentence_id = _db.add_sentence(self._conn, text)
        forms = self._segment(text)
        for form in forms:
            word_id = _db.get_or_create_word(self._conn, form)
            _db.link_word(self._conn, word_id, sentence_id)
        return sentence_id, forms

    def ingest(self, sentence_text: str, *, index: int = 0) -> IngestResult:
        """Store a sentence and link it to each distinct word form in it.

        The text is stored exactly as given. The sentence row and its links
        are committed together; if the segmenter or the database fails
        nothing is kept.

        Raises:
            ValueError: If the sentence is empty or whitespace.
            TokenizationError: If the segmenter fails or misbehaves.
            StorageError: If the database rejects the write.
        """
        if not sentence_text.strip():
            raise ValueError("Cannot ingest an empty sentence")
        sentence_id, forms = self._ingest(sentence_text)
        logger.debug(f"Stored sentence {sentence_id} with {len(forms)} word(s)")
        return IngestResult(
            index=index,
            sentence=sentence_text,
            success=True,
            sentence_id=sentence_id,
            words=tuple(forms),
        )

    def ingest_many(
        self,
        sentences: Iterable[str | bytes],
        *,
        stop_on_error: bool = False,
    ) -> BatchResult:
        """Ingest a stream of sentences, each in its own transaction.

        A failing sentence is recorded and skipped. With ``stop_on_error``
        the batch ends at the first failure instead. Items given as bytes
        are decoded as UTF-8; one that does not decode counts as a failure.
        """
        start_time = time.time()
        results: list[IngestResult] = []

        for i, sentence in enumerate(sentences):
            if not sentence.strip():
                continue
            try:
                if isinstance(sentence, bytes):
                    sentence = _decode(sentence)
                logger.info(f"#{i + 1}: {sentence}")
                result = self.ingest(sentence, index=i)
            except (StorageError, TokenizationError, ValueError) as e:
                logger.debug(f"Error ingesting sentence #{i + 1}", exc_info=True)
                if isinstance(sentence, bytes):
                    sentence = sentence.decode("utf-8", errors="replace")
                result = IngestResult(
                    index=i,
                    sentence=sentence,
                    success=False,
                    error=str(e),
                )
            results.append(result)
            if stop_on_error and not result.success:
                break

        success_count = sum(1 for r in results if r.success)
        return BatchResult(
            total_count=len(results),
            success_count=success_count,
            failure_count=len(results) - success_count,
            results=results,
            duration_seconds=time.time() - start_time,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(
        self,
        word_text: str,
        *,
        limit: int | None = _db.DEFAULT_LIMIT,
    ) -> list[str]:
        """Sentences containing ``word_text``, shortest first.

        The match is exact: normalization happened when sentences were
        ingested. At most ``limit`` sentences are returned (all of them when
        ``limit`` is None); ties in length come back in no particular order.
        An unknown word gives an empty list.
        """
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        try:
            return _db.matching_sentences(self._conn, word_text, limit)
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def get_word(self, text: str) -> WordModel | None:
        row = _db.get_word_row(self._conn, text)
        if row is None:
            return None
        return WordModel(id=row["id"], text=row["word"])

    def get_sentence(self, sentence_id: int) -> SentenceModel | None:
        row = _db.get_sentence_row(self._conn, sentence_id)
        if row is None:
            return None
        return SentenceModel(id=row["id"], text=row["sentence"])

    def words_for_sentence(self, sentence_id: int) -> list[str]:
        return _db.words_for_sentence(self._conn, sentence_id)

    def stats(self) -> BankStats:
        words, sentences, links = _db.count_rows(self._conn)
        return BankStats(
            word_count=words,
            sentence_count=sentences,
            link_count=links,
        )
