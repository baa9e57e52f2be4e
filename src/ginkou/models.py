"""Domain model dataclasses for ginkou."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class WordModel:
    """A normalized word form (dictionary form of an inflected word)."""

    id: int
    text: str


@dataclass(frozen=True, slots=True)
class SentenceModel:
    """One stored occurrence of a sentence."""

    id: int
    text: str


@dataclass(frozen=True, slots=True)
class IngestResult:
    """Outcome of ingesting a single sentence."""

    index: int
    sentence: str
    success: bool
    sentence_id: int | None = None
    words: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Outcome of ingesting a stream of sentences."""

    total_count: int
    success_count: int
    failure_count: int
    results: list[IngestResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def failures(self) -> list[IngestResult]:
        return [r for r in self.results if not r.success]


@dataclass(frozen=True, slots=True)
class BankStats:
    """Row counts of the three relations."""

    word_count: int
    sentence_count: int
    link_count: int
