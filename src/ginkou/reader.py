"""Splitting input streams into sentences.

Streams may be binary or text. Binary input is decoded one sentence at a
time, so a stretch of invalid UTF-8 spoils only its own sentence: that
sentence is yielded as the raw ``bytes`` and the rest of the stream is still
read. :meth:`ginkou.bank.SentenceBank.ingest_many` records such items as
failures.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

SPLIT_STYLES = ("line", "period")

# Japanese full stop
FULL_STOP = "。"
_FULL_STOP_BYTES = FULL_STOP.encode("utf-8")


def _as_bytes(chunk: str | bytes) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return chunk


def iter_lines(stream: Iterable[str | bytes]) -> Iterator[str | bytes]:
    """Yield each non-empty line of ``stream``, stripped."""
    for line in stream:
        line = line.strip()
        if not line:
            continue
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError:
                yield line
                continue
            line = line.strip()
            if not line:
                continue
        yield line


def _period_sentence(raw: bytes) -> str | bytes:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw
    return "".join(ch for ch in text if not ch.isspace())


def iter_periods(stream: Iterable[str | bytes]) -> Iterator[str | bytes]:
    """Yield sentences ending at ``。`` with all whitespace removed.

    Line breaks do not end a sentence; trailing text without a full stop is
    yielded as the last sentence.
    """
    buf = b""
    for chunk in stream:
        buf += _as_bytes(chunk)
        *complete, buf = buf.split(_FULL_STOP_BYTES)
        for raw in complete:
            sentence = _period_sentence(raw + _FULL_STOP_BYTES)
            if sentence.strip():
                yield sentence
    if buf.strip():
        sentence = _period_sentence(buf)
        if sentence:
            yield sentence


def iter_sentences(
    stream: Iterable[str | bytes], split: str = "line"
) -> Iterator[str | bytes]:
    """Yield the sentences of ``stream`` using the given split style."""
    if split == "line":
        return iter_lines(stream)
    if split == "period":
        return iter_periods(stream)
    raise ValueError(
        f"Unknown split style: {split!r} (expected one of {', '.join(SPLIT_STYLES)})"
    )
