"""Morphological segmentation adapters.

The sentence bank only needs ``segment(text) -> Sequence[str]``: the
dictionary forms of the words in ``text``. :class:`SudachiSegmenter` binds
that to SudachiPy; :class:`StaticSegmenter` serves canned segmentations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from ginkou.exceptions import TokenizationError

logger = logging.getLogger(__name__)

SPLIT_MODES = ("A", "B", "C")
WORD_FORMS = ("normalized", "dictionary")


class Segmenter(Protocol):
    """Anything that turns a sentence into normalized word forms."""

    def segment(self, text: str) -> Sequence[str]: ...


class SudachiSegmenter:
    """Segmenter backed by SudachiPy.

    Each morpheme contributes its normalized form, so ``来た`` and ``きた``
    both yield ``来る``; with ``form="dictionary"`` only the inflection is
    undone and the spelling is kept. The dictionary is loaded on first use.
    """

    def __init__(
        self,
        split_mode: str = "C",
        config_path: str | Path | None = None,
        form: str = "normalized",
    ) -> None:
        if split_mode not in SPLIT_MODES:
            raise ValueError(
                f"Invalid split mode: {split_mode!r} "
                f"(expected one of {', '.join(SPLIT_MODES)})"
            )
        if form not in WORD_FORMS:
            raise ValueError(
                f"Invalid word form: {form!r} "
                f"(expected one of {', '.join(WORD_FORMS)})"
            )
        self.split_mode = split_mode
        self.config_path = config_path
        self.form = form
        self._tokenizer: Any = None
        self._mode: Any = None

    def load(self) -> None:
        """Load the Sudachi dictionary now rather than on first use."""
        try:
            from sudachipy import dictionary, tokenizer
        except ImportError as e:
            raise TokenizationError(
                "SudachiPy is not installed; install sudachipy and sudachidict_core"
            ) from e

        dict_args = {}
        if self.config_path is not None:
            dict_args["config_path"] = str(self.config_path)
        try:
            self._tokenizer = dictionary.Dictionary(**dict_args).create()
        except Exception as e:
            raise TokenizationError(f"Cannot load Sudachi dictionary: {e}") from e
        self._mode = getattr(tokenizer.Tokenizer.SplitMode, self.split_mode)
        logger.debug(f"Loaded Sudachi dictionary (split mode {self.split_mode})")

    def segment(self, text: str) -> list[str]:
        if self._tokenizer is None:
            self.load()
        try:
            morphemes = self._tokenizer.tokenize(text, self._mode)
            if self.form == "normalized":
                return [m.normalized_form() for m in morphemes if m.surface().strip()]
            return [m.dictionary_form() for m in morphemes if m.surface().strip()]
        except Exception as e:
            raise TokenizationError(f"Sudachi failed on {text!r}: {e}") from e


class StaticSegmenter:
    """Segmenter answering from a fixed table.

    Sentences missing from ``table`` go to ``fallback`` when one is given,
    otherwise they raise :class:`TokenizationError`.
    """

    def __init__(
        self,
        table: Mapping[str, Sequence[str]] | None = None,
        fallback: Callable[[str], Sequence[str]] | None = None,
    ) -> None:
        self.table = dict(table or {})
        self.fallback = fallback

    def segment(self, text: str) -> Sequence[str]:
        if text in self.table:
            return self.table[text]
        if self.fallback is not None:
            return self.fallback(text)
        raise TokenizationError(f"No segmentation known for {text!r}")


def whitespace_segmenter() -> StaticSegmenter:
    """Segmenter that splits on whitespace, for space-delimited text."""
    return StaticSegmenter(fallback=str.split)


def create_segmenter(
    name: str = "sudachi",
    split_mode: str = "C",
    config_path: str | Path | None = None,
    form: str = "normalized",
) -> Segmenter:
    """Build a segmenter by name (``sudachi`` or ``whitespace``)."""
    if name == "sudachi":
        return SudachiSegmenter(
            split_mode=split_mode, config_path=config_path, form=form
        )
    if name == "whitespace":
        return whitespace_segmenter()
    raise ValueError(f"Unknown segmenter: {name!r}")
