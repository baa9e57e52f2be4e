"""Shared test fixtures for ginkou."""

import pytest

from ginkou import SentenceBank, StaticSegmenter

# Canned segmentations standing in for a morphological analyzer
SEGMENTATIONS = {
    "私がきた。": ["私", "が", "来る", "た", "。"],
    "私が来た。": ["私", "が", "来る", "た", "。"],
    "猫を見た": ["猫", "を", "見る", "た"],
    "犬を見る": ["犬", "を", "見る"],
    "猫が猫を見る": ["猫", "が", "猫", "を", "見る"],
}


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.ginkoudb and settings file."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("GINKOU_CONFIG", raising=False)
    return home


@pytest.fixture
def segmenter():
    """Canned Japanese segmentations, whitespace splitting for anything else."""
    return StaticSegmenter(SEGMENTATIONS, fallback=str.split)


@pytest.fixture
def bank(segmenter):
    """Create an in-memory sentence bank for testing."""
    with SentenceBank(":memory:", segmenter) as b:
        yield b


@pytest.fixture
def bank_with_data(bank):
    """Bank holding the two conjugation examples."""
    bank.ingest("私がきた。")
    bank.ingest("私が来た。")
    return bank
