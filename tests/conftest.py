"""Shared fixtures: small corpora and word list files."""

from __future__ import annotations

import pytest

from bf_eval.corpus import Corpus, synthetic_words


@pytest.fixture
def small_corpus() -> Corpus:
    return Corpus.from_iterable(["test", "with", "items"])


@pytest.fixture
def words_300() -> Corpus:
    return synthetic_words(300, seed=7)


@pytest.fixture
def words_file(tmp_path):
    path = tmp_path / "words.txt"
    words = [w.decode("ascii") for w in synthetic_words(400, seed=3)]
    path.write_text("\n".join(words) + "\n", encoding="utf-8")
    return path
