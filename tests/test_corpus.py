"""Tests for corpus loading, the skip-rule partition and lookup sets."""

from __future__ import annotations

import pytest

from bf_eval.corpus import (
    Corpus,
    LookupSets,
    MemberCheck,
    PairPartition,
    is_held_out,
    load_corpus,
    load_csv_tokens,
    load_word_list,
    synthetic_words,
)
from bf_eval.errors import InsufficientCorpus


class TestLoaders:
    def test_from_iterable_encodes_text(self):
        corpus = Corpus.from_iterable(["a", b"b", "é"])
        assert corpus.words == (b"a", b"b", "é".encode("utf-8"))
        assert len(corpus) == 3
        assert list(corpus) == [b"a", b"b", "é".encode("utf-8")]

    def test_load_word_list_keeps_order_and_duplicates(self, tmp_path):
        path = tmp_path / "words"
        path.write_bytes(b"zebra\r\napple\n\nzebra\nmango")
        corpus = load_word_list(path)
        assert corpus.words == (b"zebra", b"apple", b"zebra", b"mango")

    def test_load_word_list_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_word_list(tmp_path / "nope.txt")

    def test_load_csv_tokens(self, tmp_path):
        path = tmp_path / "brown.csv"
        path.write_text(
            "filename,tokenized_text\n"
            "a,The cat sat ,\n"
            "b,the Dog -- 42\n",
            encoding="utf-8",
        )
        corpus = load_csv_tokens(path)
        assert corpus.words == (b"42", b"cat", b"dog", b"sat", b"the")

    def test_load_corpus_dispatches_on_format(self, tmp_path):
        lines = tmp_path / "words"
        lines.write_bytes(b"b\na\n")
        table = tmp_path / "brown.csv"
        table.write_text("filename,tokenized_text\na,b a\n", encoding="utf-8")
        assert load_corpus(lines).words == (b"b", b"a")
        assert load_corpus(table, "csv").words == (b"a", b"b")
        with pytest.raises(ValueError):
            load_corpus(lines, "json")

    def test_directory_is_not_a_word_list(self, tmp_path):
        with pytest.raises(OSError):
            load_word_list(tmp_path)

    def test_synthetic_words_are_reproducible(self):
        a = synthetic_words(500, seed=5)
        b = synthetic_words(500, seed=5)
        assert a == b
        assert len(set(a.words)) == 500
        assert all(len(w) == 16 for w in a.words)
        assert synthetic_words(500, seed=6) != a


class TestPairPartition:
    def test_reference_example(self, small_corpus):
        partition = PairPartition(small_corpus, multiplier=2)
        assert partition.held_out() == [b"testtest"]
        assert partition.inserted() == [
            b"testwith",
            b"withtest",
            b"withwith",
            b"itemstest",
            b"itemswith",
        ]
        assert partition.size == 6
        assert partition.inserted_count == 5
        assert partition.held_out_count == 1

    def test_skip_rule(self):
        assert is_held_out(0, 0)
        assert is_held_out(199, 1)
        assert not is_held_out(1, 1)
        assert is_held_out(3, 4, modulus=7)

    @pytest.mark.parametrize(
        "n, multiplier, modulus",
        [(3, 2, 200), (300, 9, 7), (450, 250, 200), (20, 20, 3), (5, 1, 1), (17, 4, 5)],
    )
    def test_counts_match_enumeration(self, n, multiplier, modulus):
        partition = PairPartition(synthetic_words(n, seed=1), multiplier, modulus)
        held = sum(1 for i in range(n) for j in range(multiplier) if (i + j) % modulus == 0)
        assert partition.held_out_count == held
        assert partition.inserted_count == n * multiplier - held
        assert len(partition.held_out()) == held
        assert len(partition.inserted()) == n * multiplier - held

    def test_partition_is_disjoint(self, words_300):
        partition = PairPartition(words_300, multiplier=9, modulus=7)
        inserted = set(partition.inserted())
        held_out = set(partition.held_out())
        assert not inserted & held_out
        assert len(inserted) + len(held_out) == partition.size

    def test_partition_is_reproducible(self, words_file):
        first = PairPartition(load_word_list(words_file), multiplier=5, modulus=11)
        second = PairPartition(load_word_list(words_file), multiplier=5, modulus=11)
        assert first.inserted() == second.inserted()
        assert first.held_out() == second.held_out()

    def test_unequal_split_when_modulus_does_not_divide(self, words_300):
        partition = PairPartition(words_300, multiplier=1, modulus=7)
        # rows 0, 7, ..., 294 -> 43 held out, not 300 / 7
        assert partition.held_out_count == 43

    def test_per_word_member_probes(self, small_corpus):
        partition = PairPartition(small_corpus, multiplier=2)
        assert list(partition.iter_member_probes()) == [b"testwith", b"withtest", b"itemstest"]
        assert partition.member_probe_count() == 3

    def test_all_member_probes(self, small_corpus):
        partition = PairPartition(small_corpus, multiplier=2)
        assert list(partition.iter_member_probes(MemberCheck.ALL)) == partition.inserted()
        assert partition.member_probe_count("all") == 5

    def test_rows_without_inserted_pair_have_no_probe(self, words_300):
        partition = PairPartition(words_300, multiplier=1, modulus=7)
        probes = list(partition.iter_member_probes())
        assert len(probes) == 300 - 43
        assert partition.member_probe_count() == len(probes)

    def test_multiplier_larger_than_word_list(self, small_corpus):
        with pytest.raises(InsufficientCorpus) as excinfo:
            PairPartition(small_corpus, multiplier=4)
        assert excinfo.value.required == 4
        assert excinfo.value.available == 3

    def test_empty_word_list(self):
        with pytest.raises(InsufficientCorpus):
            PairPartition(Corpus(()), multiplier=1)

    @pytest.mark.parametrize("multiplier", [0, -1, 2.0, True])
    def test_invalid_multiplier(self, small_corpus, multiplier):
        with pytest.raises(ValueError):
            PairPartition(small_corpus, multiplier=multiplier)


class TestLookupSets:
    def test_halves(self):
        corpus = synthetic_words(250, seed=2)
        sets = LookupSets.build(corpus, max_words=100, seed=0)
        assert sets.known == corpus.words[:100]
        assert sets.unknown == corpus.words[100:200]
        assert sets.max_words == 100
        assert len(sets.mixed) == 100

    def test_mixed_takes_each_half_in_order(self):
        corpus = synthetic_words(200, seed=2)
        sets = LookupSets.build(corpus, max_words=100, seed=0)
        known = set(sets.known)
        from_known = [w for w in sets.mixed if w in known]
        from_unknown = [w for w in sets.mixed if w not in known]
        assert from_known == list(sets.known[:len(from_known)])
        assert from_unknown == list(sets.unknown[:len(from_unknown)])
        assert 0 < len(from_known) < 100

    def test_seeded_mix_is_reproducible(self):
        corpus = synthetic_words(200, seed=2)
        assert LookupSets.build(corpus, 100, seed=4) == LookupSets.build(corpus, 100, seed=4)
        assert LookupSets.build(corpus, 100, seed=4).mixed != LookupSets.build(corpus, 100, seed=5).mixed

    def test_requires_two_halves(self):
        with pytest.raises(InsufficientCorpus) as excinfo:
            LookupSets.build(synthetic_words(150), max_words=100)
        assert excinfo.value.required == 200

    def test_probe_lookup(self):
        sets = LookupSets.build(synthetic_words(20), max_words=10)
        assert sets.probe("contains_true") is sets.known
        assert sets.probe("contains_false") is sets.unknown
        assert sets.probe("contains_mixed") is sets.mixed
        with pytest.raises(ValueError):
            sets.probe("insert")
