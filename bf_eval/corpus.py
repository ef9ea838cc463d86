"""Corpus construction and the deterministic member / held-out partition.

A :class:`Corpus` is an ordered, immutable sequence of byte strings read once
from a word list. :class:`PairPartition` expands it by pairwise concatenation,
``words[i] + words[j]`` for every word ``i`` and each of the first
``multiplier`` words ``j``, and assigns each pair to the inserted side or the
held-out side with a pure function of ``(i, j)``::

    held_out(i, j) = (i + j) % modulus == 0

Nothing here reads the clock or an unseeded random source, so identical
inputs always give byte-identical partitions. :class:`LookupSets` is the
second, independent split used by the throughput runner: known and unknown
words plus a mixed sequence drawn with an explicit seed.
"""
from __future__ import annotations

import csv
import enum
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Sequence, Tuple, Union

from bf_eval.errors import InsufficientCorpus


logger = logging.getLogger(__name__)

DEFAULT_WORD_LIST = Path("/usr/share/dict/words")
DEFAULT_SKIP_MODULUS = 200
DEFAULT_MULTIPLIER = 250

PathLike = Union[str, Path]


@dataclass(frozen=True)
class Corpus:
    """Ordered sequence of byte strings. Shared read-only between backends."""

    words: Tuple[bytes, ...]

    @classmethod
    def from_iterable(cls, words: Iterable[Union[bytes, str]]) -> "Corpus":
        """Build a corpus, encoding ``str`` entries as UTF-8."""
        return cls(tuple(w.encode("utf-8") if isinstance(w, str) else bytes(w) for w in words))

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.words)

    def __getitem__(self, index):
        return self.words[index]


def load_word_list(path: PathLike) -> Corpus:
    """Load a newline-delimited UTF-8 word list.

    Order and duplicates are preserved; blank lines are dropped.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Word list not found: {path}")

    words = []
    with open(path, "rb") as f:
        for line in f:
            word = line.rstrip(b"\r\n")
            if word:
                words.append(word)

    logger.debug("Loaded %d words from %s", len(words), path)
    return Corpus(tuple(words))


def load_csv_tokens(path: PathLike, column: str = "tokenized_text") -> Corpus:
    """Load unique tokens from a tokenized-text CSV (e.g. brown.csv).

    Tokens are lowercased, kept only if they contain an alphanumeric
    character, de-duplicated and sorted so the result is stable.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")

    tokens = set()
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            for token in (row.get(column) or "").split():
                normalized = token.lower()
                if normalized and any(c.isalnum() for c in normalized):
                    tokens.add(normalized)

    return Corpus.from_iterable(sorted(tokens))


WORD_LIST_FORMATS = ("lines", "csv")


def load_corpus(path: PathLike, fmt: str = "lines") -> Corpus:
    """Load a corpus from ``path`` in one of :data:`WORD_LIST_FORMATS`.

    Raises:
        OSError: If the file is missing or cannot be read.
        ValueError: On an unknown format.
    """
    if fmt == "lines":
        return load_word_list(path)
    if fmt == "csv":
        return load_csv_tokens(path)
    raise ValueError(f"word list format must be one of {WORD_LIST_FORMATS}, got {fmt!r}")


def synthetic_words(n: int, seed: int = 0, width: int = 16) -> Corpus:
    """Generate ``n`` distinct fixed-width hex tokens from a seeded PRNG."""
    if n < 0:
        raise ValueError("n must not be negative")
    rng = random.Random(seed)
    seen = set()
    words = []
    while len(words) < n:
        token = f"{rng.getrandbits(4 * width):0{width}x}".encode("ascii")
        if token not in seen:
            seen.add(token)
            words.append(token)
    return Corpus(tuple(words))


def is_held_out(i: int, j: int, modulus: int = DEFAULT_SKIP_MODULUS) -> bool:
    """Skip rule: pair ``(i, j)`` is withheld from insertion."""
    return (i + j) % modulus == 0


class MemberCheck(str, enum.Enum):
    """Which inserted items the member pass queries."""

    PER_WORD = "per_word"  # first inserted pair of every source word
    ALL = "all"  # every inserted pair


class PairPartition:
    """Pairwise-expanded corpus split into inserted and held-out items.

    Iteration is row-major (``i`` outer, ``j`` inner) and lazy, so the insert
    phase never materializes the expanded corpus.
    """

    def __init__(self, corpus: Corpus, multiplier: int, modulus: int = DEFAULT_SKIP_MODULUS) -> None:
        if isinstance(multiplier, bool) or not isinstance(multiplier, int) or multiplier <= 0:
            raise ValueError(f"multiplier must be a positive integer, got {multiplier!r}")
        if isinstance(modulus, bool) or not isinstance(modulus, int) or modulus <= 0:
            raise ValueError(f"modulus must be a positive integer, got {modulus!r}")
        if len(corpus) == 0:
            raise InsufficientCorpus(max(1, multiplier), 0, "word list is empty")
        if len(corpus) < multiplier:
            raise InsufficientCorpus(
                multiplier, len(corpus), f"multiplier {multiplier} pairs each word with the first {multiplier} words"
            )

        self.corpus = corpus
        self.multiplier = multiplier
        self.modulus = modulus

    @property
    def size(self) -> int:
        """Number of generated pairs, inserted plus held out."""
        return len(self.corpus) * self.multiplier

    @property
    def held_out_count(self) -> int:
        n = len(self.corpus)
        count = 0
        for j in range(self.multiplier):
            residue = -j % self.modulus
            if residue < n:
                count += (n - residue + self.modulus - 1) // self.modulus
        return count

    @property
    def inserted_count(self) -> int:
        return self.size - self.held_out_count

    def is_held_out(self, i: int, j: int) -> bool:
        return is_held_out(i, j, self.modulus)

    def _pairs(self, held_out: bool) -> Iterator[bytes]:
        words = self.corpus.words
        prefix = words[:self.multiplier]
        modulus = self.modulus
        for i, w1 in enumerate(words):
            for j, w2 in enumerate(prefix):
                if ((i + j) % modulus == 0) == held_out:
                    yield w1 + w2

    def iter_inserted(self) -> Iterator[bytes]:
        """Lazily yield every pair that goes into the filter."""
        return self._pairs(held_out=False)

    def iter_held_out(self) -> Iterator[bytes]:
        """Lazily yield every pair kept back for the false positive check."""
        return self._pairs(held_out=True)

    def inserted(self) -> list:
        return list(self.iter_inserted())

    def held_out(self) -> list:
        return list(self.iter_held_out())

    def iter_member_probes(self, mode: MemberCheck = MemberCheck.PER_WORD) -> Iterator[bytes]:
        """Yield the inserted items the member pass should query."""
        mode = MemberCheck(mode)
        if mode is MemberCheck.ALL:
            yield from self.iter_inserted()
            return

        words = self.corpus.words
        for i, w1 in enumerate(words):
            for j in range(self.multiplier):
                if not self.is_held_out(i, j):
                    yield w1 + words[j]
                    break

    def member_probe_count(self, mode: MemberCheck = MemberCheck.PER_WORD) -> int:
        if MemberCheck(mode) is MemberCheck.ALL:
            return self.inserted_count
        # a row has no inserted pair only if every j in range(multiplier) is held out
        if self.multiplier > 1 and self.modulus > 1:
            return len(self.corpus)
        return sum(1 for _ in self.iter_member_probes(mode))

    def __repr__(self) -> str:
        return (
            f"PairPartition(words={len(self.corpus)}, multiplier={self.multiplier}, "
            f"modulus={self.modulus}, inserted={self.inserted_count}, held_out={self.held_out_count})"
        )


@dataclass(frozen=True)
class LookupSets:
    """Known, unknown and mixed word sequences for lookup benchmarks."""

    known: Tuple[bytes, ...]
    unknown: Tuple[bytes, ...]
    mixed: Tuple[bytes, ...]
    seed: int = 0

    @classmethod
    def build(cls, corpus: Corpus, max_words: int = 50_000, seed: int = 0) -> "LookupSets":
        """Split the head of ``corpus`` into known and unknown halves.

        ``mixed`` has ``max_words`` entries; each slot takes the next known or
        the next unknown word according to a coin flip from
        ``random.Random(seed)``.

        Raises:
            InsufficientCorpus: If the corpus holds fewer than ``2 * max_words`` words.
        """
        if max_words <= 0:
            raise ValueError("max_words must be positive")
        required = 2 * max_words
        if len(corpus) < required:
            raise InsufficientCorpus(required, len(corpus), "lookup sets need two disjoint halves")

        known = corpus.words[:max_words]
        unknown = corpus.words[max_words:required]

        rng = random.Random(seed)
        mixed = []
        known_index = 0
        unknown_index = 0
        for _ in range(max_words):
            if rng.randrange(2) == 0:
                mixed.append(known[known_index])
                known_index += 1
            else:
                mixed.append(unknown[unknown_index])
                unknown_index += 1

        return cls(known=known, unknown=unknown, mixed=tuple(mixed), seed=seed)

    @property
    def max_words(self) -> int:
        return len(self.known)

    def probe(self, operation: str) -> Sequence[bytes]:
        """Lookup sequence for a throughput operation name."""
        try:
            return {
                "contains_true": self.known,
                "contains_false": self.unknown,
                "contains_mixed": self.mixed,
            }[operation]
        except KeyError:
            raise ValueError(f"No lookup sequence for operation {operation!r}") from None
