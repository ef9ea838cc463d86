"""Evaluation driver: false positive rate and memory footprint per backend.

One run walks a fixed sequence of phases against a freshly built backend:

1. sample memory, then construct the backend sized for the inserted subset
2. insert every non-held-out pair, counting refused inserts
3. sample memory again; the delta is attributed to the backend alone
4. materialize the held-out pairs (only now, so step 3 is not inflated)
5. query every held-out pair: found is a false positive, missing a true negative
6. query the member probes: found is a true positive, missing a false negative

Runs are strictly sequential. Backends are evaluated one at a time so the
process-wide allocation sample belongs to exactly one of them.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Union

from bf_eval.adapters.base import BackendSpec
from bf_eval.corpus import Corpus, MemberCheck, PairPartition
from bf_eval.errors import BackendConstructionError, UndefinedRate
from bf_eval.memory import MemoryProbe


logger = logging.getLogger(__name__)

MEGABYTE = 1 << 20


@dataclass(frozen=True)
class ClassificationCounts:
    """Outcome of one evaluation run. Immutable once returned."""

    tp: int = 0
    fn: int = 0
    fp: int = 0
    tn: int = 0
    insert_failed: int = 0
    memory_delta: int = 0

    @property
    def held_out_total(self) -> int:
        return self.fp + self.tn

    @property
    def member_total(self) -> int:
        return self.tp + self.fn

    @property
    def false_positive_rate(self) -> float:
        """fp / (fp + tn), or NaN when nothing was held out."""
        if self.held_out_total == 0:
            return math.nan
        return self.fp / self.held_out_total

    def checked_false_positive_rate(self) -> float:
        """Like :attr:`false_positive_rate` but raises on an empty held-out set."""
        if self.held_out_total == 0:
            raise UndefinedRate("false positive rate is undefined without held-out samples")
        return self.fp / self.held_out_total

    @property
    def memory_mb(self) -> float:
        return self.memory_delta / MEGABYTE


@dataclass(frozen=True)
class EvaluationResult:
    """Counts for one backend, or the reason it could not be evaluated."""

    backend: str
    size: int
    counts: Optional[ClassificationCounts] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.counts is not None


def evaluate(
    spec: BackendSpec,
    partition: PairPartition,
    member_check: Union[MemberCheck, str] = MemberCheck.PER_WORD,
    probe: Optional[MemoryProbe] = None,
) -> ClassificationCounts:
    """Run the full protocol for one backend.

    Raises:
        BackendConstructionError: If the backend cannot be built for the
            partition's inserted count.
    """
    if probe is None:
        with MemoryProbe() as own_probe:
            return evaluate(spec, partition, member_check, own_probe)

    member_check = MemberCheck(member_check)
    required = partition.inserted_count
    logger.debug("%s: constructing for %d items", spec.name, required)

    # created before the first sample so the generator is not part of the delta
    pending = partition.iter_inserted()
    insert_failed = 0

    memory_before = probe.sample()
    adapter = spec.build(required)
    for item in pending:
        if not adapter.insert(item):
            insert_failed += 1
    memory_after = probe.sample()
    memory_delta = memory_after - memory_before

    logger.debug(
        "%s: inserted %d items (%d refused), memory delta %d bytes",
        spec.name, required, insert_failed, memory_delta,
    )

    held_out = partition.held_out()
    fp = tn = 0
    for item in held_out:
        if adapter.contains(item):
            fp += 1
        else:
            tn += 1
    del held_out

    logger.debug(
        "%s: fp pass done, probing %d members (%s)",
        spec.name, partition.member_probe_count(member_check), member_check.value,
    )
    tp = fn = 0
    for item in partition.iter_member_probes(member_check):
        if adapter.contains(item):
            tp += 1
        else:
            fn += 1

    logger.debug("%s: tp=%d fn=%d fp=%d tn=%d", spec.name, tp, fn, fp, tn)
    return ClassificationCounts(
        tp=tp,
        fn=fn,
        fp=fp,
        tn=tn,
        insert_failed=insert_failed,
        memory_delta=memory_delta,
    )


def run_comparison(
    specs: Iterable[BackendSpec],
    partition: PairPartition,
    member_check: Union[MemberCheck, str] = MemberCheck.PER_WORD,
) -> List[EvaluationResult]:
    """Evaluate each backend in turn on the same partition.

    A backend that fails construction is recorded with its error and the
    batch moves on to the next one.
    """
    results = []
    with MemoryProbe() as probe:
        for spec in specs:
            try:
                counts = evaluate(spec, partition, member_check, probe)
            except BackendConstructionError as e:
                logger.warning("Skipping %s: %s", spec.name, e)
                results.append(EvaluationResult(spec.name, partition.size, error=str(e)))
                continue

            logger.info(
                "%s: fp=%d/%d insertFailed=%d fn=%d/%d",
                spec.name, counts.fp, counts.held_out_total, counts.insert_failed, counts.fn, counts.member_total,
            )
            results.append(EvaluationResult(spec.name, partition.size, counts=counts))
    return results


def run_sweep(
    specs: Sequence[BackendSpec],
    corpus: Corpus,
    multipliers: Iterable[int],
    modulus: int,
    member_check: Union[MemberCheck, str] = MemberCheck.PER_WORD,
) -> Dict[int, List[EvaluationResult]]:
    """Run one comparison batch per multiplier, in the order given.

    Raises:
        InsufficientCorpus: If any multiplier exceeds the word list; no batch
            is run in that case.
    """
    partitions = [PairPartition(corpus, multiplier, modulus) for multiplier in multipliers]
    sweep = {}
    for partition in partitions:
        logger.info("Evaluating %r", partition)
        sweep[partition.multiplier] = run_comparison(specs, partition, member_check)
    return sweep
