"""Plain-text reports: one line per evaluated backend, tables for throughput."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from bf_eval.evaluation import EvaluationResult
from bf_eval.throughput import OPERATIONS, ThroughputResult


def format_result_line(result: EvaluationResult) -> str:
    """``name: size=…, mem=… MB, insertFailed=…, fn=…, fp=…, fp_rate=…``"""
    if not result.ok:
        return f"{result.backend}: error={result.error}"
    c = result.counts
    return (
        f"{result.backend}: size={result.size}, mem={c.memory_mb:.3f} MB, "
        f"insertFailed={c.insert_failed}, fn={c.fn}, fp={c.fp}, fp_rate={c.false_positive_rate:f}"
    )


def print_results(results: Iterable[EvaluationResult]) -> None:
    for result in results:
        print(format_result_line(result))


def print_sweep(sweep: Dict[int, List[EvaluationResult]]) -> None:
    """Print every batch of a multiplier sweep under its own header."""
    for multiplier, results in sweep.items():
        if len(sweep) > 1:
            print(f"# word_list_multiplier={multiplier}")
        print_results(results)


def _fmt(val) -> str:
    if val is None:
        return 'N/A'
    if isinstance(val, float):
        if val != val:
            return 'nan'
        if val == float('inf'):
            return 'inf'
        if abs(val) >= 1000:
            return f"{val:,.0f}"
        return f"{val:,.2f}"
    return str(val)


def _pct_change(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None or b is None or a == 0 or a != a or b != b:
        return None
    return (b - a) / a * 100


def format_throughput_table(
    results: Sequence[ThroughputResult],
    baseline: Optional[str] = None,
) -> str:
    """Side-by-side ns/op table per working-set size.

    The diff column compares each backend with ``baseline`` (first backend
    seen when not given); negative means faster than the baseline.
    """
    backends = list(dict.fromkeys(r.backend for r in results))
    if not backends:
        return ""
    baseline = baseline or backends[0]
    by_key = {(r.backend, r.size, r.operation): r for r in results}
    sizes = sorted({r.size for r in results})

    lines = []
    for size in sizes:
        lines.append(f"size={size}")
        lines.append(f"{'Backend':<20}{'Operation':<18}{'ns/op':>14}{'ops/sec':>16}{'Diff (%)':>12}")
        lines.append('-' * 80)
        for backend in backends:
            for operation in OPERATIONS:
                r = by_key.get((backend, size, operation))
                if r is None:
                    continue
                base = by_key.get((baseline, size, operation))
                diff = _pct_change(base.ns_per_op if base else None, r.ns_per_op)
                diff_str = f"{diff:+.2f}%" if diff is not None else 'N/A'
                lines.append(
                    f"{backend:<20}{operation:<18}{_fmt(r.ns_per_op):>14}{_fmt(r.ops_per_sec):>16}{diff_str:>12}"
                )
        lines.append("")
    return "\n".join(lines)


def print_throughput(results: Sequence[ThroughputResult], baseline: Optional[str] = None) -> None:
    print(format_throughput_table(results, baseline))
