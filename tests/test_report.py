"""Tests for report formatting."""

from __future__ import annotations

from bf_eval.evaluation import ClassificationCounts, EvaluationResult
from bf_eval.report import format_result_line, format_throughput_table, print_sweep
from bf_eval.throughput import ThroughputResult


def test_result_line_field_order():
    counts = ClassificationCounts(tp=3, fn=0, fp=1, tn=3, insert_failed=2, memory_delta=1 << 20)
    line = format_result_line(EvaluationResult("bf_std", 1000, counts=counts))
    assert line == "bf_std: size=1000, mem=1.000 MB, insertFailed=2, fn=0, fp=1, fp_rate=0.250000"


def test_result_line_with_undefined_rate():
    line = format_result_line(EvaluationResult("cuckoo", 6, counts=ClassificationCounts(tp=3)))
    assert line.endswith("fp_rate=nan")


def test_error_line():
    line = format_result_line(EvaluationResult("broken", 6, error="broken: size must be positive"))
    assert line == "broken: error=broken: size must be positive"


def test_sweep_headers_only_for_multiple_batches(capsys):
    result = EvaluationResult("exact_set", 6, counts=ClassificationCounts(tp=3, tn=1))
    print_sweep({2: [result]})
    assert capsys.readouterr().out == format_result_line(result) + "\n"

    print_sweep({1: [result], 2: [result]})
    out = capsys.readouterr().out
    assert "# word_list_multiplier=1" in out
    assert "# word_list_multiplier=2" in out


def test_throughput_table_diff_against_baseline():
    results = [
        ThroughputResult("bf_std", 500, "insert", ops=1000, seconds=0.001),
        ThroughputResult("cuckoo", 500, "insert", ops=1000, seconds=0.002),
    ]
    table = format_throughput_table(results)
    lines = table.splitlines()
    assert lines[0] == "size=500"
    std_row = next(line for line in lines if line.startswith("bf_std"))
    cuckoo_row = next(line for line in lines if line.startswith("cuckoo"))
    assert std_row.rstrip().endswith("+0.00%")
    assert cuckoo_row.rstrip().endswith("+100.00%")


def test_throughput_table_empty():
    assert format_throughput_table([]) == ""
