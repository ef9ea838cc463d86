"""End-to-end tests for the command-line entry point."""

from __future__ import annotations

from bf_eval.cli import EXIT_CONFIG_ERROR, EXIT_CORPUS_ERROR, EXIT_OK, main


def test_evaluate(words_file, capsys):
    code = main([
        "evaluate", "--word-list", str(words_file), "--multiplier", "3",
        "--backend", "exact_set", "--backend", "bf_std",
    ])
    assert code == EXIT_OK
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("exact_set: size=1200, mem=")
    assert lines[0].endswith("insertFailed=0, fn=0, fp=0, fp_rate=0.000000")
    assert lines[1].startswith("bf_std: size=1200")


def test_evaluate_sweep_with_config(words_file, tmp_path, capsys):
    config = tmp_path / "eval.yaml"
    config.write_text(
        f"word_list_path: {words_file}\n"
        "multipliers: [1, 2]\n"
        "skip_modulus: 7\n"
        "backends: [exact_set]\n",
        encoding="utf-8",
    )
    assert main(["evaluate", "--config", str(config)]) == EXIT_OK
    out = capsys.readouterr().out
    assert "# word_list_multiplier=1" in out
    assert "exact_set: size=800" in out


def test_evaluate_insufficient_corpus(words_file):
    assert main(["evaluate", "--word-list", str(words_file), "--multiplier", "1000"]) == EXIT_CORPUS_ERROR


def test_evaluate_missing_word_list(tmp_path):
    assert main(["evaluate", "--word-list", str(tmp_path / "none.txt"), "--multiplier", "2"]) == EXIT_CORPUS_ERROR


def test_evaluate_unreadable_word_list(tmp_path):
    # a directory exists but cannot be opened as a word list
    assert main(["evaluate", "--word-list", str(tmp_path), "--multiplier", "2"]) == EXIT_CORPUS_ERROR


def test_evaluate_csv_word_list(tmp_path, capsys):
    path = tmp_path / "brown.csv"
    path.write_text(
        "filename,tokenized_text\n"
        "a01,The cat sat\n"
        "a02,on the mat !!\n",
        encoding="utf-8",
    )
    code = main([
        "evaluate", "--word-list", str(path), "--word-list-format", "csv",
        "--multiplier", "2", "--backend", "exact_set",
    ])
    assert code == EXIT_OK
    assert capsys.readouterr().out.startswith("exact_set: size=10, mem=")


def test_csv_format_from_config(tmp_path, capsys):
    path = tmp_path / "brown.csv"
    path.write_text("filename,tokenized_text\na01,one two three four\n", encoding="utf-8")
    config = tmp_path / "eval.yaml"
    config.write_text(
        f"word_list_path: {path}\nword_list_format: csv\nmultiplier: 3\nbackends: [exact_set]\n",
        encoding="utf-8",
    )
    assert main(["evaluate", "--config", str(config)]) == EXIT_OK
    assert "exact_set: size=12" in capsys.readouterr().out


def test_unknown_backend(words_file):
    assert main(["evaluate", "--word-list", str(words_file), "--backend", "quotient"]) == EXIT_CONFIG_ERROR


def test_invalid_fp_rate(words_file):
    code = main(["evaluate", "--word-list", str(words_file), "--multiplier", "2", "--fp-rate", "2"])
    assert code == EXIT_CONFIG_ERROR


def test_throughput(words_file, capsys):
    code = main([
        "throughput", "--word-list", str(words_file),
        "--size", "10", "--size", "50", "--max-words", "100", "--min-ops", "100",
        "--backend", "exact_set", "--backend", "bf_light",
    ])
    assert code == EXIT_OK
    out = capsys.readouterr().out
    assert "size=10" in out
    assert "size=50" in out
    assert "contains_mixed" in out


def test_throughput_insufficient_corpus(words_file):
    code = main(["throughput", "--word-list", str(words_file), "--size", "300", "--min-ops", "10"])
    assert code == EXIT_CORPUS_ERROR


def test_list(capsys):
    assert main(["list"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "cuckoo/packed: fp_rate=0.001, layout=packed" in out
