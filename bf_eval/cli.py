"""Command-line entry point.

Usage:
    bf-eval evaluate --word-list /usr/share/dict/words --multiplier 250
    bf-eval evaluate --config eval.yaml --backend bf_std --backend cuckoo
    bf-eval throughput --word-list words.txt --size 500 --size 5000
    bf-eval list
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from bf_eval.config import EvaluationConfig, ThroughputConfig, load_config
from bf_eval.corpus import WORD_LIST_FORMATS, LookupSets, load_corpus
from bf_eval.errors import ConfigError, InsufficientCorpus
from bf_eval.evaluation import run_sweep
from bf_eval.registry import default_registry
from bf_eval.report import print_sweep, print_throughput
from bf_eval.throughput import ThroughputRunner


logger = logging.getLogger("bf_eval")

EXIT_OK = 0
EXIT_CORPUS_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bf-eval",
        description="Empirical false positive, memory and throughput comparison of AMQ filters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s evaluate --multiplier 250                     # every backend, default word list
  %(prog)s evaluate --multiplier 10 --multiplier 250     # sweep over corpus sizes
  %(prog)s evaluate --backend bf_std --fp-rate 0.001     # one backend, custom precision
  %(prog)s throughput --size 500 --size 5000             # insert/lookup latency
""",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="YAML config file")
    common.add_argument("--word-list", default=None, help="Word list path")
    common.add_argument(
        "--word-list-format", choices=WORD_LIST_FORMATS, default=None,
        help="lines: one word per line (default); csv: tokens of a tokenized_text column",
    )
    common.add_argument(
        "--backend", action="append", default=None,
        help="Backend to run (repeatable, default: all registered)",
    )
    common.add_argument("--fp-rate", type=float, default=None, help="Target false positive rate for selected backends")
    common.add_argument("--capacity", type=int, default=None, help="Capacity hint for selected backends")

    evaluate = subparsers.add_parser("evaluate", parents=[common], help="False positive rate and memory")
    evaluate.add_argument(
        "--multiplier", type=int, action="append", default=None,
        help="Word list expansion multiplier (repeatable for a sweep)",
    )
    evaluate.add_argument("--skip-modulus", type=int, default=None, help="Held-out modulus K (default: 200)")
    evaluate.add_argument(
        "--member-check", choices=["per_word", "all"], default=None,
        help="Member pass: one probe per word, or every inserted item",
    )

    throughput = subparsers.add_parser("throughput", parents=[common], help="Insert/lookup latency")
    throughput.add_argument("--size", type=int, action="append", default=None, help="Working-set size (repeatable)")
    throughput.add_argument("--max-words", type=int, default=None, help="Words per lookup half (default: 50000)")
    throughput.add_argument("--seed", type=int, default=None, help="Seed for the mixed lookup sequence")
    throughput.add_argument("--min-ops", type=int, default=None, help="Minimum timed operations per measurement")
    throughput.add_argument("--baseline", default=None, help="Backend the diff column compares against")

    subparsers.add_parser("list", help="List registered backends")
    return parser


def _resolve_config(args: argparse.Namespace) -> EvaluationConfig:
    config = load_config(args.config) if args.config else EvaluationConfig()
    data = config.to_dict()

    if args.word_list:
        data["word_list_path"] = args.word_list
    if args.word_list_format:
        data["word_list_format"] = args.word_list_format
    if args.backend:
        data["backends"] = [{"name": name} for name in args.backend]
    if args.fp_rate is not None or args.capacity is not None:
        if not data["backends"]:
            data["backends"] = [{"name": name} for name in default_registry().names()]
        for backend in data["backends"]:
            if args.fp_rate is not None:
                backend["fp_rate"] = args.fp_rate
            if args.capacity is not None:
                backend["capacity"] = args.capacity

    if args.command == "evaluate":
        if args.multiplier:
            data["multipliers"] = args.multiplier
        if args.skip_modulus is not None:
            data["skip_modulus"] = args.skip_modulus
        if args.member_check:
            data["member_check"] = args.member_check
    elif args.command == "throughput":
        throughput = data["throughput"]
        if args.size:
            throughput["sizes"] = args.size
        if args.max_words is not None:
            throughput["max_words"] = args.max_words
        if args.seed is not None:
            throughput["seed"] = args.seed
        if args.min_ops is not None:
            throughput["min_ops"] = args.min_ops
        if args.size and args.max_words is None and max(args.size) > throughput["max_words"]:
            throughput["max_words"] = max(args.size)

    return EvaluationConfig.from_dict(data)


def _run_evaluate(config: EvaluationConfig) -> int:
    specs = config.resolve_backends(default_registry())
    corpus = load_corpus(config.word_list_path, config.word_list_format)
    logger.info("Loaded %d words from %s", len(corpus), config.word_list_path)
    sweep = run_sweep(specs, corpus, config.multipliers, config.skip_modulus, config.member_check)
    print_sweep(sweep)
    return EXIT_OK


def _run_throughput(config: EvaluationConfig, baseline: Optional[str]) -> int:
    specs = config.resolve_backends(default_registry())
    settings: ThroughputConfig = config.throughput
    corpus = load_corpus(config.word_list_path, config.word_list_format)
    lookup_sets = LookupSets.build(corpus, max_words=settings.max_words, seed=settings.seed)
    runner = ThroughputRunner(lookup_sets, sizes=settings.sizes, min_ops=settings.min_ops)
    results = runner.run_all(specs)
    print_throughput(results, baseline)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    if args.command == "list":
        for spec in default_registry().specs():
            layout = f", layout={spec.layout}" if spec.layout else ""
            print(f"{spec.name}: fp_rate={spec.fp_rate}{layout}  {spec.description}")
        return EXIT_OK

    try:
        config = _resolve_config(args)
        if args.command == "evaluate":
            return _run_evaluate(config)
        return _run_throughput(config, args.baseline)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR
    except (InsufficientCorpus, OSError) as e:
        logger.error("Corpus error: %s", e)
        return EXIT_CORPUS_ERROR


if __name__ == "__main__":
    sys.exit(main())
