from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from .benchmark import DEFAULT_SEED, DEFAULT_SIZES
from .commands import benchmark as cmd_benchmark
from .commands import compare as cmd_compare
from .commands import suggest as cmd_suggest
from .commands import validate_rules as cmd_validate_rules
from .commands.inputs import read_names, read_rules
from .config import load_settings
from .core.matching import CustomerMatcher
from .services import MergeSuggestionService

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Customer name duplicate detection")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)
    suggest_parser = subparsers.add_parser(
        "suggest", help="Suggest merge groups for a list of customer names"
    )
    suggest_parser.add_argument(
        "names_file", type=Path, help="One name per line, or a JSON array of names"
    )
    suggest_parser.add_argument(
        "--division", default="", help="Division whose overrides apply (e.g. FP)"
    )
    suggest_parser.add_argument(
        "--pairwise",
        action="store_true",
        help="Compare every pair instead of using blocking (small inputs only)",
    )
    suggest_parser.add_argument(
        "--json", action="store_true", help="Emit machine-readable JSON to stdout"
    )

    compare_parser = subparsers.add_parser(
        "compare", help="Show the similarity breakdown of two names"
    )
    compare_parser.add_argument("first")
    compare_parser.add_argument("second")
    compare_parser.add_argument("--division", default="")
    compare_parser.add_argument("--json", action="store_true")

    rules_parser = subparsers.add_parser(
        "validate-rules", help="Check merge rules against the current customer names"
    )
    rules_parser.add_argument("rules_file", type=Path, help="JSON list of merge rules")
    rules_parser.add_argument("names_file", type=Path, help="Current customer names")
    rules_parser.add_argument("--division", default=None)
    rules_parser.add_argument("--json", action="store_true")

    bench_parser = subparsers.add_parser(
        "benchmark", help="Time blocked vs. pairwise matching on synthetic names"
    )
    bench_parser.add_argument(
        "--sizes", type=int, nargs="+", default=list(DEFAULT_SIZES)
    )
    bench_parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    bench_parser.add_argument("--json", action="store_true")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings(args.config)
    except FileNotFoundError as exc:
        raise SystemExit(str(exc)) from exc

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    color_handler = logging.StreamHandler()
    color_handler.setFormatter(ColorFormatter(LOG_FORMAT))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(warn_buffer)

    service: MergeSuggestionService | None = None
    if args.command in {"suggest", "validate-rules"}:
        service = MergeSuggestionService(settings)

    try:
        match args.command:
            case "suggest":
                cmd_suggest.run(
                    service,
                    read_names(args.names_file),
                    division=args.division,
                    force_pairwise=args.pairwise,
                    json_output=args.json,
                )
            case "compare":
                with CustomerMatcher(settings.for_division(args.division)) as matcher:
                    cmd_compare.run(matcher, args.first, args.second, json_output=args.json)
            case "validate-rules":
                all_valid = cmd_validate_rules.run(
                    service,
                    read_rules(args.rules_file, args.division),
                    read_names(args.names_file),
                    json_output=args.json,
                )
                if not all_valid:
                    raise SystemExit(1)
            case "benchmark":
                cmd_benchmark.run(
                    settings.matcher,
                    sizes=args.sizes,
                    seed=args.seed,
                    json_output=args.json,
                )
            case _:
                parser.error("Unknown command")
    finally:
        if service:
            service.close()
        if warn_buffer.records:
            print("\n\033[33mWarnings/Errors summary:\033[0m")
            for line in warn_buffer.records:
                print(f" - {line}")


if __name__ == "__main__":
    main()
