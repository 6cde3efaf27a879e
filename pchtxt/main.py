#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""pchtxt2ips - command line entry point.

Compiles a patch text and writes an IPS32 file per build id:

    pchtxt2ips game.pchtxt            -> <first build id>.ips
    pchtxt2ips game.pchtxt --all -o out/
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import AppConfig, load_config
from .exceptions import BaseError
from .logging_config import get_logger, setup_logging
from .patching import CompiledOutput, LoggingSink, PatchCollection, parse_pchtxt, write_ips32_file
from .version import load_version


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parses command line arguments."""
    parser = argparse.ArgumentParser(
        prog="pchtxt2ips",
        description="pchtxt2ips - compile patch text files into IPS32 patches",
    )
    parser.add_argument("input", nargs="?", help="Patch text (.pchtxt) file to compile")
    parser.add_argument("-o", "--output-dir", help="Directory for the .ips files (default from config)")
    parser.add_argument("--all", action="store_true", help="Write every build id, not only the first")
    parser.add_argument("--config", metavar="PATH", help="JSON or YAML configuration file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Console log level (default from config)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit structured JSON log lines")
    parser.add_argument("--log-file", action="store_true", help="Also write a rotating log file")
    parser.add_argument("--dump", action="store_true", help="Print the compiled patch text as JSON")
    parser.add_argument("--version", action="store_true", help="Show version information")
    return parser.parse_args(argv)


def _select_collections(output: CompiledOutput, write_all: bool) -> List[PatchCollection]:
    if write_all:
        return list(output.collections)
    return output.collections[:1]


def run(args: argparse.Namespace, config: AppConfig) -> int:
    logger = get_logger("cli")
    input_path = Path(args.input)

    try:
        with open(input_path, "r", encoding="utf-8") as f:
            output = parse_pchtxt(f, LoggingSink(get_logger("patching")))
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Could not open file %s: %s", input_path, e)
        return 1

    if args.dump:
        print(json.dumps(output.to_dict(), indent=2, ensure_ascii=False))

    if output.is_empty:
        logger.error("No patch collections compiled from %s", input_path)
        return 1

    output_dir = Path(args.output_dir or config.output.output_dir)
    write_all = args.all or config.output.all_collections
    for collection in _select_collections(output, write_all):
        target = output_dir / config.output.file_name(collection.build_id)
        try:
            write_ips32_file(collection, target)
        except BaseError as e:
            logger.error("%s", e)
            return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main function of the command line tool."""
    args = parse_arguments(argv)

    if args.version:
        print(f"pchtxt2ips v{load_version()}")
        return 0

    if not args.input:
        print("error: an input .pchtxt file is required", file=sys.stderr)
        return 2

    try:
        config = load_config(args.config)
    except BaseError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    log_settings = config.logging
    setup_logging(
        log_level=args.log_level or log_settings.level,
        log_dir=log_settings.log_dir,
        enable_file_logging=args.log_file or log_settings.file_logging,
        structured_json=args.json_logs or log_settings.json_output,
        max_log_size=log_settings.max_size,
        backup_count=log_settings.backup_count,
    )
    return run(args, config)


if __name__ == "__main__":
    raise SystemExit(main())
