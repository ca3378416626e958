"""Command-line interface.

Usage::

    headerbind translate Foundation.h --library Foundation \\
        --config Foundation.toml -o generated/
    headerbind list-writers
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from headerbind.backends import get_backend
from headerbind.config import Config
from headerbind.errors import ConfigError, TranslationError
from headerbind.translate import Translator
from headerbind.writers import get_default_writer, get_file_extension, get_writer_info

logger = logging.getLogger(__name__)

# Environment variable naming a config file when --config is not given
CONFIG_ENV_VAR = "HEADERBIND_CONFIG"


def _load_config(path: str | None) -> Config:
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if path is None:
        return Config()
    logger.info("loading config from %s", path)
    return Config.load(path)


def _translate(args: argparse.Namespace) -> int:
    try:
        config = _load_config(args.config)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    backend = get_backend(args.backend)
    entities = backend.parse(args.header, args=args.clang_arg)

    translator = Translator(config, library=args.library)
    try:
        headers = translator.translate_files(entities)
    except TranslationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    outputs = translator.render(headers, writer=args.format)

    if args.output is None:
        for key, text in outputs.items():
            if len(outputs) > 1:
                print(f"// {key}")
            print(text)
        return 0

    output_dir = Path(args.output)
    extension = get_file_extension(args.format)
    for key, text in outputs.items():
        # One directory per library
        path = output_dir / f"{key}{extension}"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.info("wrote %s", path)
    return 0


def _list_writers(args: argparse.Namespace) -> int:
    for info in get_writer_info():
        marker = " (default)" if info["is_default"] else ""
        print(f"{info['name']}{marker}: {info['description']}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="headerbind",
        description="Translate Objective-C headers into Rust binding declarations.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for info, -vv for debug)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    translate = subparsers.add_parser("translate", help="Translate a header")
    translate.add_argument("header", help="Header file to translate")
    translate.add_argument(
        "--config",
        default=None,
        help=f"TOML configuration file (default: ${CONFIG_ENV_VAR}, if set)",
    )
    translate.add_argument("--library", default=None, help="Only translate declarations from this library")
    translate.add_argument(
        "--format",
        default=get_default_writer(),
        help="Output writer (see list-writers)",
    )
    translate.add_argument("--backend", default=None, help="Parser backend (default: libclang)")
    translate.add_argument(
        "--clang-arg",
        action="append",
        default=[],
        help="Extra argument passed to clang (repeatable)",
    )
    translate.add_argument("-o", "--output", default=None, help="Directory to write one file per header into")
    translate.set_defaults(handler=_translate)

    list_writers = subparsers.add_parser("list-writers", help="List available output writers")
    list_writers.set_defaults(handler=_list_writers)

    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
