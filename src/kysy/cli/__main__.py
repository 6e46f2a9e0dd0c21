"""Entry point for running the CLI as a module."""

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from kysy import __version__
from kysy.configs.config import get_app_config
from kysy.infra.logging import setup_logging

from .kysy_cli import main

EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="kysy",
        description="Ask a local inference server a programming question",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-n",
        "--new",
        action="store_true",
        help="Start a new conversation instead of continuing the last one",
    )
    parser.add_argument(
        "-f",
        "--file",
        type=Path,
        default=None,
        help="File whose contents are appended to the question",
    )
    parser.add_argument(
        "-s",
        "--save",
        action="store_true",
        help="Save the answer's code to ./output.<extension>",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "question",
        nargs="*",
        help="Question text (words are joined with single spaces)",
    )

    return parser.parse_args(argv)


def cli_entry(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = parse_args(argv)

    try:
        config = get_app_config()
    except ValidationError as e:
        print(f"Invalid kysy configuration:\n{e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    setup_logging(config.logging, debug=args.debug)

    try:
        status = main(
            " ".join(args.question),
            file=args.file,
            new_conversation=args.new,
            save=args.save,
            config=config,
        )
    except KeyboardInterrupt:
        sys.exit(EXIT_INTERRUPTED)
    sys.exit(status)


if __name__ == "__main__":
    cli_entry()
