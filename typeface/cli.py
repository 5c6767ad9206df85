"""CLI entrypoint for typeface."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import TypefaceError
from .generator import Generator
from .logging import configure_logging
from .models import TargetSpec


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typeface",
        description="Generate a Go interface from the exported methods of a type.",
    )
    parser.add_argument("-s", dest="source_type", default="", help="source struct type name")
    parser.add_argument("-i", dest="interface", default="", help="name of the destination interface")
    parser.add_argument(
        "-f",
        dest="input",
        default="",
        help="input file or import path of the package that contains struct type declaration",
    )
    parser.add_argument(
        "-o", dest="output", default="", help="destination file name to place the generated interface"
    )
    parser.add_argument("-p", dest="package", default="", help="destination package name")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .typeface.yml file or the directory holding it.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log records to this file.",
    )
    return parser


def _target_from_args(args: argparse.Namespace) -> TargetSpec | None:
    values = (args.source_type, args.interface, args.input, args.output, args.package)
    if not all(values) or not args.output.endswith(".go"):
        return None
    return TargetSpec(
        source_location=args.input,
        type_name=args.source_type,
        interface_name=args.interface,
        destination_package=args.package,
        output_path=Path(args.output),
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for typeface."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    target = _target_from_args(args)
    if target is None:
        parser.print_usage(sys.stderr)
        parser.exit(1, "all of -s, -i, -f, -o and -p are required and -o must end with .go\n")

    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        config_path = Path(args.config) if args.config else None
        if config_path is not None and not config_path.exists():
            raise ConfigError(f"configuration file {config_path} does not exist")
        config = load_config(config_path)
        Generator(config.loader).run(target)
    except (TypefaceError, ConfigError) as exc:
        parser.exit(1, f"{exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
