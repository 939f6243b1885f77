"""CLI module - Command-line interface components."""

from gslock.cli.main import cli, main
from gslock.cli.parser import build_parser, parse_arguments

__all__ = [
    "build_parser",
    "cli",
    "main",
    "parse_arguments",
]
