"""Allow ``python -m gslock``."""

from gslock.cli.main import cli

if __name__ == "__main__":
    cli()
