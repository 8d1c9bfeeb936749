# File: clientgen/__main__.py
"""
clientgen: Module entry point.

Allows running the generator directly via::

    python -m clientgen --schema schema.json --output ./generated

This module simply delegates to the CLI entry point defined in ``clientgen.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from clientgen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
