"""Module entrypoint for ``python -m shapekit``."""

from __future__ import annotations

from shapekit.cli import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
