"""Module entrypoint for ``python -m confmend``."""

from __future__ import annotations

from confmend.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
