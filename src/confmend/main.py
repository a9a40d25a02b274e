"""Process entrypoint for ``confmend``: run the CLI and map failures to exit codes."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    """Exit statuses shared by every subcommand."""

    SUCCESS = 0
    VALIDATION_FAILED = 1
    CONFIG_ERROR = 2
    IO_ERROR = 3
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run ``confmend`` and always come back with an ``ExitCode`` value."""

    try:
        from confmend.ui.cli import run_cli

        status: object = run_cli(argv)
    except SystemExit as exc:
        status = exc.code
    except BaseException as exc:  # noqa: BLE001 - process boundary
        code = _route_exception(exc)
        _report(exc, code)
        return int(code)
    return _coerce_status(status)


def _coerce_status(status: object) -> int:
    if status is None:
        return int(ExitCode.SUCCESS)
    if isinstance(status, int) and not isinstance(status, bool):
        try:
            return int(ExitCode(status))
        except ValueError:
            return int(ExitCode.INTERNAL_ERROR)
    if isinstance(status, str) and status.strip():
        _write_stderr(status.strip())
    return int(ExitCode.INTERNAL_ERROR)


def _route_exception(exc: BaseException) -> ExitCode:
    """Pick the exit code from the first recognized error along the cause chain."""

    from confmend.config.errors import ConfigError, IOFailure
    from confmend.settings import SettingsError

    routes: tuple[tuple[tuple[type[BaseException], ...], ExitCode], ...] = (
        ((IOFailure, OSError), ExitCode.IO_ERROR),
        ((ConfigError, SettingsError), ExitCode.CONFIG_ERROR),
    )
    for link in _exception_chain(exc):
        for types, code in routes:
            if isinstance(link, types):
                return code
    return ExitCode.INTERNAL_ERROR


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    visited: set[int] = set()
    link: BaseException | None = exc
    while link is not None and id(link) not in visited:
        visited.add(id(link))
        yield link
        if link.__cause__ is not None:
            link = link.__cause__
        elif not link.__suppress_context__:
            link = link.__context__
        else:
            link = None


def _report(exc: BaseException, code: ExitCode) -> None:
    # Known failures get one line; anything else keeps its traceback.
    if code is ExitCode.INTERNAL_ERROR:
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
    else:
        _write_stderr(str(exc).strip() or type(exc).__name__)


def _write_stderr(message: str) -> None:
    sys.stderr.write(message.rstrip("\n") + "\n")


__all__ = ["ExitCode", "cli_entrypoint"]
