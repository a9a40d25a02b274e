"""JSON-with-comments parsing: strip ``//`` and ``/* */`` comments and trailing commas."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from confmend.config.errors import ParseError


def strip_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments that appear outside string literals.

    Comments are replaced by whitespace of the same shape so JSON error positions
    still point at the original line and column.
    """

    out: list[str] = []
    in_string = False
    escaped = False
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            index += 1
            continue

        if char == '"':
            in_string = True
            out.append(char)
            index += 1
            continue

        if char == "/" and index + 1 < length:
            nxt = text[index + 1]
            if nxt == "/":
                end = index + 2
                while end < length and text[end] not in "\r\n":
                    end += 1
                out.append(" " * (end - index))
                index = end
                continue
            if nxt == "*":
                end = text.find("*/", index + 2)
                if end == -1:
                    raise ParseError("unterminated block comment")
                end += 2
                out.append("".join(ch if ch in "\r\n" else " " for ch in text[index:end]))
                index = end
                continue

        out.append(char)
        index += 1
    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    """Drop commas that directly precede ``}`` or ``]`` (ignoring whitespace), outside strings."""

    out: list[str] = []
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
            out.append(char)
            continue
        if char == ",":
            ahead = index + 1
            while ahead < len(text) and text[ahead] in " \t\r\n":
                ahead += 1
            if ahead < len(text) and text[ahead] in "}]":
                out.append(" ")
                continue
        out.append(char)
    return "".join(out)


def _reject_constant(name: str) -> Any:
    raise ParseError(f"non-finite number literal {name} is not valid JSON")


def parse_jsonc(text: str, *, path: Path | None = None) -> Any:
    """Parse JSONC text into Python values; raise ``ParseError`` on malformed input.

    A leading byte-order mark is ignored. ``NaN`` and ``Infinity`` are rejected
    because they cannot be written back as JSON.
    """

    try:
        cleaned = strip_trailing_commas(strip_comments(text.removeprefix("\ufeff")))
        return json.loads(cleaned, parse_constant=_reject_constant)
    except ParseError as exc:
        raise ParseError(exc.reason, path=path) from exc
    except json.JSONDecodeError as exc:
        raise ParseError(f"{exc.msg} (line {exc.lineno}, column {exc.colno})", path=path) from exc


def load_jsonc_file(path: Path) -> Any:
    """Read and parse a JSONC file; empty content parses to ``None``."""

    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError(f"not valid UTF-8: {exc.reason}", path=path) from exc
    if not text.strip():
        return None
    return parse_jsonc(text, path=path)


__all__ = ["load_jsonc_file", "parse_jsonc", "strip_comments", "strip_trailing_commas"]
