"""
confmend - project environment detection

File: src/confmend/config/detect.py

Purpose
- Derive a partial configuration document from files already present in a
  project directory (``package.json``, lockfiles, framework config files,
  formatter settings).

Functional requirements
- Detection never fails: unreadable or malformed inputs are logged and ignored.
- Only string-typed metadata is carried over; anything else is left to defaults.
- The result is a plain partial document suitable for
  ``deep_merge(default, detected_overrides(cwd))``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

import structlog

from confmend.config.errors import ParseError
from confmend.config.jsonc import load_jsonc_file
from confmend.schema.project import PACKAGE_MANAGERS, clean_repository_url

_logger = structlog.get_logger(__name__)

# Checked in order; the first framework with a marker file wins.
FRAMEWORK_MARKERS: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("npm-jsr", ("jsr.json", "jsr.jsonc", "build.publish.ts")),
    ("astro", ("astro.config.js", "astro.config.ts", "astro.config.mjs")),
    ("nextjs", ("next.config.js", "next.config.ts", "next.config.mjs")),
    ("vite", ("vite.config.js", "vite.config.ts", "react.config.js")),
    ("svelte", ("svelte.config.js", "svelte.config.ts")),
    ("vue", ("vue.config.js",)),
    ("wxt", ("wxt.config.js", "wxt.config.ts")),
    ("vscode", ("vscode.config.js", "vscode.config.ts")),
)

LOCKFILE_MARKERS: Final[tuple[tuple[str, str], ...]] = (
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)

FORMATTER_CONFIG_FILES: Final[tuple[str, ...]] = ("biome.json", "biome.jsonc")

_AUTH_PACKAGES: Final[frozenset[str]] = frozenset({"next-auth", "@clerk/nextjs", "better-auth"})
_DATABASE_PACKAGES: Final[frozenset[str]] = frozenset({"@prisma/client", "drizzle-orm"})
_ANALYTICS_PACKAGES: Final[frozenset[str]] = frozenset(
    {"@vercel/analytics", "@segment/analytics-next"}
)
_TESTING_PACKAGES: Final[frozenset[str]] = frozenset(
    {"jest", "vitest", "@testing-library/react"}
)
_I18N_PACKAGES: Final[frozenset[str]] = frozenset({"next-intl", "i18next", "react-i18next"})


def read_package_metadata(cwd: Path) -> dict[str, Any] | None:
    """Return the parsed ``package.json`` object, or ``None`` when absent or unreadable."""

    package_path = Path(cwd) / "package.json"
    if not package_path.is_file():
        return None
    try:
        parsed = json.loads(package_path.read_text(encoding="utf-8-sig"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        _logger.warning("package_metadata_unreadable", path=str(package_path), error=str(exc))
        return None
    if not isinstance(parsed, dict):
        _logger.warning("package_metadata_unreadable", path=str(package_path), error="not an object")
        return None
    return parsed


def detect_framework(cwd: Path) -> str | None:
    root = Path(cwd)
    for framework, markers in FRAMEWORK_MARKERS:
        if any((root / marker).exists() for marker in markers):
            return framework
    return None


def detect_package_manager(cwd: Path, package: Mapping[str, Any] | None = None) -> str:
    """Pick the package manager from lockfiles, then ``packageManager``; default ``npm``."""

    root = Path(cwd)
    for lockfile, manager in LOCKFILE_MARKERS:
        if (root / lockfile).exists():
            return manager

    declared = package.get("packageManager") if package else None
    if isinstance(declared, str):
        name = declared.split("@", 1)[0].strip()
        if name in PACKAGE_MANAGERS:
            return name
    return "npm"


def detect_features(cwd: Path, package: Mapping[str, Any] | None) -> dict[str, Any]:
    """Infer feature flags from declared dependencies and marker files."""

    root = Path(cwd)
    dependencies = _dependency_names(package)
    return {
        "i18n": bool(dependencies & _I18N_PACKAGES),
        "analytics": bool(dependencies & _ANALYTICS_PACKAGES),
        "authentication": bool(dependencies & _AUTH_PACKAGES),
        "database": bool(dependencies & _DATABASE_PACKAGES),
        "testing": bool(dependencies & _TESTING_PACKAGES),
        "docker": (root / "Dockerfile").exists(),
        "ci": (root / ".github" / "workflows").is_dir() or (root / ".gitlab-ci.yml").exists(),
    }


def detect_code_style(cwd: Path) -> dict[str, Any]:
    """Read line width and indent width from a Biome formatter config, if present."""

    root = Path(cwd)
    for name in FORMATTER_CONFIG_FILES:
        config_path = root / name
        if not config_path.is_file():
            continue
        try:
            parsed = load_jsonc_file(config_path)
        except (ParseError, OSError) as exc:
            _logger.warning("formatter_config_unreadable", path=str(config_path), error=str(exc))
            return {}
        formatter = parsed.get("formatter") if isinstance(parsed, dict) else None
        if not isinstance(formatter, dict):
            return {}
        style: dict[str, Any] = {}
        line_width = formatter.get("lineWidth")
        if _is_positive_int(line_width):
            style["lineWidth"] = line_width
        indent_width = formatter.get("indentWidth")
        if _is_positive_int(indent_width):
            style["indentSize"] = indent_width
            style["tabWidth"] = indent_width
        return style
    return {}


def detected_overrides(cwd: Path) -> dict[str, Any]:
    """Combine every detector into one partial document."""

    root = Path(cwd)
    package = read_package_metadata(root)
    overrides: dict[str, Any] = {
        "projectName": _string_field(package, "name") or root.resolve().name or None,
        "projectAuthor": _author(package),
        "projectDescription": _string_field(package, "description"),
        "version": _string_field(package, "version"),
        "projectLicense": _string_field(package, "license"),
        "projectRepository": _repository(package),
        "projectFramework": detect_framework(root),
        "projectPackageManager": detect_package_manager(root, package),
        "features": detect_features(root, package),
    }
    code_style = detect_code_style(root)
    if code_style:
        overrides["codeStyle"] = code_style

    detected = {key: value for key, value in overrides.items() if value is not None}
    _logger.debug("project_detected", cwd=str(root), fields=sorted(detected))
    return detected


def _dependency_names(package: Mapping[str, Any] | None) -> set[str]:
    names: set[str] = set()
    if not package:
        return names
    for section in ("dependencies", "devDependencies"):
        block = package.get(section)
        if isinstance(block, dict):
            names.update(key for key in block if isinstance(key, str))
    return names


def _string_field(package: Mapping[str, Any] | None, key: str) -> str | None:
    if not package:
        return None
    value = package.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _author(package: Mapping[str, Any] | None) -> str | None:
    if not package:
        return None
    author = package.get("author")
    if isinstance(author, dict):
        author = author.get("name")
    if isinstance(author, str) and author.strip():
        return author.strip()
    return None


def _repository(package: Mapping[str, Any] | None) -> str | None:
    if not package:
        return None
    repository = package.get("repository")
    if isinstance(repository, dict):
        repository = repository.get("url")
    if isinstance(repository, str) and repository.strip():
        return clean_repository_url(repository)
    return None


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


__all__ = [
    "FRAMEWORK_MARKERS",
    "LOCKFILE_MARKERS",
    "clean_repository_url",
    "detect_code_style",
    "detect_features",
    "detect_framework",
    "detect_package_manager",
    "detected_overrides",
    "read_package_metadata",
]
