"""Stable constants shared by the reconciliation engine and its collaborators."""

from __future__ import annotations

from typing import Final

# Primary document and auxiliary document naming.
CONFIG_FILE_NAME: Final[str] = "confmend.jsonc"
MULTI_CONFIG_DIRNAME: Final[str] = "confmend"
MIGRATION_SOURCE_NAME: Final[str] = "confmend-tmp.jsonc"

# Sibling suffixes managed by the durable write path.
BACKUP_SUFFIX: Final[str] = ".backup"
TEMP_SUFFIX: Final[str] = ".tmp"

# Schema location written into every persisted document.
CONFIG_SCHEMA_URL: Final[str] = "https://confmend.dev/schema.json"

# Placeholders used by the default document.
UNKNOWN_VALUE: Final[str] = "unknown"
DEFAULT_DOMAIN: Final[str] = "https://example.com"

# Repair bookkeeping marker for a node replaced wholesale.
ENTIRE_OBJECT: Final[str] = "<entire_object>"

ENV_PREFIX: Final[str] = "CONFMEND_"

__all__ = [
    "BACKUP_SUFFIX",
    "CONFIG_FILE_NAME",
    "CONFIG_SCHEMA_URL",
    "DEFAULT_DOMAIN",
    "ENTIRE_OBJECT",
    "ENV_PREFIX",
    "MIGRATION_SOURCE_NAME",
    "MULTI_CONFIG_DIRNAME",
    "TEMP_SUFFIX",
    "UNKNOWN_VALUE",
]
