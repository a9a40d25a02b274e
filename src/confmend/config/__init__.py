"""
confmend config package public API.

File: src/confmend/config/__init__.py

Purpose
- Export the reconciliation engine: parsing, merging, repair, persistence,
  layered reads, aggregation, migration, detection, and bootstrap.
"""

from confmend.config.aggregate import discover_documents, read_all
from confmend.config.annotate import SECTION_COMMENTS, annotate
from confmend.config.bootstrap import LoadedConfig, ensure_config
from confmend.config.detect import (
    detect_code_style,
    detect_features,
    detect_framework,
    detect_package_manager,
    detected_overrides,
    read_package_metadata,
)
from confmend.config.errors import (
    ConfigError,
    IOFailure,
    ParseError,
    SchemaViolation,
    UnrecoverableConfig,
)
from confmend.config.jsonc import load_jsonc_file, parse_jsonc
from confmend.config.merge import deep_merge
from confmend.config.migrate import migrate, migrate_document, select_migratable
from confmend.config.reader import read_config, require_config
from confmend.config.repair import RepairResult, repair
from confmend.config.store import serialize, update_config, write_config

__all__ = [
    "SECTION_COMMENTS",
    "ConfigError",
    "IOFailure",
    "LoadedConfig",
    "ParseError",
    "RepairResult",
    "SchemaViolation",
    "UnrecoverableConfig",
    "annotate",
    "deep_merge",
    "detect_code_style",
    "detect_features",
    "detect_framework",
    "detect_package_manager",
    "detected_overrides",
    "discover_documents",
    "ensure_config",
    "load_jsonc_file",
    "migrate",
    "migrate_document",
    "parse_jsonc",
    "read_all",
    "read_config",
    "read_package_metadata",
    "repair",
    "require_config",
    "select_migratable",
    "serialize",
    "update_config",
    "write_config",
]
