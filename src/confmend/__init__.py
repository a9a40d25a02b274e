"""
confmend - package root

File: src/confmend/__init__.py

Purpose
- Package root for the configuration reconciliation engine.

Import boundary rules
- No side effects at import time (no config loading, no logging init).
- Heavy submodules are imported by callers, not re-exported here.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
