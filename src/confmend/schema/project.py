"""
confmend - project configuration schema and defaults

File: src/confmend/schema/project.py

Purpose
- Define the authoritative shape of ``confmend.jsonc``, the always-valid default
  document, the migration allow-list, and per-field repair normalizers.

Functional requirements
- ``DEFAULT_CONFIG`` is the deep-frozen default held by ``PROJECT_CONTEXT``; it validates
  against ``PROJECT_SCHEMA``. ``default_config()`` hands out mutable copies.
- ``MIGRATABLE_KEYS`` names the top-level fields an external legacy document may contribute.
- ``PROJECT_CONTEXT`` is built once at import and passed explicitly to engine calls.

Non-functional requirements
- Keep declarations deterministic: property order here is the on-disk key order.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Final

from confmend.constants import CONFIG_SCHEMA_URL, DEFAULT_DOMAIN, UNKNOWN_VALUE
from confmend.schema.context import ConfigContext
from confmend.schema.nodes import (
    ObjectNode,
    array_of,
    boolean,
    enum,
    integer,
    mapping,
    obj,
    string,
)

PROJECT_FRAMEWORKS: Final[tuple[str, ...]] = (
    UNKNOWN_VALUE,
    "npm-jsr",
    "astro",
    "nextjs",
    "vite",
    "svelte",
    "vue",
    "wxt",
    "vscode",
)
PACKAGE_MANAGERS: Final[tuple[str, ...]] = ("npm", "pnpm", "yarn", "bun")
PROMPT_BEHAVIORS: Final[tuple[str, ...]] = ("prompt", "autoYes", "autoNo")

_REPO_HOST_URL = re.compile(r"^https?://(www\.)?(github|gitlab|bitbucket|sourcehut)\.com/", re.I)
_REPO_HOST_BARE = re.compile(r"^(github|gitlab|bitbucket|sourcehut)\.com/", re.I)


def clean_repository_url(url: str) -> str:
    """Reduce a repository URL to ``owner/name`` form.

    Strips a ``git+`` prefix, a known forge host, and a trailing ``.git``, repeating
    until nothing changes so the result is stable under a second pass.
    """

    previous = None
    cleaned = url
    while cleaned != previous:
        previous = cleaned
        cleaned = cleaned.strip()
        cleaned = re.sub(r"^git\+", "", cleaned)
        cleaned = _REPO_HOST_URL.sub("", cleaned)
        cleaned = _REPO_HOST_BARE.sub("", cleaned)
        cleaned = re.sub(r"\.git$", "", cleaned, flags=re.I)
    return cleaned


def _clean_repository_list(value: Any) -> Any:
    if not isinstance(value, list):
        return value
    return [clean_repository_url(item) if isinstance(item, str) else item for item in value]


_FEATURES = obj(
    {
        "i18n": boolean(),
        "analytics": boolean(),
        "themeMode": enum("light", "dark", "dark-light"),
        "authentication": boolean(),
        "api": boolean(),
        "database": boolean(),
        "testing": boolean(),
        "docker": boolean(),
        "ci": boolean(),
        "commands": array_of(string()),
        "webview": array_of(string()),
        "language": array_of(string()),
        "themes": array_of(string()),
    }
)

_PREFERRED_LIBRARIES = obj(
    {
        "stateManagement": string(),
        "formManagement": string(),
        "styling": string(),
        "uiComponents": string(),
        "testing": string(),
        "authentication": string(),
        "database": string(),
        "api": string(),
    },
    optional=(
        "stateManagement",
        "formManagement",
        "styling",
        "uiComponents",
        "testing",
        "authentication",
        "database",
        "api",
    ),
)

_MONOREPO = obj(
    {
        "type": enum("none", "turborepo", "nx", "pnpm", "bun"),
        "packages": array_of(string()),
        "sharedPackages": array_of(string()),
    }
)

_MODERNIZE = obj(
    {
        "replaceFs": boolean(),
        "replacePath": boolean(),
        "replaceHttp": boolean(),
        "replaceProcess": boolean(),
        "replaceConsole": boolean(),
        "replaceEvents": boolean(),
    }
)

_CODE_STYLE = obj(
    {
        "dontRemoveComments": boolean(),
        "shouldAddComments": boolean(),
        "typeOrInterface": enum("type", "interface", "mixed"),
        "importOrRequire": enum("import", "require", "mixed"),
        "quoteMark": enum("single", "double"),
        "semicolons": boolean(),
        "lineWidth": integer(minimum=1),
        "indentStyle": enum("space", "tab"),
        "indentSize": integer(minimum=1),
        "importSymbol": string(),
        "trailingComma": enum("none", "es5", "all"),
        "bracketSpacing": boolean(),
        "arrowParens": enum("always", "avoid"),
        "tabWidth": integer(minimum=1),
        "jsToTs": boolean(),
        "cjsToEsm": boolean(),
        "modernize": _MODERNIZE,
    }
)

PROJECT_SCHEMA: Final[ObjectNode] = obj(
    {
        "$schema": string(),
        "projectName": string(),
        "projectAuthor": string(),
        "projectDescription": string(),
        "version": string(),
        "projectLicense": string(),
        "projectState": enum("creating", "created"),
        "projectRepository": string(),
        "projectDomain": string(),
        "projectCategory": enum(UNKNOWN_VALUE, "website", "vscode", "browser", "cli", "library"),
        "projectSubcategory": enum(UNKNOWN_VALUE, "e-commerce", "tool"),
        "projectTemplate": string(),
        "projectArchitecture": enum(UNKNOWN_VALUE, "fullstack", "separated"),
        "repoPrivacy": enum(UNKNOWN_VALUE, "public", "private"),
        "projectGitService": enum("github", "gitlab", "bitbucket", "none"),
        "projectDeployService": enum("vercel", "netlify", "railway", "deno", "none"),
        "repoBranch": string(),
        "projectFramework": enum(*PROJECT_FRAMEWORKS),
        "projectPackageManager": enum(*PACKAGE_MANAGERS),
        "projectRuntime": enum("node", "deno", "bun"),
        "preferredLibraries": _PREFERRED_LIBRARIES,
        "monorepo": _MONOREPO,
        "ignoreDependencies": array_of(string()),
        "customRules": mapping(),
        "features": _FEATURES,
        "codeStyle": _CODE_STYLE,
        "multipleRepoCloneMode": boolean(),
        "customUserFocusedRepos": array_of(string()),
        "customDevsFocusedRepos": array_of(string()),
        "hideRepoSuggestions": boolean(),
        "customReposOnNewProject": boolean(),
        "envComposerOpenBrowser": boolean(),
        "skipPromptsUseAutoBehavior": boolean(),
        "deployBehavior": enum(*PROMPT_BEHAVIORS),
        "depsBehavior": enum(*PROMPT_BEHAVIORS),
        "gitBehavior": enum(*PROMPT_BEHAVIORS),
        "i18nBehavior": enum(*PROMPT_BEHAVIORS),
        "scriptsBehavior": enum(*PROMPT_BEHAVIORS),
        "existingRepoBehavior": enum("prompt", "autoYes", "autoYesSkipCommit", "autoNo"),
    }
)

_DEFAULT_DOCUMENT: dict[str, Any] = {
    "$schema": CONFIG_SCHEMA_URL,
    "projectName": UNKNOWN_VALUE,
    "projectAuthor": UNKNOWN_VALUE,
    "projectDescription": UNKNOWN_VALUE,
    "version": "0.1.0",
    "projectLicense": "MIT",
    "projectState": "creating",
    "projectRepository": DEFAULT_DOMAIN,
    "projectDomain": DEFAULT_DOMAIN,
    "projectCategory": UNKNOWN_VALUE,
    "projectSubcategory": UNKNOWN_VALUE,
    "projectTemplate": UNKNOWN_VALUE,
    "projectArchitecture": UNKNOWN_VALUE,
    "repoPrivacy": UNKNOWN_VALUE,
    "projectGitService": "github",
    "projectDeployService": "vercel",
    "repoBranch": "main",
    "projectFramework": "nextjs",
    "projectPackageManager": "npm",
    "projectRuntime": "node",
    "preferredLibraries": {
        "stateManagement": "zustand",
        "formManagement": "react-hook-form",
        "styling": "tailwind",
        "uiComponents": "shadcn-ui",
        "testing": "bun",
        "authentication": "clerk",
        "database": "drizzle",
        "api": "trpc",
    },
    "monorepo": {
        "type": "none",
        "packages": [],
        "sharedPackages": [],
    },
    "ignoreDependencies": [],
    "customRules": {},
    "features": {
        "i18n": False,
        "analytics": False,
        "themeMode": "dark-light",
        "authentication": True,
        "api": True,
        "database": True,
        "testing": False,
        "docker": False,
        "ci": False,
        "commands": [],
        "webview": [],
        "language": [],
        "themes": [],
    },
    "codeStyle": {
        "dontRemoveComments": True,
        "shouldAddComments": True,
        "typeOrInterface": "type",
        "importOrRequire": "import",
        "quoteMark": "double",
        "semicolons": True,
        "lineWidth": 80,
        "indentStyle": "space",
        "indentSize": 2,
        "importSymbol": "~",
        "trailingComma": "all",
        "bracketSpacing": True,
        "arrowParens": "always",
        "tabWidth": 2,
        "jsToTs": False,
        "cjsToEsm": False,
        "modernize": {
            "replaceFs": False,
            "replacePath": False,
            "replaceHttp": False,
            "replaceProcess": False,
            "replaceConsole": False,
            "replaceEvents": False,
        },
    },
    "multipleRepoCloneMode": False,
    "customUserFocusedRepos": [],
    "customDevsFocusedRepos": [],
    "hideRepoSuggestions": False,
    "customReposOnNewProject": False,
    "envComposerOpenBrowser": True,
    "skipPromptsUseAutoBehavior": False,
    "deployBehavior": "prompt",
    "depsBehavior": "prompt",
    "gitBehavior": "prompt",
    "i18nBehavior": "prompt",
    "scriptsBehavior": "prompt",
    "existingRepoBehavior": "prompt",
}

# Identity fields (name, author, domain, state) are never imported from a legacy document.
MIGRATABLE_KEYS: Final[tuple[str, ...]] = (
    "projectDescription",
    "version",
    "projectLicense",
    "projectRepository",
    "projectCategory",
    "projectSubcategory",
    "projectFramework",
    "projectTemplate",
    "projectArchitecture",
    "deployBehavior",
    "depsBehavior",
    "gitBehavior",
    "i18nBehavior",
    "scriptsBehavior",
    "existingRepoBehavior",
    "repoPrivacy",
    "features",
    "preferredLibraries",
    "codeStyle",
    "monorepo",
    "ignoreDependencies",
    "customRules",
    "skipPromptsUseAutoBehavior",
)

REPAIR_NORMALIZERS: Final[dict[str, Any]] = {
    "customUserFocusedRepos": _clean_repository_list,
    "customDevsFocusedRepos": _clean_repository_list,
}

PROJECT_CONTEXT: Final[ConfigContext] = ConfigContext(
    schema=PROJECT_SCHEMA,
    default=_DEFAULT_DOCUMENT,
    migratable_keys=MIGRATABLE_KEYS,
    normalizers=REPAIR_NORMALIZERS,
)

DEFAULT_CONFIG: Final[Mapping[str, Any]] = PROJECT_CONTEXT.default


def default_config() -> dict[str, Any]:
    """Return a deep copy of the built-in default document."""

    return PROJECT_CONTEXT.default_document()


__all__ = [
    "DEFAULT_CONFIG",
    "MIGRATABLE_KEYS",
    "PACKAGE_MANAGERS",
    "PROJECT_CONTEXT",
    "PROJECT_FRAMEWORKS",
    "PROJECT_SCHEMA",
    "PROMPT_BEHAVIORS",
    "REPAIR_NORMALIZERS",
    "clean_repository_url",
    "default_config",
]
