"""Inject fixed section comments into serialized ``confmend.jsonc`` text."""

from __future__ import annotations

import re
from typing import Final

from confmend.constants import CONFIG_FILE_NAME

SECTION_COMMENTS: Final[dict[str, tuple[str, ...]]] = {
    "$schema": (
        f"{CONFIG_FILE_NAME.upper()} (project configuration)",
        "This jsonc file is generated and repaired by confmend",
        "Restart your tooling to apply config changes",
    ),
    "projectName": ("General project information",),
    "projectFramework": ("Primary tech stack/framework",),
    "ignoreDependencies": ("List dependencies to exclude from checks",),
    "customRules": ("Custom rules for project tooling",),
    "features": ("Project features",),
    "codeStyle": ("Code style preferences",),
    "multipleRepoCloneMode": ("Settings for cloning an existing repo",),
    "envComposerOpenBrowser": (
        "Set to false to disable opening the browser during env composing",
    ),
    "skipPromptsUseAutoBehavior": (
        "Enable auto-answering for prompts to skip manual confirmations.",
        "Make sure you have unknown values configured above.",
    ),
    "deployBehavior": (
        "Prompt behavior for deployment",
        "Options: prompt | autoYes | autoNo",
    ),
    "existingRepoBehavior": (
        "Behavior for existing repos during project creation",
        "Options: prompt | autoYes | autoYesSkipCommit | autoNo",
    ),
}

_BLANK_RUNS = re.compile(r"\n{3,}")
_OPEN_BLANK = re.compile(r"\{\n\n")
_CLOSE_BLANK = re.compile(r"\n\n(\s*)\}")


def annotate(text: str) -> str:
    """Insert comment blocks before known top-level keys and normalize blank lines."""

    for key, lines in SECTION_COMMENTS.items():
        block = "\n".join(f"  // {line}" for line in lines)
        pattern = re.compile(rf'\n  "{re.escape(key)}":')
        text = pattern.sub(lambda _match, block=block, key=key: f'\n\n{block}\n  "{key}":', text)

    text = _BLANK_RUNS.sub("\n\n", text)
    text = _OPEN_BLANK.sub("{\n", text)
    text = _CLOSE_BLANK.sub(r"\n\1}", text)
    return text.strip() + "\n"


__all__ = ["SECTION_COMMENTS", "annotate"]
