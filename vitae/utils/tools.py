"""Lookup of external command-line tools (compilers, PHP, Composer)."""

import shutil
from pathlib import Path
from typing import Optional

TOOL_HINTS = {
    "sass": "npm install --global sass",
    "tsc": "npm install --global typescript",
    "terser": "npm install --global terser",
    "php": "install PHP 7.4+ with the CLI SAPI",
    "composer": "see https://getcomposer.org/download/",
}


class ToolNotFoundError(RuntimeError):
    """
    Raised when an external build tool is not on PATH.

    Attributes:
        tool: Command name that could not be resolved
        hint: Installation hint shown to the developer
    """

    def __init__(self, tool: str, hint: Optional[str] = None):
        self.tool = tool
        self.hint = hint
        message = f"Build tool not found: {tool}"
        if hint:
            message += f" ({hint})"
        super().__init__(message)


def resolve_tool(command: str) -> str:
    """
    Resolve an external tool on PATH.

    Args:
        command: Tool name or path from the build configuration

    Returns:
        Absolute path to the executable

    Raises:
        ToolNotFoundError: If the tool is not installed
    """
    resolved = shutil.which(command)
    if resolved is None:
        raise ToolNotFoundError(command, TOOL_HINTS.get(Path(command).name))
    return resolved
