# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Match project paths against .gitignore patterns."""

import logging
import os
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)


class IgnoreMatcher:
    """Decide which project files are left out of a provider scan."""

    def __init__(self, spec: pathspec.GitIgnoreSpec) -> None:
        self._spec = spec

    @classmethod
    def empty(cls) -> "IgnoreMatcher":
        """Build a matcher that ignores nothing."""
        return cls(spec=pathspec.GitIgnoreSpec.from_lines([]))

    @classmethod
    def from_project_root(cls, root_path: Path) -> "IgnoreMatcher":
        """Collect the root and nested .gitignore files under ``root_path``.

        Patterns from a nested file are re-scoped to the directory holding it.

        Raises:
            OSError: If a .gitignore file cannot be read.
            UnicodeDecodeError: If a .gitignore file is not valid UTF-8.
        """
        patterns: list[str] = []
        for ignore_path in sorted(root_path.rglob(".gitignore")):
            directory = ignore_path.parent.relative_to(root_path).as_posix()
            scope = "" if directory == "." else directory
            text = ignore_path.read_text(encoding="utf-8")
            patterns.extend(_scope_pattern(line, scope) for line in text.splitlines())
        logger.debug(
            f"Loaded .gitignore patterns (root_path={root_path} patterns={len(patterns)})"
        )
        return cls(spec=pathspec.GitIgnoreSpec.from_lines(patterns))

    def excludes(self, relative_path: str) -> bool:
        """Check whether a file, or any directory above it, is ignored.

        Args:
            relative_path: Project-relative path of a file.

        Returns:
            True when the file must be skipped.
        """
        parts = [part for part in relative_path.replace(os.sep, "/").split("/") if part]
        if not parts:
            return False
        for depth in range(1, len(parts)):
            if self._spec.match_file("/".join(parts[:depth]) + "/"):
                return True
        return self._spec.match_file("/".join(parts))


def _scope_pattern(line: str, scope: str) -> str:
    """Re-anchor one pattern of a nested .gitignore to the project root."""
    stripped = line.strip()
    if not scope or not stripped or stripped.startswith("#"):
        return line
    if line.startswith(("\\!", "\\#")):
        return line
    negation = "!" if line.startswith("!") else ""
    pattern = line[len(negation) :]
    anchor = "/" if pattern.startswith("/") else ""
    pattern = pattern[len(anchor) :]
    scoped = f"{scope}/{pattern}" if pattern else scope
    return f"{negation}{anchor}{scoped}"
