import sys
from collections.abc import Callable
from pathlib import Path

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Return a factory writing ``{relative_path: source}`` files into a project."""

    def _make(files: dict[str, str]) -> Path:
        project_root = tmp_path / "project"
        project_root.mkdir(parents=True, exist_ok=True)
        for relative_path, content in files.items():
            path = project_root / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return project_root

    return _make
