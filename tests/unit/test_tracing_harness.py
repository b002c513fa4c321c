import io
import json
import re
from pathlib import Path

from cli.tracing_harness import run

VALID_MODULE = """
from tracers import tracer


@tracer
class RequestProbes:
    def started(path: str): ...

    def finished(path: str, status: int): ...
"""

INVALID_MODULE = """
from tracers import tracer


@tracer
class BrokenProbes:
    def started(self, path: str): ...
"""


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def test_tps_cli_001_scan_requires_path() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["scan"], stdout=stdout, stderr=stderr)

    assert exit_code == 2


def test_tps_cli_002_scan_fails_for_missing_path(tmp_path: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["scan", "--path", str(tmp_path / "missing")], stdout=stdout, stderr=stderr
    )

    assert exit_code == 2
    assert "Path does not exist" in stderr.getvalue()


def test_tps_cli_003_scan_supports_json_output(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    _write_file(project_root / "probes.py", VALID_MODULE)
    _write_file(project_root / "broken.py", INVALID_MODULE)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["scan", "--path", str(project_root), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert payload["errors"] == []
    assert len(payload["providers"]) == 1
    provider = payload["providers"][0]
    assert provider["file_path"] == "probes.py"
    assert provider["unique_name"].startswith("request_probes_")
    assert [probe["name"] for probe in provider["spec"]["probes"]] == [
        "started",
        "finished",
    ]


def test_tps_cli_004_scan_supports_table_output(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    _write_file(project_root / "probes.py", VALID_MODULE)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["scan", "--path", str(project_root)], stdout=stdout, stderr=stderr
    )

    assert exit_code == 0
    compact_text = re.sub(r"[^a-zA-Z0-9_]+", "", _strip_ansi(stdout.getvalue()))
    assert "unique_name" in compact_text
    assert "started" in compact_text
    assert "finished" in compact_text


def test_tps_cli_005_scan_json_writes_to_output_file(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    output_path = tmp_path / "out" / "providers.json"
    _write_file(project_root / "probes.py", VALID_MODULE)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "scan",
            "--path",
            str(project_root),
            "--format",
            "json",
            "--output",
            str(output_path),
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert stdout.getvalue() == ""
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert len(payload["providers"]) == 1


def test_tps_cli_006_scan_reports_name_collisions(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    _write_file(project_root / "a.py", VALID_MODULE)
    _write_file(
        project_root / "b.py",
        "@tracer\nclass RequestProbes:\n    def other(code: int): ...\n",
    )
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["scan", "--path", str(project_root), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert "name_collision: request_probes" in stderr.getvalue()


def test_tps_cli_007_check_reports_invalid_candidates(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    _write_file(project_root / "probes.py", VALID_MODULE)
    _write_file(project_root / "broken.py", INVALID_MODULE)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["check", "--path", str(project_root)], stdout=stdout, stderr=stderr)

    assert exit_code == 1
    output = _strip_ansi(stdout.getvalue())
    assert "broken.py:7: BrokenProbes:" in output
    assert "self or cls" in output


def test_tps_cli_008_check_passes_for_valid_project(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    _write_file(project_root / "probes.py", VALID_MODULE)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["check", "--path", str(project_root)], stdout=stdout, stderr=stderr)

    assert exit_code == 0
    assert "All provider candidates are valid." in _strip_ansi(stdout.getvalue())


def test_tps_cli_009_scan_cache_and_show(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    cache_path = tmp_path / "cache.sqlite"
    _write_file(project_root / "probes.py", VALID_MODULE)
    scan_stdout = io.StringIO()

    scan_exit = run(
        [
            "scan",
            "--path",
            str(project_root),
            "--format",
            "json",
            "--cache",
            str(cache_path),
        ],
        stdout=scan_stdout,
        stderr=io.StringIO(),
    )
    unique_name = json.loads(_strip_ansi(scan_stdout.getvalue()))["providers"][0][
        "unique_name"
    ]

    list_stdout = io.StringIO()
    list_exit = run(
        ["show", "--cache", str(cache_path)], stdout=list_stdout, stderr=io.StringIO()
    )
    show_stdout = io.StringIO()
    show_exit = run(
        ["show", "--cache", str(cache_path), "--name", unique_name],
        stdout=show_stdout,
        stderr=io.StringIO(),
    )

    assert scan_exit == 0
    assert list_exit == 0
    assert json.loads(_strip_ansi(list_stdout.getvalue())) == [unique_name]
    assert show_exit == 0
    assert json.loads(_strip_ansi(show_stdout.getvalue()))["name"] == "request_probes"


def test_tps_cli_010_show_unknown_name(tmp_path: Path) -> None:
    cache_path = tmp_path / "cache.sqlite"
    project_root = tmp_path / "project"
    _write_file(project_root / "probes.py", VALID_MODULE)
    run(
        ["scan", "--path", str(project_root), "--cache", str(cache_path)],
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )
    stderr = io.StringIO()

    exit_code = run(
        ["show", "--cache", str(cache_path), "--name", "missing_0000000000000000"],
        stdout=io.StringIO(),
        stderr=stderr,
    )

    assert exit_code == 1
    assert "Provider not found" in stderr.getvalue()


def test_tps_cli_011_show_requires_existing_cache(tmp_path: Path) -> None:
    stderr = io.StringIO()

    exit_code = run(
        ["show", "--cache", str(tmp_path / "missing.sqlite")],
        stdout=io.StringIO(),
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Cache does not exist" in stderr.getvalue()
