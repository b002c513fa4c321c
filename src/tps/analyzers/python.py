# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Python project analyzer discovering tracing providers."""

import ast
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from tps.analyzer import AnalyzerError, DiscoveredProvider, ProviderDiagnostic
from tps.errors import ValidationError
from tps.ignore import IgnoreMatcher
from tps.probe import ProbeExtractor, extract_probe
from tps.provider import ProviderSpecification
from tps.scanner import DEFAULT_MARKER_NAMES, ProviderScanner

logger = logging.getLogger(__name__)


class ProviderAnalyzer:
    """Analyze Python files and discover tracing providers."""

    def __init__(
        self,
        marker_names: Iterable[str] = DEFAULT_MARKER_NAMES,
        extractor: ProbeExtractor = extract_probe,
        ignore: IgnoreMatcher | None = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            marker_names: Decorator names marking provider classes.
            extractor: Method-to-probe extractor.
            ignore: Path matcher; defaults to the project's .gitignore files.
        """
        self._scanner = ProviderScanner(extractor=extractor, marker_names=marker_names)
        self._extractor = extractor
        self._ignore = ignore

    def analyze(
        self, root_path: Path
    ) -> tuple[list[DiscoveredProvider], list[AnalyzerError]]:
        """Discover valid providers beneath the provided root path.

        Invalid provider candidates are skipped; see :meth:`diagnose`.

        Args:
            root_path: Root directory to analyze.

        Returns:
            A tuple of discovered providers and recoverable analyzer errors.
        """
        providers: list[DiscoveredProvider] = []
        errors: list[AnalyzerError] = []
        for relative_path, tree in self._parsed_files(root_path, errors):
            for candidate in self._scanner.find_candidates(tree):
                try:
                    spec = ProviderSpecification.from_class(
                        candidate, extractor=self._extractor
                    )
                except ValidationError as exc:
                    logger.debug(
                        f"Skipping invalid provider candidate (file_path={relative_path} class={candidate.name} error={exc})"
                    )
                    continue
                providers.append(
                    DiscoveredProvider(
                        file_path=relative_path, lineno=candidate.lineno, spec=spec
                    )
                )
        logger.info(
            f"Provider analysis completed (path={root_path} providers={len(providers)} errors={len(errors)})"
        )
        return providers, errors

    def diagnose(
        self, root_path: Path
    ) -> tuple[list[ProviderDiagnostic], list[AnalyzerError]]:
        """Report every marked class that fails provider validation.

        Args:
            root_path: Root directory to analyze.

        Returns:
            A tuple of provider diagnostics and recoverable analyzer errors.
        """
        diagnostics: list[ProviderDiagnostic] = []
        errors: list[AnalyzerError] = []
        for relative_path, tree in self._parsed_files(root_path, errors):
            for candidate in self._scanner.find_candidates(tree):
                try:
                    ProviderSpecification.from_class(candidate, extractor=self._extractor)
                except ValidationError as exc:
                    diagnostics.append(
                        ProviderDiagnostic(
                            file_path=relative_path,
                            class_name=candidate.name,
                            lineno=exc.lineno or candidate.lineno,
                            message=str(exc),
                        )
                    )
        return diagnostics, errors

    def _parsed_files(
        self, root_path: Path, errors: list[AnalyzerError]
    ) -> Iterator[tuple[str, ast.Module]]:
        ignore = self._ignore
        if ignore is None:
            try:
                ignore = IgnoreMatcher.from_project_root(root_path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning(
                    f"Failed to read .gitignore files; analyzing all files (path={root_path} error={exc})"
                )
                errors.append(AnalyzerError(file_path=".gitignore", message=str(exc)))
                ignore = IgnoreMatcher.empty()

        for file_path in sorted(root_path.rglob("*.py")):
            relative_path = file_path.relative_to(root_path).as_posix()
            if ".git" in file_path.relative_to(root_path).parts:
                continue
            if ignore.excludes(relative_path):
                logger.debug(f"Skipping ignored file (file_path={relative_path})")
                continue
            try:
                source = file_path.read_text(encoding="utf-8")
                tree = ast.parse(source, filename=str(file_path))
            except (OSError, UnicodeDecodeError, SyntaxError, ValueError) as exc:
                logger.warning(
                    f"Skipping file due to parse/read failure (file_path={relative_path} error={exc})",
                )
                errors.append(AnalyzerError(file_path=relative_path, message=str(exc)))
                continue
            yield relative_path, tree
