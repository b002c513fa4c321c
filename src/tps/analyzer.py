# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Analyzer interfaces and DTOs for provider discovery across a project."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from tps.provider import ProviderSpecification


@dataclass(frozen=True)
class DiscoveredProvider:
    """Represent one provider found in a project file.

    Attributes:
        file_path: Project-relative source file path.
        lineno: Line of the provider class statement (1-based).
        spec: Built provider specification.
    """

    file_path: str
    lineno: int
    spec: ProviderSpecification


@dataclass(frozen=True)
class ProviderDiagnostic:
    """Represent one marked class rejected as a provider.

    Attributes:
        file_path: Project-relative source file path.
        class_name: Name of the rejected class.
        lineno: Line of the offending node, or of the class when unknown.
        message: Validation error text.
    """

    file_path: str
    class_name: str
    lineno: int
    message: str


@dataclass(frozen=True)
class AnalyzerError:
    """Represent an analyzer error for one file."""

    file_path: str
    message: str


class Analyzer(Protocol):
    """Project-wide provider discovery contract."""

    def analyze(
        self, root_path: Path
    ) -> tuple[list[DiscoveredProvider], list[AnalyzerError]]:
        """Analyze a project root and return discovered providers and errors."""

    def diagnose(
        self, root_path: Path
    ) -> tuple[list[ProviderDiagnostic], list[AnalyzerError]]:
        """Report every marked class that is not a valid provider."""
