# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Find tracing provider classes in a parsed source file."""

import ast
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from tps.canonical import dotted_name
from tps.errors import ValidationError
from tps.probe import ProbeExtractor, extract_probe
from tps.provider import ProviderSpecification

logger = logging.getLogger(__name__)

MarkerPredicate = Callable[[ast.expr], bool]

DEFAULT_MARKER_NAMES: frozenset[str] = frozenset({"tracer"})


@dataclass(frozen=True)
class NameCollision:
    """Represent providers sharing a base name but not their contents.

    Attributes:
        name: Shared base provider name.
        unique_names: Distinct hash-qualified names, sorted.
    """

    name: str
    unique_names: tuple[str, ...]


def make_marker_predicate(names: Iterable[str]) -> MarkerPredicate:
    """Build a decorator predicate matching on the trailing path segment.

    ``@tracer``, ``@pkg.tracer``, ``@tracer(...)`` and ``@pkg.tracer(...)`` all
    match when ``"tracer"`` is one of ``names``.

    Args:
        names: Accepted trailing segments.

    Returns:
        Predicate over decorator expressions.
    """
    accepted = frozenset(names)

    def is_marker(decorator: ast.expr) -> bool:
        if isinstance(decorator, ast.Call):
            decorator = decorator.func
        name = dotted_name(decorator)
        if name is None:
            return False
        return name.rsplit(".", 1)[-1] in accepted

    return is_marker


def marker_aliases(tree: ast.AST, names: Iterable[str]) -> set[str]:
    """Collect local names the marker is imported under.

    Args:
        tree: Parsed source file.
        names: Marker names to look for.

    Returns:
        Alias names bound by ``import ... as`` statements for a marker.
    """
    accepted = set(names)
    aliases: set[str] = set()
    for node in ast.walk(tree):
        if not isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        for alias in node.names:
            if alias.asname is None:
                continue
            if alias.name.rsplit(".", 1)[-1] in accepted:
                aliases.add(alias.asname)
    return aliases


class _ClassCollector(ast.NodeVisitor):
    """Collect marked classes, inner classes before their containers."""

    def __init__(self, is_marker: MarkerPredicate) -> None:
        self._is_marker = is_marker
        self.candidates: list[ast.ClassDef] = []

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        self.generic_visit(node)
        if any(self._is_marker(decorator) for decorator in node.decorator_list):
            self.candidates.append(node)


class ProviderScanner:
    """Scan parsed source files for tracing providers."""

    def __init__(
        self,
        is_marker: MarkerPredicate | None = None,
        extractor: ProbeExtractor = extract_probe,
        marker_names: Iterable[str] = DEFAULT_MARKER_NAMES,
    ) -> None:
        """Initialize the scanner.

        Args:
            is_marker: Decorator predicate. When omitted, decorators are matched
                against ``marker_names`` plus any import aliases of them found in
                the scanned file.
            extractor: Method-to-probe extractor.
            marker_names: Marker names used when ``is_marker`` is omitted.
        """
        self._is_marker = is_marker
        self._extractor = extractor
        self._marker_names = frozenset(marker_names)

    def find_candidates(self, tree: ast.AST) -> list[ast.ClassDef]:
        """Return classes carrying the provider marker.

        Args:
            tree: Parsed source file.

        Returns:
            Marked classes, each nested class ahead of the class containing it.
        """
        collector = _ClassCollector(is_marker=self._predicate_for(tree))
        collector.visit(tree)
        return collector.candidates

    def scan(self, tree: ast.AST) -> list[ProviderSpecification]:
        """Build specifications for every valid provider in a file.

        Candidates that fail validation are skipped. Build a candidate
        directly with :meth:`ProviderSpecification.from_class` to see why.

        Args:
            tree: Parsed source file.

        Returns:
            Specifications of the valid providers.
        """
        providers: list[ProviderSpecification] = []
        for candidate in self.find_candidates(tree):
            try:
                providers.append(
                    ProviderSpecification.from_class(candidate, extractor=self._extractor)
                )
            except ValidationError as exc:
                logger.debug(
                    f"Skipping invalid provider candidate (class={candidate.name} error={exc})"
                )
        return providers

    def _predicate_for(self, tree: ast.AST) -> MarkerPredicate:
        if self._is_marker is not None:
            return self._is_marker
        names = set(self._marker_names)
        names.update(marker_aliases(tree, self._marker_names))
        return make_marker_predicate(names)


def find_providers(
    tree: ast.AST,
    is_marker: MarkerPredicate | None = None,
    extractor: ProbeExtractor = extract_probe,
) -> list[ProviderSpecification]:
    """Find all valid tracing providers in a parsed source file.

    Invalid providers are silently ignored; building them directly raises a
    detailed :class:`ValidationError` instead.
    """
    return ProviderScanner(is_marker=is_marker, extractor=extractor).scan(tree)


def find_name_collisions(
    providers: Iterable[ProviderSpecification],
) -> list[NameCollision]:
    """Report base names shared by providers with different contents.

    Args:
        providers: Specifications gathered from one or more files.

    Returns:
        One collision per shared base name, sorted by name.
    """
    unique_by_name: dict[str, set[str]] = {}
    for provider in providers:
        unique_by_name.setdefault(provider.name, set()).add(provider.unique_name)
    collisions = [
        NameCollision(name=name, unique_names=tuple(sorted(unique_names)))
        for name, unique_names in sorted(unique_by_name.items())
        if len(unique_names) > 1
    ]
    for collision in collisions:
        logger.warning(
            f"Provider base name is shared by different providers (name={collision.name} count={len(collision.unique_names)})"
        )
    return collisions
