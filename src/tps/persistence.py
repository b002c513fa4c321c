# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Persistence contracts for cached provider specifications."""

from typing import Protocol

from tps.analyzer import DiscoveredProvider
from tps.provider import ProviderSpecification


class PersistenceError(RuntimeError):
    """Represent a fatal persistence operation failure."""


class SpecCache(Protocol):
    """Define the contract for caching provider specifications."""

    def store(self, providers: list[DiscoveredProvider]) -> int:
        """Store providers keyed by unique name and return how many were written."""

    def load(self, unique_name: str) -> ProviderSpecification | None:
        """Load one provider by unique name, or ``None`` when absent."""

    def list_unique_names(self) -> list[str]:
        """List cached unique names in sorted order."""
