# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Analyzer package for tracing provider discovery."""

from tps.analyzers.python import ProviderAnalyzer

__all__ = ["ProviderAnalyzer"]
